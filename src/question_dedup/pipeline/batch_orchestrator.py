"""Batch orchestrator: drives the detector across a batch and owns corpus growth."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Sequence
from typing import Any
from uuid import uuid4

from question_dedup.config.settings import Settings
from question_dedup.detection.detector import Candidate, DuplicateDetector
from question_dedup.exceptions import BatchValidationError, PersistenceFailure
from question_dedup.models.domain import BatchResult, DetectionState, QuestionRecord
from question_dedup.observability.logger import get_logger
from question_dedup.observability.metrics import log_batch_metrics
from question_dedup.protocols.corpus_store import CorpusStore
from question_dedup.similarity.cache import SimilarityCache

logger = get_logger("batch_orchestrator")

ValidItem = tuple[str, Any]


class BatchOrchestrator:
    """Processes one batch at a time against the stored corpus.

    The corpus is loaded once per batch and flushed once at the end with every
    newly accepted question. Questions accepted earlier in the batch are
    candidates for later ones.
    """

    def __init__(
        self,
        detector: DuplicateDetector,
        store: CorpusStore,
        cache: SimilarityCache,
        settings: Settings,
    ) -> None:
        self._detector = detector
        self._store = store
        self._cache = cache
        self._settings = settings
        self._lock = asyncio.Lock()

    async def process_batch(
        self,
        questions: Sequence[Any],
        source_refs: Sequence[Any] | None = None,
    ) -> list[BatchResult]:
        """Check a batch of at most ``max_questions_per_batch`` questions.

        Raises ``BatchValidationError`` before any oracle work, and
        ``PersistenceFailure`` (carrying the results) if the flush fails.
        """
        items = self._validate(questions, source_refs, enforce_limit=True)
        async with self._lock:
            corpus = await self._store.load()
            results, accepted = await self._run(items, corpus)
            await self._flush(corpus, accepted, results)
        return results

    async def process_chunked(
        self,
        questions: Sequence[Any],
        source_refs: Sequence[Any] | None = None,
    ) -> list[BatchResult]:
        """Process an arbitrarily long input in chunks of ``max_questions_per_batch``.

        Each chunk sees every question accepted by the chunks before it; the
        corpus is flushed once after the last chunk.
        """
        items = self._validate(questions, source_refs, enforce_limit=False)
        size = self._settings.max_questions_per_batch
        async with self._lock:
            corpus = await self._store.load()
            results: list[BatchResult] = []
            accepted: list[QuestionRecord] = []
            for start in range(0, len(items), size):
                chunk_results, chunk_accepted = await self._run(
                    items[start : start + size], corpus + accepted
                )
                results.extend(chunk_results)
                accepted.extend(chunk_accepted)
                logger.info(
                    "chunk_processed",
                    chunk_start=start,
                    chunk_size=len(chunk_results),
                    accepted=len(chunk_accepted),
                )
            await self._flush(corpus, accepted, results)
        return results

    async def reset(self) -> None:
        """Empty the stored corpus and forget cached verdicts."""
        async with self._lock:
            await self._store.reset()
            self._cache.reset()
        logger.info("corpus_reset")

    async def corpus_size(self) -> int:
        return len(await self._store.load())

    def _validate(
        self,
        questions: Sequence[Any],
        source_refs: Sequence[Any] | None,
        enforce_limit: bool,
    ) -> list[ValidItem]:
        if not isinstance(questions, (list, tuple)):
            raise BatchValidationError("Input must be an array of questions")

        limit = self._settings.max_questions_per_batch
        if enforce_limit and len(questions) > limit:
            raise BatchValidationError(f"Maximum {limit} questions allowed per request")

        if source_refs is None:
            source_refs = [None] * len(questions)
        elif len(source_refs) != len(questions):
            raise BatchValidationError("source_refs must be the same length as questions")

        items = [
            (q.strip(), ref)
            for q, ref in zip(questions, source_refs)
            if isinstance(q, str) and q.strip()
        ]
        if not items:
            raise BatchValidationError("No valid questions provided")

        dropped = len(questions) - len(items)
        if dropped:
            logger.info("invalid_questions_dropped", dropped=dropped, kept=len(items))
        return items

    async def _run(
        self, items: list[ValidItem], corpus: list[QuestionRecord]
    ) -> tuple[list[BatchResult], list[QuestionRecord]]:
        batch_id = str(uuid4())
        start = time.monotonic()
        loop = asyncio.get_running_loop()
        deadline = (
            loop.time() + self._settings.batch_deadline_seconds
            if self._settings.batch_deadline_seconds > 0
            else None
        )

        texts = [question for question, _ in items]
        corpus_candidates = await asyncio.to_thread(self._prefilter_all, texts, corpus)

        results: list[BatchResult] = []
        accepted: list[QuestionRecord] = []
        for (question, ref), candidates in zip(items, corpus_candidates):
            outcome = await self._detector.check(
                question,
                batch_accepted=accepted,
                deadline=deadline,
                corpus_candidates=candidates,
            )
            if outcome.state is DetectionState.UNIQUE:
                accepted.append(QuestionRecord.accept(question))

            results.append(
                BatchResult(
                    question=question,
                    is_duplicate=outcome.is_duplicate,
                    most_similar_question=outcome.most_similar.text if outcome.most_similar else None,
                    similarity_score=outcome.score,
                    similarity_explanation=outcome.explanation,
                    source_ref=ref,
                )
            )

        log_batch_metrics(
            batch_id,
            total=len(results),
            duplicates=len(results) - len(accepted),
            accepted=len(accepted),
            duration_ms=(time.monotonic() - start) * 1000,
        )
        return results, accepted

    def _prefilter_all(
        self, texts: list[str], corpus: list[QuestionRecord]
    ) -> list[list[Candidate]]:
        return [self._detector.prefilter(text, corpus) for text in texts]

    async def _flush(
        self,
        corpus: list[QuestionRecord],
        accepted: list[QuestionRecord],
        results: list[BatchResult],
    ) -> None:
        if not accepted:
            return
        try:
            await self._store.save(corpus + accepted)
        except PersistenceFailure as e:
            logger.error("corpus_flush_failed", error=str(e), accepted=len(accepted))
            raise PersistenceFailure(
                f"Results computed but not saved: {e}", results=results
            ) from e
        logger.info("corpus_flushed", size=len(corpus) + len(accepted), added=len(accepted))
