"""Per-question duplicate decision combining the lexical and semantic tiers."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

from question_dedup.config.settings import Settings
from question_dedup.models.domain import DetectionOutcome, DetectionState, QuestionRecord
from question_dedup.observability.logger import get_logger
from question_dedup.observability.metrics import log_comparison
from question_dedup.oracle.client import OracleClient
from question_dedup.similarity.lexical import lexical_score

logger = get_logger("duplicate_detector")

Candidate = tuple[QuestionRecord, float]

NO_CANDIDATES_EXPLANATION = "No lexically similar questions found"


class DuplicateDetector:
    def __init__(self, oracle: OracleClient, settings: Settings) -> None:
        self._oracle = oracle
        self._settings = settings

    def prefilter(self, question: str, pool: Sequence[QuestionRecord]) -> list[Candidate]:
        """Records from ``pool`` scoring at or above the pre-filter threshold, in pool order."""
        threshold = self._settings.prefilter_threshold
        candidates: list[Candidate] = []
        for record in pool:
            score = lexical_score(question, record.text)
            if score >= threshold:
                candidates.append((record, score))
        return candidates

    async def check(
        self,
        question: object,
        corpus: Sequence[QuestionRecord] = (),
        batch_accepted: Sequence[QuestionRecord] = (),
        deadline: float | None = None,
        corpus_candidates: list[Candidate] | None = None,
    ) -> DetectionOutcome:
        """Decide whether ``question`` duplicates a corpus or batch question.

        Candidates are visited in corpus order, then batch-acceptance order.
        The first verdict that says "same" (or scores above the duplicate
        threshold) ends the search. ``deadline`` is an event-loop timestamp
        after which oracle calls degrade to fallback verdicts. Pass
        ``corpus_candidates`` to reuse an earlier corpus pre-filter.
        """
        if not isinstance(question, str) or not question.strip():
            return DetectionOutcome(state=DetectionState.REJECTED)

        settings = self._settings
        if corpus_candidates is None:
            corpus_candidates = self.prefilter(question, corpus)
        candidates = corpus_candidates + self.prefilter(question, batch_accepted)
        if not candidates:
            return DetectionOutcome(state=DetectionState.UNIQUE, explanation=NO_CANDIDATES_EXPLANATION)

        best: QuestionRecord | None = None
        best_score = 0.0
        best_explanation = ""
        state = DetectionState.UNIQUE
        explanation = ""

        for record, lexical in candidates:
            verdict = await self._oracle.judge(
                question, record.text, lexical=lexical, timeout=self._remaining(deadline)
            )
            log_comparison(len(question), len(record.text), verdict.score, verdict.source.value)

            if best is None or verdict.score > best_score:
                best = record
                best_score = verdict.score
                best_explanation = verdict.explanation

            if verdict.is_same or verdict.score > settings.duplicate_threshold:
                state = DetectionState.DUPLICATE
                explanation = verdict.explanation
                break

        return DetectionOutcome(
            state=state,
            most_similar=best if best_score > settings.reporting_floor else None,
            score=best_score,
            explanation=explanation or best_explanation,
        )

    @staticmethod
    def _remaining(deadline: float | None) -> float | None:
        if deadline is None:
            return None
        return deadline - asyncio.get_running_loop().time()
