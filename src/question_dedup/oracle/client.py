"""Rate-limited, retried semantic judgments with local fallback."""

from __future__ import annotations

import asyncio

from question_dedup.config.constants import (
    DEGRADED_FALLBACK_EXPLANATION,
    HIGH_CONFIDENCE_FALLBACK_EXPLANATION,
)
from question_dedup.config.settings import Settings
from question_dedup.exceptions import MalformedOutput, OracleError, RateLimited, TransientFailure
from question_dedup.models.domain import SimilarityVerdict, VerdictSource
from question_dedup.observability.logger import get_logger
from question_dedup.observability.metrics import (
    CACHE_SIZE,
    FALLBACKS,
    ORACLE_CALLS,
    ORACLE_FAILURES,
)
from question_dedup.oracle.prompts import (
    JUDGE_SYSTEM,
    SIMILARITY_JUDGE_PROMPT,
    SIMPLIFIED_JUDGE_PROMPT,
)
from question_dedup.oracle.rate_budget import RateBudget
from question_dedup.oracle.sanitizer import parse_verdict
from question_dedup.protocols.judge import SemanticJudge
from question_dedup.protocols.metrics import MetricsSink
from question_dedup.similarity.cache import SimilarityCache
from question_dedup.similarity.lexical import lexical_score, token_overlap

logger = get_logger("oracle_client")


class OracleClient:
    """Asks the semantic judge about a question pair.

    ``judge`` always returns a verdict. Rate limits and transient errors are
    retried with exponential backoff, malformed answers are retried once with
    a simpler prompt, and anything left over (including an expired deadline)
    becomes a locally synthesized fallback verdict.
    """

    def __init__(
        self,
        judge: SemanticJudge | None,
        cache: SimilarityCache,
        budget: RateBudget,
        metrics: MetricsSink,
        settings: Settings,
    ) -> None:
        self._judge = judge
        self._cache = cache
        self._budget = budget
        self._metrics = metrics
        self._settings = settings

    async def judge(
        self,
        a: str,
        b: str,
        lexical: float | None = None,
        timeout: float | None = None,
    ) -> SimilarityVerdict:
        if lexical is None:
            lexical = lexical_score(a, b)

        cached = self._cache.get(a, b)
        if cached is not None:
            logger.debug("verdict_cache_hit")
            return cached

        if self._judge is None:
            return self._fallback(a, b, lexical, reason="oracle_disabled")
        if timeout is not None and timeout <= 0:
            return self._fallback(a, b, lexical, reason="deadline_expired")

        try:
            if timeout is None:
                verdict = await self._judge_with_retries(a, b, lexical)
            else:
                verdict = await asyncio.wait_for(
                    self._judge_with_retries(a, b, lexical), timeout=timeout
                )
        except asyncio.TimeoutError:
            return self._fallback(a, b, lexical, reason="deadline_expired")
        except RateLimited:
            return self._fallback(a, b, lexical, reason="rate_limited")
        except MalformedOutput:
            return self._fallback(a, b, lexical, reason="malformed_output")
        except OracleError:
            return self._fallback(a, b, lexical, reason="transient_failure")
        except Exception as e:
            logger.error("oracle_unexpected_error", error=str(e))
            return self._fallback(a, b, lexical, reason="unexpected_error")

        self._cache.put(a, b, verdict)
        self._metrics.gauge(CACHE_SIZE, self._cache.size)
        return verdict

    async def _judge_with_retries(self, a: str, b: str, lexical: float) -> SimilarityVerdict:
        prompt = SIMILARITY_JUDGE_PROMPT.format(question_a=a, question_b=b)
        simplified = False
        failures = 0

        while True:
            try:
                raw = await self._request(prompt)
                return parse_verdict(raw, lexical, self._settings.duplicate_threshold)
            except MalformedOutput:
                self._metrics.increment(ORACLE_FAILURES)
                if simplified:
                    raise
                simplified = True
                prompt = SIMPLIFIED_JUDGE_PROMPT.format(question_a=a, question_b=b)
                logger.info("oracle_retry_simplified")
            except (RateLimited, TransientFailure) as e:
                failures += 1
                if failures >= self._settings.oracle_max_attempts:
                    logger.warning("oracle_retries_exhausted", attempts=failures, error=str(e))
                    raise
                delay = self._settings.oracle_backoff_base_seconds * (2 ** (failures - 1))
                if isinstance(e, RateLimited) and e.retry_after is not None:
                    delay = max(delay, e.retry_after)
                logger.info(
                    "oracle_backoff",
                    attempt=failures,
                    delay_seconds=round(delay, 3),
                    error_type=type(e).__name__,
                )
                await asyncio.sleep(delay)

    async def _request(self, prompt: str) -> str:
        async with self._budget.slot():
            self._metrics.increment(ORACLE_CALLS)
            try:
                return await self._judge.request(prompt, system=JUDGE_SYSTEM)
            except OracleError:
                self._metrics.increment(ORACLE_FAILURES)
                raise
            except Exception as e:
                self._metrics.increment(ORACLE_FAILURES)
                raise TransientFailure(f"Judge request failed: {e}") from e

    def _fallback(self, a: str, b: str, lexical: float, reason: str) -> SimilarityVerdict:
        self._metrics.increment(FALLBACKS)
        settings = self._settings

        if lexical >= settings.high_confidence_threshold:
            verdict = SimilarityVerdict(
                score=lexical,
                is_same=True,
                reasons=("near-identical text", f"fallback: {reason}"),
                explanation=HIGH_CONFIDENCE_FALLBACK_EXPLANATION,
                source=VerdictSource.HIGH_CONFIDENCE_FALLBACK,
            )
        else:
            overlap = token_overlap(a, b)
            score = (
                settings.fallback_lexical_weight * lexical
                + settings.fallback_overlap_weight * overlap
            )
            verdict = SimilarityVerdict(
                score=score,
                is_same=score > settings.duplicate_threshold,
                reasons=(f"lexical={lexical:.2f}", f"shared_terms={overlap:.2f}", f"fallback: {reason}"),
                explanation=DEGRADED_FALLBACK_EXPLANATION,
                source=VerdictSource.DEGRADED_FALLBACK,
            )

        logger.warning(
            "oracle_fallback",
            reason=reason,
            source=verdict.source.value,
            score=round(verdict.score, 4),
        )
        return verdict
