"""Counters read by the health endpoint, plus metric logging helpers."""

from __future__ import annotations

from collections import defaultdict

from question_dedup.observability.logger import get_logger

logger = get_logger("metrics")

ORACLE_CALLS = "oracle_calls"
ORACLE_FAILURES = "oracle_failures"
FALLBACKS = "fallback_invocations"
CACHE_SIZE = "cache_size"


class InMemoryMetrics:
    """Process-scoped counters and gauges.

    One instance is created per application (or per test) and handed to the
    components that update it; nothing here is global.
    """

    def __init__(self) -> None:
        self._counters: dict[str, int] = defaultdict(int)
        self._gauges: dict[str, float] = {}

    def increment(self, name: str, amount: int = 1) -> None:
        self._counters[name] += amount

    def gauge(self, name: str, value: float) -> None:
        self._gauges[name] = value

    def get(self, name: str) -> float:
        if name in self._gauges:
            return self._gauges[name]
        return self._counters.get(name, 0)

    def snapshot(self) -> dict[str, float]:
        data: dict[str, float] = {
            ORACLE_CALLS: 0,
            ORACLE_FAILURES: 0,
            FALLBACKS: 0,
            CACHE_SIZE: 0,
        }
        data.update(self._counters)
        data.update(self._gauges)
        return data


def log_batch_metrics(
    batch_id: str,
    total: int,
    duplicates: int,
    accepted: int,
    duration_ms: float,
) -> None:
    logger.info(
        "batch_metrics",
        batch_id=batch_id,
        total=total,
        duplicates=duplicates,
        accepted=accepted,
        duration_ms=round(duration_ms, 2),
    )


def log_comparison(question_len: int, candidate_len: int, score: float, source: str) -> None:
    logger.debug(
        "comparison",
        question_len=question_len,
        candidate_len=candidate_len,
        score=round(score, 4),
        source=source,
    )
