"""Process-scoped memo of pairwise similarity verdicts."""

from __future__ import annotations

from question_dedup.models.domain import SimilarityVerdict
from question_dedup.observability.logger import get_logger

logger = get_logger("similarity_cache")


class SimilarityCache:
    """Verdicts keyed by the unordered, case-insensitive pair of texts.

    Entries live until ``reset`` is called; there is no expiry.
    """

    def __init__(self) -> None:
        self._entries: dict[tuple[str, str], SimilarityVerdict] = {}

    def get(self, a: str, b: str) -> SimilarityVerdict | None:
        return self._entries.get(self._key(a, b))

    def put(self, a: str, b: str, verdict: SimilarityVerdict) -> None:
        self._entries[self._key(a, b)] = verdict

    def reset(self) -> None:
        cleared = len(self._entries)
        self._entries.clear()
        logger.info("similarity_cache_reset", cleared=cleared)

    @property
    def size(self) -> int:
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    @staticmethod
    def _key(a: str, b: str) -> tuple[str, str]:
        first, second = a.lower(), b.lower()
        return (first, second) if first <= second else (second, first)
