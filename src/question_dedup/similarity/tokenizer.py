"""Content terms of a question, used for the shared-term overlap."""

from __future__ import annotations

import re

from question_dedup.config.constants import STOPWORDS

_NON_WORD = re.compile(r"[^\w\s]")


def content_terms(text: str) -> frozenset[str]:
    """Lowercased words of ``text`` without punctuation, stopwords or single characters."""
    words = _NON_WORD.sub(" ", text.lower()).split()
    return frozenset(w for w in words if len(w) > 1 and w not in STOPWORDS)
