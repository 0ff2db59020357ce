"""Surface-text similarity used as the pre-filter and as the fallback score."""

from __future__ import annotations

import re
from collections import Counter

from question_dedup.similarity.tokenizer import content_terms

_WHITESPACE = re.compile(r"\s+")


def _bigrams(text: str) -> Counter[str]:
    return Counter(text[i : i + 2] for i in range(len(text) - 1))


def lexical_score(a: str, b: str) -> float:
    """Dice coefficient over character bigrams, ignoring case and whitespace.

    Symmetric and deterministic. Two empty strings score 1.0, one empty string
    scores 0.0.
    """
    first = _WHITESPACE.sub("", a.lower())
    second = _WHITESPACE.sub("", b.lower())

    if first == second:
        return 1.0
    if len(first) < 2 or len(second) < 2:
        return 0.0

    first_bigrams = _bigrams(first)
    second_bigrams = _bigrams(second)
    intersection = sum((first_bigrams & second_bigrams).values())
    return (2.0 * intersection) / (len(first) + len(second) - 2)


def token_overlap(a: str, b: str) -> float:
    """Jaccard overlap of content tokens. 0.0 when either side has none."""
    first = content_terms(a)
    second = content_terms(b)
    if not first or not second:
        return 0.0
    return len(first & second) / len(first | second)
