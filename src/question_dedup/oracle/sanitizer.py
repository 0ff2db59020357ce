"""Turn the judge's free-text answer into a SimilarityVerdict.

The judge is asked for a JSON object but routinely returns it wrapped in
markdown fences, with trailing commas, Python-style quoting, stray control
characters, missing closing brackets or a sentence of prose around it.
``repair_json_text`` fixes those defects in a fixed order:

  1. strip code fences
  2. drop dangling commas before a closing bracket (or at end of text)
  3. normalize quoting on structural tokens (keys, single-quoted values,
     Python literals)
  4. strip control characters
  5. append the missing closers for unbalanced ``{`` / ``[``
  6. cut out the outermost ``{...}`` object when prose surrounds it

Every pass is idempotent. ``parse_verdict`` then parses strictly and fills in
defaults for missing fields. Any failure becomes ``MalformedOutput``.
"""

from __future__ import annotations

import json
import math
import re

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from question_dedup.config.constants import DEFAULT_EXPLANATION, DEFAULT_REASONS
from question_dedup.exceptions import MalformedOutput
from question_dedup.models.domain import SimilarityVerdict, VerdictSource
from question_dedup.observability.logger import get_logger

logger = get_logger("sanitizer")

_FENCE = re.compile(r"```[A-Za-z0-9_-]*")
_DANGLING_COMMA = re.compile(r",\s*(?=[\]}])")
_TRAILING_COMMA = re.compile(r",\s*$")
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_PY_LITERALS = {"True": "true", "False": "false", "None": "null"}
_STRUCTURAL = "{[,:"
_CLOSERS = {"{": "}", "[": "]"}


class JudgeResponse(BaseModel):
    """Partial view of the judge's JSON; every field may be missing."""

    model_config = ConfigDict(extra="ignore")

    score: float | None = Field(
        default=None,
        validation_alias=AliasChoices("score", "similarity", "similarity_score", "similarityScore"),
    )
    is_same: bool | None = Field(
        default=None,
        validation_alias=AliasChoices("isSame", "is_same", "same", "isDuplicate", "is_duplicate"),
    )
    reasons: list[str] | None = None
    explanation: str | None = None

    @field_validator("score", mode="before")
    @classmethod
    def _percent_to_fraction(cls, value):
        if isinstance(value, str):
            value = value.strip().rstrip("%")
        if value is None or value == "":
            return None
        number = float(value)
        if not math.isfinite(number):
            raise ValueError(f"score must be finite, got {value!r}")
        if 1.0 < number <= 100.0:
            number = number / 100.0
        return number

    @field_validator("reasons", mode="before")
    @classmethod
    def _coerce_reasons(cls, value):
        if value is None:
            return None
        if isinstance(value, str):
            return [value] if value.strip() else None
        if isinstance(value, list):
            return [str(item) for item in value if str(item).strip()]
        return [str(value)]


def strip_fences(text: str) -> str:
    return _FENCE.sub("", text).strip()


def drop_dangling_commas(text: str) -> str:
    text = _DANGLING_COMMA.sub("", text)
    return _TRAILING_COMMA.sub("", text)


def normalize_quotes(text: str) -> str:
    """Rewrite single-quoted strings, bare keys and Python literals as JSON.

    Only tokens in structural position (after ``{ [ , :``) are touched, so
    apostrophes inside prose and inside double-quoted strings survive.
    """
    out: list[str] = []
    i = 0
    n = len(text)
    prev = " "  # last significant character emitted outside a string
    while i < n:
        ch = text[i]
        if ch == '"':
            end, _ = _scan_string(text, i, '"')
            out.append(text[i:end])
            prev = '"'
            i = end
            continue
        if ch == "'" and prev in _STRUCTURAL:
            end, closed = _scan_string(text, i, "'")
            body = text[i + 1 : end - 1] if closed else text[i + 1 : end]
            body = body.replace("\\'", "'").replace('"', '\\"')
            out.append(f'"{body}"')
            prev = '"'
            i = end
            continue
        if (ch.isalpha() or ch == "_") and prev in _STRUCTURAL:
            j = i
            while j < n and (text[j].isalnum() or text[j] == "_"):
                j += 1
            word = text[i:j]
            k = j
            while k < n and text[k] in " \t":
                k += 1
            if k < n and text[k] == ":" and prev in "{,":
                out.append(f'"{word}"')
            else:
                out.append(_PY_LITERALS.get(word, word))
            prev = word[-1]
            i = j
            continue
        out.append(ch)
        if not ch.isspace():
            prev = ch
        i += 1
    return "".join(out)


def strip_control_chars(text: str) -> str:
    return _CONTROL_CHARS.sub("", text)


def balance_brackets(text: str) -> str:
    """Append the fewest closers needed to balance ``{``/``[`` from the first ``{``."""
    start = text.find("{")
    if start == -1:
        return text
    stack: list[str] = []
    i = start
    n = len(text)
    in_string = False
    while i < n:
        ch = text[i]
        if in_string:
            if ch == "\\":
                i += 2
                continue
            if ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch in _CLOSERS:
            stack.append(_CLOSERS[ch])
        elif ch in "]}":
            if stack and stack[-1] == ch:
                stack.pop()
            if not stack:
                return text
        i += 1
    if not stack:
        return text
    suffix = '"' if in_string else ""
    return drop_dangling_commas(text.rstrip() + suffix) + "".join(reversed(stack))


def isolate_object(text: str) -> str:
    """Return the outermost balanced ``{...}`` object, dropping surrounding prose."""
    start = text.find("{")
    if start == -1:
        return text
    depth = 0
    in_string = False
    i = start
    while i < len(text):
        ch = text[i]
        if in_string:
            if ch == "\\":
                i += 2
                continue
            if ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start : i + 1]
        i += 1
    return text[start:]


def repair_json_text(raw: str) -> str:
    text = strip_fences(raw)
    text = drop_dangling_commas(text)
    text = normalize_quotes(text)
    text = strip_control_chars(text)
    text = balance_brackets(text)
    return isolate_object(text)


def parse_verdict(raw: str, lexical: float, duplicate_threshold: float) -> SimilarityVerdict:
    """Repair and parse a raw judge answer.

    Missing ``score`` falls back to ``lexical``; missing ``is_same`` is derived
    from the score. Raises ``MalformedOutput`` for anything unparseable.
    """
    try:
        repaired = repair_json_text(raw)
        data = json.loads(repaired, strict=False)
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        parsed = JudgeResponse.model_validate(data)
    except Exception as e:
        logger.warning("judge_output_unparseable", error=str(e), raw_len=len(raw or ""))
        raise MalformedOutput(f"Could not parse judge output: {e}") from e

    score = parsed.score if parsed.score is not None else lexical
    is_same = parsed.is_same if parsed.is_same is not None else score > duplicate_threshold
    return SimilarityVerdict(
        score=score,
        is_same=is_same,
        reasons=tuple(parsed.reasons) if parsed.reasons else DEFAULT_REASONS,
        explanation=parsed.explanation or DEFAULT_EXPLANATION,
        source=VerdictSource.ORACLE,
    )


def _scan_string(text: str, start: int, quote: str) -> tuple[int, bool]:
    """Index just past the closing ``quote``, and whether one was found."""
    i = start + 1
    while i < len(text):
        if text[i] == "\\":
            i += 2
            continue
        if text[i] == quote:
            return i + 1, True
        i += 1
    return len(text), False
