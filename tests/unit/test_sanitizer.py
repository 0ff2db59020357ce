"""Tests for judge output repair and parsing."""

import json

import pytest

from question_dedup.config.constants import DEFAULT_EXPLANATION, DEFAULT_REASONS
from question_dedup.exceptions import MalformedOutput
from question_dedup.models.domain import VerdictSource
from question_dedup.oracle.sanitizer import (
    balance_brackets,
    isolate_object,
    normalize_quotes,
    parse_verdict,
    repair_json_text,
)

THRESHOLD = 0.85

CLEAN = (
    '{"score": 0.91, "isSame": true, "reasons": ["same subject", "same intent"], '
    '"explanation": "Both ask for the capital of France."}'
)
BROKEN = (
    "```json\n"
    '{"score": 0.91, "isSame": true, "reasons": ["same subject", "same intent",], '
    '"explanation": "Both ask for the capital of France.",\n'
    "```"
)


def test_fenced_trailing_comma_missing_brace_matches_clean():
    assert parse_verdict(BROKEN, 0.5, THRESHOLD) == parse_verdict(CLEAN, 0.5, THRESHOLD)


def test_clean_payload_fields():
    verdict = parse_verdict(CLEAN, 0.5, THRESHOLD)
    assert verdict.score == 0.91
    assert verdict.is_same is True
    assert verdict.reasons == ("same subject", "same intent")
    assert verdict.explanation == "Both ask for the capital of France."
    assert verdict.source is VerdictSource.ORACLE


def test_repair_is_idempotent():
    once = repair_json_text(BROKEN)
    assert repair_json_text(once) == once
    assert json.loads(once)["score"] == 0.91


def test_single_quotes_and_python_literals():
    raw = "{'score': 0.4, 'isSame': False, 'reasons': ['different country'], 'explanation': \"It's about Spain\"}"
    verdict = parse_verdict(raw, 0.5, THRESHOLD)
    assert verdict.score == 0.4
    assert verdict.is_same is False
    assert verdict.reasons == ("different country",)
    assert verdict.explanation == "It's about Spain"


def test_bare_keys():
    assert json.loads(normalize_quotes("{score: 0.8, isSame: true}")) == {"score": 0.8, "isSame": True}


def test_apostrophes_in_prose_untouched():
    text = "Here's the answer"
    assert normalize_quotes(text) == text


def test_prose_around_object():
    raw = 'Sure! Here is my verdict: {"score": 0.3, "isSame": false} Let me know if you need more.'
    verdict = parse_verdict(raw, 0.5, THRESHOLD)
    assert verdict.score == 0.3
    assert verdict.is_same is False


def test_control_characters_removed():
    raw = '{"score": 0.5,\x00 "isSame": false\x07}'
    assert parse_verdict(raw, 0.9, THRESHOLD).score == 0.5


def test_balance_appends_minimum_closers():
    assert balance_brackets('{"reasons": ["a"') == '{"reasons": ["a"]}'
    assert balance_brackets('{"explanation": "cut off') == '{"explanation": "cut off"}'
    assert balance_brackets('{"a": 1}') == '{"a": 1}'


def test_isolate_object_ignores_braces_in_strings():
    assert isolate_object('x {"a": "}"} y') == '{"a": "}"}'


def test_missing_score_defaults_to_lexical():
    verdict = parse_verdict('{"isSame": false}', 0.72, THRESHOLD)
    assert verdict.score == 0.72
    assert verdict.is_same is False
    assert verdict.reasons == DEFAULT_REASONS
    assert verdict.explanation == DEFAULT_EXPLANATION


def test_missing_is_same_derived_from_score():
    assert parse_verdict('{"score": 0.9}', 0.1, THRESHOLD).is_same is True
    assert parse_verdict('{"score": 0.85}', 0.1, THRESHOLD).is_same is False


def test_percent_score():
    assert parse_verdict('{"score": "87%"}', 0.1, THRESHOLD).score == pytest.approx(0.87)
    assert parse_verdict('{"score": 90}', 0.1, THRESHOLD).score == pytest.approx(0.9)


def test_alternate_field_names():
    verdict = parse_verdict('{"similarity": 0.7, "is_same": true, "reasons": "one reason"}', 0.1, THRESHOLD)
    assert verdict.score == 0.7
    assert verdict.is_same is True
    assert verdict.reasons == ("one reason",)


@pytest.mark.parametrize(
    "raw",
    [
        "I cannot determine that.",
        "",
        "[1, 2]",
        '{"score": "high"}',
        '{"score": 0.5 "isSame": true}',
        '{"score": NaN, "isSame": false}',
        '{"score": Infinity}',
        '{"score": "nan"}',
    ],
)
def test_unrecoverable_raises_malformed(raw):
    with pytest.raises(MalformedOutput):
        parse_verdict(raw, 0.5, THRESHOLD)
