"""Tests for content term extraction."""

from question_dedup.similarity.tokenizer import content_terms


def test_stopwords_removed():
    terms = content_terms("What is the boiling point of water at sea level?")
    assert terms == {"boiling", "point", "water", "sea", "level"}


def test_case_folded():
    assert content_terms("Romeo JULIET romeo") == {"romeo", "juliet"}


def test_punctuation_split():
    terms = content_terms("Hello, world! Who wrote it?")
    assert terms == {"hello", "world", "wrote"}


def test_empty_and_single_characters():
    assert content_terms("") == frozenset()
    assert content_terms("x y z") == frozenset()
