"""Shared test fixtures."""

from __future__ import annotations

import json
import re
import tempfile
from pathlib import Path

import pytest

from question_dedup.config.settings import Settings
from question_dedup.detection.detector import DuplicateDetector
from question_dedup.exceptions import PersistenceFailure
from question_dedup.models.domain import QuestionRecord
from question_dedup.observability.metrics import InMemoryMetrics
from question_dedup.oracle.client import OracleClient
from question_dedup.oracle.rate_budget import RateBudget
from question_dedup.pipeline.batch_orchestrator import BatchOrchestrator
from question_dedup.similarity.cache import SimilarityCache
from question_dedup.similarity.lexical import lexical_score


class FakeJudge:
    """Scripted judge that records every prompt it receives.

    Each call pops the next scripted item; once the script is empty the
    ``default`` is used. Items may be a raw string, an exception to raise, or
    a callable taking the prompt.
    """

    def __init__(self, responses=None, default=None) -> None:
        self.calls: list[str] = []
        self._responses = list(responses or [])
        self._default = default

    async def request(self, prompt: str, system: str | None = None) -> str:
        self.calls.append(prompt)
        item = self._responses.pop(0) if self._responses else self._default
        if isinstance(item, Exception):
            raise item
        if callable(item):
            return item(prompt)
        return item


def lexical_verdict(prompt: str) -> str:
    """Judge answer that scores the prompt's two questions lexically."""
    a = re.search(r"Question A: (.*)", prompt).group(1)
    b = re.search(r"Question B: (.*)", prompt).group(1)
    score = lexical_score(a, b)
    return json.dumps(
        {
            "score": score,
            "isSame": score > 0.85,
            "reasons": ["surface comparison"],
            "explanation": f"Scored {score:.2f} on surface text",
        }
    )


class MemoryStore:
    def __init__(self, records=None, fail_on_save: bool = False) -> None:
        self.records: list[QuestionRecord] = list(records or [])
        self.save_calls = 0
        self.reset_calls = 0
        self._fail_on_save = fail_on_save

    async def load(self) -> list[QuestionRecord]:
        return list(self.records)

    async def save(self, records: list[QuestionRecord]) -> None:
        self.save_calls += 1
        if self._fail_on_save:
            raise PersistenceFailure("disk full")
        self.records = list(records)

    async def reset(self) -> None:
        self.reset_calls += 1
        self.records = []


@pytest.fixture
def settings():
    """Test settings with temp paths and near-zero backoff."""
    tmp = tempfile.mkdtemp()
    return Settings(
        google_api_key="",
        oracle_enabled=False,
        oracle_backoff_base_seconds=0.001,
        questions_file_path=str(Path(tmp) / "questions.json"),
        sqlite_corpus_db_path=str(Path(tmp) / "questions.db"),
        uploads_dir=str(Path(tmp) / "uploads"),
    )


@pytest.fixture
def metrics():
    return InMemoryMetrics()


@pytest.fixture
def cache():
    return SimilarityCache()


@pytest.fixture
def budget(settings):
    return RateBudget(
        capacity=settings.oracle_requests_per_window,
        window_seconds=settings.oracle_window_seconds,
        max_concurrency=settings.oracle_max_concurrency,
    )


@pytest.fixture
def make_oracle(cache, budget, metrics, settings):
    def _make(judge) -> OracleClient:
        return OracleClient(judge=judge, cache=cache, budget=budget, metrics=metrics, settings=settings)

    return _make


@pytest.fixture
def make_orchestrator(make_oracle, cache, settings):
    def _make(judge, store=None) -> tuple[BatchOrchestrator, MemoryStore]:
        store = store if store is not None else MemoryStore()
        detector = DuplicateDetector(make_oracle(judge), settings)
        return BatchOrchestrator(detector=detector, store=store, cache=cache, settings=settings), store

    return _make


@pytest.fixture
def tmp_dir():
    """Create a temporary directory."""
    return tempfile.mkdtemp()


@pytest.fixture
def fake_judge():
    """Factory for scripted judges: ``fake_judge(responses, default=...)``."""
    return FakeJudge


@pytest.fixture
def lexical_judge():
    return FakeJudge(default=lexical_verdict)


@pytest.fixture
def memory_store():
    """Factory for in-memory corpus stores."""
    return MemoryStore
