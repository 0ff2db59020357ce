"""Protocol for question corpus persistence."""

from __future__ import annotations

from typing import Protocol

from question_dedup.models.domain import QuestionRecord


class CorpusStore(Protocol):
    """Failures surface as ``PersistenceFailure``."""

    async def load(self) -> list[QuestionRecord]: ...

    async def save(self, records: list[QuestionRecord]) -> None: ...

    async def reset(self) -> None: ...
