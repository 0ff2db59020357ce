"""Core domain objects used throughout the system."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import uuid4


def new_question_id() -> str:
    return f"question:{uuid4().hex}"


@dataclass(frozen=True)
class QuestionRecord:
    id: str
    text: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def accept(cls, text: str) -> QuestionRecord:
        return cls(id=new_question_id(), text=text)


class VerdictSource(str, Enum):
    ORACLE = "oracle"
    HIGH_CONFIDENCE_FALLBACK = "high_confidence_fallback"
    DEGRADED_FALLBACK = "degraded_fallback"


@dataclass(frozen=True)
class SimilarityVerdict:
    score: float
    is_same: bool
    reasons: tuple[str, ...]
    explanation: str
    source: VerdictSource = VerdictSource.ORACLE

    def __post_init__(self) -> None:
        object.__setattr__(self, "score", max(0.0, min(1.0, float(self.score))))
        object.__setattr__(self, "reasons", tuple(self.reasons))

    @property
    def is_fallback(self) -> bool:
        return self.source is not VerdictSource.ORACLE


class DetectionState(str, Enum):
    UNIQUE = "unique"
    DUPLICATE = "duplicate"
    REJECTED = "rejected"


@dataclass
class DetectionOutcome:
    state: DetectionState
    most_similar: QuestionRecord | None = None
    score: float = 0.0
    explanation: str = ""

    @property
    def is_duplicate(self) -> bool:
        return self.state is DetectionState.DUPLICATE


@dataclass
class BatchResult:
    question: str
    is_duplicate: bool
    most_similar_question: str | None
    similarity_score: float
    similarity_explanation: str
    source_ref: Any = None
