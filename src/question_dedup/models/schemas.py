"""Pydantic models for API request/response serialization."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from question_dedup.models.domain import BatchResult


class CheckBatchRequest(BaseModel):
    # Shape is checked by the orchestrator so bad input gets a 400, not a 422
    questions: Any = None


class QuestionResultSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question: str
    is_duplicate: bool = Field(alias="isDuplicate")
    most_similar_question: str | None = Field(default=None, alias="mostSimilarQuestion")
    similarity_score: float = Field(alias="similarityScore")
    similarity_explanation: str = Field(default="", alias="similarityExplanation")
    row_data: Any = Field(default=None, alias="rowData")

    @classmethod
    def from_result(cls, result: BatchResult) -> QuestionResultSchema:
        return cls(
            question=result.question,
            is_duplicate=result.is_duplicate,
            most_similar_question=result.most_similar_question,
            similarity_score=result.similarity_score,
            similarity_explanation=result.similarity_explanation,
            row_data=result.source_ref,
        )


class BatchStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_questions: int = Field(alias="totalQuestions")
    duplicates_found: int = Field(alias="duplicatesFound")
    unique_questions: int = Field(alias="uniqueQuestions")
    processing_time: str | None = Field(default=None, alias="processingTime")

    @classmethod
    def from_results(cls, results: list[BatchResult], processing_time: str | None = None) -> BatchStats:
        duplicates = sum(1 for r in results if r.is_duplicate)
        return cls(
            total_questions=len(results),
            duplicates_found=duplicates,
            unique_questions=len(results) - duplicates,
            processing_time=processing_time,
        )


class CheckBatchResponse(BaseModel):
    success: bool = True
    persisted: bool = True
    error: str | None = None
    results: list[QuestionResultSchema]
    stats: BatchStats


class UploadResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    persisted: bool = True
    error: str | None = None
    results: list[QuestionResultSchema]
    cleaned_file_path: str = Field(alias="cleanedFilePath")
    stats: BatchStats


class ResetResponse(BaseModel):
    success: bool = True
    message: str


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float
    corpus_size: int
    metrics: dict[str, float]


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
