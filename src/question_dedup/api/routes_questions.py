"""Batch check and corpus reset endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from question_dedup.api.dependencies import get_orchestrator
from question_dedup.exceptions import BatchValidationError, PersistenceFailure
from question_dedup.models.schemas import (
    BatchStats,
    CheckBatchRequest,
    CheckBatchResponse,
    QuestionResultSchema,
    ResetResponse,
)
from question_dedup.pipeline.batch_orchestrator import BatchOrchestrator

router = APIRouter()


@router.post("/check-batch", response_model=CheckBatchResponse)
async def check_batch(
    request: CheckBatchRequest,
    orchestrator: BatchOrchestrator = Depends(get_orchestrator),
):
    try:
        results = await orchestrator.process_batch(request.questions)
    except BatchValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PersistenceFailure as e:
        body = CheckBatchResponse(
            success=False,
            persisted=False,
            error=str(e),
            results=[QuestionResultSchema.from_result(r) for r in e.results],
            stats=BatchStats.from_results(e.results),
        )
        return JSONResponse(status_code=500, content=body.model_dump(mode="json", by_alias=True))

    return CheckBatchResponse(
        results=[QuestionResultSchema.from_result(r) for r in results],
        stats=BatchStats.from_results(results),
    )


@router.post("/reset-questions", response_model=ResetResponse)
async def reset_questions(
    orchestrator: BatchOrchestrator = Depends(get_orchestrator),
) -> ResetResponse:
    try:
        await orchestrator.reset()
    except PersistenceFailure as e:
        raise HTTPException(status_code=500, detail=str(e))
    return ResetResponse(message="Questions database has been reset successfully")
