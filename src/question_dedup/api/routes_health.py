"""Health check endpoint."""

from __future__ import annotations

import time

from fastapi import APIRouter, Depends, Request

from question_dedup import __version__
from question_dedup.api.dependencies import get_cache, get_metrics, get_orchestrator
from question_dedup.models.schemas import HealthResponse
from question_dedup.observability.metrics import CACHE_SIZE, InMemoryMetrics
from question_dedup.pipeline.batch_orchestrator import BatchOrchestrator
from question_dedup.similarity.cache import SimilarityCache

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(
    request: Request,
    orchestrator: BatchOrchestrator = Depends(get_orchestrator),
    metrics: InMemoryMetrics = Depends(get_metrics),
    cache: SimilarityCache = Depends(get_cache),
) -> HealthResponse:
    metrics.gauge(CACHE_SIZE, cache.size)
    return HealthResponse(
        status="healthy",
        version=__version__,
        uptime_seconds=round(time.monotonic() - request.app.state.started_at, 3),
        corpus_size=await orchestrator.corpus_size(),
        metrics=metrics.snapshot(),
    )
