"""FastAPI dependency injection helpers."""

from __future__ import annotations

from fastapi import Request

from question_dedup.config.settings import Settings
from question_dedup.ingestion.spreadsheet import SpreadsheetIngestor
from question_dedup.observability.metrics import InMemoryMetrics
from question_dedup.pipeline.batch_orchestrator import BatchOrchestrator
from question_dedup.similarity.cache import SimilarityCache


def get_orchestrator(request: Request) -> BatchOrchestrator:
    return request.app.state.orchestrator


def get_ingestor(request: Request) -> SpreadsheetIngestor:
    return request.app.state.ingestor


def get_metrics(request: Request) -> InMemoryMetrics:
    return request.app.state.metrics


def get_cache(request: Request) -> SimilarityCache:
    return request.app.state.cache


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
