"""FastAPI application factory with lifespan management."""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI

from question_dedup import __version__
from question_dedup.api.middleware import RequestContextMiddleware
from question_dedup.api.routes_health import router as health_router
from question_dedup.api.routes_questions import router as questions_router
from question_dedup.api.routes_upload import router as upload_router
from question_dedup.config.settings import Settings
from question_dedup.detection.detector import DuplicateDetector
from question_dedup.exceptions import ConfigurationError
from question_dedup.ingestion.spreadsheet import SpreadsheetIngestor
from question_dedup.observability.logger import get_logger, setup_logging
from question_dedup.observability.metrics import InMemoryMetrics
from question_dedup.oracle.client import OracleClient
from question_dedup.oracle.rate_budget import RateBudget
from question_dedup.pipeline.batch_orchestrator import BatchOrchestrator
from question_dedup.protocols.judge import SemanticJudge
from question_dedup.similarity.cache import SimilarityCache
from question_dedup.storage.json_corpus_store import JSONCorpusStore
from question_dedup.storage.sqlite_corpus_store import SQLiteCorpusStore

logger = get_logger("app")


def create_judge(settings: Settings) -> SemanticJudge | None:
    if not settings.oracle_enabled:
        return None
    if not settings.google_api_key:
        logger.warning("oracle_disabled_no_api_key")
        return None
    from question_dedup.oracle.gemini_judge import GeminiJudge

    return GeminiJudge(
        api_key=settings.google_api_key,
        model=settings.gemini_model,
        temperature=settings.gemini_temperature,
        max_tokens=settings.gemini_max_tokens,
    )


async def create_store(settings: Settings) -> JSONCorpusStore | SQLiteCorpusStore:
    if settings.corpus_backend == "json":
        Path(settings.questions_file_path).parent.mkdir(parents=True, exist_ok=True)
        store = JSONCorpusStore(settings.questions_file_path)
    elif settings.corpus_backend == "sqlite":
        Path(settings.sqlite_corpus_db_path).parent.mkdir(parents=True, exist_ok=True)
        store = SQLiteCorpusStore(settings.sqlite_corpus_db_path)
    else:
        raise ConfigurationError(f"Unknown corpus backend: {settings.corpus_backend}")
    await store.initialize()
    return store


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    setup_logging(settings.log_level, settings.json_logs)
    Path(settings.uploads_dir).mkdir(parents=True, exist_ok=True)

    # Storage
    store = await create_store(settings)

    # Shared process-scoped state
    metrics = InMemoryMetrics()
    cache = SimilarityCache()
    budget = RateBudget(
        capacity=settings.oracle_requests_per_window,
        window_seconds=settings.oracle_window_seconds,
        max_concurrency=settings.oracle_max_concurrency,
    )

    # Oracle
    judge = app.state.judge if app.state.judge is not None else create_judge(settings)
    oracle = OracleClient(judge=judge, cache=cache, budget=budget, metrics=metrics, settings=settings)

    # Detection and orchestration
    detector = DuplicateDetector(oracle=oracle, settings=settings)
    orchestrator = BatchOrchestrator(detector=detector, store=store, cache=cache, settings=settings)
    ingestor = SpreadsheetIngestor(orchestrator=orchestrator, output_dir=settings.uploads_dir)

    # Attach to app state
    app.state.orchestrator = orchestrator
    app.state.ingestor = ingestor
    app.state.metrics = metrics
    app.state.cache = cache
    app.state.started_at = time.monotonic()

    logger.info(
        "startup_complete",
        corpus_size=await orchestrator.corpus_size(),
        backend=settings.corpus_backend,
        oracle="enabled" if judge is not None else "disabled",
        max_questions_per_batch=settings.max_questions_per_batch,
        max_upload_mb=settings.max_upload_bytes / (1024 * 1024),
    )

    yield

    logger.info("shutdown_complete")


def create_app(settings: Settings | None = None, judge: SemanticJudge | None = None) -> FastAPI:
    app = FastAPI(
        title="Question Dedup",
        version=__version__,
        description="Duplicate question detection with lexical and semantic scoring",
        lifespan=lifespan,
    )
    app.state.settings = settings or Settings()
    app.state.judge = judge
    app.add_middleware(RequestContextMiddleware)
    app.include_router(health_router, tags=["health"])
    app.include_router(questions_router, tags=["questions"])
    app.include_router(upload_router, tags=["upload"])
    return app
