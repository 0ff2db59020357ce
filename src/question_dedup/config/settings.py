"""Central configuration via Pydantic Settings. All values driven by env vars."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # API Keys
    google_api_key: str = ""

    # LLM / Gemini judge
    gemini_model: str = "gemini-2.0-flash"
    gemini_temperature: float = 0.0
    gemini_max_tokens: int = 512
    oracle_enabled: bool = True

    # Similarity thresholds
    prefilter_threshold: float = 0.6
    duplicate_threshold: float = 0.85
    reporting_floor: float = 0.6
    high_confidence_threshold: float = 0.95

    # Degraded fallback blend
    fallback_lexical_weight: float = 0.7
    fallback_overlap_weight: float = 0.3

    # Oracle budget and retries
    oracle_requests_per_window: int = 60
    oracle_window_seconds: float = 60.0
    oracle_max_concurrency: int = 2
    oracle_max_attempts: int = 3
    oracle_backoff_base_seconds: float = 1.0

    # Batching
    max_questions_per_batch: int = 1000
    batch_deadline_seconds: float = 0.0  # 0 disables the deadline

    # Storage
    corpus_backend: Literal["json", "sqlite"] = "json"
    questions_file_path: str = "data/questions.json"
    sqlite_corpus_db_path: str = "data/questions.db"
    uploads_dir: str = "data/uploads"
    max_upload_bytes: int = 10 * 1024 * 1024

    # Server
    host: str = "0.0.0.0"
    port: int = 3000

    # Logging
    log_level: str = "INFO"
    json_logs: bool = False

    model_config = {"env_file": ".env", "env_prefix": "QDEDUP_"}
