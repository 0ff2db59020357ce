"""Custom exception hierarchy for the question dedup engine."""

from __future__ import annotations


class QuestionDedupError(Exception):
    """Base exception for all question dedup errors."""


class BatchValidationError(QuestionDedupError):
    """Batch input was rejected before any oracle work started."""


class OracleError(QuestionDedupError):
    """Error talking to the semantic judge."""


class RateLimited(OracleError):
    """The judge signalled that the request budget is exhausted (HTTP 429)."""

    def __init__(self, message: str = "rate limited", retry_after: float | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class TransientFailure(OracleError):
    """Transport or server-side error that may succeed on retry."""


class MalformedOutput(OracleError):
    """The judge answered, but the answer could not be turned into a verdict."""


class PersistenceFailure(QuestionDedupError):
    """The corpus could not be written or reset.

    When raised at the end of a batch, ``results`` holds the already computed
    batch results so the caller can still report them.
    """

    def __init__(self, message: str, results: list | None = None) -> None:
        super().__init__(message)
        self.results = results if results is not None else []


class IngestionError(QuestionDedupError):
    """Error reading questions out of an uploaded spreadsheet."""


class ConfigurationError(QuestionDedupError):
    """Error in system configuration."""
