"""Per-request context: request IDs, timing and last-resort error mapping."""

from __future__ import annotations

import time
from uuid import uuid4

import structlog
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from question_dedup.exceptions import QuestionDedupError
from question_dedup.models.schemas import ErrorResponse
from question_dedup.observability.logger import get_logger

logger = get_logger("middleware")

REQUEST_ID_HEADER = "X-Request-ID"


def _elapsed_ms(start: float) -> float:
    return round((time.monotonic() - start) * 1000, 2)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Binds a request ID for every log line emitted while serving a request.

    A client supplied ``X-Request-ID`` is reused so batch and upload calls can
    be traced across services. Domain errors that escape a route become a JSON
    500 instead of a bare server error.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
        start = time.monotonic()

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id, method=request.method, path=request.url.path
        )

        try:
            response = await call_next(request)
        except QuestionDedupError as e:
            logger.error(
                "request_failed",
                error_type=type(e).__name__,
                error=str(e),
                duration_ms=_elapsed_ms(start),
            )
            response = JSONResponse(
                status_code=500, content=ErrorResponse(error=str(e)).model_dump()
            )

        duration_ms = _elapsed_ms(start)
        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Duration-MS"] = str(duration_ms)
        logger.info("request_completed", status=response.status_code, duration_ms=duration_ms)
        return response
