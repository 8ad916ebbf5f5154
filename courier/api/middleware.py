"""Per-request logging context and access log."""

import re
import time
from typing import Optional
from uuid import uuid4

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

CORRELATION_HEADER = "X-Correlation-Id"

# Client-supplied ids end up in every log line of the request
_VALID_CORRELATION_ID = re.compile(r"[A-Za-z0-9._-]{1,64}")

logger = structlog.get_logger(__name__)


def resolve_correlation_id(header_value: Optional[str]) -> str:
    """Use the caller's id when it is well formed, otherwise mint one."""
    if header_value and _VALID_CORRELATION_ID.fullmatch(header_value):
        return header_value
    return str(uuid4())


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Binds correlation id, method and path for the request's log lines.

    Emits one ``request_completed`` event per request with the status and
    duration. Bearer tokens and bodies are never logged here.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        correlation_id = resolve_correlation_id(request.headers.get(CORRELATION_HEADER))
        request.state.correlation_id = correlation_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            correlation_id=correlation_id,
            method=request.method,
            path=request.url.path,
        )

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "request_failed",
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            raise

        logger.info(
            "request_completed",
            status=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        response.headers[CORRELATION_HEADER] = correlation_id
        return response
