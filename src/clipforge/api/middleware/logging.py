"""Request logging middleware."""

import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from structlog import get_logger

logger = get_logger()

REQUEST_ID_HEADER = "X-Request-ID"


class LoggingMiddleware(BaseHTTPMiddleware):
    """Tags every request with an id and logs its outcome.

    A caller-supplied ``X-Request-ID`` is reused so a frontend can correlate
    its own logs with ours.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        log = logger.bind(
            request_id=request_id, method=request.method, path=request.url.path
        )

        log.info("request_started", range=request.headers.get("range"))
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            log.exception("request_failed")
            raise

        log.info(
            "request_completed",
            status_code=response.status_code,
            duration_seconds=round(time.perf_counter() - started, 3),
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
