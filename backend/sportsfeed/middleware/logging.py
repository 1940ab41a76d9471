"""
backend/sportsfeed/middleware/logging.py

Purpose:
    Logging bootstrap plus a request middleware that emits one JSON line per
    HTTP request and tags every log record produced while serving it (provider
    attempts, breaker decisions) with the same short request id.

Dependencies:
    - starlette
"""

import contextvars
import json
import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("sportsfeed.http")

_request_id: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="-")


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get()
        return True


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = uuid.uuid4().hex[:8]
        token = _request_id.set(request_id)
        start = time.monotonic()
        try:
            response: Response = await call_next(request)
        finally:
            _request_id.reset(token)

        log_data = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "query": sorted(request.query_params.keys()),
            "status": response.status_code,
            "duration_ms": round((time.monotonic() - start) * 1000, 2),
        }
        level = logging.WARNING if response.status_code >= 400 else logging.INFO
        logger.log(level, json.dumps(log_data))

        response.headers["X-Request-ID"] = request_id
        return response


def setup_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s [%(request_id)s] %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, RequestIdFilter) for f in handler.filters):
            handler.addFilter(RequestIdFilter())
    # Per-request lines come from the middleware; httpx INFO lines leak query strings.
    logging.getLogger("httpx").setLevel(logging.WARNING)
