"""
Per-request access logging.
"""

import logging
import time
import uuid
from typing import Iterable, Tuple

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("ppewatch.request")


DEFAULT_IGNORED_PREFIXES: Tuple[str, ...] = (
    "/health",
    "/docs",
    "/redoc",
    "/openapi.json",
    "/favicon.ico",
)


def _client_ip(request: Request) -> str:
    xff = request.headers.get("x-forwarded-for")
    if xff:
        return xff.split(",")[0].strip()
    client = request.client
    return client.host if client else "unknown"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs each request with a trace id and duration.
    Adds X-Request-ID to every response.
    """
    
    def __init__(self, app, ignored_prefixes: Iterable[str] = DEFAULT_IGNORED_PREFIXES):
        super().__init__(app)
        self.ignored_prefixes = tuple(ignored_prefixes)
    
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        method = request.method.upper()
        
        trace_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        request.state.trace_id = trace_id
        
        skip = method == "OPTIONS" or any(path.startswith(p) for p in self.ignored_prefixes)
        
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            if not skip:
                duration_ms = int((time.perf_counter() - start) * 1000)
                logger.exception(
                    "request CRASH %s %s ip=%s dur_ms=%s trace_id=%s",
                    method,
                    path,
                    _client_ip(request),
                    duration_ms,
                    trace_id,
                )
            raise
        
        response.headers["X-Request-ID"] = trace_id
        
        if skip:
            return response
        
        duration_ms = int((time.perf_counter() - start) * 1000)
        status = response.status_code
        
        if status >= 500:
            level = logging.ERROR
        elif status >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO
        
        logger.log(
            level,
            "request %s %s -> %s ip=%s user=%s dur_ms=%s trace_id=%s",
            method,
            path,
            status,
            _client_ip(request),
            getattr(request.state, "user_email", "-"),
            duration_ms,
            trace_id,
        )
        return response
