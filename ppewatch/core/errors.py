"""
JSON error envelope.

Every error response has the shape::

    {"error": {"message": ..., "type": ..., "status": ..., "trace_id": ..., "details"?: ...}}

and carries an ``X-Request-ID`` header.
"""

import logging
import uuid
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from ppewatch.config import settings

log = logging.getLogger("ppewatch.errors")


def ensure_trace_id(request: Request) -> str:
    """
    Return a stable trace id for this request.
    Prefer request.state, then the X-Request-ID header, else generate one.
    """
    val = getattr(request.state, "trace_id", None)
    if val:
        return str(val)
    trace_id = request.headers.get("x-request-id") or uuid.uuid4().hex
    request.state.trace_id = trace_id
    return trace_id


def error_payload(
    *,
    message: str,
    typ: str,
    status: int,
    trace_id: str,
    details: Optional[Any] = None,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "error": {
            "type": typ,
            "message": message,
            "status": status,
            "trace_id": trace_id,
        },
    }
    if details is not None:
        body["error"]["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """Install the envelope for HTTP, validation and unexpected errors."""
    
    @app.exception_handler(HTTPException)
    async def http_exc_handler(request: Request, exc: HTTPException):
        trace_id = ensure_trace_id(request)
        status_code = int(exc.status_code)
        message = exc.detail if isinstance(exc.detail, str) else "HTTP error"
        details = exc.detail if isinstance(exc.detail, dict) else None
        
        headers = dict(exc.headers or {})
        headers["X-Request-ID"] = trace_id
        
        level = logging.ERROR if status_code >= 500 else logging.WARNING
        log.log(
            level,
            "HTTPException %s %s -> %s | trace_id=%s | detail=%r",
            request.method,
            request.url.path,
            status_code,
            trace_id,
            exc.detail,
        )
        
        return JSONResponse(
            status_code=status_code,
            headers=headers,
            content=error_payload(
                message=message,
                typ="http_error",
                status=status_code,
                trace_id=trace_id,
                details=details,
            ),
        )
    
    @app.exception_handler(RequestValidationError)
    async def validation_exc_handler(request: Request, exc: RequestValidationError):
        trace_id = ensure_trace_id(request)
        errors = jsonable_encoder(exc.errors())
        log.warning(
            "ValidationError %s %s -> 422 | trace_id=%s | errors=%s",
            request.method,
            request.url.path,
            trace_id,
            errors,
        )
        return JSONResponse(
            status_code=422,
            headers={"X-Request-ID": trace_id},
            content=error_payload(
                message="Validation failed.",
                typ="validation_error",
                status=422,
                trace_id=trace_id,
                details=errors,
            ),
        )
    
    @app.exception_handler(Exception)
    async def unhandled_exc_handler(request: Request, exc: Exception):
        trace_id = ensure_trace_id(request)
        log.exception(
            "Unhandled exception %s %s -> 500 | trace_id=%s",
            request.method,
            request.url.path,
            trace_id,
        )
        details = None
        if settings.ENVIRONMENT != "production":
            details = {"exception": type(exc).__name__, "detail": str(exc)}
        return JSONResponse(
            status_code=500,
            headers={"X-Request-ID": trace_id},
            content=error_payload(
                message="Internal server error",
                typ="internal_error",
                status=500,
                trace_id=trace_id,
                details=details,
            ),
        )
