"""API middleware: CORS, request logging, and error handling.

# ─── MIDDLEWARE EXECUTION ORDER ───────────────────────────────────────
#
# Starlette middleware is a stack (last added, first executed):
#
#   In main.py:
#     app.add_middleware(ErrorHandlingMiddleware)    # added 1st -> inner
#     app.add_middleware(RequestLoggingMiddleware)   # added 2nd -> outer
#
#   Request flow:
#     Client -> RequestLogging -> ErrorHandling -> route handler
#
# RequestLoggingMiddleware therefore sees the final status code, including
# the 4xx/5xx that ErrorHandling produced from a KnowledgeBaseError.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import time
import uuid

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from bizknowledge.api.schemas import ErrorResponse
from bizknowledge.utils.errors import KnowledgeBaseError
from bizknowledge.utils.logging import bind_request_context, clear_request_context, get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------


def configure_cors(app: FastAPI, *, allowed_origins: list[str] | None = None) -> None:
    """Add CORS middleware; all origins are allowed unless a list is given."""
    origins = allowed_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


# ---------------------------------------------------------------------------
# Request Logging
# ---------------------------------------------------------------------------


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request and bind a request id to the log context."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:16]
        bind_request_context(request_id=request_id)
        start = time.perf_counter()
        response: Response | None = None

        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            status_code = response.status_code if response else 500
            _logger.info(
                "http_request",
                method=request.method,
                path=str(request.url.path),
                status=status_code,
                duration_ms=duration_ms,
            )
            clear_request_context()


# ---------------------------------------------------------------------------
# Error Handling
# ---------------------------------------------------------------------------


def error_response(exc: KnowledgeBaseError) -> JSONResponse:
    """Convert a domain error into its JSON ``ErrorResponse``."""
    details = exc.details()
    body = ErrorResponse(
        error=type(exc).__name__,
        detail=exc.message,
        file_type=details.get("file_type"),  # type: ignore[arg-type]
        file_name=details.get("file_name"),  # type: ignore[arg-type]
        supported_types=details.get("supported_types"),  # type: ignore[arg-type]
    )
    return JSONResponse(
        status_code=exc.http_status,
        content=body.model_dump(exclude_none=True),
    )


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Catch ``KnowledgeBaseError`` subclasses and return structured JSON errors.

    The status code comes from the exception class (``http_status``).
    Stack traces stay in the server log; the client sees the error type,
    message and, for upload failures, the file details and the accepted
    formats.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except KnowledgeBaseError as exc:
            log = _logger.error if exc.http_status >= 500 else _logger.warning
            log(
                "application_error",
                error_type=type(exc).__name__,
                message=exc.message,
                provider=exc.provider_name,
                status=exc.http_status,
                path=str(request.url.path),
            )
            return error_response(exc)
