"""Domain exceptions and their HTTP translation.

Services raise the exceptions below; `register_exception_handlers`
turns them (and framework errors) into the JSON error body
`{timestamp, status, error, message, path}`.
"""

import logging
from datetime import datetime, timezone
from http import HTTPStatus
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import ClientDisconnect

logger = logging.getLogger("portfolio.errors")


class BlogNotFoundError(Exception):
    """Raised when an admin operation targets a missing or deleted blog."""


class BlogSlugAlreadyExistsError(Exception):
    """Raised when a blog slug is already taken."""


class EmailServiceError(Exception):
    """Low-level email delivery failure raised by mail backends."""


class EmailSendingError(Exception):
    """User-facing failure of the contact form email; wraps `EmailServiceError`."""


def error_body(status: int, error: str, message: str, path: str) -> dict:
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "status": status,
        "error": error,
        "message": message,
        "path": path,
    }


def error_response(request: Request, status: int, error: str, message: str, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status,
        content=error_body(status, error, message, request.url.path),
        headers=headers,
    )


def internal_error_response(request: Request) -> JSONResponse:
    return error_response(request, 500, "Internal Server Error", "An unexpected error occurred")


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        field = ".".join(loc) or "request"
        parts.append(f"{field} - {err.get('msg', 'invalid value')}")
    return "Validation failed: " + "; ".join(parts)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the application's exception handlers to `app`."""

    @app.exception_handler(BlogNotFoundError)
    async def handle_blog_not_found(request: Request, exc: BlogNotFoundError):
        logger.warning("Blog not found: %s", exc)
        return error_response(request, 404, "Blog Not Found", str(exc))

    @app.exception_handler(BlogSlugAlreadyExistsError)
    async def handle_slug_exists(request: Request, exc: BlogSlugAlreadyExistsError):
        logger.warning("Blog slug already exists: %s", exc)
        return error_response(request, 409, "Blog Slug Already Exists", str(exc))

    @app.exception_handler(EmailSendingError)
    async def handle_email_sending(request: Request, exc: EmailSendingError):
        logger.error("Email sending failed: %s (cause: %r)", exc, exc.__cause__)
        return error_response(request, 500, "Email Sending Failed", str(exc))

    @app.exception_handler(RequestValidationError)
    async def handle_validation(request: Request, exc: RequestValidationError):
        message = _validation_message(exc)
        logger.warning("Validation error on %s: %s", request.url.path, message)
        return error_response(request, 400, "Validation Error", message)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        try:
            reason = HTTPStatus(exc.status_code).phrase
        except ValueError:
            reason = "Error"
        message = exc.detail if isinstance(exc.detail, str) else reason
        return error_response(request, exc.status_code, reason, message, headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("Unexpected error occurred on %s", request.url.path)
        return internal_error_response(request)


_DISCONNECT_MARKERS = ("broken pipe", "connection reset", "connection aborted", "client disconnected")


def is_client_disconnect(exc: BaseException) -> bool:
    """True when `exc` (or its cause chain) means the client went away mid-request."""
    seen = set()
    while exc is not None and id(exc) not in seen:
        seen.add(id(exc))
        if isinstance(exc, (ClientDisconnect, BrokenPipeError, ConnectionResetError, ConnectionAbortedError)):
            return True
        if any(marker in str(exc).lower() for marker in _DISCONNECT_MARKERS):
            return True
        exc = exc.__cause__ or exc.__context__
    return False
