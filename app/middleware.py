"""Middleware for the proxy service."""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from app.upstream import ErrorKind, build_failure
from app.utils.exception_logging import (
    format_exception_message,
    log_exception_with_details,
)

logger = logging.getLogger("uvicorn.error")

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "X-DNS-Prefetch-Control": "off",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "same-origin",
}


def internal_error_response(request: Request, exc: Exception) -> JSONResponse:
    """Log ``exc`` and render the last-resort 500; detail is hidden in production."""
    log_exception_with_details(
        logger, f"[Server] {request.method} {request.url.path}", exc
    )
    settings = request.app.state.settings
    message = None if settings.is_production() else format_exception_message(exc)
    return build_failure(ErrorKind.INTERNAL_ERROR, message=message).to_response()


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every inbound request with its origin."""

    async def dispatch(self, request: Request, call_next):
        origin = request.headers.get("origin") or "unknown"
        logger.info(f"[Request] {request.method} {request.url.path} - Origin: {origin}")
        return await call_next(request)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add conservative security headers to every response."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response


class UnhandledErrorMiddleware(BaseHTTPMiddleware):
    """
    Turn exceptions escaping a route into the last-resort 500.

    Installed inside the CORS middleware so the 500 still carries the
    cross-origin headers a browser needs to read it.
    """

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            return internal_error_response(request, exc)
