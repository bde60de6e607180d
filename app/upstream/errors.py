"""
Client-facing error taxonomy.

Every failure the proxy reports is one of the ``ErrorKind`` members below. The
mapping from an upstream HTTP status to a kind is an explicit table with a
default arm, so it can be tested exhaustively.
"""

from enum import Enum
from typing import Any, Dict, Optional

from app.upstream.results import ForwardFailure


class ErrorKind(str, Enum):
    INVALID_REQUEST = "InvalidRequest"
    FORBIDDEN = "Forbidden"
    NOT_FOUND = "NotFound"
    RATE_LIMITED = "RateLimited"
    SERVICE_UNAVAILABLE = "ServiceUnavailable"
    TIMEOUT = "Timeout"
    NETWORK_ERROR = "NetworkError"
    MISCONFIGURED_SERVICE = "MisconfiguredService"
    UNHANDLED_UPSTREAM_STATUS = "UnhandledUpstreamStatus"
    INTERNAL_ERROR = "InternalError"


# Outward status for kinds that do not mirror the upstream status
KIND_STATUS: Dict[ErrorKind, int] = {
    ErrorKind.INVALID_REQUEST: 400,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.SERVICE_UNAVAILABLE: 503,
    ErrorKind.TIMEOUT: 408,
    ErrorKind.NETWORK_ERROR: 500,
    ErrorKind.MISCONFIGURED_SERVICE: 500,
    ErrorKind.INTERNAL_ERROR: 500,
}

UPSTREAM_STATUS_KINDS: Dict[int, ErrorKind] = {
    400: ErrorKind.INVALID_REQUEST,
    403: ErrorKind.FORBIDDEN,
    404: ErrorKind.NOT_FOUND,
    429: ErrorKind.RATE_LIMITED,
    503: ErrorKind.SERVICE_UNAVAILABLE,
}

_TITLES: Dict[ErrorKind, str] = {
    ErrorKind.INVALID_REQUEST: "Invalid request",
    ErrorKind.FORBIDDEN: "Access forbidden",
    ErrorKind.NOT_FOUND: "Resource not found",
    ErrorKind.RATE_LIMITED: "Rate limit reached",
    ErrorKind.SERVICE_UNAVAILABLE: "Service temporarily unavailable",
    ErrorKind.TIMEOUT: "Timeout",
    ErrorKind.NETWORK_ERROR: "Proxy server error",
    ErrorKind.MISCONFIGURED_SERVICE: "Proxy not configured",
    ErrorKind.UNHANDLED_UPSTREAM_STATUS: "Brawl Stars API error",
    ErrorKind.INTERNAL_ERROR: "Internal server error",
}

_MESSAGES: Dict[ErrorKind, str] = {
    ErrorKind.INVALID_REQUEST: "Check the parameters of your request",
    ErrorKind.FORBIDDEN: "Invalid API key or IP address not allowed by the Brawl Stars API",
    ErrorKind.NOT_FOUND: "Player or club tag not found, verify the tag and try again",
    ErrorKind.RATE_LIMITED: "Please wait before trying again",
    ErrorKind.SERVICE_UNAVAILABLE: "The Brawl Stars API is under maintenance",
    ErrorKind.TIMEOUT: "The Brawl Stars API took too long to respond",
    ErrorKind.NETWORK_ERROR: "Could not connect to the Brawl Stars API",
    ErrorKind.MISCONFIGURED_SERVICE: "BRAWL_STARS_API_KEY is not configured on the proxy",
    ErrorKind.UNHANDLED_UPSTREAM_STATUS: "Unexpected response from the Brawl Stars API",
    ErrorKind.INTERNAL_ERROR: "An unexpected error occurred",
}

ROUTE_NOT_FOUND_TITLE = "Endpoint not found"
ROUTE_NOT_FOUND_MESSAGE = "See GET / for the list of available endpoints"


def kind_for_upstream_status(status_code: int) -> ErrorKind:
    """Classify an upstream error status; unknown statuses fall to the default arm."""
    return UPSTREAM_STATUS_KINDS.get(status_code, ErrorKind.UNHANDLED_UPSTREAM_STATUS)


def build_failure(
    kind: ErrorKind,
    status_code: Optional[int] = None,
    message: Optional[str] = None,
    error: Optional[str] = None,
    **extra: Any,
) -> ForwardFailure:
    """Build a ``ForwardFailure`` with the default title/message for ``kind``."""
    if status_code is None:
        status_code = KIND_STATUS[kind]
    return ForwardFailure(
        kind=kind,
        status_code=status_code,
        error=error or _TITLES[kind],
        message=message if message is not None else _MESSAGES.get(kind),
        extra={k: v for k, v in extra.items() if v is not None},
    )


def failure_for_upstream_status(
    status_code: int,
    upstream_message: Optional[str] = None,
    retry_after: Optional[str] = None,
) -> ForwardFailure:
    """Translate an upstream error response into its client-facing failure."""
    kind = kind_for_upstream_status(status_code)
    if kind is ErrorKind.INVALID_REQUEST:
        return build_failure(kind, details=upstream_message)
    if kind is ErrorKind.RATE_LIMITED:
        return build_failure(kind, retryAfter=retry_after)
    if kind is ErrorKind.UNHANDLED_UPSTREAM_STATUS:
        return build_failure(kind, status_code=status_code, message=upstream_message)
    return build_failure(kind)


def route_not_found() -> ForwardFailure:
    return build_failure(
        ErrorKind.NOT_FOUND,
        error=ROUTE_NOT_FOUND_TITLE,
        message=ROUTE_NOT_FOUND_MESSAGE,
    )
