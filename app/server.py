import logging
import time
from typing import Optional, Sequence

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import ReadableSpan, TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    SpanExporter,
    SpanExportResult,
)
from prometheus_client import Info
from prometheus_fastapi_instrumentator import Instrumentator
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.middleware import (
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
    UnhandledErrorMiddleware,
    internal_error_response,
)
from app.rate_limiter import build_limiter
from app.routes import router
from app.settings import ProxySettings
from app.upstream import ErrorKind, Forwarder, build_failure, route_not_found
from app.utils import token_fingerprint
from app.vars import HOST, OTLP_ENDPOINT, OTLP_HEADERS, SERVICE_NAME, SERVICE_VERSION

logger = logging.getLogger("uvicorn.error")


class FilteringSpanExporter(SpanExporter):
    """
    Wrapper exporter that filters out noisy ASGI body spans.
    """

    def __init__(self, exporter: SpanExporter):
        self.exporter = exporter

    def export(self, spans: Sequence[ReadableSpan]) -> SpanExportResult:
        filtered_spans = [
            span
            for span in spans
            if not (
                span.attributes
                and span.attributes.get("asgi.event.type") == "http.response.body"
            )
        ]
        if filtered_spans:
            return self.exporter.export(filtered_spans)
        return SpanExportResult.SUCCESS

    def shutdown(self):
        return self.exporter.shutdown()

    def force_flush(self, timeout_millis: int = 30000):
        return self.exporter.force_flush(timeout_millis)


def _configure_tracing() -> None:
    # The global provider can only be set once per process
    if isinstance(trace.get_tracer_provider(), TracerProvider):
        return
    tracer_provider = TracerProvider(
        resource=Resource.create({"service.name": SERVICE_NAME})
    )
    if OTLP_ENDPOINT:
        otlp_exporter = OTLPSpanExporter(
            endpoint=OTLP_ENDPOINT,
            headers=((OTLP_HEADERS).split(",") if OTLP_HEADERS else None),
        )
        tracer_provider.add_span_processor(
            BatchSpanProcessor(FilteringSpanExporter(otlp_exporter))
        )
    trace.set_tracer_provider(tracer_provider)


_app_info = Info("fastapi_app_info", "Application Info")
_app_info.info({"app_name": SERVICE_NAME, "version": SERVICE_VERSION})


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (404, 405):
            logger.info(
                f"[Server] No route for {request.method} {request.url.path}"
            )
            return route_not_found().to_response()
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
        window = exc.limit.limit.get_expiry()
        logger.warning(
            f"[Server] Rate limit exceeded for {request.client.host if request.client else 'unknown'}"
            f" on {request.url.path}: {exc.detail}"
        )
        response = build_failure(
            ErrorKind.RATE_LIMITED,
            message="Too many requests from this IP, please try again later",
            retryAfter=window,
        ).to_response()
        response.headers["Retry-After"] = str(window)
        return response

    # Only reached for faults raised outside UnhandledErrorMiddleware
    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        return internal_error_response(request, exc)


def create_app(
    settings: Optional[ProxySettings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    instrument: bool = True,
) -> FastAPI:
    """
    Build the proxy application.

    ``settings`` default to ``ProxySettings.from_env()``; ``transport`` replaces
    the network transport of the upstream client (tests use ``httpx.MockTransport``).
    """
    settings = settings or ProxySettings.from_env()

    app = FastAPI(title="Brawl Stars API Proxy", version=SERVICE_VERSION)
    app.state.settings = settings
    app.state.forwarder = Forwarder(settings, transport=transport)
    app.state.started_at = time.monotonic()

    _register_error_handlers(app)

    app.state.limiter = build_limiter(settings)

    app.add_middleware(UnhandledErrorMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.is_development() else list(settings.allowed_origins),
        allow_credentials=True,
        allow_methods=["GET", "HEAD", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    if instrument:
        _configure_tracing()
        Instrumentator().instrument(app).expose(app)
        FastAPIInstrumentor.instrument_app(app)

    app.include_router(router)

    logger.info(f"[Server] Brawl Stars proxy configured for port {settings.port}")
    logger.info(f"[Server] Local URL: http://localhost:{settings.port} (host {HOST})")
    logger.info(
        f"[Server] API key configured: {'yes' if settings.api_key_configured else 'no'}"
        f" ({token_fingerprint(settings.api_key)})"
    )
    logger.info(f"[Server] Environment: {settings.environment}")
    logger.info(f"[Server] Upstream: {settings.upstream_base_url}")
    return app


app = create_app()
