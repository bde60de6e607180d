import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request

from app.rate_limiter import enforce_rate_limit
from app.settings import ProxySettings
from app.upstream import Forwarder
from app.upstream.route_table import ROUTE_TABLE, RouteDescriptor, endpoint_listing
from app.vars import SERVICE_VERSION

# HEAD is answered wherever GET is
READ_METHODS = ["GET", "HEAD"]

router = APIRouter()


def get_settings(request: Request) -> ProxySettings:
    return request.app.state.settings


def get_forwarder(request: Request) -> Forwarder:
    return request.app.state.forwarder


@router.api_route("/health", methods=READ_METHODS)
async def health(request: Request, settings: ProxySettings = Depends(get_settings)):
    started_at = getattr(request.app.state, "started_at", time.monotonic())
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.monotonic() - started_at, 3),
        "environment": settings.environment,
        "apiKeyConfigured": settings.api_key_configured,
    }


@router.api_route(
    "/", methods=READ_METHODS, dependencies=[Depends(enforce_rate_limit)]
)
async def index():
    return {
        "name": "Brawl Stars API Proxy",
        "version": SERVICE_VERSION,
        "status": "active",
        "endpoints": endpoint_listing(),
    }


def proxy_endpoint(descriptor: RouteDescriptor):
    """Endpoint forwarding one route table entry upstream."""

    async def endpoint(request: Request, forwarder: Forwarder = Depends(get_forwarder)):
        # limit is forwarded as given; the upstream API enforces its own bounds
        query = {q.name: request.query_params.get(q.name) for q in descriptor.query}
        upstream_path = descriptor.resolve(dict(request.path_params), query)
        result = await forwarder.forward(upstream_path)
        return result.to_response()

    endpoint.__name__ = descriptor.name
    return endpoint


for _descriptor in ROUTE_TABLE:
    router.add_api_route(
        _descriptor.path,
        proxy_endpoint(_descriptor),
        methods=READ_METHODS,
        name=_descriptor.name,
        dependencies=[Depends(enforce_rate_limit)],
    )
