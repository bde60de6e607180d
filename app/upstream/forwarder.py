"""
Forwarder for calls to the Brawl Stars API.

``Forwarder.forward`` performs exactly one upstream GET per call, bounded by the
configured timeout, and always returns a ``ForwardResult``. Upstream error
statuses, transport failures and timeouts are translated into the client-facing
taxonomy in ``app.upstream.errors``; nothing is retried.
"""

import asyncio
import logging
from typing import Dict, Optional

import httpx
from opentelemetry import trace

from app.settings import ProxySettings
from app.upstream.errors import (
    ErrorKind,
    build_failure,
    failure_for_upstream_status,
)
from app.upstream.results import ForwardFailure, ForwardResult, ForwardSuccess
from app.utils import mask_token
from app.utils.traced_requests import traced_request

logger = logging.getLogger("uvicorn.error")
tracer = trace.get_tracer(__name__)


def _upstream_message(response: httpx.Response) -> str:
    """Prefer the ``message`` field of the upstream JSON error body."""
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return response.reason_phrase or f"HTTP {response.status_code}"


class Forwarder:
    """Executes authenticated upstream calls and classifies their outcome."""

    def __init__(
        self,
        settings: ProxySettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        self.transport = transport

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.settings.api_key}",
            "Accept": "application/json",
            "User-Agent": self.settings.user_agent,
        }

    def url_for(self, upstream_path: str) -> str:
        return f"{self.settings.upstream_base_url}{upstream_path}"

    async def forward(self, upstream_path: str) -> ForwardResult:
        if not self.settings.api_key_configured:
            logger.error(
                f"[Proxy] Refusing {upstream_path}: BRAWL_STARS_API_KEY is not configured"
            )
            return build_failure(ErrorKind.MISCONFIGURED_SERVICE)

        with traced_request(
            tracer,
            operation="brawlstars.forward",
            upstream_path=upstream_path,
            start_message=f"[Proxy] Forwarding {upstream_path}",
        ) as span:
            result = await self._execute(upstream_path)
            span.set_attribute("upstream.status_code", result.status_code)
            if isinstance(result, ForwardFailure):
                span.set_attribute("proxy.error_kind", result.kind.value)
            return result

    async def _execute(self, upstream_path: str) -> ForwardResult:
        timeout = self.settings.upstream_timeout
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(timeout),
                transport=self.transport,
                follow_redirects=False,
            ) as client:
                response = await asyncio.wait_for(
                    client.get(self.url_for(upstream_path), headers=self._headers()),
                    timeout=timeout,
                )
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            logger.error(f"[Proxy] Timeout after {timeout}s: {upstream_path}: {e!r}")
            return build_failure(ErrorKind.TIMEOUT)
        except httpx.RequestError as e:
            logger.error(
                mask_token(
                    f"[Proxy] Network error: {upstream_path}: {e!r}",
                    self.settings.api_key,
                )
            )
            return build_failure(ErrorKind.NETWORK_ERROR)

        if response.is_success:
            logger.info(
                f"[Proxy] Success: {upstream_path} - Status: {response.status_code}"
            )
            return ForwardSuccess(
                status_code=response.status_code, body=response.content
            )

        message = mask_token(_upstream_message(response), self.settings.api_key)
        failure = failure_for_upstream_status(
            response.status_code,
            upstream_message=message,
            retry_after=response.headers.get("retry-after"),
        )
        logger.warning(
            f"[Proxy] Error: {upstream_path} - Upstream status: {response.status_code}"
            f" -> {failure.kind.value} ({failure.status_code}): {message}"
        )
        return failure
