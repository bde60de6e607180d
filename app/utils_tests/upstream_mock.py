import json
from typing import Any, Callable, Dict, List, Optional

import httpx


class UpstreamMock:
    """
    Stand-in for the Brawl Stars API.

    Wraps an ``httpx.MockTransport`` and records every request it receives, so
    tests can assert on the exact URL and headers the proxy sent.
    """

    def __init__(
        self,
        status_code: int = 200,
        body: Any = None,
        headers: Optional[Dict[str, str]] = None,
        handler: Optional[Callable[[httpx.Request], httpx.Response]] = None,
    ):
        self.status_code = status_code
        self.body = {} if body is None else body
        self.headers = headers or {}
        self.handler = handler
        self.requests: List[httpx.Request] = []
        self.transport = httpx.MockTransport(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.handler is not None:
            return self.handler(request)
        if isinstance(self.body, (bytes, str)):
            content = self.body
        else:
            content = json.dumps(self.body)
        return httpx.Response(
            self.status_code,
            content=content,
            headers={"content-type": "application/json", **self.headers},
        )

    def respond(self, status_code: int, body: Any = None, headers=None) -> None:
        self.status_code = status_code
        self.body = {} if body is None else body
        self.headers = headers or {}

    @property
    def last_request(self) -> httpx.Request:
        assert self.requests, "upstream was never called"
        return self.requests[-1]

    @property
    def last_raw_path(self) -> str:
        return self.last_request.url.raw_path.decode("ascii")


def raising(exc: Exception) -> Callable[[httpx.Request], httpx.Response]:
    """Handler that fails the upstream call with ``exc``."""

    def _handler(request: httpx.Request) -> httpx.Response:
        raise exc

    return _handler
