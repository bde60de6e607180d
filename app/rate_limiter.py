from fastapi import Request
from limits import parse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from slowapi.wrappers import Limit

from app.settings import ProxySettings

# Every guarded route draws from the same bucket
GLOBAL_SCOPE = "global"


class ClientRateLimit:
    """
    One request budget per client IP, shared by every route it guards.

    The check runs as a route dependency, so it does not rely on the
    middleware finding the endpoint behind a path.
    """

    def __init__(self, settings: ProxySettings):
        self.limiter = Limiter(
            key_func=get_remote_address,
            storage_uri="memory://",
            enabled=settings.rate_limit_enabled,
        )
        self.limit = Limit(
            parse(settings.rate_limit),
            get_remote_address,
            GLOBAL_SCOPE,
            False,
            None,
            None,
            None,
            1,
            False,
        )

    @property
    def enabled(self) -> bool:
        return self.limiter.enabled

    def hit(self, request: Request) -> None:
        if not self.enabled:
            return
        client = get_remote_address(request)
        if not self.limiter.limiter.hit(self.limit.limit, client, GLOBAL_SCOPE):
            raise RateLimitExceeded(self.limit)


def build_limiter(settings: ProxySettings) -> ClientRateLimit:
    return ClientRateLimit(settings)


async def enforce_rate_limit(request: Request) -> None:
    request.app.state.limiter.hit(request)
