"""
Process-wide proxy settings.

Settings are read from the environment exactly once, when the application is
created, and are immutable afterwards. Request handling code receives them via
``app.state`` instead of reading ``os.environ`` itself, so tests can build a
``ProxySettings`` by hand.
"""

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from app.vars import (
    DEFAULT_ALLOWED_ORIGINS,
    DEFAULT_PORT,
    DEFAULT_RATE_LIMIT,
    DEFAULT_UPSTREAM_TIMEOUT,
    DEFAULT_UPSTREAM_URL,
    USER_AGENT,
)


def _split_csv(raw: Optional[str]) -> Tuple[str, ...]:
    if not raw:
        return ()
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def _as_bool(raw: Optional[str], default: bool) -> bool:
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class ProxySettings:
    api_key: Optional[str] = None
    port: int = DEFAULT_PORT
    environment: str = "development"
    upstream_base_url: str = DEFAULT_UPSTREAM_URL
    upstream_timeout: float = DEFAULT_UPSTREAM_TIMEOUT
    user_agent: str = USER_AGENT
    allowed_origins: Tuple[str, ...] = field(default=DEFAULT_ALLOWED_ORIGINS)
    rate_limit: str = DEFAULT_RATE_LIMIT
    rate_limit_enabled: bool = True

    @property
    def api_key_configured(self) -> bool:
        return bool(self.api_key)

    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ProxySettings":
        """Build settings from environment variables (``os.environ`` by default)."""
        env = os.environ if environ is None else environ

        origins = list(DEFAULT_ALLOWED_ORIGINS)
        for origin in (env.get("FRONTEND_URL"),) + _split_csv(
            env.get("ALLOWED_ORIGINS")
        ):
            if origin and origin not in origins:
                origins.append(origin)

        return cls(
            api_key=(env.get("BRAWL_STARS_API_KEY") or "").strip() or None,
            port=int(env.get("PORT") or DEFAULT_PORT),
            environment=env.get("NODE_ENV") or env.get("ENVIRONMENT") or "development",
            upstream_base_url=(
                env.get("BRAWL_STARS_API_URL") or DEFAULT_UPSTREAM_URL
            ).rstrip("/"),
            upstream_timeout=float(
                env.get("UPSTREAM_TIMEOUT") or DEFAULT_UPSTREAM_TIMEOUT
            ),
            allowed_origins=tuple(origins),
            rate_limit=env.get("RATE_LIMIT") or DEFAULT_RATE_LIMIT,
            rate_limit_enabled=_as_bool(env.get("RATE_LIMIT_ENABLED"), True),
        )
