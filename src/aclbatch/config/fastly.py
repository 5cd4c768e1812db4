"""Fastly API configuration values."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .env import optional_env_float, optional_env_int, require_env_vars
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

FASTLY_API_URL = "https://api.fastly.com"
FASTLY_TIMEOUT_SECONDS = 30.0
FASTLY_RETRY_TOTAL = 3


@dataclass(frozen=True)
class FastlyConfig:
    """Holds Fastly API configuration values."""

    api_token: str
    resilience: ResilienceConfig

    @property
    def base_url(self) -> str:
        return self.resilience.base_url or FASTLY_API_URL


def get_fastly_config(*, resilience: ResilienceConfig | None = None) -> FastlyConfig:
    values = require_env_vars(("FASTLY_API_TOKEN",))
    return FastlyConfig(
        api_token=values["FASTLY_API_TOKEN"],
        resilience=resilience or default_resilience_config(),
    )


def default_resilience_config() -> ResilienceConfig:
    return ResilienceConfig(
        name="fastly",
        base_url=os.getenv("FASTLY_API_URL") or FASTLY_API_URL,
        timeout_seconds=optional_env_float("ACLBATCH_TIMEOUT_SECONDS", FASTLY_TIMEOUT_SECONDS),
        retry=RetryPolicy(total=optional_env_int("ACLBATCH_RETRY_TOTAL", FASTLY_RETRY_TOTAL)),
        ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
    )
