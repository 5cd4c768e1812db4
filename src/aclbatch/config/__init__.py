"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env_float, optional_env_int, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .fastly import FASTLY_API_URL, FastlyConfig, default_resilience_config, get_fastly_config
from .http_resilience import NO_RETRY, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging

__all__ = [
    "FASTLY_API_URL",
    "NO_RETRY",
    "ConfigurationError",
    "FastlyConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "configure_logging",
    "default_resilience_config",
    "get_fastly_config",
    "optional_env_float",
    "optional_env_int",
    "require_env_vars",
]
