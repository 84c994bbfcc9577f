"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env_var, optional_int_env_var
from .errors import ConfigurationError
from .getgems import (
    COLLECTION_SEARCH_PAGE_SIZE,
    DEFAULT_GETGEMS_NETWORK_FEE,
    PAGE_STATE_SEARCH_DEPTH,
    RESPONSE_SEARCH_DEPTH,
    GetgemsConfig,
    get_getgems_config,
)
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging

__all__ = [
    "COLLECTION_SEARCH_PAGE_SIZE",
    "DEFAULT_GETGEMS_NETWORK_FEE",
    "PAGE_STATE_SEARCH_DEPTH",
    "RESPONSE_SEARCH_DEPTH",
    "ConfigurationError",
    "GetgemsConfig",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "configure_logging",
    "get_getgems_config",
    "optional_env_var",
    "optional_int_env_var",
]
