"""Getgems marketplace configuration values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from venuemark.domain.classification import DEFAULT_GETGEMS_NETWORK_FEE

from .env import optional_env_var, optional_int_env_var
from .errors import ConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

DEFAULT_GRAPHQL_URL: Final[str] = "https://getgems.io/graphql/"
DEFAULT_ENDPOINT_MARKER: Final[str] = "getgems.io/graphql"
GETGEMS_TIMEOUT_SECONDS: Final[float] = 15.0

RESPONSE_SEARCH_DEPTH: Final[int] = 15
PAGE_STATE_SEARCH_DEPTH: Final[int] = 10

# Number of items requested by the collection search; no pagination beyond it.
COLLECTION_SEARCH_PAGE_SIZE: Final[int] = 100


@dataclass(frozen=True, slots=True)
class GetgemsConfig:
    """Holds Getgems GraphQL endpoint and classification settings."""

    graphql_url: str
    endpoint_marker: str
    getgems_network_fee: int
    resilience: ResilienceConfig


def get_getgems_config(*, resilience: ResilienceConfig | None = None) -> GetgemsConfig:
    graphql_url = optional_env_var("VENUEMARK_GRAPHQL_URL", DEFAULT_GRAPHQL_URL)
    network_fee = optional_int_env_var(
        "VENUEMARK_GETGEMS_NETWORK_FEE", DEFAULT_GETGEMS_NETWORK_FEE
    )
    if network_fee < 0:
        raise ConfigurationError("VENUEMARK_GETGEMS_NETWORK_FEE must be non-negative")

    return GetgemsConfig(
        graphql_url=graphql_url,
        endpoint_marker=DEFAULT_ENDPOINT_MARKER,
        getgems_network_fee=network_fee,
        resilience=resilience
        or ResilienceConfig(
            name="getgems",
            timeout_seconds=GETGEMS_TIMEOUT_SECONDS,
            retry=RetryPolicy(total=2),
            ratelimit=RateLimit(max_calls=5, per_seconds=1.0),
            default_headers={"Content-Type": "application/json"},
        ),
    )
