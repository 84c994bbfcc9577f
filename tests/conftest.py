from __future__ import annotations

import json
from pathlib import Path

import pytest

from venuemark.config import ResilienceConfig, RetryPolicy
from venuemark.config.getgems import DEFAULT_ENDPOINT_MARKER, DEFAULT_GRAPHQL_URL, GetgemsConfig
from venuemark.domain.classification import DEFAULT_GETGEMS_NETWORK_FEE
from venuemark.domain.store import AttributionStore

DATA_DIR = Path(__file__).resolve().parent / "data"


@pytest.fixture
def getgems_config() -> GetgemsConfig:
    return GetgemsConfig(
        graphql_url=DEFAULT_GRAPHQL_URL,
        endpoint_marker=DEFAULT_ENDPOINT_MARKER,
        getgems_network_fee=DEFAULT_GETGEMS_NETWORK_FEE,
        resilience=ResilienceConfig(name="getgems-test", retry=RetryPolicy(total=0)),
    )


@pytest.fixture
def store() -> AttributionStore:
    return AttributionStore.create()


@pytest.fixture(scope="session")
def search_response() -> dict[str, object]:
    with (DATA_DIR / "getgems_search_response.json").open(encoding="utf-8") as handle:
        return json.load(handle)


@pytest.fixture(scope="session")
def item_page_html() -> str:
    return (DATA_DIR / "getgems_item_page.html").read_text(encoding="utf-8")
