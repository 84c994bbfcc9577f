from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from venuemark.adapters.getgems import GetgemsAPIError, GetgemsGraphQLClient
from venuemark.adapters.getgems.queries import (
    COLLECTION_SEARCH_OPERATION,
    COLLECTION_SEARCH_QUERY,
    ITEM_BY_ADDRESS_OPERATION,
    ITEM_BY_ADDRESS_QUERY,
    collection_search_variables,
    item_by_address_variables,
)
from venuemark.config.getgems import GetgemsConfig

from tests.helpers.getgems import item_node, make_client_factory, point_query_response


def test_execute_posts_operation_and_returns_payload(getgems_config: GetgemsConfig) -> None:
    seen: list[httpx.Request] = []
    payload = point_query_response(item_node("X1"))

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=payload)

    client = GetgemsGraphQLClient(
        config=getgems_config, client_factory=make_client_factory(handler)
    )

    result = asyncio.run(
        client.execute(
            ITEM_BY_ADDRESS_OPERATION, ITEM_BY_ADDRESS_QUERY, item_by_address_variables("X1")
        )
    )

    assert result == payload
    assert len(seen) == 1
    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == getgems_config.graphql_url
    assert request.headers["content-type"] == "application/json"
    body = json.loads(request.content)
    assert body["operationName"] == "alphaNftItemByAddress"
    assert body["variables"] == {"address": "X1"}
    assert "alphaNftItemByAddress(address: $address)" in body["query"]


def test_captured_headers_are_replayed_once_captured(getgems_config: GetgemsConfig) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"data": {}})

    client = GetgemsGraphQLClient(
        config=getgems_config, client_factory=make_client_factory(handler)
    )
    assert client.capture_headers(
        {"x-gg-client": "v:1 l:en", "Content-Length": "123", "Host": "getgems.io"}
    )
    assert not client.capture_headers({"x-gg-client": "other"})

    asyncio.run(
        client.execute(
            COLLECTION_SEARCH_OPERATION,
            COLLECTION_SEARCH_QUERY,
            collection_search_variables("EQcollection"),
        )
    )

    assert client.captured_headers == {"x-gg-client": "v:1 l:en"}
    assert seen[0].headers["x-gg-client"] == "v:1 l:en"
    body = json.loads(seen[0].content)
    assert body["variables"]["count"] == 100
    assert body["variables"]["cursor"] is None
    assert json.loads(body["variables"]["query"]) == {
        "$and": [{"collectionAddress": "EQcollection"}, {"saleType": "fix_price"}]
    }


def test_errors_without_data_raise(getgems_config: GetgemsConfig) -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"errors": [{"message": "rate limited"}]})

    client = GetgemsGraphQLClient(
        config=getgems_config, client_factory=make_client_factory(handler)
    )

    with pytest.raises(GetgemsAPIError, match="rate limited") as excinfo:
        asyncio.run(client.execute(ITEM_BY_ADDRESS_OPERATION, ITEM_BY_ADDRESS_QUERY, {}))

    assert excinfo.value.operation_name == ITEM_BY_ADDRESS_OPERATION


def test_partial_errors_keep_data(getgems_config: GetgemsConfig) -> None:
    payload = {"data": {"alphaNftItemByAddress": None}, "errors": [{"message": "not found"}]}

    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=payload)

    client = GetgemsGraphQLClient(
        config=getgems_config, client_factory=make_client_factory(handler)
    )

    assert asyncio.run(client.execute(ITEM_BY_ADDRESS_OPERATION, ITEM_BY_ADDRESS_QUERY, {})) == (
        payload
    )


def test_http_errors_propagate(getgems_config: GetgemsConfig) -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(403, json={"message": "forbidden"})

    client = GetgemsGraphQLClient(
        config=getgems_config, client_factory=make_client_factory(handler)
    )

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(client.execute(ITEM_BY_ADDRESS_OPERATION, ITEM_BY_ADDRESS_QUERY, {}))


def test_non_object_payload_is_rejected(getgems_config: GetgemsConfig) -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=["unexpected"])

    client = GetgemsGraphQLClient(
        config=getgems_config, client_factory=make_client_factory(handler)
    )

    with pytest.raises(GetgemsAPIError):
        asyncio.run(client.execute(ITEM_BY_ADDRESS_OPERATION, ITEM_BY_ADDRESS_QUERY, {}))
