from __future__ import annotations

import asyncio
import json
from collections.abc import Mapping

import httpx

from venuemark.adapters.getgems import GetgemsAPIError, InterceptedExchange, extract_next_data
from venuemark.domain.classification import ClassifierPolicy
from venuemark.domain.model import AttributionRecord, Venue
from venuemark.domain.store import AttributionStore
from venuemark.ingest import IngestionPipeline, IngestSource

from tests.helpers.getgems import (
    FakeGraphQLTransport,
    edges_response,
    fix_price_sale,
    item_node,
    point_query_response,
)

GRAPHQL_URL = "https://getgems.io/graphql/?operationName=nftSearch"


class SnapshotRecorder:
    def __init__(self) -> None:
        self.snapshots: list[dict[str, AttributionRecord]] = []

    def __call__(self, snapshot: Mapping[str, AttributionRecord]) -> None:
        self.snapshots.append(dict(snapshot))


def _venues(store: AttributionStore) -> dict[str, Venue]:
    return {item_id: record.venue for item_id, record in store.snapshot().items()}


def _pipeline(
    store: AttributionStore,
    *,
    graphql: FakeGraphQLTransport | None = None,
) -> tuple[IngestionPipeline, SnapshotRecorder]:
    recorder = SnapshotRecorder()
    return IngestionPipeline(store=store, graphql=graphql, on_update=recorder), recorder


def _exchange(body: object) -> InterceptedExchange:
    return InterceptedExchange(url=GRAPHQL_URL, response_body=json.dumps(body).encode())


def test_intercepted_response_attributes_both_venues_in_one_broadcast(
    store: AttributionStore,
) -> None:
    pipeline, recorder = _pipeline(store)
    response = edges_response(
        item_node(
            "X1",
            kind="Normal",
            sale={"__typename": "NftSaleAuction", "marketplace": "GETGEMS"},
        ),
        item_node("X2", kind="Normal", sale=fix_price_sale("S2", 999)),
    )

    report = pipeline.ingest_intercepted(_exchange(response))

    assert report is not None
    assert report.source is IngestSource.INTERCEPTION
    assert report.operation == "nftSearch"
    assert report.added == 2
    assert report.broadcast
    assert _venues(store) == {"X1": Venue.GETGEMS, "X2": Venue.FRAGMENT}
    assert len(recorder.snapshots) == 1
    assert set(recorder.snapshots[0]) == {"X1", "X2"}


def test_repeated_ingestion_is_idempotent(store: AttributionStore) -> None:
    pipeline, recorder = _pipeline(store)
    response = edges_response(item_node("X1", sale=fix_price_sale("S1", "300000000")))

    pipeline.ingest_intercepted(_exchange(response))
    first = dict(store.snapshot())
    report = pipeline.ingest_intercepted(_exchange(response))

    assert report is not None
    assert report.added == 0
    assert report.known == 1
    assert not report.broadcast
    assert dict(store.snapshot()) == first
    assert len(recorder.snapshots) == 1


def test_conflicting_later_pass_does_not_overwrite(store: AttributionStore) -> None:
    pipeline, _ = _pipeline(store)

    pipeline.ingest_response(
        edges_response(item_node("X1", sale=fix_price_sale("S1", 300_000_000)))
    )
    pipeline.ingest_response(
        edges_response(item_node("X1", sale={"__typename": "TelemintAuction"}))
    )

    assert _venues(store) == {"X1": Venue.GETGEMS}


def test_other_urls_are_ignored(store: AttributionStore) -> None:
    pipeline, recorder = _pipeline(store)
    exchange = InterceptedExchange(
        url="https://getgems.io/_next/data/build/collection.json",
        response_body=edges_response(item_node("X1", kind="OffchainNft")),
    )

    assert pipeline.ingest_intercepted(exchange) is None
    assert store.size() == 0
    assert recorder.snapshots == []


def test_undecodable_response_is_reported(store: AttributionStore) -> None:
    pipeline, recorder = _pipeline(store)

    exchange = InterceptedExchange(url=GRAPHQL_URL, response_body=b"<html>")

    report = pipeline.ingest_intercepted(exchange)

    assert report is not None
    assert report.failed
    assert recorder.snapshots == []


def test_malformed_item_does_not_abort_siblings(store: AttributionStore) -> None:
    pipeline, _ = _pipeline(store)
    response = edges_response(
        {"__typename": "NftItem", "address": "bad", "name": ["not", "text"]},
        item_node("X1", sale=fix_price_sale("S1", 1)),
        item_node("X2"),
    )

    report = pipeline.ingest_response(response)

    assert report.malformed == 1
    assert report.unclassified == 1
    assert _venues(store) == {"X1": Venue.FRAGMENT}


def test_unreadable_fee_does_not_hide_stronger_signals(store: AttributionStore) -> None:
    pipeline, _ = _pipeline(store)
    response = edges_response(
        item_node(
            "X1",
            kind="OffchainNft",
            sale={"__typename": "NftSaleFixPrice", "networkFee": "n/a"},
        ),
        item_node(
            "X2",
            sale={"__typename": "NftSaleAuction", "marketplace": "GETGEMS", "networkFee": "n/a"},
        ),
        item_node("X3", sale=fix_price_sale("S3", "n/a")),
    )

    report = pipeline.ingest_response(response)

    assert report.malformed == 0
    assert report.candidates == 3
    assert report.unclassified == 1
    assert _venues(store) == {"X1": Venue.GETGEMS, "X2": Venue.GETGEMS}


def test_policy_fee_threshold_is_used(store: AttributionStore) -> None:
    pipeline = IngestionPipeline(
        store=store, policy=ClassifierPolicy(getgems_network_fee=250_000_000)
    )

    pipeline.ingest_response(
        edges_response(item_node("X1", sale=fix_price_sale("S1", 250_000_000)))
    )

    assert _venues(store) == {"X1": Venue.GETGEMS}


def test_page_state_attributes_cached_listings_and_items(
    store: AttributionStore,
    item_page_html: str,
) -> None:
    pipeline, recorder = _pipeline(store)

    report = pipeline.ingest_page_state(extract_next_data(item_page_html))

    assert report.added == 2
    assert _venues(store) == {
        "EQPageItem000000000000000000000000000000000002001": Venue.GETGEMS,
        "EQPageOffchain000000000000000000000000000000002002": Venue.GETGEMS,
    }
    assert len(recorder.snapshots) == 1


def test_page_state_broadcasts_whenever_store_is_not_empty(
    store: AttributionStore,
    item_page_html: str,
) -> None:
    pipeline, recorder = _pipeline(store)
    document = extract_next_data(item_page_html)

    pipeline.ingest_page_state(document)
    report = pipeline.ingest_page_state(document)

    assert report.added == 0
    assert report.broadcast
    assert len(recorder.snapshots) == 2


def test_empty_page_state_does_not_broadcast(store: AttributionStore) -> None:
    pipeline, recorder = _pipeline(store)

    report = pipeline.ingest_page_state({"props": {"pageProps": {}}})

    assert report.added == 0
    assert not report.broadcast
    assert recorder.snapshots == []


def test_page_state_falls_back_to_page_props_with_lookup_table(store: AttributionStore) -> None:
    pipeline, _ = _pipeline(store)
    document = {
        "props": {
            "pageProps": {
                "gqlCache": {
                    "NftSaleFixPrice:S1": fix_price_sale("S1", "100000000"),
                },
                "nft": item_node("X1", sale={"__ref": "NftSaleFixPrice:S1"}),
            }
        }
    }

    report = pipeline.ingest_page_state(document)

    assert report.added == 1
    assert _venues(store) == {"X1": Venue.FRAGMENT}


def test_page_state_fallback_attributes_every_embedded_item(store: AttributionStore) -> None:
    pipeline, _ = _pipeline(store)
    document = {
        "props": {
            "pageProps": {
                "nft": item_node("X1", kind="OffchainNft"),
                "related": [
                    item_node("X2", sale={"__typename": "TelemintAuction"}),
                    item_node("X3"),
                ],
            }
        }
    }

    report = pipeline.ingest_page_state(document)

    assert report.added == 2
    assert report.unclassified == 1
    assert _venues(store) == {"X1": Venue.GETGEMS, "X2": Venue.FRAGMENT}


def test_page_state_finds_items_in_dehydrated_queries(store: AttributionStore) -> None:
    pipeline, _ = _pipeline(store)
    document = {
        "props": {
            "pageProps": {
                "dehydratedState": {
                    "queries": [
                        {"queryKey": ["collection"], "state": {"data": None}},
                        {
                            "queryKey": ["nft", "X1"],
                            "state": {
                                "data": {
                                    "nftItem": item_node(
                                        "X1",
                                        sale={"__typename": "TelemintAuction", "marketplace": None},
                                    )
                                }
                            },
                        },
                    ]
                }
            }
        }
    }

    report = pipeline.ingest_page_state(document)

    assert report.added == 1
    assert _venues(store) == {"X1": Venue.FRAGMENT}


def test_point_query_attributes_single_item(store: AttributionStore) -> None:
    transport = FakeGraphQLTransport(
        responses={"X1": point_query_response(item_node("X1", kind="OffchainNft"))}
    )
    pipeline, recorder = _pipeline(store, graphql=transport)

    report = asyncio.run(pipeline.ingest_point_query("X1"))

    assert report.added == 1
    assert report.operation == "alphaNftItemByAddress"
    assert transport.calls == [("alphaNftItemByAddress", {"address": "X1"})]
    assert _venues(store) == {"X1": Venue.GETGEMS}
    assert len(recorder.snapshots) == 1


def test_point_query_without_item_adds_nothing(store: AttributionStore) -> None:
    transport = FakeGraphQLTransport(responses={"X1": point_query_response(None)})
    pipeline, recorder = _pipeline(store, graphql=transport)

    report = asyncio.run(pipeline.ingest_point_query("X1"))

    assert report.added == 0
    assert not report.failed
    assert recorder.snapshots == []


def test_point_query_transport_failure_leaves_store_untouched(store: AttributionStore) -> None:
    for error in (httpx.ConnectError("boom"), GetgemsAPIError("rate limited")):
        pipeline, recorder = _pipeline(store, graphql=FakeGraphQLTransport(error=error))

        report = asyncio.run(pipeline.ingest_point_query("X1"))

        assert report.failed
        assert store.size() == 0
        assert recorder.snapshots == []


def test_point_query_without_transport_fails_softly(store: AttributionStore) -> None:
    pipeline, _ = _pipeline(store)

    report = asyncio.run(pipeline.ingest_point_query("X1"))

    assert report.failed


def test_point_queries_skip_known_and_duplicate_ids(store: AttributionStore) -> None:
    transport = FakeGraphQLTransport(
        responses={
            "X1": point_query_response(item_node("X1", sale=fix_price_sale("S1", 1))),
            "X2": point_query_response(item_node("X2", sale=fix_price_sale("S2", 300_000_000))),
        }
    )
    pipeline, _ = _pipeline(store, graphql=transport)

    asyncio.run(pipeline.ingest_point_query("X1"))
    reports = asyncio.run(pipeline.ingest_point_queries(["X1", "X2", "X2"]))

    assert len(reports) == 1
    assert [variables["address"] for _, variables in transport.calls] == ["X1", "X2"]
    assert _venues(store) == {"X1": Venue.FRAGMENT, "X2": Venue.GETGEMS}


def test_collection_search_ingests_edge_list(
    store: AttributionStore,
    search_response: dict[str, object],
) -> None:
    transport = FakeGraphQLTransport(responses={"nftSearch": search_response})
    pipeline, recorder = _pipeline(store, graphql=transport)

    report = asyncio.run(pipeline.ingest_collection("EQcollection"))

    assert report.source is IngestSource.COLLECTION_SEARCH
    assert report.added == 3
    assert report.unclassified == 1
    assert _venues(store) == {
        "EQAuctionGetgemsItem0000000000000000000000000001": Venue.GETGEMS,
        "EQFixPriceFragmentItem000000000000000000000000002": Venue.FRAGMENT,
        "EQFixPriceGetgemsItem0000000000000000000000000003": Venue.GETGEMS,
    }
    assert len(recorder.snapshots) == 1
    operation, variables = transport.calls[0]
    assert operation == "nftSearch"
    assert variables["count"] == 100
