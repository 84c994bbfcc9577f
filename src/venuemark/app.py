"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from venuemark.adapters.getgems.client import GetgemsGraphQLClient
from venuemark.adapters.getgems.page_state import load_page_document
from venuemark.config.getgems import GetgemsConfig, get_getgems_config
from venuemark.domain.classification import ClassifierPolicy
from venuemark.domain.store import AttributionStore
from venuemark.ingest import IngestionPipeline
from venuemark.messaging import BroadcastChannel, ContentAgent, PageAgent

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable, Iterable, Mapping

    from venuemark.adapters.http_resilience import ResilientClient
    from venuemark.config.http_resilience import ResilienceConfig
    from venuemark.domain.model import AttributionRecord
    from venuemark.messaging import DocumentProvider, RenderCallback

type ClientFactory = Callable[[ResilienceConfig], ResilientClient]

PAGE_ORIGIN = "page"
CONTENT_ORIGIN = "content"

log = getLogger(__name__)


def classifier_policy(config: GetgemsConfig) -> ClassifierPolicy:
    return ClassifierPolicy(getgems_network_fee=config.getgems_network_fee)


def build_pipeline(
    *,
    store: AttributionStore | None = None,
    config: GetgemsConfig | None = None,
    graphql: GetgemsGraphQLClient | None = None,
) -> IngestionPipeline:
    effective_config = config or get_getgems_config()
    return IngestionPipeline(
        store=store or AttributionStore.create(),
        graphql=graphql,
        policy=classifier_policy(effective_config),
        endpoint_marker=effective_config.endpoint_marker,
    )


def attribute_response(
    body: object,
    *,
    config: GetgemsConfig | None = None,
) -> Mapping[str, AttributionRecord]:
    """Attribute every item found in one GraphQL response body."""

    pipeline = build_pipeline(config=config)
    pipeline.ingest_response(body)
    return pipeline.store.snapshot()


def attribute_page(
    text: str,
    *,
    config: GetgemsConfig | None = None,
) -> Mapping[str, AttributionRecord]:
    """Attribute the items embedded in a page (HTML or bare ``__NEXT_DATA__`` JSON)."""

    pipeline = build_pipeline(config=config)
    document = load_page_document(text)
    if document is None:
        log.warning("No page state found")
        return pipeline.store.snapshot()
    pipeline.ingest_page_state(document)
    return pipeline.store.snapshot()


async def lookup_items(
    addresses: Iterable[str],
    *,
    config: GetgemsConfig | None = None,
    client_factory: ClientFactory | None = None,
) -> Mapping[str, AttributionRecord]:
    """Point-query each address against the GraphQL API."""

    effective_config = config or get_getgems_config()
    graphql = GetgemsGraphQLClient(config=effective_config, client_factory=client_factory)
    pipeline = build_pipeline(config=effective_config, graphql=graphql)
    reports = await pipeline.ingest_point_queries(addresses)
    log.info(
        "Finished lookup: queried=%s, attributed=%s, failed=%s",
        len(reports),
        pipeline.store.size(),
        sum(1 for report in reports if report.failed),
    )
    return pipeline.store.snapshot()


async def search_collection(
    collection_address: str,
    *,
    config: GetgemsConfig | None = None,
    client_factory: ClientFactory | None = None,
) -> Mapping[str, AttributionRecord]:
    """Attribute the first page of fixed-price items of a collection."""

    effective_config = config or get_getgems_config()
    graphql = GetgemsGraphQLClient(config=effective_config, client_factory=client_factory)
    pipeline = build_pipeline(config=effective_config, graphql=graphql)
    await pipeline.ingest_collection(collection_address)
    return pipeline.store.snapshot()


@dataclass(slots=True)
class MarkerSession:
    """A producer and a consumer connected by one broadcast channel."""

    channel: BroadcastChannel
    page: PageAgent
    content: ContentAgent

    @asynccontextmanager
    async def running(self) -> AsyncIterator[MarkerSession]:
        """Run both agents; on exit the producer finishes its work before the consumer stops."""

        page_task = asyncio.create_task(self.page.run())
        content_task = asyncio.create_task(self.content.run())
        try:
            yield self
        finally:
            self.page.endpoint.close()
            await page_task
            self.content.endpoint.close()
            await content_task


def open_session(
    location: str,
    *,
    config: GetgemsConfig | None = None,
    graphql: GetgemsGraphQLClient | None = None,
    document_provider: DocumentProvider | None = None,
    render: RenderCallback | None = None,
) -> MarkerSession:
    effective_config = config or get_getgems_config()
    channel = BroadcastChannel()
    page = PageAgent(
        endpoint=channel.connect(PAGE_ORIGIN),
        store=AttributionStore.create(),
        location=location,
        graphql=graphql,
        document_provider=document_provider,
        policy=classifier_policy(effective_config),
        endpoint_marker=effective_config.endpoint_marker,
    )
    content = ContentAgent(endpoint=channel.connect(CONTENT_ORIGIN), render=render)
    log.info("Opened session for %s", location)
    return MarkerSession(channel=channel, page=page, content=content)
