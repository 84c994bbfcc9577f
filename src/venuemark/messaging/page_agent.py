"""Producer side of the channel: runs in the page context next to the API traffic."""

from __future__ import annotations

import asyncio
from contextvars import ContextVar
from logging import getLogger
from typing import TYPE_CHECKING

from venuemark.adapters.getgems.routes import PageKind, PageLocation
from venuemark.config.getgems import DEFAULT_ENDPOINT_MARKER
from venuemark.domain.classification import DEFAULT_POLICY
from venuemark.ingest import IngestionPipeline

from .messages import DataUpdated, ExtractPageData, RequestData, data_updated

if TYPE_CHECKING:
    from collections.abc import Callable, Coroutine, Mapping

    from venuemark.adapters.getgems.client import GetgemsGraphQLClient
    from venuemark.adapters.getgems.interception import InterceptedExchange
    from venuemark.domain.classification import ClassifierPolicy
    from venuemark.domain.model import AttributionRecord
    from venuemark.domain.store import AttributionStore
    from venuemark.ingest import IngestReport

    from .bus import ChannelEndpoint

type DocumentProvider = Callable[[], object | None]

log = getLogger(__name__)

_reply_to: ContextVar[str | None] = ContextVar("venuemark_reply_to", default=None)


class PageAgent:
    """Own the attribution store and answer the content context's requests.

    Each request runs in its own task so a slow point query never blocks an
    extract request. Tasks share the store without locking; the store's
    first-writer-wins insert makes their writes commute.
    """

    def __init__(
        self,
        *,
        endpoint: ChannelEndpoint,
        store: AttributionStore,
        location: str,
        graphql: GetgemsGraphQLClient | None = None,
        document_provider: DocumentProvider | None = None,
        policy: ClassifierPolicy = DEFAULT_POLICY,
        endpoint_marker: str = DEFAULT_ENDPOINT_MARKER,
    ) -> None:
        self.endpoint = endpoint
        self.store = store
        self.location = PageLocation.parse(location)
        self.graphql = graphql
        self.document_provider = document_provider
        self.pipeline = IngestionPipeline(
            store=store,
            graphql=graphql,
            policy=policy,
            endpoint_marker=endpoint_marker,
            on_update=self._broadcast,
        )
        self._tasks: set[asyncio.Task[None]] = set()

    def navigate(self, location: str) -> None:
        """Switch to a new page: attributions of the previous page are dropped."""

        self.location = PageLocation.parse(location)
        self.store.drop()
        log.info("Navigated to %s page", self.location.kind)

    def on_intercepted(self, exchange: InterceptedExchange) -> IngestReport | None:
        """Hook for the transport collaborator, called after each completed request."""

        if self.graphql is not None and exchange.request_headers:
            self.graphql.capture_headers(exchange.request_headers)
        return self.pipeline.ingest_intercepted(exchange)

    async def run(self) -> None:
        """Serve requests until the endpoint is closed, then wait for in-flight work."""

        async for message in self.endpoint:
            match message:
                case RequestData():
                    self._spawn(self.handle_request_data(message))
                case ExtractPageData():
                    self._spawn(self.handle_extract_page_data(message))
                case DataUpdated():
                    pass
        await self.drain()

    async def drain(self) -> None:
        while self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    def _spawn(self, coro: Coroutine[object, object, None]) -> None:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log.error("Request handler failed", exc_info=exc)

    async def handle_request_data(self, message: RequestData) -> None:
        _reply_to.set(message.request_id)
        addresses = list(dict.fromkeys(message.addresses))
        if not addresses:
            return
        log.info("Received request for %s NFT addresses", len(addresses))

        location = self.location
        match location.kind:
            case PageKind.NFT if location.address is not None:
                await self.pipeline.ingest_point_query(location.address)
            case PageKind.USER:
                await self.pipeline.ingest_point_queries(addresses)
            case PageKind.COLLECTION | PageKind.COLLECTION_ITEM if location.collection_address:
                await self.pipeline.ingest_collection(location.collection_address)
            case _:
                log.info("Could not determine collection, NFT or user address; ignoring request")

    async def handle_extract_page_data(self, message: ExtractPageData) -> None:
        _reply_to.set(message.request_id)
        document = self.document_provider() if self.document_provider is not None else None
        if document is None:
            log.info("No page document available")
            return
        self.pipeline.ingest_page_state(document)

    def _broadcast(self, snapshot: Mapping[str, AttributionRecord]) -> None:
        self.endpoint.post(data_updated(snapshot, in_reply_to=_reply_to.get()))
