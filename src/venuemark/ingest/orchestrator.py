"""Run ingestion passes over every data source and publish store snapshots."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from venuemark.adapters.getgems.cache_table import (
    GqlCacheTable,
    dehydrated_queries,
    page_props,
    query_data,
)
from venuemark.adapters.getgems.client import GetgemsAPIError
from venuemark.adapters.getgems.interception import (
    decode_json_body,
    matches_endpoint,
    operation_name,
)
from venuemark.adapters.getgems.queries import (
    COLLECTION_SEARCH_OPERATION,
    COLLECTION_SEARCH_QUERY,
    ITEM_BY_ADDRESS_OPERATION,
    ITEM_BY_ADDRESS_QUERY,
    collection_search_variables,
    item_by_address_variables,
)
from venuemark.adapters.getgems.translator import parse_item
from venuemark.config.getgems import (
    DEFAULT_ENDPOINT_MARKER,
    PAGE_STATE_SEARCH_DEPTH,
    RESPONSE_SEARCH_DEPTH,
)
from venuemark.domain.classification import DEFAULT_POLICY, ClassifierPolicy, classify
from venuemark.domain.model import AttributionRecord
from venuemark.domain.references import resolve_listing
from venuemark.domain.shape_search import (
    find_edge_list_items,
    find_item_candidate,
    find_item_candidates,
)

from .context import IngestReport, IngestSource

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

    from venuemark.adapters.getgems.interception import InterceptedExchange
    from venuemark.domain.model import Item, Venue
    from venuemark.domain.ports import GraphQLTransport, LookupTable
    from venuemark.domain.store import AttributionStore

type SnapshotListener = Callable[[Mapping[str, AttributionRecord]], None]

log = getLogger(__name__)

# Failures of the engine's own queries; logged and otherwise ignored.
_TRANSPORT_ERRORS: tuple[type[Exception], ...] = (httpx.HTTPError, GetgemsAPIError, ValueError)


class IngestionPipeline:
    """Feed intercepted responses, page state and point queries into one store.

    Every pass extracts candidate items, resolves and classifies their
    listings, records new attributions and then hands one snapshot of the
    whole store to ``on_update`` when the pass warrants a broadcast. Nothing
    a payload contains can make a pass raise; the worst outcome is fewer
    attributions.
    """

    def __init__(
        self,
        *,
        store: AttributionStore,
        graphql: GraphQLTransport | None = None,
        policy: ClassifierPolicy = DEFAULT_POLICY,
        endpoint_marker: str = DEFAULT_ENDPOINT_MARKER,
        on_update: SnapshotListener | None = None,
        response_depth: int = RESPONSE_SEARCH_DEPTH,
        page_state_depth: int = PAGE_STATE_SEARCH_DEPTH,
    ) -> None:
        self.store = store
        self.graphql = graphql
        self.policy = policy
        self.endpoint_marker = endpoint_marker
        self.on_update = on_update
        self.response_depth = response_depth
        self.page_state_depth = page_state_depth

    # -- interception -------------------------------------------------------

    def ingest_intercepted(self, exchange: InterceptedExchange) -> IngestReport | None:
        """Ingest a completed GraphQL call; ``None`` when the URL is not the API endpoint."""

        if not matches_endpoint(exchange.url, self.endpoint_marker):
            return None

        report = IngestReport(source=IngestSource.INTERCEPTION, operation=operation_name(exchange))
        try:
            body = decode_json_body(exchange.response_body)
        except ValueError as exc:
            log.warning("Could not decode %s response: %s", report.operation or "GraphQL", exc)
            report.failed = True
            return report

        self._ingest_edge_lists(body, report)
        return self._finish(report, broadcast=report.added > 0)

    def ingest_response(
        self,
        body: object,
        *,
        operation: str | None = None,
    ) -> IngestReport:
        """Ingest an already-decoded GraphQL response body."""

        report = IngestReport(source=IngestSource.INTERCEPTION, operation=operation)
        self._ingest_edge_lists(body, report)
        return self._finish(report, broadcast=report.added > 0)

    def _ingest_edge_lists(self, body: object, report: IngestReport) -> None:
        for node in find_edge_list_items(body, max_depth=self.response_depth):
            item = parse_item(node)
            if item is None:
                report.malformed += 1
                continue
            self._attribute(item, None, report)

    # -- embedded page state ------------------------------------------------

    def ingest_page_state(self, document: object) -> IngestReport:
        """Ingest one ``__NEXT_DATA__`` document.

        Two indexed passes run over the ``gqlCache`` table: sale entries first,
        attributed to the items pointing at them, then item entries with inline
        sales or off-chain kinds. Only when both add nothing does an unindexed
        search of ``pageProps`` and the dehydrated React Query state run.
        """

        report = IngestReport(source=IngestSource.PAGE_STATE)
        table = GqlCacheTable.from_document(document)
        items = [item for _, item in table.item_entries()]
        log.debug("gqlCache holds %s entries, %s items", len(table), len(items))

        self._ingest_cached_listings(table, items, report)
        for item in items:
            if item.item_id not in self.store:
                self._attribute(item, None, report)

        if report.added == 0:
            self._ingest_unindexed(page_props(document), table, report)
        if report.added == 0:
            for query in dehydrated_queries(document):
                self._ingest_unindexed(query_data(query), table, report)

        return self._finish(report, broadcast=self.store.size() > 0)

    def _ingest_cached_listings(
        self,
        table: GqlCacheTable,
        items: list[Item],
        report: IngestReport,
    ) -> None:
        for _, listing in table.listing_entries():
            venue = classify(None, listing, policy=self.policy)
            if venue is None:
                report.unclassified += 1
                continue
            for item in items:
                pointer = item.listing_pointer
                if pointer is not None and pointer.points_at(listing.listing_id):
                    report.candidates += 1
                    self._record(item, venue, report)

    def _ingest_unindexed(
        self,
        root: object,
        table: LookupTable,
        report: IngestReport,
    ) -> None:
        for fragment in find_item_candidates(root, max_depth=self.page_state_depth):
            item = parse_item(fragment)
            if item is None:
                report.malformed += 1
                continue
            self._attribute(item, table, report)

    # -- on-demand queries --------------------------------------------------

    async def ingest_point_query(self, item_id: str) -> IngestReport:
        """Query the API for exactly one item and attribute it."""

        report = IngestReport(source=IngestSource.POINT_QUERY, operation=ITEM_BY_ADDRESS_OPERATION)
        payload = await self._execute(
            ITEM_BY_ADDRESS_OPERATION,
            ITEM_BY_ADDRESS_QUERY,
            item_by_address_variables(item_id),
            report,
        )
        if report.failed:
            return report

        fragment = find_item_candidate(payload, max_depth=self.response_depth)
        item = parse_item(fragment) if fragment is not None else None
        if item is None:
            log.info("No item returned for %s", item_id)
            report.malformed += 1
        else:
            self._attribute(item, None, report)
        return self._finish(report, broadcast=report.added > 0)

    async def ingest_point_queries(self, item_ids: Iterable[str]) -> list[IngestReport]:
        """Point-query each id not attributed yet, one request at a time."""

        reports: list[IngestReport] = []
        for item_id in dict.fromkeys(item_ids):
            if item_id in self.store:
                continue
            reports.append(await self.ingest_point_query(item_id))
        return reports

    async def ingest_collection(self, collection_address: str) -> IngestReport:
        """Search the fixed-price items of one collection (first page only)."""

        report = IngestReport(
            source=IngestSource.COLLECTION_SEARCH, operation=COLLECTION_SEARCH_OPERATION
        )
        payload = await self._execute(
            COLLECTION_SEARCH_OPERATION,
            COLLECTION_SEARCH_QUERY,
            collection_search_variables(collection_address),
            report,
        )
        if report.failed:
            return report
        self._ingest_edge_lists(payload, report)
        return self._finish(report, broadcast=report.added > 0)

    async def _execute(
        self,
        operation: str,
        query: str,
        variables: Mapping[str, object],
        report: IngestReport,
    ) -> object:
        if self.graphql is None:
            log.warning("No GraphQL transport configured; skipping %s", operation)
            report.failed = True
            return None
        try:
            return await self.graphql.execute(operation, query, variables)
        except _TRANSPORT_ERRORS:
            log.exception("GraphQL %s failed", operation)
            report.failed = True
            return None

    # -- shared steps -------------------------------------------------------

    def _attribute(
        self,
        item: Item,
        lookup_table: LookupTable | None,
        report: IngestReport,
    ) -> bool:
        report.candidates += 1
        if item.item_id in self.store:
            report.known += 1
            return False
        try:
            listing = resolve_listing(item, lookup_table)
            venue = classify(item, listing, policy=self.policy)
        except (LookupError, TypeError, ValueError):
            log.exception("Failed to attribute %s", item.item_id)
            report.malformed += 1
            return False

        if listing is None and item.listing_pointer is not None:
            report.unresolved += 1
        if venue is None:
            report.unclassified += 1
            return False
        return self._record(item, venue, report)

    def _record(self, item: Item, venue: Venue, report: IngestReport) -> bool:
        added = self.store.upsert_if_absent(item.item_id, AttributionRecord.for_item(item, venue))
        if added:
            report.added += 1
            log.debug("Attributed %s (%s) to %s", item.item_id, item.display_name, venue)
        else:
            report.known += 1
        return added

    def _finish(self, report: IngestReport, *, broadcast: bool) -> IngestReport:
        log.info(
            "Ingested %s%s: %s. Total: %s",
            report.source,
            f" ({report.operation})" if report.operation else "",
            report.summary(),
            self.store.size(),
        )
        if broadcast and self.on_update is not None:
            self.on_update(self.store.snapshot())
            report.broadcast = True
        return report
