"""Consumer side of the channel: keeps the latest snapshot for the render layer."""

from __future__ import annotations

from logging import getLogger
from types import MappingProxyType
from typing import TYPE_CHECKING
from uuid import uuid4

from .messages import DataUpdated, ExtractPageData, RequestData, records_from_snapshot

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

    from venuemark.domain.model import AttributionRecord, Venue

    from .bus import ChannelEndpoint

type RenderCallback = Callable[[Mapping[str, AttributionRecord]], None]

log = getLogger(__name__)


class ContentAgent:
    def __init__(
        self,
        *,
        endpoint: ChannelEndpoint,
        render: RenderCallback | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.render = render
        self._view: dict[str, AttributionRecord] = {}
        self.updates_received = 0

    @property
    def view(self) -> Mapping[str, AttributionRecord]:
        return MappingProxyType(self._view)

    def venue_for(self, item_id: str) -> Venue | None:
        record = self._view.get(item_id)
        return record.venue if record is not None else None

    def apply(self, message: DataUpdated) -> None:
        """Replace the local view with the snapshot carried by ``message``."""

        self._view = records_from_snapshot(message.snapshot)
        self.updates_received += 1
        log.info("Received NFT data: %s items", len(self._view))
        if self.render is not None:
            self.render(self.view)

    def request_data(self, addresses: Iterable[str]) -> RequestData | None:
        """Ask the page context about addresses not in the view; ``None`` if all are known."""

        unknown = [address for address in dict.fromkeys(addresses) if address not in self._view]
        if not unknown:
            return None
        message = RequestData(addresses=unknown, request_id=uuid4().hex)
        log.info("Requesting data for %s unmarked NFTs", len(unknown))
        self.endpoint.post(message)
        return message

    def extract_page_data(self) -> ExtractPageData:
        message = ExtractPageData(request_id=uuid4().hex)
        self.endpoint.post(message)
        return message

    async def run(self) -> None:
        async for message in self.endpoint:
            if isinstance(message, DataUpdated):
                self.apply(message)
