"""In-process broadcast bus standing in for ``window.postMessage``.

Every posted message is serialised to JSON text and handed to every connected
endpoint, the sender included, exactly like a same-window ``postMessage``.
Receivers drop their own echoes and anything that does not parse as a known
message. Delivery is at-most-once: a closed endpoint simply stops receiving.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError

from .messages import decode_message, encode_message

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from .messages import ChannelMessage

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Envelope:
    origin: str
    text: str


class BroadcastChannel:
    def __init__(self) -> None:
        self._endpoints: list[ChannelEndpoint] = []

    def connect(self, origin: str) -> ChannelEndpoint:
        endpoint = ChannelEndpoint(self, origin)
        self._endpoints.append(endpoint)
        log.debug("Endpoint %s connected", origin)
        return endpoint

    def disconnect(self, endpoint: ChannelEndpoint) -> None:
        if endpoint in self._endpoints:
            self._endpoints.remove(endpoint)

    def post_text(self, origin: str, text: str) -> int:
        """Deliver raw text to all endpoints; returns the number of deliveries."""

        envelope = Envelope(origin=origin, text=text)
        for endpoint in self._endpoints:
            endpoint.deliver(envelope)
        return len(self._endpoints)


class ChannelEndpoint:
    """One side's view of the bus."""

    def __init__(self, channel: BroadcastChannel, origin: str) -> None:
        self.channel = channel
        self.origin = origin
        self._inbox: asyncio.Queue[Envelope | None] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def post(self, message: ChannelMessage) -> None:
        self.channel.post_text(self.origin, encode_message(message))

    def deliver(self, envelope: Envelope) -> None:
        if not self._closed:
            self._inbox.put_nowait(envelope)

    def close(self) -> None:
        """Stop receiving; posting stays possible so in-flight replies still go out."""

        if self._closed:
            return
        self._closed = True
        self.channel.disconnect(self)
        self._inbox.put_nowait(None)

    async def receive(self) -> ChannelMessage | None:
        """Wait for the next foreign, well-formed message; ``None`` once closed."""

        while True:
            envelope = await self._inbox.get()
            if envelope is None:
                return None
            if envelope.origin == self.origin:
                continue
            try:
                return decode_message(envelope.text)
            except ValidationError as exc:
                log.debug(
                    "Ignoring unrecognised message from %s: %s",
                    envelope.origin,
                    exc.error_count(),
                )

    async def __aiter__(self) -> AsyncIterator[ChannelMessage]:
        while (message := await self.receive()) is not None:
            yield message
