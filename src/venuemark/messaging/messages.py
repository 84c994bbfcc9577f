"""Wire messages exchanged between the page context and the content context."""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from venuemark.domain.model import AttributionRecord, Venue

if TYPE_CHECKING:
    from collections.abc import Mapping


class ChannelModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


class SnapshotEntry(ChannelModel):
    name: str | None = None
    marketplace: Venue
    kind: str = "unknown"


class DataUpdated(ChannelModel):
    """Full snapshot of the producer's store; always replaces the consumer's view."""

    type: Literal["GETGEMS_MARKER_NFT_DATA"] = "GETGEMS_MARKER_NFT_DATA"
    snapshot: dict[str, SnapshotEntry] = Field(default_factory=dict, alias="data")
    in_reply_to: str | None = None


class RequestData(ChannelModel):
    type: Literal["GETGEMS_MARKER_REQUEST_DATA"] = "GETGEMS_MARKER_REQUEST_DATA"
    addresses: list[str] = Field(default_factory=list)
    request_id: str | None = None


class ExtractPageData(ChannelModel):
    type: Literal["GETGEMS_MARKER_EXTRACT_PAGE_DATA"] = "GETGEMS_MARKER_EXTRACT_PAGE_DATA"
    request_id: str | None = None


type ChannelMessage = DataUpdated | RequestData | ExtractPageData

CHANNEL_MESSAGE_ADAPTER: TypeAdapter[ChannelMessage] = TypeAdapter(
    Annotated[DataUpdated | RequestData | ExtractPageData, Field(discriminator="type")]
)


def encode_message(message: ChannelMessage) -> str:
    return message.model_dump_json(by_alias=True)


def decode_message(text: str | bytes) -> ChannelMessage:
    """Parse one wire message; raises ``pydantic.ValidationError`` on anything else."""

    return CHANNEL_MESSAGE_ADAPTER.validate_json(text)


def snapshot_entries(records: Mapping[str, AttributionRecord]) -> dict[str, SnapshotEntry]:
    return {
        item_id: SnapshotEntry(
            name=record.display_name,
            marketplace=record.venue,
            kind=str(record.kind),
        )
        for item_id, record in records.items()
    }


def data_updated(
    records: Mapping[str, AttributionRecord],
    *,
    in_reply_to: str | None = None,
) -> DataUpdated:
    return DataUpdated(snapshot=snapshot_entries(records), in_reply_to=in_reply_to)


def records_from_snapshot(snapshot: Mapping[str, SnapshotEntry]) -> dict[str, AttributionRecord]:
    return {
        item_id: AttributionRecord(
            item_id=item_id,
            display_name=entry.name,
            venue=entry.marketplace,
            kind=entry.kind,
        )
        for item_id, entry in snapshot.items()
    }
