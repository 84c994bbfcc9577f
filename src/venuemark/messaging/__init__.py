from __future__ import annotations

from .bus import BroadcastChannel, ChannelEndpoint, Envelope
from .content_agent import ContentAgent, RenderCallback
from .messages import (
    ChannelMessage,
    DataUpdated,
    ExtractPageData,
    RequestData,
    SnapshotEntry,
    data_updated,
    decode_message,
    encode_message,
    records_from_snapshot,
    snapshot_entries,
)
from .page_agent import DocumentProvider, PageAgent

__all__ = [
    "BroadcastChannel",
    "ChannelEndpoint",
    "ChannelMessage",
    "ContentAgent",
    "DataUpdated",
    "DocumentProvider",
    "Envelope",
    "ExtractPageData",
    "PageAgent",
    "RenderCallback",
    "RequestData",
    "SnapshotEntry",
    "data_updated",
    "decode_message",
    "encode_message",
    "records_from_snapshot",
    "snapshot_entries",
]
