"""Ingestion passes that turn GraphQL and page-state payloads into attributions."""

from __future__ import annotations

from .context import IngestReport, IngestSource
from .orchestrator import IngestionPipeline, SnapshotListener

__all__ = [
    "IngestReport",
    "IngestSource",
    "IngestionPipeline",
    "SnapshotListener",
]
