"""Per-pass bookkeeping for the ingestion pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class IngestSource(StrEnum):
    INTERCEPTION = "interception"
    PAGE_STATE = "page_state"
    POINT_QUERY = "point_query"
    COLLECTION_SEARCH = "collection_search"


@dataclass(slots=True)
class IngestReport:
    """Outcome of one ingestion pass over one data source event."""

    source: IngestSource
    operation: str | None = None
    candidates: int = 0
    added: int = 0
    known: int = 0
    malformed: int = 0
    unresolved: int = 0
    unclassified: int = 0
    failed: bool = False
    broadcast: bool = False

    def summary(self) -> str:
        return (
            f"candidates={self.candidates}, added={self.added}, known={self.known}, "
            f"unresolved={self.unresolved}, unclassified={self.unclassified}, "
            f"malformed={self.malformed}"
        )
