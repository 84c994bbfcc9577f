"""Accumulating, first-writer-wins attribution store."""

from __future__ import annotations

from logging import getLogger
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

    from venuemark.domain.model import AttributionRecord

log = getLogger(__name__)


class AttributionStore:
    """Mapping of item id to attribution record for one page context.

    Entries are only ever added. The first record written for an item id is
    kept and any later record for the same id is dropped, which makes repeated
    and overlapping ingestion passes idempotent and order-independent.
    """

    __slots__ = ("_records",)

    def __init__(self) -> None:
        self._records: dict[str, AttributionRecord] = {}

    @classmethod
    def create(cls) -> AttributionStore:
        return cls()

    def drop(self) -> None:
        """Forget everything, e.g. when the page navigates away."""

        log.debug("Dropping attribution store with %s records", len(self._records))
        self._records.clear()

    def upsert_if_absent(self, item_id: str, record: AttributionRecord) -> bool:
        if item_id in self._records:
            existing = self._records[item_id]
            if existing.venue != record.venue:
                log.debug(
                    "Keeping %s for %s, ignoring later %s",
                    existing.venue,
                    item_id,
                    record.venue,
                )
            return False
        self._records[item_id] = record
        return True

    def get(self, item_id: str) -> AttributionRecord | None:
        return self._records.get(item_id)

    def snapshot(self) -> Mapping[str, AttributionRecord]:
        """Return a read-only copy; later writes to the store do not show through."""

        return MappingProxyType(dict(self._records))

    def size(self) -> int:
        return len(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._records

    def __iter__(self) -> Iterator[str]:
        return iter(dict(self._records))
