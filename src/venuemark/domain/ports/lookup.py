"""Port for companion lookup tables shipped alongside embedded page state."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from venuemark.domain.model import Listing


@runtime_checkable
class LookupTable(Protocol):
    """Read-only access to records keyed by ``TypeTag:identifier``."""

    def listing(self, key: str) -> Listing | None:
        """Return the listing stored under ``key`` or ``None`` when absent or malformed."""
        ...
