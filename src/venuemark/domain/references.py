"""Resolve an item's listing reference into a concrete listing."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from venuemark.domain.model import Listing, ListingPointer

if TYPE_CHECKING:
    from venuemark.domain.model import Item
    from venuemark.domain.ports import LookupTable

log = getLogger(__name__)


def resolve_listing(item: Item, lookup_table: LookupTable | None = None) -> Listing | None:
    """Return the listing for ``item``.

    Inline listings are returned as-is. A reference marker is dereferenced through
    ``lookup_table``; a missing table or a missing key yields ``None`` so the item
    can be retried by a later pass that has more data.
    """

    ref = item.listing_ref
    if ref is None:
        return None
    if isinstance(ref, Listing):
        return ref
    if isinstance(ref, ListingPointer):
        if lookup_table is None:
            log.debug("No lookup table to dereference %s for %s", ref.key, item.item_id)
            return None
        listing = lookup_table.listing(ref.key)
        if listing is None:
            log.debug("Lookup table has no listing %s for %s", ref.key, item.item_id)
        return listing
    return None
