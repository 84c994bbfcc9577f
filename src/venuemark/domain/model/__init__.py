"""Domain model for venue attribution."""

from __future__ import annotations

from .entities import AttributionRecord, Item, Listing, ListingPointer, ListingRef
from .enums import ExplicitVenue, ItemKind, SaleType, Venue

__all__ = [
    "AttributionRecord",
    "ExplicitVenue",
    "Item",
    "ItemKind",
    "Listing",
    "ListingPointer",
    "ListingRef",
    "SaleType",
    "Venue",
]
