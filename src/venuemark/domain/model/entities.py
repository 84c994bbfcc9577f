"""Items, listings and attribution records."""

from __future__ import annotations

from dataclasses import dataclass

from .enums import ItemKind, SaleType, Venue

type ListingRef = Listing | ListingPointer


@dataclass(frozen=True, slots=True)
class Listing:
    """A sale record attached to an item.

    ``network_fee`` is ``None`` only when the payload carried no fee field at all;
    an explicit ``null`` fee is normalised to ``0`` by the translator.
    """

    listing_id: str | None = None
    type_tag: str | None = None
    explicit_venue: str | None = None
    network_fee: int | None = None

    @property
    def sale_type(self) -> SaleType | None:
        if self.type_tag is None:
            return None
        try:
            return SaleType(self.type_tag)
        except ValueError:
            return None


@dataclass(frozen=True, slots=True)
class ListingPointer:
    """Reference marker pointing at a listing stored in a companion lookup table."""

    key: str

    @property
    def type_tag(self) -> str:
        return self.key.partition(":")[0]

    @property
    def identifier(self) -> str:
        return self.key.partition(":")[2]

    def points_at(self, listing_id: str | None) -> bool:
        return bool(listing_id) and self.identifier == listing_id


@dataclass(frozen=True, slots=True)
class Item:
    item_id: str
    display_name: str | None = None
    kind: str | None = None
    listing_ref: ListingRef | None = None

    @property
    def is_offchain(self) -> bool:
        return self.kind == ItemKind.OFFCHAIN

    @property
    def inline_listing(self) -> Listing | None:
        return self.listing_ref if isinstance(self.listing_ref, Listing) else None

    @property
    def listing_pointer(self) -> ListingPointer | None:
        return self.listing_ref if isinstance(self.listing_ref, ListingPointer) else None


@dataclass(frozen=True, slots=True)
class AttributionRecord:
    item_id: str
    display_name: str | None
    venue: Venue
    kind: str = ItemKind.UNKNOWN

    @classmethod
    def for_item(cls, item: Item, venue: Venue) -> AttributionRecord:
        return cls(
            item_id=item.item_id,
            display_name=item.display_name,
            venue=venue,
            kind=item.kind or ItemKind.UNKNOWN,
        )
