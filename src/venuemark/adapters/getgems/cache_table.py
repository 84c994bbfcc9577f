"""Read-only view over the Apollo ``gqlCache`` embedded in Next.js page state."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from venuemark.domain.model import SaleType
from venuemark.domain.shape_search import mapping_at

from .translator import parse_item, parse_listing

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

    from venuemark.domain.model import Item, Listing

ITEM_KEY_PREFIX: Final[str] = "NftItem:"
LISTING_KEY_PREFIXES: Final[tuple[str, ...]] = tuple(f"{sale_type}:" for sale_type in SaleType)


def page_props(document: object) -> Mapping[str, object]:
    """Return ``props.pageProps`` of a ``__NEXT_DATA__`` document, or an empty mapping."""

    return mapping_at(document, "props", "pageProps") or {}


def dehydrated_queries(document: object) -> list[object]:
    state = mapping_at(page_props(document), "dehydratedState")
    queries = state.get("queries") if state is not None else None
    return list(queries) if isinstance(queries, list) else []


def query_data(query: object) -> object:
    state = mapping_at(query, "state")
    return state.get("data") if state is not None else None


class GqlCacheTable:
    """Companion lookup table keyed by ``TypeTag:identifier``.

    Entries are parsed lazily; malformed entries behave as if they were absent.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping[str, object] | None = None) -> None:
        self._entries: Mapping[str, object] = entries or {}

    @classmethod
    def from_document(cls, document: object) -> GqlCacheTable:
        return cls(mapping_at(page_props(document), "gqlCache"))

    def __len__(self) -> int:
        return len(self._entries)

    def listing(self, key: str) -> Listing | None:
        return parse_listing(self._entries.get(key))

    def listing_entries(self) -> Iterator[tuple[str, Listing]]:
        """Yield listings stored under a sale key and carrying their own address."""

        for key, value in self._entries.items():
            if not key.startswith(LISTING_KEY_PREFIXES):
                continue
            listing = parse_listing(value)
            if listing is not None and listing.listing_id:
                yield key, listing

    def item_entries(self) -> Iterator[tuple[str, Item]]:
        for key, value in self._entries.items():
            if not key.startswith(ITEM_KEY_PREFIX):
                continue
            item = parse_item(value)
            if item is not None:
                yield key, item
