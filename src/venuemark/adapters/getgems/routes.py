"""Classify Getgems page paths into the locations the engine cares about."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum
from typing import Final
from urllib.parse import urlsplit

_ADDRESS: Final[str] = r"[A-Za-z0-9_-]+"
_COLLECTION_ITEM_RE: Final = re.compile(rf"/collection/({_ADDRESS})/({_ADDRESS})")
_COLLECTION_RE: Final = re.compile(rf"/collection/({_ADDRESS})")
_NFT_RE: Final = re.compile(rf"/nft/({_ADDRESS})")
_USER_RE: Final = re.compile(rf"/user/({_ADDRESS})")


class PageKind(StrEnum):
    NFT = "nft"
    COLLECTION_ITEM = "collection_item"
    COLLECTION = "collection"
    USER = "user"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class PageLocation:
    kind: PageKind
    address: str | None = None
    collection_address: str | None = None

    @classmethod
    def parse(cls, location: str) -> PageLocation:
        """Parse a path or full URL."""

        path = urlsplit(location).path or location
        if match := _NFT_RE.search(path):
            return cls(PageKind.NFT, address=match.group(1))
        if match := _COLLECTION_ITEM_RE.search(path):
            return cls(
                PageKind.COLLECTION_ITEM,
                address=match.group(2),
                collection_address=match.group(1),
            )
        if match := _COLLECTION_RE.search(path):
            return cls(PageKind.COLLECTION, collection_address=match.group(1))
        if match := _USER_RE.search(path):
            return cls(PageKind.USER, address=match.group(1))
        return cls(PageKind.OTHER)

    @property
    def is_item_page(self) -> bool:
        return self.kind in {PageKind.NFT, PageKind.COLLECTION_ITEM}
