"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class Venue(StrEnum):
    """Marketplace an item is listed on."""

    GETGEMS = "getgems"
    FRAGMENT = "fragment"


class ExplicitVenue(StrEnum):
    """Values of the ``marketplace`` field carried by auction-style sales."""

    GETGEMS = "GETGEMS"
    FRAGMENT = "FRAGMENT"

    @property
    def venue(self) -> Venue:
        return Venue.GETGEMS if self is ExplicitVenue.GETGEMS else Venue.FRAGMENT


class SaleType(StrEnum):
    """GraphQL ``__typename`` of a sale record."""

    FIX_PRICE = "NftSaleFixPrice"
    AUCTION = "NftSaleAuction"
    TELEMINT_AUCTION = "TelemintAuction"


class ItemKind(StrEnum):
    OFFCHAIN = "OffchainNft"
    UNKNOWN = "unknown"
