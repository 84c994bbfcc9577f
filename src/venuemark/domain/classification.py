"""Venue classification from item and listing signals."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from venuemark.domain.model import ExplicitVenue, SaleType, Venue

if TYPE_CHECKING:
    from venuemark.domain.model import Item, Listing

# Fixed-price sales deployed by Getgems carry a 0.3 TON network fee (in nanotons).
DEFAULT_GETGEMS_NETWORK_FEE: Final[int] = 300_000_000


@dataclass(frozen=True, slots=True)
class ClassifierPolicy:
    """Tunable inputs of the classifier.

    ``getgems_network_fee`` fingerprints fixed-price sales deployed by Getgems.
    It reflects the currently observed fee and has to follow any fee change.
    """

    getgems_network_fee: int = DEFAULT_GETGEMS_NETWORK_FEE


DEFAULT_POLICY: Final[ClassifierPolicy] = ClassifierPolicy()

_AUCTION_VENUES: Final[dict[SaleType, Venue]] = {
    SaleType.AUCTION: Venue.GETGEMS,
    SaleType.TELEMINT_AUCTION: Venue.FRAGMENT,
}


def classify(
    item: Item | None,
    listing: Listing | None,
    *,
    policy: ClassifierPolicy = DEFAULT_POLICY,
) -> Venue | None:
    """Return the venue ``item`` is listed on, or ``None`` when it cannot be told.

    Signals are checked from most to least authoritative and the first one that
    applies wins:

    1. off-chain items are always hosted by Getgems;
    2. an explicit ``marketplace`` field on the listing;
    3. the listing type (Getgems auction vs. Telemint auction);
    4. the network fee of a fixed-price listing, compared with the Getgems fee.

    The order matters: an auction with a zero fee is decided by step 3 and never
    reaches the fee comparison.
    """

    if item is not None and item.is_offchain:
        return Venue.GETGEMS
    if listing is None:
        return None

    explicit = _explicit_venue(listing.explicit_venue)
    if explicit is not None:
        return explicit

    sale_type = listing.sale_type
    if sale_type is not None and sale_type in _AUCTION_VENUES:
        return _AUCTION_VENUES[sale_type]

    if listing.network_fee is not None:
        if listing.network_fee == policy.getgems_network_fee:
            return Venue.GETGEMS
        return Venue.FRAGMENT

    return None


def _explicit_venue(value: str | None) -> Venue | None:
    if value is None:
        return None
    try:
        return ExplicitVenue(value).venue
    except ValueError:
        return None
