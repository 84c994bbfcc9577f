"""Translate Getgems payload fragments into domain items and listings."""

from __future__ import annotations

from collections.abc import Mapping
from logging import getLogger

from pydantic import ValidationError

from venuemark.domain.model import Item, Listing, ListingPointer

from .schema import ItemPayloadInput, NftItemPayload, SalePayload, SaleRefPayload

log = getLogger(__name__)


def _ensure_item_payload(fragment: ItemPayloadInput) -> NftItemPayload:
    if isinstance(fragment, NftItemPayload):
        return fragment
    return NftItemPayload.model_validate(fragment)


def listing_from_payload(payload: SalePayload) -> Listing:
    return Listing(
        listing_id=payload.address or None,
        type_tag=payload.typename,
        explicit_venue=payload.marketplace,
        network_fee=payload.network_fee,
    )


def item_from_payload(payload: NftItemPayload) -> Item:
    listing_ref: Listing | ListingPointer | None
    match payload.sale:
        case SaleRefPayload(ref=ref):
            listing_ref = ListingPointer(key=ref)
        case SalePayload() as sale:
            listing_ref = listing_from_payload(sale)
        case _:
            listing_ref = None
    return Item(
        item_id=payload.address,
        display_name=payload.name,
        kind=payload.kind,
        listing_ref=listing_ref,
    )


def parse_item(fragment: object) -> Item | None:
    """Return the item described by ``fragment`` or ``None`` if it is not item-shaped."""

    if not isinstance(fragment, (Mapping, NftItemPayload)):
        return None
    try:
        payload = _ensure_item_payload(fragment)
    except ValidationError as exc:
        log.debug("Skipping malformed item fragment: %s", exc.errors(include_url=False))
        return None
    return item_from_payload(payload)


def parse_listing(fragment: object) -> Listing | None:
    if not isinstance(fragment, Mapping):
        return None
    try:
        payload = SalePayload.model_validate(fragment)
    except ValidationError as exc:
        log.debug("Skipping malformed sale fragment: %s", exc.errors(include_url=False))
        return None
    return listing_from_payload(payload)
