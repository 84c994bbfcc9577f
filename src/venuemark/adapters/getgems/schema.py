"""Pydantic models describing the Getgems GraphQL payloads we read."""

from __future__ import annotations

from collections.abc import Mapping
from logging import getLogger

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidatorFunctionWrapHandler,  # noqa: TC002
    field_validator,
)

log = getLogger(__name__)


class GetgemsBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


class SaleRefPayload(GetgemsBaseModel):
    """Apollo cache reference, e.g. ``{"__ref": "NftSaleFixPrice:EQ..."}``."""

    ref: str = Field(alias="__ref", min_length=1)


class SalePayload(GetgemsBaseModel):
    typename: str | None = Field(default=None, alias="__typename")
    address: str | None = None
    marketplace: str | None = None
    network_fee: int | None = Field(default=None, alias="networkFee")
    full_price: str | None = Field(default=None, alias="fullPrice")
    currency: str | None = None

    @field_validator("network_fee", mode="wrap")
    @classmethod
    def _lenient_fee(cls, value: object, handler: ValidatorFunctionWrapHandler) -> int | None:
        # Only runs when the field is present: an explicit null still means "has a fee".
        if value is None:
            return 0
        try:
            return handler(value)
        except ValidationError:
            log.debug("Ignoring unreadable network fee %r", value)
            return None

    @field_validator("full_price", mode="before")
    @classmethod
    def _price_as_text(cls, value: object) -> object:
        if isinstance(value, int):
            return str(value)
        return value


class NftItemPayload(GetgemsBaseModel):
    typename: str | None = Field(default=None, alias="__typename")
    address: str = Field(min_length=1)
    name: str | None = None
    kind: str | None = None
    sale: SaleRefPayload | SalePayload | None = Field(default=None, union_mode="left_to_right")

    @field_validator("sale", mode="wrap")
    @classmethod
    def _lenient_sale(
        cls, value: object, handler: ValidatorFunctionWrapHandler
    ) -> SaleRefPayload | SalePayload | None:
        """A broken sale leaves the item without a listing instead of rejecting it."""

        if value is None or not isinstance(value, Mapping):
            return None
        try:
            return handler(value)
        except ValidationError as exc:
            log.debug("Ignoring malformed sale: %s", exc.errors(include_url=False))
            return None


class GraphQLErrorPayload(GetgemsBaseModel):
    message: str = ""


class GraphQLResponse(GetgemsBaseModel):
    data: dict[str, object] | None = None
    errors: list[GraphQLErrorPayload] = Field(default_factory=list[GraphQLErrorPayload])


ItemPayloadInput = NftItemPayload | Mapping[str, object]
