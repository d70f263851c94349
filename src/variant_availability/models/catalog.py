"""Catalog models for product variants and their per-seller offers."""

import logging
import math
import re
from collections.abc import Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)


class AvailabilityStatus(str, Enum):
    """Commercial availability of an offer."""

    IN_STOCK = "InStock"
    OUT_OF_STOCK = "OutOfStock"
    PRE_ORDER = "PreOrder"
    BACK_ORDER = "BackOrder"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, value: Any) -> "AvailabilityStatus":
        """
        Map a raw availability value onto a status.

        Accepts enum names in any case or separator style ("InStock",
        "in_stock", "IN STOCK") and schema.org URLs
        ("https://schema.org/InStock"). Anything else is Unknown.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return cls.UNKNOWN
        token = value.strip().rstrip("/").rsplit("/", 1)[-1]
        token = re.sub(r"[\s_\-]", "", token).lower()
        return _STATUS_ALIASES.get(token, cls.UNKNOWN)


_STATUS_ALIASES: dict[str, AvailabilityStatus] = {
    "instock": AvailabilityStatus.IN_STOCK,
    "limitedavailability": AvailabilityStatus.IN_STOCK,
    "onlineonly": AvailabilityStatus.IN_STOCK,
    "outofstock": AvailabilityStatus.OUT_OF_STOCK,
    "soldout": AvailabilityStatus.OUT_OF_STOCK,
    "discontinued": AvailabilityStatus.OUT_OF_STOCK,
    "preorder": AvailabilityStatus.PRE_ORDER,
    "presale": AvailabilityStatus.PRE_ORDER,
    "backorder": AvailabilityStatus.BACK_ORDER,
    "unknown": AvailabilityStatus.UNKNOWN,
}


def _to_number(value: Any) -> float | None:
    """Read an int, float or numeric string; None for anything else."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        try:
            value = float(value)
        except ValueError:
            return None
    if not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return value


def coerce_quantity(value: Any) -> int | None:
    """Coerce a raw quantity, treating malformed or negative values as absent."""
    number = _to_number(value)
    if number is None or number < 0:
        return None
    if isinstance(number, float):
        if not number.is_integer():
            return None
        return int(number)
    return number


def coerce_price(value: Any) -> float | None:
    """Coerce a raw price, treating malformed or negative values as absent."""
    number = _to_number(value)
    if number is None or number < 0:
        return None
    return float(number)


class CatalogOffer(BaseModel):
    """One seller's commercial record for a variant."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    availability_status: AvailabilityStatus = Field(
        default=AvailabilityStatus.UNKNOWN,
        description="Availability status; unknown strings degrade to Unknown",
    )
    quantity: int | None = Field(default=None, description="Stock quantity, None if unknown")
    price: float | None = Field(default=None, description="Offer price, None if unknown")
    seller_id: str = Field(default="", description="Seller identifier")

    @field_validator("availability_status", mode="before")
    @classmethod
    def _parse_status(cls, value: Any) -> AvailabilityStatus:
        return AvailabilityStatus.parse(value)

    @field_validator("quantity", mode="before")
    @classmethod
    def _parse_quantity(cls, value: Any) -> int | None:
        return coerce_quantity(value)

    @field_validator("price", mode="before")
    @classmethod
    def _parse_price(cls, value: Any) -> float | None:
        return coerce_price(value)

    @field_validator("seller_id", mode="before")
    @classmethod
    def _parse_seller(cls, value: Any) -> str:
        if value is None or isinstance(value, bool):
            return ""
        return str(value)


class CatalogVariant(BaseModel):
    """
    One purchasable variant of a product.

    Offers keep the order in which the catalog returned them; the offer
    selector falls back on that order.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    variant_key: str = Field(description="Identity joined against UI option labels")
    offers: tuple[CatalogOffer, ...] = Field(default=(), description="Offers in received order")

    @field_validator("variant_key", mode="before")
    @classmethod
    def _stringify_key(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("offers", mode="before")
    @classmethod
    def _drop_malformed_offers(cls, value: Any) -> tuple[Any, ...]:
        if value is None:
            return ()
        # schema.org AggregateOffer wraps the list: {"offers": [...]}
        if isinstance(value, Mapping):
            value = value.get("offers") or ()
        if not isinstance(value, (list, tuple)):
            logger.debug("Ignoring non-sequence offers value: %r", type(value).__name__)
            return ()
        kept = tuple(item for item in value if isinstance(item, (Mapping, CatalogOffer)))
        if len(kept) != len(value):
            logger.debug("Dropped %d malformed offer entries", len(value) - len(kept))
        return kept


class CatalogProduct(BaseModel):
    """A decoded catalog response: variants plus the UI-facing option labels."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    product_id: str | None = Field(default=None, description="Platform product ID")
    variants: tuple[CatalogVariant, ...] = Field(default=())
    option_labels: tuple[str, ...] = Field(
        default=(), description="Labels shown by the variant selector"
    )
