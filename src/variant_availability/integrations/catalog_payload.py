"""Decoding of raw catalog responses into validated catalog models.

Two payload shapes are understood:

- flat: ``{"productId", "variants": [{"variantKey", "offers": [...]}], "optionLabels"}``
- schema.org / storefront GraphQL: ``{"id", "isVariantOf": {"hasVariant": [...],
  "skuVariants": {"availableVariations": {"Color": [{"label", "value"}]}}}}``
  where each variant carries ``offers: {"offers": [{"availability", "price",
  "quantity", "seller": {"identifier"}}]}``.

Missing or malformed fields degrade to absent values; only a payload that is
not an object at all is rejected.
"""

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from variant_availability.exceptions import PayloadDecodeError
from variant_availability.models.catalog import CatalogOffer, CatalogProduct, CatalogVariant
from variant_availability.observability.tracing import traced

logger = logging.getLogger(__name__)


def _first_present(data: Mapping[str, Any], *keys: str) -> Any:
    """Value of the first key that is present and not None."""
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


def _first_str(data: Mapping[str, Any], *keys: str) -> str | None:
    """First value among keys that reads as a non-blank string; non-string values are skipped."""
    for key in keys:
        text = _as_str(data.get(key))
        if text is not None:
            return text
    return None


def _as_list(value: Any) -> list[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def _as_str(value: Any) -> str | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (str, int, float)):
        text = str(value)
        return text if text.strip() else None
    return None


def decode_offer(raw: Any) -> CatalogOffer | None:
    """
    Decode one offer record.

    Accepts schema.org field names (availability, seller.identifier) as well
    as the engine's own (availabilityStatus, sellerId).

    Returns:
        The offer, or None when the record is not an object.
    """
    if isinstance(raw, CatalogOffer):
        return raw
    if not isinstance(raw, Mapping):
        return None

    seller = raw.get("seller")
    seller_id = _first_present(raw, "sellerId", "seller_id")
    if seller_id is None and isinstance(seller, Mapping):
        seller_id = _first_present(seller, "identifier", "id", "name")
    elif seller_id is None:
        seller_id = seller

    return CatalogOffer(
        availability_status=_first_present(raw, "availabilityStatus", "availability_status", "availability"),
        quantity=_first_present(raw, "quantity", "inventoryLevel", "inventory_quantity"),
        price=_first_present(raw, "price", "lowPrice"),
        seller_id=seller_id,
    )


def _decode_offers(raw_offers: Any) -> list[CatalogOffer]:
    """Offers in received order; a wrapping AggregateOffer object is unwrapped."""
    if isinstance(raw_offers, Mapping):
        raw_offers = raw_offers.get("offers")
    offers = []
    for raw in _as_list(raw_offers):
        offer = decode_offer(raw)
        if offer is not None:
            offers.append(offer)
    return offers


def _property_value(raw_variant: Mapping[str, Any], name: str) -> str | None:
    """Value of the additionalProperty with the given name (case-insensitive)."""
    wanted = name.strip().casefold()
    for prop in _as_list(raw_variant.get("additionalProperty")):
        if not isinstance(prop, Mapping):
            continue
        prop_name = _as_str(prop.get("name"))
        if prop_name is not None and prop_name.strip().casefold() == wanted:
            return _as_str(prop.get("value"))
    return None


def _variant_key(raw_variant: Mapping[str, Any], key_property: str | None) -> str | None:
    if key_property:
        value = _property_value(raw_variant, key_property)
        if value is not None:
            return value
    return _first_str(raw_variant, "variantKey", "variant_key", "sku", "name")


def _decode_variants(raw_variants: Any, key_property: str | None) -> list[CatalogVariant]:
    variants = []
    skipped = 0
    for raw in _as_list(raw_variants):
        if not isinstance(raw, Mapping):
            skipped += 1
            continue
        key = _variant_key(raw, key_property)
        if key is None:
            skipped += 1
            continue
        try:
            variants.append(CatalogVariant(variant_key=key, offers=_decode_offers(raw.get("offers"))))
        except ValidationError:
            logger.debug("Skipping undecodable variant %r", key, exc_info=True)
            skipped += 1
    if skipped:
        logger.info("Skipped %d catalog variants without a usable key", skipped)
    return variants


def extract_option_labels(payload: Mapping[str, Any], dimension: str | None = None) -> list[str]:
    """
    UI option labels carried by the payload.

    Uses ``optionLabels`` when present, else the values of
    ``isVariantOf.skuVariants.availableVariations[dimension]``. Without a
    dimension the single available one is used.
    """
    explicit = _first_present(payload, "optionLabels", "option_labels")
    if explicit is not None:
        return [label for label in (_as_str(item) for item in _as_list(explicit)) if label is not None]

    parent = payload.get("isVariantOf")
    sku_variants = parent.get("skuVariants") if isinstance(parent, Mapping) else None
    variations = sku_variants.get("availableVariations") if isinstance(sku_variants, Mapping) else None
    if not isinstance(variations, Mapping) or not variations:
        return []

    if dimension is None:
        if len(variations) != 1:
            logger.debug("Ambiguous option dimension among %s", sorted(variations))
            return []
        dimension = next(iter(variations))

    matches = [name for name in variations if str(name).casefold() == dimension.casefold()]
    if not matches:
        return []

    labels = []
    for entry in _as_list(variations[matches[0]]):
        if isinstance(entry, Mapping):
            label = _first_str(entry, "value", "label")
        else:
            label = _as_str(entry)
        if label is not None:
            labels.append(label)
    return labels


@traced(name="availability.decode_product", attributes={"component": "boundary"})
def decode_product(
    payload: Any,
    *,
    key_property: str | None = None,
    option_dimension: str | None = None,
) -> CatalogProduct:
    """
    Decode a raw catalog response.

    Args:
        payload: The parsed JSON response.
        key_property: additionalProperty name whose value is the variant key
            (e.g. "Color"); falls back to sku, then name.
        option_dimension: availableVariations dimension supplying option labels.

    Returns:
        The decoded product.

    Raises:
        PayloadDecodeError: If the payload is not a JSON object.
    """
    if not isinstance(payload, Mapping):
        raise PayloadDecodeError(
            f"Catalog payload must be a JSON object, got {type(payload).__name__}"
        )

    if "variants" in payload:
        raw_variants = payload.get("variants")
    else:
        parent = payload.get("isVariantOf")
        raw_variants = parent.get("hasVariant") if isinstance(parent, Mapping) else None

    return CatalogProduct(
        product_id=_first_str(payload, "productId", "product_id", "productID", "id", "sku"),
        variants=tuple(_decode_variants(raw_variants, key_property)),
        option_labels=tuple(extract_option_labels(payload, option_dimension)),
    )


def load_payload(path: str | Path) -> Any:
    """
    Read a catalog response from a JSON file.

    Raises:
        PayloadDecodeError: If the file cannot be read or is not valid JSON.
    """
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as e:
        raise PayloadDecodeError(f"Cannot read catalog payload {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise PayloadDecodeError(f"Catalog payload {path} is not valid JSON: {e}") from e
