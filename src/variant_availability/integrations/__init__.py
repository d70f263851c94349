"""Boundary adapters turning raw catalog responses into engine models."""

from variant_availability.integrations.catalog_payload import (
    decode_offer,
    decode_product,
    extract_option_labels,
    load_payload,
)

__all__ = ["decode_offer", "decode_product", "extract_option_labels", "load_payload"]
