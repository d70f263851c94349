"""Per-variant resolution steps: key matching, offer selection, classification."""

from variant_availability.resolvers.classifier import AvailabilityClassifier, classify_offer
from variant_availability.resolvers.keys import VariantKeyResolver, normalize_key, resolve_variant
from variant_availability.resolvers.offers import OfferSelector, select_offer

__all__ = [
    "AvailabilityClassifier",
    "OfferSelector",
    "VariantKeyResolver",
    "classify_offer",
    "normalize_key",
    "resolve_variant",
    "select_offer",
]
