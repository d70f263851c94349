"""Data models for the variant availability engine."""

from variant_availability.models.catalog import (
    AvailabilityStatus,
    CatalogOffer,
    CatalogProduct,
    CatalogVariant,
)
from variant_availability.models.config import (
    KeyNormalization,
    MissingDataPolicy,
    ResolutionConfig,
    load_resolution_config,
)
from variant_availability.models.decision import (
    AvailabilityDecision,
    AvailabilityMap,
    CoverageDiagnostics,
)

__all__ = [
    "AvailabilityDecision",
    "AvailabilityMap",
    "AvailabilityStatus",
    "CatalogOffer",
    "CatalogProduct",
    "CatalogVariant",
    "CoverageDiagnostics",
    "KeyNormalization",
    "MissingDataPolicy",
    "ResolutionConfig",
    "load_resolution_config",
]
