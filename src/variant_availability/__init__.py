"""Variant availability resolution engine."""

from variant_availability.builder import AvailabilityMapBuilder, build_availability_map
from variant_availability.decorator import SelectorDecorator, SelectorOption, decorate_options
from variant_availability.exceptions import (
    AvailabilityEngineError,
    ConfigurationError,
    PayloadDecodeError,
)
from variant_availability.models import (
    AvailabilityDecision,
    AvailabilityMap,
    AvailabilityStatus,
    CatalogOffer,
    CatalogProduct,
    CatalogVariant,
    CoverageDiagnostics,
    KeyNormalization,
    MissingDataPolicy,
    ResolutionConfig,
    load_resolution_config,
)
from variant_availability.resolvers import (
    AvailabilityClassifier,
    OfferSelector,
    VariantKeyResolver,
)

__version__ = "0.1.0"

__all__ = [
    "AvailabilityClassifier",
    "AvailabilityDecision",
    "AvailabilityEngineError",
    "AvailabilityMap",
    "AvailabilityMapBuilder",
    "AvailabilityStatus",
    "CatalogOffer",
    "CatalogProduct",
    "CatalogVariant",
    "ConfigurationError",
    "CoverageDiagnostics",
    "KeyNormalization",
    "MissingDataPolicy",
    "OfferSelector",
    "PayloadDecodeError",
    "ResolutionConfig",
    "SelectorDecorator",
    "SelectorOption",
    "VariantKeyResolver",
    "build_availability_map",
    "decorate_options",
    "load_resolution_config",
]
