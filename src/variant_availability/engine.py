"""Calling layer around the availability engine: settings, memoization, diagnostics."""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from variant_availability.cache import AvailabilityCache
from variant_availability.config import Settings, get_settings
from variant_availability.integrations.catalog_payload import decode_product
from variant_availability.models.catalog import CatalogProduct
from variant_availability.models.config import ResolutionConfig, load_resolution_config
from variant_availability.models.decision import AvailabilityMap
from variant_availability.observability.diagnostics import (
    CompositeDiagnosticsSink,
    DiagnosticsSink,
    LoggingDiagnosticsSink,
    MetricsDiagnosticsSink,
)

logger = logging.getLogger(__name__)


class AvailabilityEngine:
    """
    Resolve availability for catalog responses.

    Owns what the pure builder must not: settings-derived configuration
    (including the availability feature flag), the memoizing cache and the
    diagnostics sinks. Safe to share between threads.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        cache: AvailabilityCache | None = None,
        diagnostics_sink: DiagnosticsSink | None = None,
    ) -> None:
        """
        Initialize the engine.

        Args:
            settings: Configuration settings. Uses defaults if not provided.
            cache: Memoizing cache (for testing). Sized from settings if not provided.
            diagnostics_sink: Receiver of coverage counts. Logs and records
                metrics if not provided.

        Raises:
            ConfigurationError: If the settings hold invalid resolution values.
        """
        self.settings = settings or get_settings()
        self.base_config = self.settings.resolution_config()
        self.cache = cache if cache is not None else AvailabilityCache(
            maxsize=self.settings.availability_cache_size
        )
        self.diagnostics_sink = diagnostics_sink or CompositeDiagnosticsSink(
            [LoggingDiagnosticsSink(), MetricsDiagnosticsSink()]
        )
        logger.info(
            "Availability engine ready",
            extra={
                "check_enabled": self.base_config.availability_check_enabled,
                "missing_data_policy": self.base_config.missing_data_policy.value,
                "cache_size": self.cache.maxsize,
            },
        )

    def config_for(self, overrides: Mapping[str, Any] | None = None) -> ResolutionConfig:
        """Settings-derived configuration with per-request overrides applied."""
        if not overrides:
            return self.base_config
        return load_resolution_config(self.base_config, **dict(overrides))

    def resolve(
        self,
        product: CatalogProduct,
        option_labels: Iterable[str] | None = None,
        overrides: Mapping[str, Any] | None = None,
    ) -> AvailabilityMap:
        """
        Resolve availability for a decoded product.

        Args:
            product: Decoded catalog response.
            option_labels: UI option labels; defaults to those in the product.
            overrides: Per-request ResolutionConfig values.

        Returns:
            The (possibly cached) availability map.

        Raises:
            ConfigurationError: If the overrides are invalid.
        """
        config = self.config_for(overrides)
        labels = product.option_labels if option_labels is None else tuple(option_labels)
        return self.cache.get_or_build(
            product.variants,
            labels,
            config,
            diagnostics_sink=self.diagnostics_sink,
            product_id=product.product_id,
        )

    def resolve_payload(
        self,
        payload: Any,
        option_labels: Iterable[str] | None = None,
        overrides: Mapping[str, Any] | None = None,
        key_property: str | None = None,
        option_dimension: str | None = None,
    ) -> tuple[CatalogProduct, AvailabilityMap]:
        """
        Decode a raw catalog response and resolve it.

        Raises:
            PayloadDecodeError: If the payload is not a JSON object.
            ConfigurationError: If the overrides are invalid.
        """
        product = decode_product(
            payload,
            key_property=key_property or self.settings.variant_key_property,
            option_dimension=option_dimension or self.settings.option_dimension,
        )
        return product, self.resolve(product, option_labels, overrides)
