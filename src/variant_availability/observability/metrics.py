"""OpenTelemetry metrics definitions and recording."""

import logging
from typing import Any

from opentelemetry import metrics

logger = logging.getLogger(__name__)

# Global metrics registry
_metrics_registry: "MetricsRegistry | None" = None


class MetricsRegistry:
    """
    Registry for availability engine metrics.

    Provides:
    - Map build count and duration
    - Catalog coverage counts (variants, with offers, with a resolved status)
    - Unmatched option labels
    - Memoization cache hits and misses
    """

    def __init__(self, meter_name: str = "variant_availability") -> None:
        """
        Initialize the metrics registry.

        Args:
            meter_name: Name for the meter.
        """
        self._meter = metrics.get_meter(meter_name)
        self._instruments: dict[str, Any] = {}
        self._create_instruments()
        logger.debug("Metrics registry initialized")

    def _create_instruments(self) -> None:
        """Create all metric instruments."""
        self._instruments["builds_total"] = self._meter.create_counter(
            name="availability_map_builds_total",
            description="Total number of availability map builds",
            unit="1",
        )

        self._instruments["build_duration"] = self._meter.create_histogram(
            name="availability_map_build_duration_seconds",
            description="Duration of availability map builds in seconds",
            unit="s",
        )

        self._instruments["variants_total"] = self._meter.create_counter(
            name="availability_variants_total",
            description="Catalog variants seen, split by coverage bucket",
            unit="1",
        )

        self._instruments["unmatched_options_total"] = self._meter.create_counter(
            name="availability_unmatched_options_total",
            description="Option labels with no matching commercial record",
            unit="1",
        )

        self._instruments["cache_lookups_total"] = self._meter.create_counter(
            name="availability_cache_lookups_total",
            description="Availability cache lookups by result",
            unit="1",
        )

    def record_build(
        self,
        duration_seconds: float,
        check_enabled: bool = True,
        status: str = "success",
    ) -> None:
        """
        Record one availability map build.

        Args:
            duration_seconds: Time taken for the build.
            check_enabled: Whether classification ran.
            status: success or error.
        """
        labels = {"check_enabled": str(check_enabled).lower(), "status": status}
        self._instruments["builds_total"].add(1, labels)
        self._instruments["build_duration"].record(duration_seconds, labels)

    def record_coverage(
        self,
        total: int,
        with_offers: int,
        with_resolved_status: int,
        unmatched_options: int,
    ) -> None:
        """
        Record catalog coverage counts from one build.

        Args:
            total: Variants in the catalog response.
            with_offers: Variants with at least one offer.
            with_resolved_status: Variants whose canonical offer has a known status.
            unmatched_options: Option labels with no commercial record.
        """
        variants = self._instruments["variants_total"]
        variants.add(total, {"coverage": "all"})
        variants.add(with_offers, {"coverage": "with_offers"})
        variants.add(with_resolved_status, {"coverage": "with_resolved_status"})
        self._instruments["unmatched_options_total"].add(unmatched_options)

    def record_cache_lookup(self, hit: bool) -> None:
        """Record a memoization cache lookup."""
        self._instruments["cache_lookups_total"].add(
            1, {"result": "hit" if hit else "miss"}
        )


def get_metrics_registry() -> MetricsRegistry:
    """
    Get the global metrics registry.

    Creates one if it doesn't exist.
    """
    global _metrics_registry
    if _metrics_registry is None:
        _metrics_registry = MetricsRegistry()
    return _metrics_registry


def record_build(duration_seconds: float, check_enabled: bool = True, status: str = "success") -> None:
    """Record one availability map build."""
    get_metrics_registry().record_build(
        duration_seconds=duration_seconds,
        check_enabled=check_enabled,
        status=status,
    )


def record_cache_lookup(hit: bool) -> None:
    """Record a memoization cache lookup."""
    get_metrics_registry().record_cache_lookup(hit)
