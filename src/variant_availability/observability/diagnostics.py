"""Diagnostics sinks receiving coverage counts from map builds.

Sinks are fire-and-forget: the builder logs and discards any exception a
sink raises, so a failing sink never changes a classification.
"""

import logging
from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from variant_availability.models.decision import CoverageDiagnostics
from variant_availability.observability.metrics import MetricsRegistry, get_metrics_registry

logger = logging.getLogger(__name__)


@runtime_checkable
class DiagnosticsSink(Protocol):
    """Receives one CoverageDiagnostics record per build."""

    def emit(self, diagnostics: CoverageDiagnostics, product_id: str | None = None) -> None:
        ...


class LoggingDiagnosticsSink:
    """Logs coverage counts; incomplete coverage is logged at INFO, complete at DEBUG."""

    def __init__(self, logger_name: str = "variant_availability.diagnostics") -> None:
        self._logger = logging.getLogger(logger_name)

    def emit(self, diagnostics: CoverageDiagnostics, product_id: str | None = None) -> None:
        counts = diagnostics.model_dump()
        incomplete = (
            diagnostics.with_offers < diagnostics.total
            or diagnostics.with_resolved_status < diagnostics.total
            or diagnostics.unmatched_options > 0
        )
        level = logging.INFO if incomplete else logging.DEBUG
        self._logger.log(
            level,
            "Availability coverage for product %s: %d/%d with offers, %d with status, "
            "%d unmatched options",
            product_id or "-",
            diagnostics.with_offers,
            diagnostics.total,
            diagnostics.with_resolved_status,
            diagnostics.unmatched_options,
            extra={"product_id": product_id, "coverage": counts},
        )


class MetricsDiagnosticsSink:
    """Forwards coverage counts to the OpenTelemetry metrics registry."""

    def __init__(self, registry: MetricsRegistry | None = None) -> None:
        self._registry = registry

    def emit(self, diagnostics: CoverageDiagnostics, product_id: str | None = None) -> None:
        registry = self._registry or get_metrics_registry()
        registry.record_coverage(
            total=diagnostics.total,
            with_offers=diagnostics.with_offers,
            with_resolved_status=diagnostics.with_resolved_status,
            unmatched_options=diagnostics.unmatched_options,
        )


class CollectingDiagnosticsSink:
    """Keeps every record in memory. Used by tests and embedding tools."""

    def __init__(self) -> None:
        self.records: list[tuple[str | None, CoverageDiagnostics]] = []

    def emit(self, diagnostics: CoverageDiagnostics, product_id: str | None = None) -> None:
        self.records.append((product_id, diagnostics))

    @property
    def last(self) -> CoverageDiagnostics | None:
        return self.records[-1][1] if self.records else None


class CompositeDiagnosticsSink:
    """Fans a record out to several sinks; one failing sink does not stop the rest."""

    def __init__(self, sinks: Iterable[DiagnosticsSink]) -> None:
        self.sinks = list(sinks)

    def emit(self, diagnostics: CoverageDiagnostics, product_id: str | None = None) -> None:
        for sink in self.sinks:
            try:
                sink.emit(diagnostics, product_id)
            except Exception:
                logger.warning(
                    "Diagnostics sink %s failed", type(sink).__name__, exc_info=True
                )
