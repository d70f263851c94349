"""Observability module for logging, tracing, metrics and diagnostics."""

from variant_availability.observability.diagnostics import (
    CollectingDiagnosticsSink,
    CompositeDiagnosticsSink,
    DiagnosticsSink,
    LoggingDiagnosticsSink,
    MetricsDiagnosticsSink,
)
from variant_availability.observability.logging import configure_logging, get_logger
from variant_availability.observability.metrics import (
    MetricsRegistry,
    get_metrics_registry,
    record_build,
    record_cache_lookup,
)
from variant_availability.observability.tracing import get_tracer, pipeline_span, traced

__all__ = [
    # Diagnostics
    "DiagnosticsSink",
    "LoggingDiagnosticsSink",
    "MetricsDiagnosticsSink",
    "CollectingDiagnosticsSink",
    "CompositeDiagnosticsSink",
    # Tracing
    "get_tracer",
    "traced",
    "pipeline_span",
    # Metrics
    "MetricsRegistry",
    "get_metrics_registry",
    "record_build",
    "record_cache_lookup",
    # Logging
    "configure_logging",
    "get_logger",
]
