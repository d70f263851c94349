"""OpenTelemetry SDK initialization."""

import logging
from dataclasses import dataclass, field

from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.exporter.prometheus import PrometheusMetricReader
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased

logger = logging.getLogger(__name__)

# Track if telemetry has been initialized
_telemetry_initialized = False


@dataclass
class TelemetryConfig:
    """Configuration for OpenTelemetry."""

    # Service identification
    service_name: str = "variant-availability"
    service_version: str = "0.1.0"
    environment: str = "development"

    # OTLP exporter settings
    otlp_endpoint: str = "http://localhost:4317"
    otlp_insecure: bool = True

    # Feature flags
    enable_tracing: bool = True
    enable_metrics: bool = True

    # Sampling
    trace_sample_rate: float = 1.0

    # Resource attributes
    resource_attributes: dict[str, str] = field(default_factory=dict)


def init_telemetry(config: TelemetryConfig | None = None, app=None) -> bool:
    """
    Initialize the OpenTelemetry SDK.

    Sets up:
    - Tracer provider with an OTLP span exporter
    - Meter provider with a Prometheus metric reader
    - FastAPI instrumentation when an app is given

    Args:
        config: Telemetry configuration. Uses defaults if not provided.
        app: Optional FastAPI application to instrument.

    Returns:
        True if initialization was successful, False otherwise.
    """
    global _telemetry_initialized

    if _telemetry_initialized:
        logger.debug("Telemetry already initialized")
        return True

    if config is None:
        config = TelemetryConfig()

    try:
        resource = Resource.create({
            "service.name": config.service_name,
            "service.version": config.service_version,
            "deployment.environment": config.environment,
            **config.resource_attributes,
        })

        if config.enable_tracing:
            tracer_provider = TracerProvider(
                resource=resource,
                sampler=TraceIdRatioBased(config.trace_sample_rate),
            )
            otlp_exporter = OTLPSpanExporter(
                endpoint=config.otlp_endpoint,
                insecure=config.otlp_insecure,
            )
            tracer_provider.add_span_processor(BatchSpanProcessor(otlp_exporter))
            trace.set_tracer_provider(tracer_provider)
            logger.info(f"Tracing initialized with endpoint: {config.otlp_endpoint}")

        if config.enable_metrics:
            meter_provider = MeterProvider(
                resource=resource,
                metric_readers=[PrometheusMetricReader()],
            )
            metrics.set_meter_provider(meter_provider)
            logger.info("Metrics initialized with Prometheus exporter")

        if app is not None:
            FastAPIInstrumentor.instrument_app(app)
            logger.debug("FastAPI instrumentation applied")

        _telemetry_initialized = True
        logger.info("OpenTelemetry initialized successfully")
        return True

    except Exception as e:
        logger.error(f"Failed to initialize OpenTelemetry: {e}")
        return False


def shutdown_telemetry() -> None:
    """Flush and shut down the SDK providers."""
    global _telemetry_initialized

    if not _telemetry_initialized:
        return

    tracer_provider = trace.get_tracer_provider()
    if isinstance(tracer_provider, TracerProvider):
        tracer_provider.shutdown()

    meter_provider = metrics.get_meter_provider()
    if isinstance(meter_provider, MeterProvider):
        meter_provider.shutdown()

    _telemetry_initialized = False
    logger.info("OpenTelemetry shutdown complete")
