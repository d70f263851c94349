"""FastAPI application server."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import JSONResponse, Response

from variant_availability.api.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from variant_availability.api.routes import router
from variant_availability.config import get_settings
from variant_availability.engine import AvailabilityEngine
from variant_availability.exceptions import AvailabilityEngineError
from variant_availability.observability.logging import configure_logging
from variant_availability.observability.telemetry import (
    TelemetryConfig,
    init_telemetry,
    shutdown_telemetry,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan manager.

    Initializes and shuts down:
    - Structured logging
    - OpenTelemetry (tracing + metrics)
    - Availability engine
    """
    settings = get_settings()

    configure_logging(
        level=settings.log_level,
        json_format=settings.log_json,
    )

    logger.info("Starting Variant Availability Engine...")

    if settings.service_environment == "production" and settings.api_key in ("", "dev-api-key"):
        logger.warning("Production: API_KEY is default or empty. Set a strong API_KEY.")

    if settings.enable_tracing or settings.enable_metrics:
        telemetry_config = TelemetryConfig(
            service_name=settings.service_name,
            service_version=settings.api_version,
            environment=settings.service_environment,
            otlp_endpoint=settings.otlp_endpoint,
            enable_tracing=settings.enable_tracing,
            enable_metrics=settings.enable_metrics,
        )
        init_telemetry(telemetry_config, app=app)

    # Invalid resolution settings fail startup here rather than per request
    app.state.engine = AvailabilityEngine(settings=settings)
    logger.info("Variant Availability Engine ready")

    yield

    logger.info("Shutting down Variant Availability Engine...")
    app.state.engine = None
    shutdown_telemetry()
    logger.info("Shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description=(
            "Variant availability resolution API. "
            "Decides per variant whether a selector option is available, "
            "low on stock, pre-orderable or unavailable."
        ),
        lifespan=lifespan,
    )

    @app.exception_handler(AvailabilityEngineError)
    async def availability_error_handler(request: Request, exc: AvailabilityEngineError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
        )

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(router)

    if settings.enable_metrics:

        @app.get("/metrics", include_in_schema=False)
        async def metrics():
            """Prometheus metrics endpoint."""
            return Response(
                content=generate_latest(),
                media_type=CONTENT_TYPE_LATEST,
            )

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "variant_availability.api.server:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
