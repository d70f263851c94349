"""API routes for the availability engine."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from variant_availability.api.middleware import verify_api_key
from variant_availability.config import get_settings
from variant_availability.decorator import SelectorDecorator, SelectorOption, availability_caption
from variant_availability.engine import AvailabilityEngine
from variant_availability.models.decision import AvailabilityDecision, CoverageDiagnostics

router = APIRouter()

_decorator = SelectorDecorator()

_API_MODEL_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def get_engine(request: Request) -> AvailabilityEngine:
    """Get the engine attached to the app during startup."""
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        raise HTTPException(
            status_code=503,
            detail="Engine not initialized",
        )
    return engine


class ResolveAvailabilityRequest(BaseModel):
    """Request body for the resolve endpoint."""

    model_config = {
        **_API_MODEL_CONFIG,
        "json_schema_extra": {"examples": [
            {
                "product": {
                    "productId": "sku-100",
                    "variants": [
                        {
                            "variantKey": "Red",
                            "offers": [
                                {"availabilityStatus": "InStock", "quantity": 100, "price": 50, "sellerId": "1"}
                            ],
                        }
                    ],
                },
                "optionLabels": ["Red", "Green"],
                "config": {"lowStockThreshold": 5},
            }
        ]},
    }

    product: dict[str, Any] = Field(description="Raw catalog response for one product")
    option_labels: list[str] | None = Field(
        default=None, description="UI option labels; taken from the payload when omitted"
    )
    option_dimension: str | None = Field(
        default=None, description="availableVariations dimension supplying option labels"
    )
    key_property: str | None = Field(
        default=None, description="additionalProperty holding the variant key"
    )
    config: dict[str, Any] = Field(
        default_factory=dict, description="ResolutionConfig overrides"
    )


class ResolvedOption(SelectorOption):
    """Selector option with the flags and caption applied."""

    caption: str = ""


class ResolveAvailabilityResponse(BaseModel):
    """Availability decisions for one product."""

    model_config = _API_MODEL_CONFIG

    product_id: str | None = None
    decisions: dict[str, AvailabilityDecision]
    options: list[ResolvedOption]
    diagnostics: CoverageDiagnostics


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    cache: dict[str, int] | None = None


@router.post(
    "/v1/availability/resolve",
    response_model=ResolveAvailabilityResponse,
    response_model_by_alias=True,
    summary="Resolve variant availability",
    description="Classify each variant of a catalog response and decorate the selector options.",
)
async def resolve_availability(
    body: ResolveAvailabilityRequest,
    _api_key: str = Depends(verify_api_key),
    engine: AvailabilityEngine = Depends(get_engine),
) -> ResolveAvailabilityResponse:
    """
    Resolve availability for one product.

    Decodes the payload, applies config overrides on top of the deployment
    settings and returns the decision per variant key and option label.
    """
    product, availability_map = engine.resolve_payload(
        body.product,
        option_labels=body.option_labels,
        overrides=body.config,
        key_property=body.key_property,
        option_dimension=body.option_dimension,
    )

    options = []
    for label in availability_map.option_labels:
        decision = availability_map.lookup(label)
        option = ResolvedOption(label=label, value=label, caption=availability_caption(decision))
        options.append(_decorator.decorate(option, decision))

    return ResolveAvailabilityResponse(
        product_id=product.product_id,
        decisions={
            key: availability_map[key]
            for key in dict.fromkeys((*availability_map.variant_keys, *availability_map.option_labels))
        },
        options=options,
        diagnostics=availability_map.diagnostics,
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check if the service is healthy and ready to accept requests.",
)
async def health_check(request: Request) -> HealthResponse:
    """Health check endpoint."""
    settings = get_settings()
    engine = getattr(request.app.state, "engine", None)

    return HealthResponse(
        status="healthy" if engine is not None else "starting",
        version=settings.api_version,
        cache=engine.cache.stats() if engine is not None else None,
    )
