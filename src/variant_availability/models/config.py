"""Resolution configuration supplied by the calling layer."""

from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel, to_snake

from variant_availability.exceptions import ConfigurationError
from variant_availability.models.catalog import AvailabilityStatus


class MissingDataPolicy(str, Enum):
    """Decision applied to UI options with no matching commercial record."""

    OPTIMISTIC = "Optimistic"  # leave the option selectable
    PESSIMISTIC = "Pessimistic"  # disable the option


class KeyNormalization(str, Enum):
    """How UI option labels are matched against variant keys."""

    EXACT = "Exact"
    TRIM_CASE_FOLD = "TrimCaseFold"

    def apply(self, value: str) -> str:
        """Return the lookup form of a key under this normalization."""
        if self is KeyNormalization.TRIM_CASE_FOLD:
            return value.strip().casefold()
        return value


class ResolutionConfig(BaseModel):
    """
    Configuration for one availability resolution.

    Built by the caller (settings, request overrides); the engine never reads
    environment state itself. Invalid values are rejected at construction.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    preferred_seller_id: str | None = Field(
        default=None,
        description="Seller whose offer wins when present",
    )
    low_stock_threshold: int = Field(
        default=10,
        ge=0,
        description="In-stock quantities at or below this are flagged low stock",
    )
    accepted_availability_statuses: frozenset[AvailabilityStatus] = Field(
        default=frozenset({AvailabilityStatus.IN_STOCK}),
        description="Statuses that count as purchasable",
    )
    missing_data_policy: MissingDataPolicy = Field(
        default=MissingDataPolicy.OPTIMISTIC,
        description="Fail-safe decision for options with no commercial record",
    )
    key_normalization: KeyNormalization = Field(
        default=KeyNormalization.TRIM_CASE_FOLD,
        description="Matching rule between option labels and variant keys",
    )
    availability_check_enabled: bool = Field(
        default=True,
        description="When false every option is left selectable without classification",
    )
    zero_price_sellable: bool = Field(
        default=False,
        description="Treat a price of exactly zero as sellable (free items)",
    )

    @field_validator("preferred_seller_id", mode="before")
    @classmethod
    def _blank_seller_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("accepted_availability_statuses", mode="before")
    @classmethod
    def _parse_statuses(cls, value: Any) -> Any:
        if isinstance(value, (str, AvailabilityStatus)):
            value = [value]
        if isinstance(value, Iterable):
            parsed = set()
            for item in value:
                status = AvailabilityStatus.parse(item)
                if status is AvailabilityStatus.UNKNOWN:
                    raise ValueError(f"Unrecognised or non-purchasable status: {item!r}")
                parsed.add(status)
            return frozenset(parsed)
        return value

    @field_validator("accepted_availability_statuses")
    @classmethod
    def _require_statuses(
        cls, value: frozenset[AvailabilityStatus]
    ) -> frozenset[AvailabilityStatus]:
        if not value:
            raise ValueError("At least one availability status must be accepted")
        return value

    @field_validator("missing_data_policy", "key_normalization", mode="before")
    @classmethod
    def _case_insensitive_enum(cls, value: Any) -> Any:
        if isinstance(value, str) and not isinstance(value, Enum):
            lowered = value.strip().replace("_", "").replace("-", "").lower()
            for member in (*MissingDataPolicy, *KeyNormalization):
                if member.value.lower() == lowered:
                    return member.value
        return value

    def accepts(self, status: AvailabilityStatus) -> bool:
        """Whether the status counts as purchasable under this configuration."""
        return status in self.accepted_availability_statuses


def describe_validation_error(exc: ValidationError) -> str:
    """Flatten pydantic errors into one readable line."""
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "config"
        parts.append(f"{location}: {error.get('msg')}")
    return "; ".join(parts)


def load_resolution_config(
    data: Mapping[str, Any] | ResolutionConfig | None = None,
    **overrides: Any,
) -> ResolutionConfig:
    """
    Build a ResolutionConfig from a mapping plus keyword overrides.

    Args:
        data: Base values (snake_case or camelCase keys), or an existing config.
        **overrides: Values that replace those in ``data``.

    Returns:
        The validated configuration.

    Raises:
        ConfigurationError: If any value is invalid.
    """
    if isinstance(data, ResolutionConfig):
        if not overrides:
            return data
        values: dict[str, Any] = data.model_dump()
    else:
        values = {to_snake(key): value for key, value in dict(data or {}).items()}
    values.update((to_snake(key), value) for key, value in overrides.items())

    try:
        return ResolutionConfig.model_validate(values)
    except ValidationError as exc:
        raise ConfigurationError(
            "Invalid resolution configuration",
            detail=describe_validation_error(exc),
        ) from exc
