"""Configuration management using pydantic-settings."""

from functools import lru_cache
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from variant_availability.models.config import ResolutionConfig, load_resolution_config


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # API Settings
    api_key: str = Field(
        default="dev-api-key",
        description="API key for authentication",
    )
    api_title: str = Field(
        default="Variant Availability Engine",
        description="API title",
    )
    api_version: str = Field(
        default="0.1.0",
        description="API version",
    )

    # Availability resolution defaults
    availability_check_enabled: bool = Field(
        default=True,
        description="Classify availability; when false every option stays selectable",
    )
    preferred_seller_id: str | None = Field(
        default=None,
        description="Seller whose offer is preferred for multi-seller variants",
    )
    low_stock_threshold: int = Field(
        default=10,
        description="In-stock quantities at or below this show the low-stock marker",
    )
    accepted_availability_statuses: list[str] = Field(
        default_factory=lambda: ["InStock"],
        description="Statuses counted as purchasable (JSON list in the environment)",
    )
    missing_data_policy: str = Field(
        default="Optimistic",
        description="Optimistic or Pessimistic fail-safe for unmatched options",
    )
    key_normalization: str = Field(
        default="TrimCaseFold",
        description="Exact or TrimCaseFold option label matching",
    )
    zero_price_sellable: bool = Field(
        default=False,
        description="Treat zero-priced offers as sellable",
    )

    # Boundary decoding
    variant_key_property: str | None = Field(
        default=None,
        description="additionalProperty used as the variant key (e.g. Color)",
    )
    option_dimension: str | None = Field(
        default=None,
        description="availableVariations dimension supplying option labels",
    )

    # Performance
    availability_cache_size: int = Field(
        default=256,
        description="Maximum memoized availability maps (0 disables the cache)",
    )

    # Observability - OpenTelemetry
    otlp_endpoint: str = Field(
        default="http://localhost:4317",
        description="OTLP gRPC endpoint for traces",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
    )
    log_json: bool = Field(
        default=True,
        description="Enable JSON structured logging",
    )
    enable_tracing: bool = Field(
        default=False,
        description="Enable OpenTelemetry tracing export",
    )
    enable_metrics: bool = Field(
        default=True,
        description="Enable Prometheus metrics",
    )
    service_name: str = Field(
        default="variant-availability",
        description="Service name for telemetry",
    )
    service_environment: str = Field(
        default="development",
        description="Deployment environment (development, staging, production)",
    )

    def resolution_config(self, **overrides: Any) -> ResolutionConfig:
        """
        Build the ResolutionConfig for a request.

        Args:
            **overrides: Per-request values replacing the settings defaults.

        Raises:
            ConfigurationError: If the combined values are invalid.
        """
        return load_resolution_config(
            {
                "preferred_seller_id": self.preferred_seller_id,
                "low_stock_threshold": self.low_stock_threshold,
                "accepted_availability_statuses": self.accepted_availability_statuses,
                "missing_data_policy": self.missing_data_policy,
                "key_normalization": self.key_normalization,
                "availability_check_enabled": self.availability_check_enabled,
                "zero_price_sellable": self.zero_price_sellable,
            },
            **overrides,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
