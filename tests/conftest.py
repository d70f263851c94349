"""Pytest configuration and fixtures."""

import os
import sys
from pathlib import Path

import pytest

# Add src to path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

# Set test environment variables
os.environ.setdefault("API_KEY", "test-api-key")
os.environ.setdefault("ENABLE_TRACING", "false")
os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("ENABLE_METRICS", "false")


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def default_config():
    """Default ResolutionConfig (InStock only, optimistic, TrimCaseFold)."""
    from variant_availability.models.config import ResolutionConfig

    return ResolutionConfig()


@pytest.fixture
def scenario_variants():
    """Variants covering the documented scenarios (Green has no commercial record)."""
    from variant_availability.models.catalog import CatalogOffer, CatalogVariant

    return [
        CatalogVariant(
            variant_key="Red",
            offers=[CatalogOffer(availability_status="InStock", quantity=100, price=50, seller_id="1")],
        ),
        CatalogVariant(
            variant_key="Blue",
            offers=[CatalogOffer(availability_status="OutOfStock", quantity=0, price=0, seller_id="1")],
        ),
        CatalogVariant(
            variant_key="Yellow",
            offers=[CatalogOffer(availability_status="InStock", quantity=5, price=50, seller_id="1")],
        ),
        CatalogVariant(
            variant_key="Teal",
            offers=[CatalogOffer(availability_status="PreOrder", price=30, seller_id="1")],
        ),
    ]


@pytest.fixture
def scenario_labels() -> list[str]:
    """UI option labels shown by the selector."""
    return ["Red", "Blue", "Green", "Yellow", "Teal"]


@pytest.fixture
def flat_payload() -> dict:
    """Catalog response in the flat shape."""
    return {
        "productId": "prod-100",
        "variants": [
            {
                "variantKey": "Red",
                "offers": [
                    {"availabilityStatus": "InStock", "quantity": 100, "price": 50, "sellerId": "1"},
                ],
            },
            {
                "variantKey": "Yellow",
                "offers": [
                    {"availabilityStatus": "InStock", "quantity": 5, "price": 50, "sellerId": "1"},
                ],
            },
            {"variantKey": "Blue", "offers": []},
        ],
        "optionLabels": ["Red", "Yellow", "Blue", "Green"],
    }


@pytest.fixture
def schema_payload() -> dict:
    """Catalog response in the schema.org / storefront GraphQL shape."""
    return {
        "id": "prod-200",
        "isVariantOf": {
            "hasVariant": [
                {
                    "sku": "200-red",
                    "name": "Shirt Red",
                    "additionalProperty": [
                        {"name": "Color", "value": "Red"},
                        {"name": "Size", "value": "M"},
                    ],
                    "offers": {
                        "offers": [
                            {
                                "availability": "https://schema.org/InStock",
                                "price": 59.9,
                                "quantity": 12,
                                "seller": {"identifier": "1"},
                            },
                        ]
                    },
                },
                {
                    "sku": "200-blue",
                    "name": "Shirt Blue",
                    "additionalProperty": [{"name": "Color", "value": "Blue"}],
                    "offers": {
                        "offers": [
                            {
                                "availability": "https://schema.org/OutOfStock",
                                "price": 0,
                                "quantity": 0,
                                "seller": {"identifier": "1"},
                            },
                        ]
                    },
                },
            ],
            "skuVariants": {
                "availableVariations": {
                    "Color": [
                        {"label": "Red", "value": "Red", "src": "red.png"},
                        {"label": "Blue", "value": "Blue", "src": "blue.png"},
                        {"label": "Green", "value": "Green", "src": "green.png"},
                    ]
                }
            },
        },
    }


@pytest.fixture
def clear_settings_cache():
    """Reset cached settings around tests that change the environment."""
    from variant_availability.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def restore_root_logging():
    """Undo configure_logging calls made by the CLI and the app lifespan."""
    import logging

    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
