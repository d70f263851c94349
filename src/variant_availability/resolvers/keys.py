"""Variant key resolution: joins UI option labels to catalog variants."""

import logging
from collections.abc import Iterable

from variant_availability.models.catalog import CatalogVariant
from variant_availability.models.config import KeyNormalization, ResolutionConfig

logger = logging.getLogger(__name__)


def normalize_key(value: str) -> str:
    """Trim surrounding whitespace and case-fold."""
    return KeyNormalization.TRIM_CASE_FOLD.apply(value)


class VariantKeyResolver:
    """
    Resolve UI option labels to catalog variants.

    The lookup tables are built once per catalog response so resolving the
    whole option set stays linear. When two variants share a key the first
    one wins.
    """

    def __init__(
        self,
        variants: Iterable[CatalogVariant],
        normalization: KeyNormalization = KeyNormalization.TRIM_CASE_FOLD,
    ) -> None:
        """
        Build the lookup tables.

        Args:
            variants: Catalog variants in received order.
            normalization: Matching rule for labels that miss the exact table.
        """
        self.normalization = normalization
        self._exact: dict[str, CatalogVariant] = {}
        self._normalized: dict[str, CatalogVariant] = {}

        for variant in variants:
            if variant.variant_key in self._exact:
                logger.debug("Duplicate variant key ignored: %r", variant.variant_key)
                continue
            self._exact[variant.variant_key] = variant
            if normalization is KeyNormalization.TRIM_CASE_FOLD:
                self._normalized.setdefault(normalize_key(variant.variant_key), variant)

    def __len__(self) -> int:
        return len(self._exact)

    def resolve(self, label: str) -> CatalogVariant | None:
        """
        Find the variant for a UI option label.

        Returns:
            The matched variant, or None when nothing matches. No match is not
            an error; the map builder applies the missing-data policy.
        """
        variant = self._exact.get(label)
        if variant is not None:
            return variant
        if self.normalization is KeyNormalization.TRIM_CASE_FOLD and isinstance(label, str):
            return self._normalized.get(normalize_key(label))
        return None


def resolve_variant(
    label: str,
    variants: Iterable[CatalogVariant],
    config: ResolutionConfig,
) -> CatalogVariant | None:
    """Resolve a single label. Builders resolving many labels should reuse a resolver."""
    return VariantKeyResolver(variants, config.key_normalization).resolve(label)
