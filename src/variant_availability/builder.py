"""Availability map builder: orchestrates key resolution, offer selection and classification."""

import logging
import time
from collections.abc import Iterable, Sequence

from variant_availability.models.catalog import AvailabilityStatus, CatalogVariant
from variant_availability.models.config import KeyNormalization, ResolutionConfig
from variant_availability.models.decision import (
    AvailabilityDecision,
    AvailabilityMap,
    CoverageDiagnostics,
)
from variant_availability.observability.diagnostics import DiagnosticsSink
from variant_availability.observability.metrics import record_build
from variant_availability.observability.tracing import pipeline_span
from variant_availability.resolvers.classifier import AvailabilityClassifier
from variant_availability.resolvers.keys import VariantKeyResolver
from variant_availability.resolvers.offers import OfferSelector

logger = logging.getLogger(__name__)


class AvailabilityMapBuilder:
    """
    Build an AvailabilityMap for one catalog response.

    Steps:
    1. Classify every catalog variant once (canonical offer, then decision)
    2. Resolve every UI option label to a variant; unmatched labels get the
       fail-safe decision of the configured missing-data policy
    3. Add normalized key aliases under TrimCaseFold
    4. Emit coverage diagnostics to the optional sink

    The build is a pure function of its inputs: identical inputs give
    value-equal maps. Diagnostics delivery never affects the result.
    """

    def __init__(
        self,
        selector: OfferSelector | None = None,
        classifier: AvailabilityClassifier | None = None,
    ) -> None:
        self.selector = selector or OfferSelector()
        self.classifier = classifier or AvailabilityClassifier()

    def build(
        self,
        variants: Iterable[CatalogVariant],
        option_labels: Iterable[str],
        config: ResolutionConfig,
        diagnostics_sink: DiagnosticsSink | None = None,
        product_id: str | None = None,
    ) -> AvailabilityMap:
        """
        Build the availability map.

        Args:
            variants: Catalog variants in received order.
            option_labels: UI option labels to resolve.
            config: Resolution configuration.
            diagnostics_sink: Optional receiver of coverage counts.
            product_id: Product identifier, used for logs and spans only.

        Returns:
            An immutable AvailabilityMap covering every variant key and label.
        """
        variants = tuple(variants)
        labels = tuple(dict.fromkeys(label for label in option_labels if isinstance(label, str)))
        start_time = time.perf_counter()

        try:
            with pipeline_span(
                "build_map",
                product_id=product_id,
                variants=len(variants),
                options=len(labels),
                check_enabled=config.availability_check_enabled,
            ) as span:
                if config.availability_check_enabled:
                    entries, variant_keys, diagnostics = self._classify(variants, labels, config)
                else:
                    entries, variant_keys, diagnostics = self._unchecked(variants, labels)

                span.set_attribute("options.unmatched", diagnostics.unmatched_options)
        except Exception:
            record_build(
                time.perf_counter() - start_time,
                config.availability_check_enabled,
                status="error",
            )
            raise

        entries, aliases = self._with_aliases(entries, config.key_normalization)
        availability_map = AvailabilityMap(
            entries,
            variant_keys=variant_keys,
            option_labels=labels,
            key_normalization=config.key_normalization,
            diagnostics=diagnostics,
            aliases=aliases,
        )

        record_build(time.perf_counter() - start_time, config.availability_check_enabled)
        logger.debug(
            "Built availability map",
            extra={"product_id": product_id, "coverage": diagnostics.model_dump()},
        )
        self._emit(diagnostics, diagnostics_sink, product_id)
        return availability_map

    def _classify(
        self,
        variants: Sequence[CatalogVariant],
        labels: Sequence[str],
        config: ResolutionConfig,
    ) -> tuple[dict[str, AvailabilityDecision], tuple[str, ...], CoverageDiagnostics]:
        """Classify variants and resolve labels against them."""
        entries: dict[str, AvailabilityDecision] = {}
        with_offers = 0
        with_status = 0

        for variant in variants:
            if variant.variant_key in entries:
                continue
            offer = self.selector.select(variant.offers, config)
            if variant.offers:
                with_offers += 1
            if offer is not None and offer.availability_status is not AvailabilityStatus.UNKNOWN:
                with_status += 1
            entries[variant.variant_key] = self.classifier.classify(offer, config)

        variant_keys = tuple(entries)
        resolver = VariantKeyResolver(variants, config.key_normalization)
        fail_safe = AvailabilityDecision.fail_safe(config.missing_data_policy)
        unmatched = 0

        for label in labels:
            variant = resolver.resolve(label)
            if variant is None:
                unmatched += 1
                entries.setdefault(label, fail_safe)
            else:
                entries.setdefault(label, entries[variant.variant_key])

        diagnostics = CoverageDiagnostics(
            total=len(variant_keys),
            with_offers=with_offers,
            with_resolved_status=with_status,
            option_count=len(labels),
            unmatched_options=unmatched,
        )
        return entries, variant_keys, diagnostics

    def _unchecked(
        self,
        variants: Sequence[CatalogVariant],
        labels: Sequence[str],
    ) -> tuple[dict[str, AvailabilityDecision], tuple[str, ...], CoverageDiagnostics]:
        """Availability checking disabled: every key stays selectable."""
        decision = AvailabilityDecision.unchecked()
        variant_keys = tuple(dict.fromkeys(variant.variant_key for variant in variants))
        entries = dict.fromkeys((*variant_keys, *labels), decision)
        diagnostics = CoverageDiagnostics(
            total=len(variant_keys),
            with_offers=sum(1 for variant in variants if variant.offers),
            option_count=len(labels),
        )
        return entries, variant_keys, diagnostics

    def _with_aliases(
        self,
        entries: dict[str, AvailabilityDecision],
        normalization: KeyNormalization,
    ) -> tuple[dict[str, AvailabilityDecision], dict[str, AvailabilityDecision]]:
        """
        Add normalized forms of every key without overwriting exact keys.

        Returns the entries with aliases added, plus the alias table used for
        normalized lookups. The first key to claim a normalized form keeps it,
        matching VariantKeyResolver: variant keys in catalog order, then labels.
        """
        if normalization is KeyNormalization.EXACT:
            return entries, {}
        aliases: dict[str, AvailabilityDecision] = {}
        for key, decision in entries.items():
            aliases.setdefault(normalization.apply(key), decision)
        aliased = dict(entries)
        for alias, decision in aliases.items():
            aliased.setdefault(alias, decision)
        return aliased, aliases

    def _emit(
        self,
        diagnostics: CoverageDiagnostics,
        sink: DiagnosticsSink | None,
        product_id: str | None,
    ) -> None:
        if sink is None:
            return
        try:
            sink.emit(diagnostics, product_id)
        except Exception:
            logger.warning("Diagnostics sink %s failed", type(sink).__name__, exc_info=True)


_default_builder = AvailabilityMapBuilder()


def build_availability_map(
    variants: Iterable[CatalogVariant],
    option_labels: Iterable[str],
    config: ResolutionConfig | None = None,
    diagnostics_sink: DiagnosticsSink | None = None,
    product_id: str | None = None,
) -> AvailabilityMap:
    """Build an availability map with the default builder and configuration."""
    return _default_builder.build(
        variants,
        option_labels,
        config or ResolutionConfig(),
        diagnostics_sink=diagnostics_sink,
        product_id=product_id,
    )
