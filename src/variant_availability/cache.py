"""Memoization of availability maps for callers that rebuild on every render."""

import hashlib
import json
import logging
import threading
from collections import OrderedDict
from collections.abc import Iterable

from variant_availability.builder import AvailabilityMapBuilder
from variant_availability.models.catalog import CatalogVariant
from variant_availability.models.config import ResolutionConfig
from variant_availability.models.decision import AvailabilityMap
from variant_availability.observability.diagnostics import DiagnosticsSink
from variant_availability.observability.metrics import record_cache_lookup

logger = logging.getLogger(__name__)


def fingerprint(
    variants: Iterable[CatalogVariant],
    option_labels: Iterable[str],
    config: ResolutionConfig,
) -> str:
    """Content hash of a build's inputs, stable across processes."""
    config_data = config.model_dump(mode="json")
    config_data["accepted_availability_statuses"] = sorted(
        config_data["accepted_availability_statuses"]
    )
    document = {
        "variants": [variant.model_dump(mode="json") for variant in variants],
        "labels": list(option_labels),
        "config": config_data,
    }
    encoded = json.dumps(document, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(encoded.encode("utf-8")).hexdigest()


class AvailabilityCache:
    """
    LRU cache of availability maps keyed by input fingerprint.

    Identical inputs return the identical map object, which keeps the result
    referentially stable for reactive consumers. Hits do not re-emit
    diagnostics.
    """

    def __init__(
        self,
        maxsize: int = 256,
        builder: AvailabilityMapBuilder | None = None,
    ) -> None:
        """
        Initialize the cache.

        Args:
            maxsize: Maximum number of maps kept; 0 disables caching.
            builder: Builder used on misses.
        """
        if maxsize < 0:
            raise ValueError("maxsize must be >= 0")
        self.maxsize = maxsize
        self.builder = builder or AvailabilityMapBuilder()
        self._entries: OrderedDict[str, AvailabilityMap] = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def get_or_build(
        self,
        variants: Iterable[CatalogVariant],
        option_labels: Iterable[str],
        config: ResolutionConfig,
        diagnostics_sink: DiagnosticsSink | None = None,
        product_id: str | None = None,
    ) -> AvailabilityMap:
        """Return the cached map for these inputs, building it on a miss."""
        variants = tuple(variants)
        option_labels = tuple(option_labels)
        key = fingerprint(variants, option_labels, config)

        with self._lock:
            cached = self._entries.get(key)
            if cached is not None:
                self._entries.move_to_end(key)
                self._hits += 1
        if cached is not None:
            record_cache_lookup(hit=True)
            return cached

        record_cache_lookup(hit=False)
        availability_map = self.builder.build(
            variants,
            option_labels,
            config,
            diagnostics_sink=diagnostics_sink,
            product_id=product_id,
        )

        with self._lock:
            self._misses += 1
            if self.maxsize == 0:
                return availability_map
            # Another thread may have built the same inputs meanwhile; keep the first.
            existing = self._entries.setdefault(key, availability_map)
            self._entries.move_to_end(key)
            while len(self._entries) > self.maxsize:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted availability map %s", evicted[:12])
        return existing

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0

    def stats(self) -> dict[str, int]:
        """Hit, miss and size counters."""
        with self._lock:
            return {
                "hits": self._hits,
                "misses": self._misses,
                "size": len(self._entries),
                "maxsize": self.maxsize,
            }
