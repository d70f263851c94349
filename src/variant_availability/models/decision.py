"""Availability decisions and the immutable per-response availability map."""

from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from variant_availability.models.catalog import AvailabilityStatus
from variant_availability.models.config import KeyNormalization, MissingDataPolicy


class AvailabilityDecision(BaseModel):
    """Per-variant availability outcome consumed by the selector UI."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    is_available: bool = False
    is_low_stock: bool = False
    is_pre_order: bool = False
    is_back_order: bool = False
    resolved_quantity: int = Field(default=0, ge=0, description="0 when unknown")
    resolved_status: AvailabilityStatus = AvailabilityStatus.UNKNOWN
    resolved_price: float = Field(default=0.0, ge=0, description="0 when unknown")

    @classmethod
    def unavailable(cls) -> "AvailabilityDecision":
        """Decision for a variant with nothing to classify."""
        return cls()

    @classmethod
    def unchecked(cls) -> "AvailabilityDecision":
        """Decision used when availability checking is switched off."""
        return cls(is_available=True)

    @classmethod
    def fail_safe(cls, policy: MissingDataPolicy) -> "AvailabilityDecision":
        """Decision synthesized for an option with no commercial record."""
        return cls(is_available=policy is MissingDataPolicy.OPTIMISTIC)


class CoverageDiagnostics(BaseModel):
    """Data-quality counts for one map build."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    total: int = Field(default=0, ge=0, description="Catalog variants seen")
    with_offers: int = Field(default=0, ge=0, description="Variants with at least one offer")
    with_resolved_status: int = Field(
        default=0, ge=0, description="Variants whose canonical offer has a known status"
    )
    option_count: int = Field(default=0, ge=0, description="UI option labels resolved")
    unmatched_options: int = Field(
        default=0, ge=0, description="Option labels with no commercial record"
    )


class AvailabilityMap(Mapping[str, AvailabilityDecision]):
    """
    Read-only snapshot of decisions keyed by variant key and option label.

    Under TrimCaseFold normalization the normalized form of every key is
    stored as well and points at the same decision object. Normalized
    lookups go through a separate alias table in which the first key
    (variant keys in catalog order, then labels) claims each normalized
    form, so an exact key such as "red" cannot shadow the alias that "Red"
    already owns. Two maps compare equal when their items are equal.
    """

    __slots__ = (
        "_entries",
        "_aliases",
        "_variant_keys",
        "_option_labels",
        "_normalization",
        "_diagnostics",
    )

    def __init__(
        self,
        entries: Mapping[str, AvailabilityDecision] | None = None,
        *,
        variant_keys: tuple[str, ...] = (),
        option_labels: tuple[str, ...] = (),
        key_normalization: KeyNormalization = KeyNormalization.TRIM_CASE_FOLD,
        diagnostics: CoverageDiagnostics | None = None,
        aliases: Mapping[str, AvailabilityDecision] | None = None,
    ) -> None:
        self._entries = MappingProxyType(dict(entries or {}))
        if aliases is None:
            aliases = {}
            if key_normalization is not KeyNormalization.EXACT:
                for key, decision in self._entries.items():
                    aliases.setdefault(key_normalization.apply(key), decision)
        self._aliases = MappingProxyType(dict(aliases))
        self._variant_keys = tuple(variant_keys)
        self._option_labels = tuple(option_labels)
        self._normalization = key_normalization
        self._diagnostics = diagnostics or CoverageDiagnostics()

    def __getitem__(self, key: str) -> AvailabilityDecision:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return (
            f"AvailabilityMap(variants={len(self._variant_keys)}, "
            f"options={len(self._option_labels)}, entries={len(self._entries)})"
        )

    @property
    def variant_keys(self) -> tuple[str, ...]:
        """Catalog variant keys in input order (first occurrence only)."""
        return self._variant_keys

    @property
    def option_labels(self) -> tuple[str, ...]:
        """UI option labels in input order."""
        return self._option_labels

    @property
    def key_normalization(self) -> KeyNormalization:
        return self._normalization

    @property
    def diagnostics(self) -> CoverageDiagnostics:
        return self._diagnostics

    def lookup(
        self, label: str, default: AvailabilityDecision | None = None
    ) -> AvailabilityDecision | None:
        """Find a decision by exact key, then through the normalized alias table."""
        decision = self._entries.get(label)
        if decision is None and isinstance(label, str):
            decision = self._aliases.get(self._normalization.apply(label))
        return decision if decision is not None else default

    def to_dict(self) -> dict[str, dict[str, Any]]:
        """JSON-ready decisions for the variant keys and option labels."""
        result: dict[str, dict[str, Any]] = {}
        for key in (*self._variant_keys, *self._option_labels):
            if key not in result and key in self._entries:
                result[key] = self._entries[key].model_dump(mode="json")
        return result
