"""Maps availability decisions onto variant selector options."""

from collections.abc import Iterable, Mapping

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from variant_availability.models.decision import AvailabilityDecision, AvailabilityMap


class SelectorOption(BaseModel):
    """One option rendered by the variant selector."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    label: str
    value: str
    src: str | None = Field(default=None, description="Swatch image URL")
    alt: str | None = None
    disabled: bool = False
    low_stock: bool = Field(default=False, description="Show the low-stock marker")


class SelectorDecorator:
    """Copies decision flags onto selector options. No classification happens here."""

    def decorate(self, option: SelectorOption, decision: AvailabilityDecision) -> SelectorOption:
        return option.model_copy(
            update={
                "disabled": not decision.is_available,
                "low_stock": decision.is_low_stock,
            }
        )

    def decorate_all(
        self,
        options: Iterable[SelectorOption],
        availability_map: AvailabilityMap | Mapping[str, AvailabilityDecision],
    ) -> list[SelectorOption]:
        """Decorate options found in the map by value, then label; others pass through."""
        decorated = []
        for option in options:
            decision = _find(availability_map, option.value) or _find(availability_map, option.label)
            decorated.append(self.decorate(option, decision) if decision is not None else option)
        return decorated


def _find(
    availability_map: AvailabilityMap | Mapping[str, AvailabilityDecision],
    key: str,
) -> AvailabilityDecision | None:
    if isinstance(availability_map, AvailabilityMap):
        return availability_map.lookup(key)
    return availability_map.get(key)


def decorate_options(
    options: Iterable[SelectorOption],
    availability_map: AvailabilityMap | Mapping[str, AvailabilityDecision],
) -> list[SelectorOption]:
    """Decorate options with a default SelectorDecorator."""
    return SelectorDecorator().decorate_all(options, availability_map)


def availability_caption(decision: AvailabilityDecision) -> str:
    """Tooltip text for an option."""
    if not decision.is_available:
        return "Unavailable"
    if decision.is_pre_order:
        return "Pre-order"
    if decision.is_back_order:
        return "Back-order"
    if decision.resolved_quantity > 0:
        return f"{decision.resolved_quantity} in stock"
    return "In stock"
