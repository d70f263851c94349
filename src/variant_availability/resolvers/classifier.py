"""Availability classification of a canonical offer."""

from variant_availability.models.catalog import AvailabilityStatus, CatalogOffer
from variant_availability.models.config import ResolutionConfig
from variant_availability.models.decision import AvailabilityDecision

# Always passed through the status gate so their flags can be reported even
# when the deployment does not accept them as purchasable.
_DEFERRED_STATUSES = frozenset({AvailabilityStatus.PRE_ORDER, AvailabilityStatus.BACK_ORDER})


class AvailabilityClassifier:
    """
    Turn a canonical offer into an AvailabilityDecision.

    Rules, first match wins:
    - no offer: unavailable
    - status neither accepted nor PreOrder/BackOrder: unavailable
    - InStock with quantity > 0 and a positive price: available, low stock
      when quantity <= low_stock_threshold
    - PreOrder with a positive price: pre-order
    - BackOrder with a positive price: back-order
    - anything else (zero price, zero quantity, ...): unavailable

    A zero price is the catalog's "not sellable" sentinel and forces
    unavailability unless zero_price_sellable is set. PreOrder and BackOrder
    only count as available when listed in accepted_availability_statuses.
    """

    def classify(
        self,
        offer: CatalogOffer | None,
        config: ResolutionConfig,
    ) -> AvailabilityDecision:
        """
        Classify one offer.

        Args:
            offer: The canonical offer, or None when the variant has none.
            config: Resolution configuration.

        Returns:
            The decision, with resolved fields copied from the offer (0 and
            Unknown when absent).
        """
        if offer is None:
            return AvailabilityDecision.unavailable()

        status = offer.availability_status
        quantity = offer.quantity if offer.quantity is not None else 0
        resolved = {
            "resolved_quantity": quantity,
            "resolved_status": status,
            "resolved_price": offer.price if offer.price is not None else 0.0,
        }

        if status not in config.accepted_availability_statuses | _DEFERRED_STATUSES:
            return AvailabilityDecision(**resolved)

        if not self._has_sellable_price(offer, config):
            return AvailabilityDecision(**resolved)

        if status is AvailabilityStatus.IN_STOCK:
            if quantity <= 0:
                return AvailabilityDecision(**resolved)
            return AvailabilityDecision(
                is_available=True,
                is_low_stock=quantity <= config.low_stock_threshold,
                **resolved,
            )

        if status is AvailabilityStatus.PRE_ORDER:
            return AvailabilityDecision(
                is_available=config.accepts(status),
                is_pre_order=True,
                **resolved,
            )

        if status is AvailabilityStatus.BACK_ORDER:
            return AvailabilityDecision(
                is_available=config.accepts(status),
                is_back_order=True,
                **resolved,
            )

        return AvailabilityDecision(**resolved)

    def _has_sellable_price(self, offer: CatalogOffer, config: ResolutionConfig) -> bool:
        """Positive price, or exactly zero when free items are sellable."""
        if offer.price is None:
            return False
        if offer.price > 0:
            return True
        return config.zero_price_sellable and offer.price == 0


_default_classifier = AvailabilityClassifier()


def classify_offer(
    offer: CatalogOffer | None,
    config: ResolutionConfig,
) -> AvailabilityDecision:
    """Classify an offer with the default classifier."""
    return _default_classifier.classify(offer, config)
