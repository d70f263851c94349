"""Canonical offer selection for multi-seller variants."""

from collections.abc import Sequence

from variant_availability.models.catalog import CatalogOffer
from variant_availability.models.config import ResolutionConfig


class OfferSelector:
    """
    Pick the single offer that represents a variant.

    Policy is positional: the preferred seller's offer when one exists,
    otherwise the first offer as received. Offers are never ranked by price
    or stock, so the chosen offer cannot flip between refreshes of the same
    data.
    """

    def select(
        self,
        offers: Sequence[CatalogOffer],
        config: ResolutionConfig,
    ) -> CatalogOffer | None:
        """
        Select the canonical offer.

        Args:
            offers: Offers in received order.
            config: Resolution configuration (preferred seller).

        Returns:
            The canonical offer, or None when there are no offers.
        """
        if not offers:
            return None

        preferred = config.preferred_seller_id
        if preferred is not None:
            for offer in offers:
                if offer.seller_id == preferred:
                    return offer

        return offers[0]


_default_selector = OfferSelector()


def select_offer(
    offers: Sequence[CatalogOffer],
    config: ResolutionConfig,
) -> CatalogOffer | None:
    """Select the canonical offer with the default selector."""
    return _default_selector.select(offers, config)
