"""Tests for offer classification."""

import pytest

from variant_availability.models.catalog import AvailabilityStatus, CatalogOffer
from variant_availability.models.config import ResolutionConfig
from variant_availability.resolvers.classifier import AvailabilityClassifier, classify_offer


@pytest.fixture
def classifier() -> AvailabilityClassifier:
    return AvailabilityClassifier()


def _offer(status: str, quantity=None, price=None) -> CatalogOffer:
    return CatalogOffer(availability_status=status, quantity=quantity, price=price, seller_id="1")


class TestInStock:
    """Classification of in-stock offers."""

    def test_plenty_of_stock(self, classifier, default_config):
        decision = classifier.classify(_offer("InStock", 100, 50), default_config)
        assert decision.is_available is True
        assert decision.is_low_stock is False
        assert decision.resolved_quantity == 100
        assert decision.resolved_price == 50
        assert decision.resolved_status is AvailabilityStatus.IN_STOCK

    def test_low_stock(self, classifier, default_config):
        decision = classifier.classify(_offer("InStock", 5, 50), default_config)
        assert decision.is_available is True
        assert decision.is_low_stock is True

    @pytest.mark.parametrize(
        "quantity,low_stock",
        [(9, True), (10, True), (11, False)],
    )
    def test_threshold_boundary(self, classifier, default_config, quantity, low_stock):
        """Quantity equal to the threshold counts as low stock."""
        decision = classifier.classify(_offer("InStock", quantity, 50), default_config)
        assert decision.is_low_stock is low_stock

    def test_zero_threshold_disables_low_stock(self, classifier):
        config = ResolutionConfig(low_stock_threshold=0)
        decision = classifier.classify(_offer("InStock", 1, 50), config)
        assert decision.is_available is True
        assert decision.is_low_stock is False

    def test_zero_quantity_unavailable(self, classifier, default_config):
        decision = classifier.classify(_offer("InStock", 0, 50), default_config)
        assert decision.is_available is False
        assert decision.is_low_stock is False

    def test_unknown_quantity_unavailable(self, classifier, default_config):
        decision = classifier.classify(_offer("InStock", None, 50), default_config)
        assert decision.is_available is False
        assert decision.resolved_quantity == 0


class TestPrice:
    """The zero-price sentinel."""

    @pytest.mark.parametrize("status", ["InStock", "PreOrder", "BackOrder"])
    def test_zero_price_never_available(self, classifier, status):
        config = ResolutionConfig(accepted_availability_statuses=["InStock", "PreOrder", "BackOrder"])
        decision = classifier.classify(_offer(status, 100, 0), config)
        assert decision.is_available is False
        assert decision.is_pre_order is False
        assert decision.is_back_order is False

    def test_missing_price_unavailable(self, classifier, default_config):
        decision = classifier.classify(_offer("InStock", 100, None), default_config)
        assert decision.is_available is False
        assert decision.resolved_price == 0

    def test_zero_price_sellable_flag(self, classifier):
        config = ResolutionConfig(zero_price_sellable=True)
        decision = classifier.classify(_offer("InStock", 3, 0), config)
        assert decision.is_available is True
        assert decision.is_low_stock is True


class TestStatusGate:
    """Statuses outside the accepted set."""

    def test_out_of_stock(self, classifier, default_config):
        decision = classifier.classify(_offer("OutOfStock", 0, 0), default_config)
        assert decision.is_available is False
        assert decision.resolved_status is AvailabilityStatus.OUT_OF_STOCK

    def test_out_of_stock_with_quantity(self, classifier, default_config):
        """Status wins over a stale positive quantity."""
        decision = classifier.classify(_offer("OutOfStock", 40, 20), default_config)
        assert decision.is_available is False
        assert decision.resolved_quantity == 40

    def test_unknown_status(self, classifier, default_config):
        decision = classifier.classify(_offer("SomethingNew", 10, 20), default_config)
        assert decision.is_available is False
        assert decision.resolved_status is AvailabilityStatus.UNKNOWN

    def test_no_offer(self, classifier, default_config):
        decision = classifier.classify(None, default_config)
        assert decision.is_available is False
        assert decision.resolved_status is AvailabilityStatus.UNKNOWN
        assert decision.resolved_quantity == 0

    def test_in_stock_not_accepted(self, classifier):
        config = ResolutionConfig(accepted_availability_statuses=["PreOrder"])
        decision = classifier.classify(_offer("InStock", 100, 50), config)
        assert decision.is_available is False


class TestDeferredFulfilment:
    """Pre-order and back-order offers."""

    def test_pre_order_not_accepted(self, classifier, default_config):
        """Flag is reported even when the status is not purchasable."""
        decision = classifier.classify(_offer("PreOrder", None, 30), default_config)
        assert decision.is_pre_order is True
        assert decision.is_available is False
        assert decision.is_low_stock is False

    def test_pre_order_accepted(self, classifier):
        config = ResolutionConfig(accepted_availability_statuses=["InStock", "PreOrder"])
        decision = classifier.classify(_offer("PreOrder", None, 30), config)
        assert decision.is_pre_order is True
        assert decision.is_available is True

    def test_back_order_accepted(self, classifier):
        config = ResolutionConfig(accepted_availability_statuses=["InStock", "BackOrder"])
        decision = classifier.classify(_offer("https://schema.org/BackOrder", 0, 30), config)
        assert decision.is_back_order is True
        assert decision.is_pre_order is False
        assert decision.is_available is True

    def test_pre_order_ignores_low_quantity(self, classifier):
        config = ResolutionConfig(accepted_availability_statuses=["PreOrder"])
        decision = classifier.classify(_offer("PreOrder", 1, 30), config)
        assert decision.is_low_stock is False

    def test_module_function(self, default_config):
        assert classify_offer(_offer("InStock", 50, 10), default_config).is_available is True
