"""Tests for the availability map builder."""

import pytest

from variant_availability.builder import AvailabilityMapBuilder, build_availability_map
from variant_availability.decorator import SelectorOption, decorate_options
from variant_availability.models.catalog import CatalogOffer, CatalogVariant
from variant_availability.models.config import ResolutionConfig
from variant_availability.models.decision import AvailabilityMap
from variant_availability.observability.diagnostics import CollectingDiagnosticsSink
from variant_availability.resolvers.classifier import AvailabilityClassifier
from variant_availability.resolvers.keys import VariantKeyResolver


class FailingSink:
    """Diagnostics sink that always raises."""

    def emit(self, diagnostics, product_id=None):
        raise RuntimeError("sink down")


class ExplodingClassifier(AvailabilityClassifier):
    """Classifier that always raises."""

    def classify(self, offer, config):
        raise RuntimeError("classifier down")


@pytest.fixture
def builder() -> AvailabilityMapBuilder:
    return AvailabilityMapBuilder()


class TestScenarios:
    """The selector scenarios: in stock, out of stock, unmatched, low stock, pre-order."""

    @pytest.fixture
    def availability_map(self, builder, scenario_variants, scenario_labels, default_config):
        return builder.build(scenario_variants, scenario_labels, default_config)

    def test_in_stock(self, availability_map: AvailabilityMap):
        red = availability_map["Red"]
        assert red.is_available is True
        assert red.is_low_stock is False
        assert red.resolved_quantity == 100

    def test_out_of_stock(self, availability_map: AvailabilityMap):
        blue = availability_map["Blue"]
        assert blue.is_available is False
        assert blue.is_low_stock is False

    def test_unmatched_optimistic(self, availability_map: AvailabilityMap):
        """An option with no commercial record stays selectable by default."""
        green = availability_map["Green"]
        assert green.is_available is True
        assert green.is_low_stock is False

    def test_low_stock(self, availability_map: AvailabilityMap):
        yellow = availability_map["Yellow"]
        assert yellow.is_available is True
        assert yellow.is_low_stock is True

    def test_pre_order(self, availability_map: AvailabilityMap):
        teal = availability_map["Teal"]
        assert teal.is_pre_order is True
        assert teal.is_available is False

    def test_every_label_and_variant_present(self, availability_map, scenario_labels):
        for key in (*scenario_labels, "Red", "Blue", "Yellow", "Teal"):
            assert key in availability_map

    def test_label_shares_variant_decision(self, availability_map: AvailabilityMap):
        assert availability_map.lookup("red") is availability_map["Red"]

    def test_variant_keys_and_labels(self, availability_map: AvailabilityMap, scenario_labels):
        assert availability_map.variant_keys == ("Red", "Blue", "Yellow", "Teal")
        assert availability_map.option_labels == tuple(scenario_labels)


class TestPolicies:
    """Configuration driven behavior."""

    def test_pessimistic_disables_unmatched(self, builder, scenario_variants, scenario_labels):
        config = ResolutionConfig(missing_data_policy="Pessimistic")
        availability_map = builder.build(scenario_variants, scenario_labels, config)
        assert availability_map["Green"].is_available is False
        assert availability_map["Red"].is_available is True

    def test_matched_variant_without_offers_is_unavailable(self, builder):
        """Policy applies only to unmatched labels, not to variants without offers."""
        variants = [CatalogVariant(variant_key="Blue")]
        availability_map = builder.build(variants, ["Blue"], ResolutionConfig())
        assert availability_map["Blue"].is_available is False

    def test_check_disabled(self, builder, scenario_variants, scenario_labels):
        config = ResolutionConfig(availability_check_enabled=False)
        availability_map = builder.build(scenario_variants, scenario_labels, config)
        for key in ("Red", "Blue", "Green", "Teal"):
            decision = availability_map[key]
            assert decision.is_available is True
            assert decision.is_low_stock is False
            assert decision.is_pre_order is False

    def test_check_disabled_diagnostics(self, builder, scenario_variants, scenario_labels):
        config = ResolutionConfig(availability_check_enabled=False)
        diagnostics = builder.build(scenario_variants, scenario_labels, config).diagnostics
        assert diagnostics.total == 4
        assert diagnostics.unmatched_options == 0

    def test_pre_order_accepted(self, builder, scenario_variants, scenario_labels):
        config = ResolutionConfig(accepted_availability_statuses=["InStock", "PreOrder"])
        availability_map = builder.build(scenario_variants, scenario_labels, config)
        assert availability_map["Teal"].is_available is True

    def test_preferred_seller(self, builder):
        variants = [
            CatalogVariant(
                variant_key="Red",
                offers=[
                    CatalogOffer(seller_id="2", availability_status="InStock", quantity=10, price=20),
                    CatalogOffer(seller_id="1", availability_status="OutOfStock", quantity=0, price=20),
                ],
            )
        ]
        default = builder.build(variants, ["Red"], ResolutionConfig())
        preferred = builder.build(variants, ["Red"], ResolutionConfig(preferred_seller_id="1"))
        assert default["Red"].is_available is True
        assert preferred["Red"].is_available is False


class TestKeyHandling:
    """Normalization, aliases and duplicates."""

    def test_labels_match_case_insensitively(self, builder, default_config):
        variants = [
            CatalogVariant(
                variant_key=" Dark Blue",
                offers=[CatalogOffer(availability_status="InStock", quantity=3, price=9)],
            )
        ]
        availability_map = builder.build(variants, ["dark blue"], default_config)
        assert availability_map["dark blue"].is_low_stock is True
        assert availability_map.diagnostics.unmatched_options == 0

    def test_exact_normalization(self, builder, scenario_variants):
        config = ResolutionConfig(key_normalization="Exact", missing_data_policy="Pessimistic")
        availability_map = builder.build(scenario_variants, ["red"], config)
        assert availability_map["red"].is_available is False
        assert "red" in availability_map
        assert availability_map.diagnostics.unmatched_options == 1
        assert availability_map.lookup("RED") is None

    def test_aliases_do_not_overwrite_exact_keys(self, builder, default_config):
        variants = [
            CatalogVariant(
                variant_key="Red",
                offers=[CatalogOffer(availability_status="InStock", quantity=50, price=9)],
            ),
            CatalogVariant(
                variant_key="red",
                offers=[CatalogOffer(availability_status="OutOfStock", price=9)],
            ),
        ]
        availability_map = builder.build(variants, [], default_config)
        assert availability_map["Red"].is_available is True
        assert availability_map["red"].is_available is False

    def test_normalized_lookup_agrees_with_resolver(self, builder, default_config):
        """Keys differing only by case: lookups follow the first variant, like label resolution."""
        variants = [
            CatalogVariant(
                variant_key="Red",
                offers=[CatalogOffer(availability_status="InStock", quantity=50, price=10)],
            ),
            CatalogVariant(
                variant_key="red",
                offers=[CatalogOffer(availability_status="OutOfStock", price=10)],
            ),
        ]
        availability_map = builder.build(variants, ["RED"], default_config)

        assert VariantKeyResolver(variants).resolve("rEd").variant_key == "Red"
        assert availability_map["RED"].is_available is True
        assert availability_map.lookup("rEd") is availability_map["RED"]
        assert availability_map.lookup("rEd") is availability_map["Red"]
        assert availability_map.lookup("red") is availability_map["red"]

        (option,) = decorate_options([SelectorOption(label="rEd", value="rEd")], availability_map)
        assert option.disabled is False

    def test_duplicate_variant_keys_first_wins(self, builder, default_config):
        variants = [
            CatalogVariant(
                variant_key="Red",
                offers=[CatalogOffer(availability_status="InStock", quantity=50, price=9)],
            ),
            CatalogVariant(
                variant_key="Red",
                offers=[CatalogOffer(availability_status="OutOfStock", price=9)],
            ),
        ]
        availability_map = builder.build(variants, ["Red"], default_config)
        assert availability_map["Red"].is_available is True
        assert availability_map.variant_keys == ("Red",)
        assert availability_map.diagnostics.total == 1

    def test_duplicate_labels_collapsed(self, builder, scenario_variants, default_config):
        availability_map = builder.build(scenario_variants, ["Red", "Red", "Green"], default_config)
        assert availability_map.option_labels == ("Red", "Green")
        assert availability_map.diagnostics.option_count == 2


class TestEdgeCases:
    """Empty inputs."""

    def test_empty_catalog(self, builder):
        config = ResolutionConfig(missing_data_policy="Pessimistic")
        availability_map = builder.build([], ["Red", "Blue"], config)
        assert availability_map["Red"].is_available is False
        assert availability_map.diagnostics.unmatched_options == 2

    def test_no_labels(self, builder, scenario_variants, default_config):
        availability_map = builder.build(scenario_variants, [], default_config)
        assert availability_map["Red"].is_available is True
        assert availability_map.option_labels == ()

    def test_nothing(self, builder, default_config):
        availability_map = builder.build([], [], default_config)
        assert len(availability_map) == 0


class TestDeterminism:
    """Identical inputs give value-equal maps."""

    def test_repeat_builds_equal(self, builder, scenario_variants, scenario_labels, default_config):
        first = builder.build(scenario_variants, scenario_labels, default_config)
        second = builder.build(scenario_variants, scenario_labels, default_config)
        assert first == second
        assert first.to_dict() == second.to_dict()
        assert first.diagnostics == second.diagnostics

    def test_build_availability_map_default_config(self, scenario_variants, scenario_labels):
        availability_map = build_availability_map(scenario_variants, scenario_labels)
        assert availability_map["Green"].is_available is True


class TestDiagnostics:
    """Coverage counts and sink delivery."""

    def test_counts(self, builder, scenario_variants, scenario_labels, default_config):
        sink = CollectingDiagnosticsSink()
        builder.build(
            scenario_variants, scenario_labels, default_config,
            diagnostics_sink=sink, product_id="p-1",
        )
        product_id, diagnostics = sink.records[0]
        assert product_id == "p-1"
        assert diagnostics.total == 4
        assert diagnostics.with_offers == 4
        assert diagnostics.with_resolved_status == 4
        assert diagnostics.option_count == 5
        assert diagnostics.unmatched_options == 1

    def test_counts_missing_offers_and_status(self, builder, default_config):
        variants = [
            CatalogVariant(variant_key="A"),
            CatalogVariant(variant_key="B", offers=[CatalogOffer(availability_status="Mystery")]),
            CatalogVariant(variant_key="C", offers=[CatalogOffer(availability_status="InStock")]),
        ]
        diagnostics = builder.build(variants, [], default_config).diagnostics
        assert diagnostics.total == 3
        assert diagnostics.with_offers == 2
        assert diagnostics.with_resolved_status == 1

    def test_failing_sink_does_not_change_result(
        self, builder, scenario_variants, scenario_labels, default_config
    ):
        expected = builder.build(scenario_variants, scenario_labels, default_config)
        actual = builder.build(
            scenario_variants, scenario_labels, default_config, diagnostics_sink=FailingSink()
        )
        assert actual == expected


class TestBuildMetrics:
    """Build outcome metrics."""

    @pytest.fixture
    def recorded(self, monkeypatch) -> list[str]:
        statuses: list[str] = []

        def fake_record_build(duration_seconds, check_enabled=True, status="success"):
            statuses.append(status)

        monkeypatch.setattr("variant_availability.builder.record_build", fake_record_build)
        return statuses

    def test_success_recorded(self, recorded, builder, scenario_variants, default_config):
        builder.build(scenario_variants, ["Red"], default_config)
        assert recorded == ["success"]

    def test_failure_recorded_and_raised(self, recorded, scenario_variants, default_config):
        builder = AvailabilityMapBuilder(classifier=ExplodingClassifier())
        with pytest.raises(RuntimeError, match="classifier down"):
            builder.build(scenario_variants, ["Red"], default_config)
        assert recorded == ["error"]
