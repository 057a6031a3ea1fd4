"""Tests for bundle-to-offer reconciliation."""

import logging

import pytest

from ndc_offers import metrics
from ndc_offers.config import MatchingConfig
from ndc_offers.domain.models import (
    ALaCarteOfferItem,
    BundleDefinition,
    DefinitionCatalog,
    Money,
    ServiceCategory,
    ServiceDefinition,
)
from ndc_offers.services.reconciliation import BundleReconciler, strip_prefix


def line(item_id, journey, pax, definition="SD-PLUS"):
    return ALaCarteOfferItem(
        offer_item_id=item_id,
        service_definition_ref_id=definition,
        price=Money(45.0, "AUD"),
        pax_ref_ids=tuple(pax),
        journey_ref_ids=(journey,) if journey else (),
    )


@pytest.fixture
def catalog():
    return DefinitionCatalog.from_definitions(
        [
            BundleDefinition(
                service_definition_id="SD-PLUS",
                service_code="P200",
                name="Plus",
                category=ServiceCategory.BUNDLE,
                included_service_ref_ids=("SD-BAG", "SD-MEAL", "SD-FLEX"),
            ),
            BundleDefinition(
                service_definition_id="SD-MAX",
                service_code="M300",
                name="Max",
                category=ServiceCategory.BUNDLE,
            ),
            ServiceDefinition("SD-BAG", "BG20", "Bag", ServiceCategory.BAGGAGE),
            ServiceDefinition("SD-MEAL", "ML01", "Meal", ServiceCategory.MEAL),
            ServiceDefinition("SD-FLEX", "FLX", "Flex", ServiceCategory.ANCILLARY),
        ]
    )


@pytest.fixture
def reconciler():
    return BundleReconciler(config=MatchingConfig())


class TestCorrelation:
    def test_strip_prefix_takes_first_match(self):
        """The first configured prefix that matches is removed."""
        assert strip_prefix("Mkt-seg123", ("Mkt-seg", "seg")) == "123"
        assert strip_prefix("seg123", ("Mkt-seg", "seg")) == "123"
        assert strip_prefix("other", ("seg",)) == "other"

    def test_journey_matches_segment_with_same_core(self, reconciler, catalog):
        """fl<core> journeys match seg<core> segments."""
        bundles = reconciler.match_bundles_to_offer(
            [line("b-1", "fl913653037", ["ADT1"])], catalog, ["seg913653037"]
        )
        assert [b.service_code for b in bundles] == ["P200"]

    def test_marketing_segment_prefix_is_stripped(self, reconciler, catalog):
        """Mkt-seg segment ids correlate like plain ones."""
        bundles = reconciler.match_bundles_to_offer(
            [line("b-1", "fl42", ["ADT1"]), line("b-2", "fl43", ["ADT1"], "SD-MAX")],
            catalog,
            ["Mkt-seg42"],
        )
        assert [b.service_code for b in bundles] == ["P200"]

    def test_offer_journey_ref_containing_core_matches(self, reconciler, catalog):
        """Offer journey refs match when they contain the core id."""
        item = line("b-1", "fl555", ["ADT1"])
        assert reconciler.matches(item, set(), ["journey-555-out"])
        assert reconciler.matches(item, set(), ["fl555"])
        assert not reconciler.matches(item, set(), ["journey-556"])

    def test_line_without_journey_never_matches(self, reconciler):
        """Lines with no journey ref are never attached."""
        assert not reconciler.matches(line("b-1", None, ["ADT1"]), {"1"}, ["fl1"])


class TestGrouping:
    def test_one_bundle_per_product_code(self, reconciler, catalog):
        """Lines of one product collapse into one bundle with a passenger map."""
        items = [
            line("b-1", "fl1", ["ADT1"]),
            line("b-2", "fl1", ["ADT2"]),
            line("b-3", "fl1", ["CHD1"]),
        ]
        bundles = reconciler.match_bundles_to_offer(items, catalog, ["seg1"])
        assert len(bundles) == 1
        plus = bundles[0]
        assert plus.offer_item_id == "b-1"
        assert plus.pax_ref_ids == ("ADT1", "ADT2", "CHD1")
        assert dict(plus.pax_offer_item_ids) == {"ADT1": "b-1", "ADT2": "b-2", "CHD1": "b-3"}
        assert plus.journey_ref_ids == ("fl1",)

    def test_pax_list_and_map_have_same_size(self, reconciler, catalog):
        """A repeated passenger keeps its first position and its last item id."""
        items = [
            line("b-1", "fl1", ["ADT1", "ADT2"]),
            line("b-2", "fl1", ["ADT1"]),
        ]
        plus = reconciler.match_bundles_to_offer(items, catalog, ["seg1"])[0]
        assert plus.pax_ref_ids == ("ADT1", "ADT2")
        assert len(plus.pax_ref_ids) == len(plus.pax_offer_item_ids)
        assert plus.pax_offer_item_ids["ADT1"] == "b-2"

    def test_unknown_definition_is_skipped(self, reconciler, catalog):
        """Lines whose definition is not a bundle are ignored."""
        items = [line("b-1", "fl1", ["ADT1"], "SD-GONE")]
        assert reconciler.match_bundles_to_offer(items, catalog, ["seg1"]) == ()

    def test_inclusions_bucketed_by_category(self, reconciler, catalog):
        """Included services are grouped by their category."""
        inclusions = reconciler.resolve_inclusions(catalog.bundle("SD-PLUS"), catalog)
        assert [i.service_code for i in inclusions.baggage] == ["BG20"]
        assert [i.service_code for i in inclusions.meals] == ["ML01"]
        assert [i.service_code for i in inclusions.other] == ["FLX"]
        assert inclusions.seats == ()
        assert reconciler.resolve_inclusions(catalog.bundle("SD-MAX"), catalog).is_empty


class TestNoMatchFallback:
    def test_falls_back_to_all_lines_with_warning(self, reconciler, catalog, caplog):
        """No match attaches every line, logs and counts it."""
        items = [line("b-1", "fl1", ["ADT1"]), line("b-2", "fl2", ["ADT1"], "SD-MAX")]
        with caplog.at_level(logging.WARNING, logger="ndc_offers.services.reconciliation"):
            bundles = reconciler.match_bundles_to_offer(
                items, catalog, ["seg99"], offer_id="o-1"
            )
        assert [b.service_code for b in bundles] == ["P200", "M300"]
        assert "No bundle line matched" in caplog.text
        assert metrics.get_counter(metrics.RECONCILIATION_FALLBACK) == 1

    def test_fallback_disabled_returns_nothing(self, catalog):
        """With the fallback off an unmatched offer gets no bundles."""
        reconciler = BundleReconciler(config=MatchingConfig(include_all_on_no_match=False))
        bundles = reconciler.match_bundles_to_offer(
            [line("b-1", "fl1", ["ADT1"])], catalog, ["seg99"]
        )
        assert bundles == ()
        assert metrics.get_counter(metrics.RECONCILIATION_FALLBACK) == 0

    def test_no_lines_is_not_a_fallback(self, reconciler, catalog):
        """An empty a-la-carte offer does not count as a fallback."""
        assert reconciler.match_bundles_to_offer([], catalog, ["seg1"]) == ()
        assert metrics.get_counter(metrics.RECONCILIATION_FALLBACK) == 0
