"""Tests for the price response normalizer."""

import pytest

from conftest import (
    ALACARTE_OFFER_ID,
    OFFER_ID,
    PRICE_BUNDLE_REJECTION_XML,
    PRICE_HARD_REJECTION_XML,
    PRICE_PARTIAL_XML,
    PRICE_RESPONSE_XML,
)
from ndc_offers.config import ParsingConfig
from ndc_offers.domain.errors import UpstreamRejectionError
from ndc_offers.domain.models import ServiceCategory, UpstreamError
from ndc_offers.services.price_response import PriceResponseNormalizer, rejected_category


@pytest.fixture
def normalizer():
    return PriceResponseNormalizer(config=ParsingConfig())


class TestPricedOffers:
    def test_total_sums_every_priced_offer(self, normalizer, document_parser):
        """The summary total adds up fare and a-la-carte offers."""
        summary = normalizer.normalize(document_parser.parse(PRICE_RESPONSE_XML))
        assert [o.offer_id for o in summary.offers] == [OFFER_ID, ALACARTE_OFFER_ID]
        assert summary.total.value == pytest.approx(210.00)
        assert summary.total.currency == "AUD"
        assert summary.removed_category is None

    def test_priced_offer_items_by_reference(self, normalizer, document_parser):
        """Priced offers are read through OfferItemRefID references."""
        summary = normalizer.normalize(document_parser.parse(PRICE_RESPONSE_XML))
        alacarte = summary.offers[1]
        assert [i.offer_item_id for i in alacarte.offer_items] == [f"{ALACARTE_OFFER_ID}-1"]
        assert alacarte.offer_items[0].total_amount.value == pytest.approx(45.00)
        fare_item = summary.offers[0].offer_items[0]
        assert fare_item.offer_item_id == f"{OFFER_ID}-oi-1"
        assert fare_item.total_amount.value == pytest.approx(120.00)

    def test_warnings_and_expiration(self, normalizer, document_parser):
        """Warnings and the price guarantee expiry are carried."""
        summary = normalizer.normalize(document_parser.parse(PRICE_RESPONSE_XML))
        assert summary.warnings == ("Fare rules apply",)
        assert summary.expiration == "2026-11-01T07:00:00Z"

    def test_plain_offer_elements_are_accepted(self, normalizer, document_parser):
        """Bare Offer elements price like PricedOffer ones."""
        xml = """<RS><Offer OfferID="o-1">
          <TotalPrice><TotalAmount CurCode="NZD">80</TotalAmount></TotalPrice>
        </Offer></RS>"""
        summary = normalizer.normalize(document_parser.parse(xml))
        assert summary.total.value == pytest.approx(80.0)
        assert summary.total.currency == "NZD"
        assert summary.expiration is None

    def test_empty_response_has_no_total(self, normalizer, document_parser):
        """No offers means no total."""
        summary = normalizer.normalize(document_parser.parse("<RS/>"))
        assert summary.offers == ()
        assert summary.total is None


class TestErrors:
    def test_errors_with_offers_become_warnings(self, normalizer, document_parser):
        """Errors next to priced offers are reported as warnings."""
        summary = normalizer.normalize(document_parser.parse(PRICE_PARTIAL_XML))
        assert summary.total.value == pytest.approx(120.00)
        assert summary.warnings == ("OF4053: Error selling SSRs for service bundle",)

    def test_bundle_rejection_is_recoverable(self, normalizer, document_parser):
        """A bundle SSR rejection names the category to drop."""
        with pytest.raises(UpstreamRejectionError) as exc_info:
            normalizer.normalize(document_parser.parse(PRICE_BUNDLE_REJECTION_XML))
        error = exc_info.value
        assert error.is_recoverable
        assert error.rejected_category is ServiceCategory.BUNDLE
        assert [e.code for e in error.errors] == ["OF4053"]
        assert str(error).startswith("OF4053: Error encountered selling")

    def test_other_rejection_is_not_recoverable(self, normalizer, document_parser):
        """Any other rejection cannot be retried."""
        with pytest.raises(UpstreamRejectionError) as exc_info:
            normalizer.normalize(document_parser.parse(PRICE_HARD_REJECTION_XML))
        assert not exc_info.value.is_recoverable
        assert exc_info.value.message == "OF2002: Offer expired"


class TestRejectedCategory:
    @pytest.mark.parametrize(
        "code, message",
        [
            ("OF4053", "Anything"),
            ("OF9999", "Failure SELLING SSRS FOR SERVICE BUNDLE P200"),
            ("UNKNOWN", "Error encountered selling product"),
        ],
    )
    def test_bundle_signals(self, code, message):
        """Known code or message fragments point at bundles."""
        assert rejected_category([UpstreamError(code, message)]) is ServiceCategory.BUNDLE

    def test_unrelated_errors(self):
        """Unrelated errors name no category."""
        errors = [UpstreamError("OF2002", "Offer expired"), UpstreamError("OF1000", "Timeout")]
        assert rejected_category(errors) is None
        assert rejected_category([]) is None
