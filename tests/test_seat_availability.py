"""Tests for the seat availability normalizer."""

import logging

import pytest

from ndc_offers.config import ParsingConfig
from ndc_offers.domain.models import ShoppingFailure
from ndc_offers.domain.seating import OccupationStatus, PassengerType, SeatAvailability
from ndc_offers.services.seat_availability import (
    SeatAvailabilityNormalizer,
    occupation_status,
)


@pytest.fixture
def normalizer():
    return SeatAvailabilityNormalizer(config=ParsingConfig())


@pytest.fixture
def availability(normalizer, seat_reader):
    result = normalizer.normalize(seat_reader)
    assert isinstance(result, SeatAvailability)
    return result


class TestSeatMap:
    def test_map_per_segment(self, availability):
        """One seat map per segment, found by segment id."""
        assert availability.alacarte_offer_id == "seat-alc-1"
        assert [m.segment_id for m in availability.seat_maps] == ["seg913653037"]
        assert availability.seat_map("seg913653037") is availability.seat_maps[0]
        assert availability.seat_map("other") is None

    def test_cabin_layout(self, availability):
        """Cabin rows, row range and column layout are read."""
        cabin = availability.seat_maps[0].cabins[0]
        assert cabin.cabin_type_code == "M"
        assert (cabin.first_row, cabin.last_row) == (1, 12)
        assert cabin.column_layout == "AB"
        assert [r.row_number for r in cabin.rows] == [1, 12]

    def test_item_ids_joined_per_passenger_type(self, availability):
        """Seat item refs resolve to one item id per passenger type."""
        seat = availability.seat_maps[0].find_seat("1A")
        assert seat.item_id_for(PassengerType.ADT) == "seat-alc-1-2"
        assert seat.item_id_for(PassengerType.CHD) == "seat-alc-1-8"
        assert seat.item_id_for(PassengerType.INF) is None
        assert seat.price.value == pytest.approx(25.0)
        assert seat.price.currency == "AUD"

    def test_characteristics_are_upper_cased(self, availability):
        """Characteristic codes are normalized and drive SSR needs."""
        seat = availability.seat_maps[0].find_seat("1A")
        assert seat.characteristics == ("W", "L")
        assert seat.is_window
        assert seat.required_ssr_codes == ("LEGX",)

    def test_occupation_statuses(self, availability):
        """Status codes map onto free, occupied or blocked."""
        seat_map = availability.seat_maps[0]
        assert seat_map.find_seat("1A").occupation_status is OccupationStatus.FREE
        assert seat_map.find_seat("1B").occupation_status is OccupationStatus.OCCUPIED
        assert seat_map.find_seat("12A").occupation_status is OccupationStatus.OCCUPIED
        assert seat_map.find_seat("12B").occupation_status is OccupationStatus.FREE

    def test_unpriced_seat_has_no_items(self, availability):
        """A seat without priced refs has no price and no items."""
        seat = availability.seat_maps[0].find_seat("12B")
        assert seat.price is None
        assert dict(seat.offer_item_ids_by_pax_type) == {}


class TestFallbacks:
    def test_cabin_and_row_elements(self, normalizer, document_parser):
        """Cabin and Row elements with attributes are accepted."""
        xml = """<RS><SeatMap SegmentRef="seg1">
          <Cabin>
            <Row Number="3"><Seat Column="C"><OccupationStatusCode>A</OccupationStatusCode></Seat></Row>
          </Cabin>
        </SeatMap></RS>"""
        result = normalizer.normalize(document_parser.parse(xml))
        seat_map = result.seat_maps[0]
        assert seat_map.segment_id == "seg1"
        cabin = seat_map.cabins[0]
        assert (cabin.cabin_type_code, cabin.first_row, cabin.last_row) == ("M", 1, 30)
        assert cabin.column_layout == "ABC DEF"
        assert seat_map.find_seat("3C").occupation_status is OccupationStatus.FREE

    def test_non_numeric_row_is_skipped(self, normalizer, document_parser, caplog):
        """Rows without a numeric number are skipped and logged."""
        xml = """<RS><SeatMap><PaxSegmentRefID>seg1</PaxSegmentRefID><CabinCompartment>
          <SeatRow><RowNumber>x1</RowNumber><Seat><ColumnID>A</ColumnID></Seat></SeatRow>
          <SeatRow><RowNumber>2</RowNumber><Seat><ColumnID>A</ColumnID></Seat></SeatRow>
        </CabinCompartment></SeatMap></RS>"""
        with caplog.at_level(logging.WARNING, logger="ndc_offers.services.seat_availability"):
            result = normalizer.normalize(document_parser.parse(xml))
        assert [r.row_number for r in result.seat_maps[0].cabins[0].rows] == [2]
        assert "Skipping seat row" in caplog.text
        assert result.alacarte_offer_id is None

    def test_errors_short_circuit(self, normalizer, document_parser):
        """An Error block yields a failure."""
        xml = "<RS><Error><Code>SA100</Code><DescText>No seat map</DescText></Error></RS>"
        result = normalizer.normalize(document_parser.parse(xml))
        assert isinstance(result, ShoppingFailure)
        assert result.codes == ("SA100",)

    @pytest.mark.parametrize(
        "code, expected",
        [
            ("F", OccupationStatus.FREE),
            (" available ", OccupationStatus.FREE),
            ("X", OccupationStatus.OCCUPIED),
            ("Z", OccupationStatus.BLOCKED),
            ("??", OccupationStatus.OCCUPIED),
            (None, OccupationStatus.OCCUPIED),
        ],
    )
    def test_status_codes(self, code, expected):
        """Unknown or missing codes count as occupied."""
        assert occupation_status(code) is expected
