"""Seat availability normalizer.

Seats do not carry prices themselves. Each seat lists one OfferItemRefID
per passenger type, and the a-la-carte offer of the same document gives
the price and eligible passengers of every such item. The normalizer
joins the two so the solver can read ``seat.item_id_for(pax_type)``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from ..config import ParsingConfig, get_config
from ..domain.models import Money, ShoppingFailure
from ..domain.seating import (
    CabinCompartment,
    OccupationStatus,
    PassengerType,
    Seat,
    SeatAvailability,
    SeatMap,
    SeatRow,
)
from ..ports.document import DocumentReaderPort, Element
from .extraction import Attr, Text, first_of, parse_amount
from .normalizer import extract_errors

SEAT_MAP_SEGMENT = (Text("PaxSegmentRefID"), Attr("SegmentRef"))
ROW_NUMBER = (Text("RowNumber"), Attr("Number"))
COLUMN = (Text("ColumnID"), Attr("Column"))
UNIT_PRICE_CURRENCY = (
    Text("UnitPrice", "CurCode"),
    Attr("CurCode", "UnitPrice", "TotalAmount"),
)

STATUS_CODES = {
    "F": OccupationStatus.FREE,
    "A": OccupationStatus.FREE,
    "FREE": OccupationStatus.FREE,
    "AVAILABLE": OccupationStatus.FREE,
    "O": OccupationStatus.OCCUPIED,
    "X": OccupationStatus.OCCUPIED,
    "OCCUPIED": OccupationStatus.OCCUPIED,
    "Z": OccupationStatus.BLOCKED,
    "BLOCKED": OccupationStatus.BLOCKED,
}


@dataclass(frozen=True, slots=True)
class _SeatOfferItem:
    price: Money
    pax_types: tuple[PassengerType, ...]


def occupation_status(code: Optional[str]) -> OccupationStatus:
    """Map a status code; unknown or missing codes count as occupied."""
    return STATUS_CODES.get((code or "O").strip().upper(), OccupationStatus.OCCUPIED)


@dataclass
class SeatAvailabilityNormalizer:
    """Normalizes a seat availability document.

    Attributes:
        config: Parsing defaults
    """

    config: ParsingConfig = field(default_factory=lambda: get_config().parsing)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def normalize(
        self, reader: DocumentReaderPort
    ) -> Union[SeatAvailability, ShoppingFailure]:
        errors = extract_errors(reader)
        if errors:
            self._logger.warning(
                "Seat availability response carries errors",
                extra={"codes": [e.code for e in errors]},
            )
            return ShoppingFailure(errors=errors)

        offer_items = self.parse_offer_items(reader)
        seat_maps = tuple(
            self.parse_seat_map(reader, map_el, offer_items)
            for map_el in reader.get_elements(None, "SeatMap")
        )

        alacarte = reader.get_element(None, "ALaCarteOffer")
        alacarte_offer_id = (
            first_of(reader, alacarte, (Text("OfferID"), Attr("OfferID")))
            if alacarte is not None
            else None
        )
        if not alacarte_offer_id:
            self._logger.warning("Seat availability response has no a-la-carte offer id")

        self._logger.info(
            "Normalized seat availability",
            extra={
                "seat_maps": len(seat_maps),
                "offer_items": len(offer_items),
                "alacarte_offer_id": alacarte_offer_id,
            },
        )
        return SeatAvailability(seat_maps=seat_maps, alacarte_offer_id=alacarte_offer_id)

    def parse_offer_items(self, reader: DocumentReaderPort) -> Dict[str, _SeatOfferItem]:
        """Item id -> price and eligible passenger types, over every a-la-carte offer."""
        default_currency = self.config.default_currency
        items: Dict[str, _SeatOfferItem] = {}
        for offer_el in reader.get_elements(None, "ALaCarteOffer"):
            for item_el in reader.get_elements(offer_el, "OfferItem"):
                item_id = reader.get_text(item_el, "OfferItemID")
                if not item_id:
                    continue
                amount = first_of(reader, item_el, (Text("UnitPrice", "TotalAmount"),))
                price = Money(
                    parse_amount(amount),
                    first_of(reader, item_el, UNIT_PRICE_CURRENCY, default=default_currency),
                )

                pax_types: List[PassengerType] = []
                eligibility = reader.get_element(item_el, "Eligibility")
                pax_elements = (
                    reader.get_elements(eligibility, "PaxRefID")
                    if eligibility is not None
                    else ()
                )
                for pax_el in pax_elements:
                    pax_ref_id = reader.text_of(pax_el)
                    if not pax_ref_id:
                        continue
                    try:
                        pax_type = PassengerType.from_pax_ref(pax_ref_id)
                    except ValueError:
                        self._logger.debug(
                            "Ignoring unknown passenger type",
                            extra={"offer_item_id": item_id, "pax_ref_id": pax_ref_id},
                        )
                        continue
                    if pax_type not in pax_types:
                        pax_types.append(pax_type)

                items[item_id] = _SeatOfferItem(price, tuple(pax_types))
        return items

    def parse_seat_map(
        self,
        reader: DocumentReaderPort,
        map_el: Element,
        offer_items: Dict[str, _SeatOfferItem],
    ) -> SeatMap:
        cabin_elements = reader.get_elements(map_el, "CabinCompartment")
        if not cabin_elements:
            cabin = reader.get_element(map_el, "Cabin")
            cabin_elements = [cabin] if cabin is not None else []
        return SeatMap(
            segment_id=first_of(reader, map_el, SEAT_MAP_SEGMENT, default=""),
            cabins=tuple(
                self.parse_cabin(reader, cabin_el, offer_items) for cabin_el in cabin_elements
            ),
        )

    def parse_cabin(
        self,
        reader: DocumentReaderPort,
        cabin_el: Element,
        offer_items: Dict[str, _SeatOfferItem],
    ) -> CabinCompartment:
        row_elements = reader.get_elements(cabin_el, "SeatRow") or reader.get_elements(
            cabin_el, "Row"
        )
        rows: List[SeatRow] = []
        for row_el in row_elements:
            raw_number = first_of(reader, row_el, ROW_NUMBER)
            if not raw_number or not raw_number.isdigit():
                self._logger.warning(
                    "Skipping seat row without numeric row number",
                    extra={"row_number": raw_number},
                )
                continue
            row_number = int(raw_number)
            seats = tuple(
                self.parse_seat(reader, seat_el, row_number, offer_items)
                for seat_el in reader.get_elements(row_el, "Seat")
            )
            rows.append(SeatRow(row_number=row_number, seats=seats))

        return CabinCompartment(
            cabin_type_code=reader.get_text(cabin_el, "CabinTypeCode") or "M",
            rows=tuple(rows),
            first_row=_int(reader.get_text(cabin_el, "FirstRowNumber"), 1),
            last_row=_int(reader.get_text(cabin_el, "LastRowNumber"), 30),
            column_layout=reader.get_text(cabin_el, "SeatColumnLayout") or "ABC DEF",
        )

    def parse_seat(
        self,
        reader: DocumentReaderPort,
        seat_el: Element,
        row_number: int,
        offer_items: Dict[str, _SeatOfferItem],
    ) -> Seat:
        column = first_of(reader, seat_el, COLUMN, default="")
        status = occupation_status(reader.get_text(seat_el, "OccupationStatusCode"))
        characteristics = tuple(
            code.upper()
            for code in (
                reader.text_of(el)
                for el in reader.get_elements(seat_el, "SeatCharacteristicCode")
            )
            if code
        )

        # One ref per passenger type; all refs of a seat share the price.
        price: Optional[Money] = None
        by_pax_type: Dict[PassengerType, str] = {}
        for ref_el in reader.get_elements(seat_el, "OfferItemRefID"):
            item_id = reader.text_of(ref_el)
            offer_item = offer_items.get(item_id) if item_id else None
            if offer_item is None:
                continue
            if price is None:
                price = offer_item.price
            for pax_type in offer_item.pax_types:
                by_pax_type[pax_type] = item_id

        if not by_pax_type and status is OccupationStatus.FREE:
            self._logger.debug(
                "Free seat has no priced offer item",
                extra={"seat_id": f"{row_number}{column}"},
            )

        return Seat(
            row=row_number,
            column=column,
            characteristics=characteristics,
            price=price,
            offer_item_ids_by_pax_type=by_pax_type,
            occupation_status=status,
        )


def _int(text: Optional[str], default: int) -> int:
    return int(text) if text and text.strip().isdigit() else default
