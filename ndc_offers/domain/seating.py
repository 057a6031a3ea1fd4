"""Seat maps, passengers and seat assignment results.

The static tables at the bottom of this module encode the carrier's
seat characteristic rules: which passenger types a characteristic
forbids, which characteristics require a special service request (SSR),
and how characteristics rank when seats are assigned automatically.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from types import MappingProxyType
from typing import Iterator, Mapping, Optional

from .models import Money

_TRAILING_DIGITS = re.compile(r"\d+$")


class PassengerType(Enum):
    """Passenger type code."""

    ADT = "ADT"
    CHD = "CHD"
    INF = "INF"

    @classmethod
    def from_pax_ref(cls, pax_ref_id: str) -> PassengerType:
        """Derive the type from a reference such as 'ADT1' or 'CHD0'.

        Raises:
            ValueError: If the prefix is not a known passenger type.
        """
        return cls(_TRAILING_DIGITS.sub("", pax_ref_id).upper())


@dataclass(frozen=True, slots=True)
class Passenger:
    """A traveller in the booking."""

    pax_id: str
    pax_type: PassengerType
    name: Optional[str] = None

    @classmethod
    def from_pax_ref(cls, pax_id: str, name: Optional[str] = None) -> Passenger:
        return cls(pax_id=pax_id, pax_type=PassengerType.from_pax_ref(pax_id), name=name)


class OccupationStatus(Enum):
    """Seat occupation status as published in the seat map."""

    FREE = "F"
    OCCUPIED = "O"
    BLOCKED = "Z"


class SeatTier(IntEnum):
    """Preference rank used by auto-assignment, highest first."""

    OTHER = 0
    STANDARD = 1
    UPFRONT = 2
    EXTRA_LEGROOM = 3


@dataclass(frozen=True, slots=True)
class Seat:
    """One seat on one segment.

    Attributes:
        row: Row number
        column: Column letter
        characteristics: Upper-cased characteristic codes
        price: Seat price, when the seat is sold
        offer_item_ids_by_pax_type: Item id to request per passenger type
        occupation_status: Occupation status
    """

    row: int
    column: str
    characteristics: tuple[str, ...] = ()
    price: Optional[Money] = None
    offer_item_ids_by_pax_type: Mapping[PassengerType, str] = field(
        default_factory=lambda: MappingProxyType({})
    )
    occupation_status: OccupationStatus = OccupationStatus.FREE

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "offer_item_ids_by_pax_type",
            MappingProxyType(dict(self.offer_item_ids_by_pax_type)),
        )

    @property
    def seat_id(self) -> str:
        return f"{self.row}{self.column}"

    @property
    def restricted_types(self) -> frozenset[PassengerType]:
        restricted: set[PassengerType] = set()
        for code in self.characteristics:
            restricted |= PASSENGER_RESTRICTIONS.get(code, frozenset())
        return frozenset(restricted)

    def is_restricted_for(self, pax_type: PassengerType) -> bool:
        return pax_type in self.restricted_types

    @property
    def is_exit_row(self) -> bool:
        return any(code in EXIT_ROW_CODES for code in self.characteristics)

    @property
    def is_window(self) -> bool:
        return "W" in self.characteristics

    @property
    def is_aisle(self) -> bool:
        return "A" in self.characteristics

    @property
    def tier(self) -> SeatTier:
        codes = set(self.characteristics)
        if "L" in codes:
            return SeatTier.EXTRA_LEGROOM
        if "F" in codes:
            return SeatTier.UPFRONT
        if codes & {"AV", "JLSF"}:
            return SeatTier.STANDARD
        return SeatTier.OTHER

    @property
    def required_ssr_codes(self) -> tuple[str, ...]:
        return tuple(
            dict.fromkeys(
                SSR_REQUIREMENTS[code]
                for code in self.characteristics
                if code in SSR_REQUIREMENTS
            )
        )

    def item_id_for(self, pax_type: PassengerType) -> Optional[str]:
        return self.offer_item_ids_by_pax_type.get(pax_type)


@dataclass(frozen=True, slots=True)
class SeatRow:
    row_number: int
    seats: tuple[Seat, ...] = ()


@dataclass(frozen=True, slots=True)
class CabinCompartment:
    """A cabin section of the seat map."""

    cabin_type_code: str = "M"
    rows: tuple[SeatRow, ...] = ()
    first_row: int = 1
    last_row: int = 30
    column_layout: str = "ABC DEF"


@dataclass(frozen=True, slots=True)
class SeatMap:
    """All cabins of one segment."""

    segment_id: str
    cabins: tuple[CabinCompartment, ...] = ()

    def seats(self) -> Iterator[Seat]:
        for cabin in self.cabins:
            for row in cabin.rows:
                yield from row.seats

    def find_seat(self, seat_id: str) -> Optional[Seat]:
        return next((s for s in self.seats() if s.seat_id == seat_id), None)


@dataclass(frozen=True, slots=True)
class SeatAvailability:
    """Normalized seat availability response."""

    seat_maps: tuple[SeatMap, ...] = ()
    alacarte_offer_id: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return True

    def seat_map(self, segment_id: str) -> Optional[SeatMap]:
        return next((m for m in self.seat_maps if m.segment_id == segment_id), None)


@dataclass(frozen=True, slots=True)
class SsrItem:
    """A priced SSR line required by a chosen seat."""

    code: str
    segment_id: str
    pax_id: str
    offer_id: str
    offer_item_id: str


@dataclass(frozen=True, slots=True)
class SsrCatalog:
    """SSR offer items keyed by (code, segment, passenger).

    Segment ids are stored and looked up without the marketing prefix,
    so 'Mkt-seg1' and 'seg1' resolve to the same entry.
    """

    entries: Mapping[tuple[str, str, str], tuple[str, str]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    strip_prefix: str = "Mkt-"

    def __post_init__(self) -> None:
        normalized = {
            (code, self._segment_key(segment), pax): ref
            for (code, segment, pax), ref in dict(self.entries).items()
        }
        object.__setattr__(self, "entries", MappingProxyType(normalized))

    def _segment_key(self, segment_id: str) -> str:
        if self.strip_prefix and segment_id.startswith(self.strip_prefix):
            return segment_id[len(self.strip_prefix):]
        return segment_id

    @classmethod
    def from_nested(
        cls,
        mappings: Mapping[str, Mapping[str, Mapping[str, tuple[str, str]]]],
        strip_prefix: str = "Mkt-",
    ) -> SsrCatalog:
        """Build from ``{code: {segment: {pax: (offer_id, offer_item_id)}}}``."""
        entries = {
            (code, segment, pax): ref
            for code, by_segment in mappings.items()
            for segment, by_pax in by_segment.items()
            for pax, ref in by_pax.items()
        }
        return cls(entries=entries, strip_prefix=strip_prefix)

    def lookup(self, code: str, segment_id: str, pax_id: str) -> Optional[SsrItem]:
        ref = self.entries.get((code, self._segment_key(segment_id), pax_id))
        if ref is None:
            return None
        offer_id, offer_item_id = ref
        return SsrItem(
            code=code,
            segment_id=segment_id,
            pax_id=pax_id,
            offer_id=offer_id,
            offer_item_id=offer_item_id,
        )


@dataclass(frozen=True, slots=True)
class SeatSelection:
    """A passenger bound to a seat on a segment.

    Attributes:
        pax_id: Passenger id
        segment_id: Segment id
        seat: The chosen seat
        offer_item_id: Item id for this passenger's type
        ssr_items: SSR lines resolved for the seat's characteristics
        unresolved_ssr_codes: SSR codes the seat needs but that could not
            be resolved to an offer item
    """

    pax_id: str
    segment_id: str
    seat: Seat
    offer_item_id: str
    ssr_items: tuple[SsrItem, ...] = ()
    unresolved_ssr_codes: tuple[str, ...] = ()

    @property
    def seat_id(self) -> str:
        return self.seat.seat_id


# Characteristic code -> passenger types that may not occupy the seat.
PASSENGER_RESTRICTIONS: Mapping[str, frozenset[PassengerType]] = MappingProxyType(
    {
        "1C": frozenset({PassengerType.CHD}),
        "NCHILD": frozenset({PassengerType.CHD}),
        "IE": frozenset({PassengerType.CHD}),
        "1N": frozenset({PassengerType.INF}),
        "1A": frozenset({PassengerType.INF}),
        "NINFANT": frozenset({PassengerType.INF}),
        "E": frozenset({PassengerType.CHD, PassengerType.INF}),
        "EK": frozenset({PassengerType.CHD, PassengerType.INF}),
        "EXITROW": frozenset({PassengerType.CHD, PassengerType.INF}),
    }
)

# Characteristic code -> SSR that must be sold with the seat.
SSR_REQUIREMENTS: Mapping[str, str] = MappingProxyType(
    {
        "L": "LEGX",
        "EXTRA_LEGROOM": "LEGX",
        "F": "UPFX",
        "UPFRONT": "UPFX",
        "AV": "JLSF",
        "JLSF": "JLSF",
    }
)

EXIT_ROW_CODES = frozenset({"E", "EK", "EXITROW"})
