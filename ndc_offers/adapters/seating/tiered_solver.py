"""Tiered seat solver adapter.

Manual selection validates one seat against the passenger type and the
seats already held. Auto-assignment ranks free seats per segment by
product tier (extra legroom, upfront, standard), row proximity, position
and price, then gives each passenger the best seat their type may use.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence

from ...config import SeatingConfig, get_config
from ...domain.errors import (
    SeatPricingUnavailableError,
    SeatRestrictionError,
    SeatShortageError,
    SeatUnavailableError,
    ShortageReason,
)
from ...domain.seating import (
    Passenger,
    PassengerType,
    Seat,
    SeatMap,
    SeatSelection,
    SsrCatalog,
    SsrItem,
)


@dataclass
class TieredSeatSolver:
    """Seat solver ranking seats by product tier.

    This adapter implements SeatSolverPort.

    Attributes:
        config: Row offset and unavailable statuses
        ssr_catalog: SSR items for seats that require one
    """

    config: SeatingConfig = field(default_factory=lambda: get_config().seating)
    ssr_catalog: SsrCatalog = field(default_factory=SsrCatalog)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def with_catalog(self, ssr_catalog: SsrCatalog) -> TieredSeatSolver:
        return replace(self, ssr_catalog=ssr_catalog)

    def is_free(self, seat: Seat) -> bool:
        return seat.occupation_status.value not in self.config.unavailable_statuses

    def select_seat(
        self,
        seat: Seat,
        passenger: Passenger,
        segment_id: str,
        existing: Sequence[SeatSelection] = (),
    ) -> tuple[SeatSelection, ...]:
        """Manually assign ``seat`` to ``passenger``.

        Args:
            seat: The seat the passenger picked.
            passenger: The passenger being seated.
            segment_id: Segment the seat belongs to.
            existing: Current selections across all segments.

        Returns:
            ``existing`` without this passenger's previous seat on the
            segment, followed by the new selection.

        Raises:
            SeatUnavailableError: The seat is occupied, blocked or held
                by another passenger.
            SeatRestrictionError: A characteristic forbids the type.
            SeatPricingUnavailableError: No item id for the type.
        """
        pax_type = passenger.pax_type
        if not self.is_free(seat):
            raise SeatUnavailableError(
                f"Seat {seat.seat_id} is not available",
                seat_id=seat.seat_id,
                segment_id=segment_id,
            )
        if seat.is_restricted_for(pax_type):
            raise SeatRestrictionError(
                f"Seat {seat.seat_id} is restricted for {pax_type.value} passengers",
                seat_id=seat.seat_id,
                pax_type=pax_type.value,
                characteristics=seat.characteristics,
            )
        holder = next(
            (
                s
                for s in existing
                if s.segment_id == segment_id
                and s.seat_id == seat.seat_id
                and s.pax_id != passenger.pax_id
            ),
            None,
        )
        if holder is not None:
            raise SeatUnavailableError(
                f"Seat {seat.seat_id} is already selected by {holder.pax_id}",
                seat_id=seat.seat_id,
                segment_id=segment_id,
            )
        offer_item_id = seat.item_id_for(pax_type)
        if not offer_item_id:
            raise SeatPricingUnavailableError(
                f"Seat {seat.seat_id} is not available for {pax_type.value} passengers",
                seat_id=seat.seat_id,
                pax_type=pax_type.value,
            )

        selection = self._selection(passenger, segment_id, seat, offer_item_id)
        kept = tuple(
            s
            for s in existing
            if not (s.pax_id == passenger.pax_id and s.segment_id == segment_id)
        )
        self._logger.info(
            "Seat selected",
            extra={
                "pax_id": passenger.pax_id,
                "segment_id": segment_id,
                "seat_id": seat.seat_id,
                "replaced": len(existing) - len(kept),
            },
        )
        return kept + (selection,)

    def auto_assign(
        self,
        passengers: Sequence[Passenger],
        seat_maps: Sequence[SeatMap],
        existing: Sequence[SeatSelection] = (),
        segment_ids: Optional[Sequence[str]] = None,
    ) -> tuple[SeatSelection, ...]:
        """Seat every passenger without a seat, one segment at a time.

        Args:
            passengers: Passengers to seat.
            seat_maps: Seat maps, one per segment.
            existing: Selections to keep; their passengers are skipped
                and their seats are not offered again.
            segment_ids: Itinerary order of segments. Defaults to the
                order of ``seat_maps``. Segments without a map are
                skipped but still count for row staggering.

        Returns:
            ``existing`` followed by the new selections.

        Raises:
            SeatShortageError: A segment cannot seat every passenger.
        """
        maps: Dict[str, SeatMap] = {m.segment_id: m for m in seat_maps}
        order = list(segment_ids) if segment_ids is not None else list(maps)
        selections: List[SeatSelection] = list(existing)

        for index, segment_id in enumerate(order):
            seat_map = maps.get(segment_id)
            if seat_map is None:
                self._logger.warning(
                    "No seat map for segment, skipping",
                    extra={"segment_id": segment_id},
                )
                continue
            selections.extend(
                self._assign_segment(passengers, seat_map, index, selections)
            )
        return tuple(selections)

    def _assign_segment(
        self,
        passengers: Sequence[Passenger],
        seat_map: SeatMap,
        index: int,
        selections: Sequence[SeatSelection],
    ) -> List[SeatSelection]:
        segment_id = seat_map.segment_id
        on_segment = [s for s in selections if s.segment_id == segment_id]
        seated = {s.pax_id for s in on_segment}
        needing = [p for p in passengers if p.pax_id not in seated]
        if not needing:
            return []

        held = {s.seat_id for s in on_segment}
        available = [
            seat
            for seat in seat_map.seats()
            if self.is_free(seat) and seat.seat_id not in held
        ]
        if not available:
            raise SeatShortageError(
                f"No available seats on segment {segment_id}",
                segment_id=segment_id,
                reason=ShortageReason.NO_SEATS,
                needed=len(needing),
                available=0,
            )
        if len(available) < len(needing):
            raise SeatShortageError(
                f"Not enough seats on segment {segment_id}",
                segment_id=segment_id,
                reason=ShortageReason.RAW_SHORTAGE,
                needed=len(needing),
                available=len(available),
            )

        types = {p.pax_type for p in needing}
        suitable = [
            seat
            for seat in available
            if not (PassengerType.INF in types and seat.is_exit_row)
            and not (PassengerType.CHD in types and seat.is_restricted_for(PassengerType.CHD))
        ]
        if len(suitable) < len(needing):
            raise SeatShortageError(
                f"Not enough suitable seats on segment {segment_id}",
                segment_id=segment_id,
                reason=ShortageReason.RESTRICTED_SHORTAGE,
                needed=len(needing),
                available=len(suitable),
            )

        row_offset = index * self.config.row_offset_per_segment
        suitable.sort(key=lambda seat: self.rank(seat, row_offset))

        assigned: List[SeatSelection] = []
        used: set[str] = set()
        for passenger in needing:
            seat = next(
                (
                    s
                    for s in suitable
                    if s.seat_id not in used
                    and not s.is_restricted_for(passenger.pax_type)
                    and s.item_id_for(passenger.pax_type)
                ),
                None,
            )
            if seat is None:
                raise SeatShortageError(
                    f"No suitable seat for {passenger.pax_id} on segment {segment_id}",
                    segment_id=segment_id,
                    reason=ShortageReason.RESTRICTED_SHORTAGE,
                    needed=len(needing) - len(assigned),
                    available=len(suitable) - len(used),
                )
            used.add(seat.seat_id)
            assigned.append(
                self._selection(
                    passenger, segment_id, seat, seat.item_id_for(passenger.pax_type) or ""
                )
            )

        self._logger.info(
            "Seats auto-assigned",
            extra={
                "segment_id": segment_id,
                "seats": [s.seat_id for s in assigned],
                "row_offset": row_offset,
            },
        )
        return assigned

    @staticmethod
    def rank(seat: Seat, row_offset: int) -> tuple:
        """Sort key: tier desc, row distance asc, window/aisle desc, price asc."""
        position = (2 if seat.is_window else 0) + (2 if seat.is_aisle else 0)
        price = seat.price.value if seat.price else 0.0
        return (-int(seat.tier), abs(seat.row - row_offset), -position, price)

    def _selection(
        self,
        passenger: Passenger,
        segment_id: str,
        seat: Seat,
        offer_item_id: str,
    ) -> SeatSelection:
        resolved: List[SsrItem] = []
        missing: List[str] = []
        for code in seat.required_ssr_codes:
            item = self.ssr_catalog.lookup(code, segment_id, passenger.pax_id)
            if item is None:
                missing.append(code)
            else:
                resolved.append(item)
        if missing:
            self._logger.warning(
                "Seat requires SSRs with no offer item",
                extra={
                    "seat_id": seat.seat_id,
                    "segment_id": segment_id,
                    "pax_id": passenger.pax_id,
                    "ssr_codes": missing,
                },
            )
        return SeatSelection(
            pax_id=passenger.pax_id,
            segment_id=segment_id,
            seat=seat,
            offer_item_id=offer_item_id,
            ssr_items=tuple(resolved),
            unresolved_ssr_codes=tuple(missing),
        )
