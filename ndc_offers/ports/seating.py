"""Seat solver port - Abstraction for seat selection and assignment."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Protocol, Sequence

if TYPE_CHECKING:
    from ..domain.seating import Passenger, Seat, SeatMap, SeatSelection, SsrCatalog


class SeatSolverPort(Protocol):
    """Port for seat assignment.

    Implementation: adapters/seating/tiered_solver.py
    """

    def select_seat(
        self,
        seat: Seat,
        passenger: Passenger,
        segment_id: str,
        existing: Sequence[SeatSelection] = (),
    ) -> tuple[SeatSelection, ...]:
        """Manually assign ``seat`` to ``passenger`` on ``segment_id``.

        Args:
            seat: The seat the passenger picked.
            passenger: The passenger being seated.
            segment_id: Segment the seat map belongs to.
            existing: Current selections across all segments.

        Returns:
            The updated selections, with any previous seat of this
            passenger on this segment replaced.

        Raises:
            SeatRestrictionError: The seat forbids the passenger type.
            SeatUnavailableError: The seat is occupied or already taken.
            SeatPricingUnavailableError: No item id for the passenger type.
        """
        ...

    def auto_assign(
        self,
        passengers: Sequence[Passenger],
        seat_maps: Sequence[SeatMap],
        existing: Sequence[SeatSelection] = (),
        segment_ids: Optional[Sequence[str]] = None,
    ) -> tuple[SeatSelection, ...]:
        """Seat every passenger that has no seat yet, segment by segment.

        ``segment_ids`` gives itinerary order; rows are staggered by each
        segment's position in it so passengers do not get the same row
        number on every leg.

        Returns:
            Existing selections followed by the new ones.

        Raises:
            SeatShortageError: A segment lacks enough suitable seats.
        """
        ...

    def with_catalog(self, ssr_catalog: SsrCatalog) -> SeatSolverPort:
        """A solver of the same configuration resolving SSRs from ``ssr_catalog``.

        The catalog comes from a service list response
        (services/service_list.py).
        """
        ...
