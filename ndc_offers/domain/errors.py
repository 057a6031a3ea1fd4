"""Typed domain errors for the offer engine.

Parsing and reconciliation problems are absorbed where they occur and
only logged. Request construction, seat assignment and upstream pricing
problems are raised to the caller with one of the types below.

All errors inherit from OfferEngineError and can optionally wrap a root
cause exception for debugging.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from .models import ServiceCategory, UpstreamError


@dataclass
class OfferEngineError(Exception):
    """Base error for the offer engine domain.

    Attributes:
        message: Human-readable error description
        cause: Optional underlying exception that caused this error
    """

    message: str
    cause: Optional[Exception] = field(default=None, repr=False)

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def __post_init__(self) -> None:
        super().__init__(self.message)


@dataclass
class DocumentParseError(OfferEngineError):
    """The payload is not a well-formed XML document.

    Attributes:
        source: Short description of where the payload came from
    """

    source: str = ""


@dataclass
class RequestConstructionError(OfferEngineError):
    """Ancillary selections existed but none survived into the request.

    Attributes:
        selection_count: Number of ancillary selections submitted
        container_ids: Container offer ids that were resolved, if any
    """

    selection_count: int = 0
    container_ids: Tuple[str, ...] = ()


@dataclass
class SeatRestrictionError(OfferEngineError):
    """A seat characteristic forbids the passenger type.

    Attributes:
        seat_id: Row and column, e.g. '12A'
        pax_type: The restricted passenger type code
        characteristics: Characteristic codes of the seat
    """

    seat_id: str = ""
    pax_type: str = ""
    characteristics: Tuple[str, ...] = ()


@dataclass
class SeatUnavailableError(OfferEngineError):
    """The seat is occupied or already held by another passenger.

    Attributes:
        seat_id: Row and column
        segment_id: Segment the seat belongs to
    """

    seat_id: str = ""
    segment_id: str = ""


@dataclass
class SeatPricingUnavailableError(OfferEngineError):
    """No priced item exists for the seat and passenger type.

    Attributes:
        seat_id: Row and column
        pax_type: Passenger type with no offer item id
    """

    seat_id: str = ""
    pax_type: str = ""


class ShortageReason(Enum):
    """Why auto-assignment could not seat everyone on a segment."""

    NO_SEATS = "no_seats"
    RAW_SHORTAGE = "raw_shortage"
    RESTRICTED_SHORTAGE = "restricted_shortage"


@dataclass
class SeatShortageError(OfferEngineError):
    """Not enough suitable seats on a segment.

    Attributes:
        segment_id: Segment that ran short
        reason: Which stage of filtering ran short
        needed: Passengers still needing a seat
        available: Seats left after that stage
    """

    segment_id: str = ""
    reason: ShortageReason = ShortageReason.NO_SEATS
    needed: int = 0
    available: int = 0


@dataclass
class UpstreamRejectionError(OfferEngineError):
    """The pricing system rejected the request.

    Attributes:
        errors: Upstream codes and messages
        rejected_category: Selection category the rejection points at,
            or None when nothing in the selection can be stripped
    """

    errors: Tuple[UpstreamError, ...] = ()
    rejected_category: Optional[ServiceCategory] = None

    @property
    def is_recoverable(self) -> bool:
        """Whether stripping one selection category may succeed."""
        return self.rejected_category is not None


@dataclass
class StaleResultError(OfferEngineError):
    """A pricing result arrived after a newer request was started.

    Attributes:
        ticket: Ticket of the result that arrived
        current: Latest issued ticket
    """

    ticket: int = 0
    current: int = 0


@dataclass
class RenderingError(OfferEngineError):
    """Request serialization failed.

    Attributes:
        renderer_type: Type of renderer that failed
    """

    renderer_type: str = ""


@dataclass
class ConfigurationError(OfferEngineError):
    """Invalid or missing configuration.

    Attributes:
        setting_name: Name of the problematic setting
        expected_type: Expected type or format
    """

    setting_name: str = ""
    expected_type: Optional[str] = None
