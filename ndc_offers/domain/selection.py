"""User selections and the price request they are serialized into.

A selection is the transient state carried from the shopping step into
request construction: chosen fares plus a tagged union of ancillary
choices (bundles, services, seats). The request model is the grouped,
deduplicated form the pricing system accepts.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Union

from .models import BundleOfferItem, ServiceCategory
from .seating import SeatSelection, SsrItem


class AssociationKind(Enum):
    """How an ancillary line is attached to the itinerary."""

    SEGMENT = "segment"
    JOURNEY = "journey"
    LEG = "leg"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class Association:
    kind: AssociationKind
    ref_ids: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class BundleSelection:
    """A bundle chosen for the booking.

    Attributes:
        bundle_id: Primary item id of the bundle
        service_code: Product code
        pax_ref_ids: Passengers the bundle was offered to
        journey_ref_ids: Journeys the bundle applies to
        pax_offer_item_ids: Passenger -> item id. None when the bundle
            was swapped in from a service list that carries no map.
        container_offer_id: A-la-carte offer the items belong to
    """

    bundle_id: str
    service_code: str
    pax_ref_ids: tuple[str, ...] = ()
    journey_ref_ids: tuple[str, ...] = ()
    pax_offer_item_ids: Optional[Mapping[str, str]] = None
    container_offer_id: Optional[str] = None
    name: Optional[str] = None

    def __post_init__(self) -> None:
        if self.pax_offer_item_ids is not None:
            object.__setattr__(
                self,
                "pax_offer_item_ids",
                MappingProxyType(dict(self.pax_offer_item_ids)),
            )

    @property
    def category(self) -> ServiceCategory:
        return ServiceCategory.BUNDLE

    @property
    def association(self) -> Association:
        return Association(AssociationKind.JOURNEY, self.journey_ref_ids)

    @classmethod
    def from_bundle(
        cls,
        bundle: BundleOfferItem,
        container_offer_id: Optional[str] = None,
    ) -> BundleSelection:
        return cls(
            bundle_id=bundle.offer_item_id,
            service_code=bundle.service_code,
            pax_ref_ids=bundle.pax_ref_ids,
            journey_ref_ids=bundle.journey_ref_ids,
            pax_offer_item_ids=bundle.pax_offer_item_ids,
            container_offer_id=container_offer_id,
            name=bundle.bundle_name,
        )


@dataclass(frozen=True, slots=True)
class ServiceSelection:
    """A non-seat ancillary service (baggage, meal, SSR, ...)."""

    offer_item_id: str
    category: ServiceCategory
    pax_ref_ids: tuple[str, ...]
    association: Association
    container_offer_id: Optional[str] = None
    quantity: int = 1
    service_code: Optional[str] = None

    @classmethod
    def from_ssr(cls, ssr: SsrItem) -> ServiceSelection:
        return cls(
            offer_item_id=ssr.offer_item_id,
            category=ServiceCategory.ANCILLARY,
            pax_ref_ids=(ssr.pax_id,),
            association=Association(AssociationKind.SEGMENT, (ssr.segment_id,)),
            container_offer_id=ssr.offer_id,
            service_code=ssr.code,
        )


@dataclass(frozen=True, slots=True)
class SeatChoice:
    """A paid seat for one passenger on one segment."""

    offer_item_id: str
    pax_id: str
    segment_id: str
    row: str
    column: str
    container_offer_id: Optional[str] = None

    @property
    def category(self) -> ServiceCategory:
        return ServiceCategory.SEAT

    @property
    def pax_ref_ids(self) -> tuple[str, ...]:
        return (self.pax_id,)

    @property
    def association(self) -> Association:
        return Association(AssociationKind.SEGMENT, (self.segment_id,))

    @classmethod
    def from_selection(
        cls,
        selection: SeatSelection,
        container_offer_id: Optional[str] = None,
    ) -> SeatChoice:
        return cls(
            offer_item_id=selection.offer_item_id,
            pax_id=selection.pax_id,
            segment_id=selection.segment_id,
            row=str(selection.seat.row),
            column=selection.seat.column,
            container_offer_id=container_offer_id,
        )


AncillarySelection = Union[BundleSelection, ServiceSelection, SeatChoice]


def seat_selections_to_ancillaries(
    selections: tuple[SeatSelection, ...] | list[SeatSelection],
    container_offer_id: Optional[str] = None,
) -> tuple[AncillarySelection, ...]:
    """Turn solver output into seat choices plus their SSR services."""
    result: list[AncillarySelection] = []
    for selection in selections:
        result.append(SeatChoice.from_selection(selection, container_offer_id))
        result.extend(ServiceSelection.from_ssr(ssr) for ssr in selection.ssr_items)
    return tuple(result)


@dataclass(frozen=True, slots=True)
class FareItemRef:
    offer_item_id: str
    pax_ref_ids: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class FareSelection:
    """Fare items chosen from one flight offer."""

    offer_id: str
    owner_code: str
    items: tuple[FareItemRef, ...] = ()


@dataclass(frozen=True, slots=True)
class PricingSelection:
    """Everything the user has selected for one pricing call.

    Attributes:
        fares: Chosen flight fares
        ancillaries: Chosen bundles, services and seats
        active_container_id: A-la-carte offer id of the current shopping
            round, used when a selection carries none of its own
    """

    fares: tuple[FareSelection, ...] = ()
    ancillaries: tuple[AncillarySelection, ...] = ()
    active_container_id: Optional[str] = None

    def without_category(self, category: ServiceCategory) -> PricingSelection:
        """Snapshot with every ancillary of ``category`` removed."""
        return replace(
            self,
            ancillaries=tuple(a for a in self.ancillaries if a.category is not category),
        )

    def has_category(self, category: ServiceCategory) -> bool:
        return any(a.category is category for a in self.ancillaries)


class BlockKind(Enum):
    FARE = "fare"
    ANCILLARY = "ancillary"


@dataclass(frozen=True, slots=True)
class RequestOfferItem:
    """One line of a selected offer block.

    Fare lines carry no association. A-la-carte lines always do.
    """

    offer_item_id: str
    pax_ref_ids: tuple[str, ...]
    association: Optional[Association] = None
    seat_row: Optional[str] = None
    seat_column: Optional[str] = None
    quantity: int = 1

    @property
    def is_alacarte(self) -> bool:
        return self.association is not None

    @property
    def is_seat(self) -> bool:
        return self.seat_row is not None and self.seat_column is not None

    @property
    def key(self) -> tuple:
        refs = self.association.ref_ids if self.association else ()
        return (self.offer_item_id, self.pax_ref_ids, refs)


@dataclass(frozen=True, slots=True)
class SelectedOfferBlock:
    """All lines requested from one offer (flight or container)."""

    offer_id: str
    owner_code: str
    kind: BlockKind
    items: tuple[RequestOfferItem, ...] = ()


@dataclass(frozen=True, slots=True)
class PriceRequest:
    """The grouped pricing request.

    Blocks are disjoint by offer id and no ancillary block shares an id
    with a fare block.
    """

    selected_offers: tuple[SelectedOfferBlock, ...] = ()
    shopping_response_id: Optional[str] = None

    @property
    def fare_blocks(self) -> tuple[SelectedOfferBlock, ...]:
        return tuple(b for b in self.selected_offers if b.kind is BlockKind.FARE)

    @property
    def ancillary_blocks(self) -> tuple[SelectedOfferBlock, ...]:
        return tuple(b for b in self.selected_offers if b.kind is BlockKind.ANCILLARY)

    def block(self, offer_id: str) -> Optional[SelectedOfferBlock]:
        return next((b for b in self.selected_offers if b.offer_id == offer_id), None)

