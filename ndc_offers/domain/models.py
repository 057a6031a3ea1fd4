"""Immutable domain models for the offer engine.

All models are frozen dataclasses with slots. They are produced once per
shopping round by the normalizer and never mutated afterwards; the only
objects carried forward into request construction are the selections in
``domain.selection``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Union


def _frozen_map(values: Optional[Mapping] = None) -> Mapping:
    return MappingProxyType(dict(values or {}))


def unique(values: Iterable[str]) -> tuple[str, ...]:
    """Deduplicate while keeping first-seen order."""
    return tuple(dict.fromkeys(v for v in values if v))


class ServiceCategory(Enum):
    """Kind of ancillary product a service definition describes."""

    BUNDLE = "bundle"
    BAGGAGE = "baggage"
    SEAT = "seat"
    MEAL = "meal"
    ANCILLARY = "ancillary"


@dataclass(frozen=True, slots=True)
class Money:
    """An amount in a currency."""

    value: float
    currency: str

    def __str__(self) -> str:
        return f"{self.value:.2f} {self.currency}"


@dataclass(frozen=True, slots=True)
class CarrierInfo:
    """Airline designator and flight number."""

    airline_code: str
    flight_number: str


@dataclass(frozen=True, slots=True)
class FlightSegment:
    """A single flown segment as marketed to the passenger.

    Attributes:
        segment_id: Segment identifier referenced by offer items
        origin: Departure airport code
        destination: Arrival airport code
        departure_date: Scheduled departure date (YYYY-MM-DD)
        departure_time: Scheduled departure time
        arrival_date: Scheduled arrival date
        arrival_time: Scheduled arrival time
        marketing_carrier: Carrier selling the segment
        operating_carrier: Carrier flying it, when published
    """

    segment_id: str
    origin: str
    destination: str
    departure_date: str
    departure_time: str
    arrival_date: str
    arrival_time: str
    marketing_carrier: CarrierInfo
    operating_carrier: Optional[CarrierInfo] = None
    duration: Optional[str] = None
    cabin_code: Optional[str] = None
    class_of_service: Optional[str] = None
    fare_basis_code: Optional[str] = None


@dataclass(frozen=True, slots=True)
class PaxJourney:
    """An ordered sequence of segments from origin to destination."""

    journey_id: str
    segment_ref_ids: tuple[str, ...] = ()
    duration: Optional[str] = None


@dataclass(frozen=True, slots=True)
class ServiceDefinition:
    """A service product published in the shopping response.

    Attributes:
        service_definition_id: Identifier referenced by a-la-carte items
        service_code: Product code (e.g. 'P200')
        name: Display name, falls back to the service code
        category: Classification derived from RFIC/RFISC
        rfic: Reason-for-issuance code
        rfisc: Reason-for-issuance sub-code
        description: Free text description
    """

    service_definition_id: str
    service_code: str
    name: str
    category: ServiceCategory
    rfic: Optional[str] = None
    rfisc: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True, slots=True)
class BundleDefinition(ServiceDefinition):
    """A service definition that packages other services."""

    included_service_ref_ids: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class PriceClass:
    """Fare family metadata referenced from fare components."""

    price_class_id: str
    code: Optional[str] = None
    name: Optional[str] = None
    fare_basis_code: Optional[str] = None
    cabin_type: Optional[str] = None
    rbd: Optional[str] = None


@dataclass(frozen=True, slots=True)
class OfferItem:
    """One priced line of an offer.

    Attributes:
        offer_item_id: Line identifier
        pax_ref_ids: Passengers this line prices (never empty)
        total_amount: Line total
        base_amount: Fare before taxes, when published
        tax_amount: Tax total, when published
        segment_ref_ids: Segments the line covers
        journey_ref_ids: Journeys named by the line's service associations
    """

    offer_item_id: str
    pax_ref_ids: tuple[str, ...]
    total_amount: Money
    base_amount: Optional[Money] = None
    tax_amount: Optional[Money] = None
    fare_basis_code: Optional[str] = None
    cabin_type: Optional[str] = None
    rbd: Optional[str] = None
    segment_ref_ids: tuple[str, ...] = ()
    journey_ref_ids: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ALaCarteOfferItem:
    """A priced ancillary line from the a-la-carte offer.

    Attributes:
        offer_item_id: Line identifier, used per passenger in requests
        service_definition_ref_id: Service (usually bundle) it sells
        price: Unit price
        pax_ref_ids: Eligible passengers, deduplicated
        journey_ref_ids: Eligible journeys
        segment_ref_ids: Eligible segments
    """

    offer_item_id: str
    service_definition_ref_id: str
    price: Money
    pax_ref_ids: tuple[str, ...] = ()
    journey_ref_ids: tuple[str, ...] = ()
    segment_ref_ids: tuple[str, ...] = ()

    @property
    def journey_ref_id(self) -> Optional[str]:
        """First eligible journey, the one used for correlation."""
        return self.journey_ref_ids[0] if self.journey_ref_ids else None


@dataclass(frozen=True, slots=True)
class BundleInclusion:
    """A service contained in a bundle."""

    service_code: str
    name: str
    description: Optional[str] = None


@dataclass(frozen=True, slots=True)
class BundleInclusions:
    """Bundle contents bucketed by service category."""

    baggage: tuple[BundleInclusion, ...] = ()
    seats: tuple[BundleInclusion, ...] = ()
    meals: tuple[BundleInclusion, ...] = ()
    other: tuple[BundleInclusion, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.baggage or self.seats or self.meals or self.other)


@dataclass(frozen=True, slots=True)
class BundleOfferItem:
    """A bundle product reconciled to one flight offer.

    There is at most one per product code per offer. The primary
    ``offer_item_id`` belongs to the first matched passenger; requests
    must use ``pax_offer_item_ids`` to address every passenger.

    Attributes:
        offer_item_id: Item id of the first matched line
        service_definition_ref_id: Bundle definition id
        service_code: Product code (e.g. 'P200')
        bundle_name: Display name
        price: Per-passenger price
        pax_ref_ids: Eligible passengers in first-seen order
        pax_offer_item_ids: Passenger id -> item id
        journey_ref_ids: Journeys the bundle applies to
        inclusions: Contents of the bundle
    """

    offer_item_id: str
    service_definition_ref_id: str
    service_code: str
    bundle_name: str
    price: Money
    pax_ref_ids: tuple[str, ...] = ()
    pax_offer_item_ids: Mapping[str, str] = field(default_factory=_frozen_map)
    journey_ref_ids: tuple[str, ...] = ()
    inclusions: BundleInclusions = field(default_factory=BundleInclusions)
    description: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "pax_offer_item_ids", _frozen_map(self.pax_offer_item_ids)
        )

    @property
    def journey_ref_id(self) -> Optional[str]:
        return self.journey_ref_ids[0] if self.journey_ref_ids else None


@dataclass(frozen=True, slots=True)
class Offer:
    """A priced flight offer.

    ``total_price`` is the published offer total; it is not required to
    equal the sum of the item totals.
    """

    offer_id: str
    owner_code: str
    total_price: Money
    offer_items: tuple[OfferItem, ...] = ()
    expiration: Optional[str] = None
    bundle_offers: tuple[BundleOfferItem, ...] = ()

    @property
    def segment_ref_ids(self) -> tuple[str, ...]:
        return unique(ref for item in self.offer_items for ref in item.segment_ref_ids)

    @property
    def journey_ref_ids(self) -> tuple[str, ...]:
        return unique(ref for item in self.offer_items for ref in item.journey_ref_ids)

    @property
    def pax_ref_ids(self) -> tuple[str, ...]:
        return unique(ref for item in self.offer_items for ref in item.pax_ref_ids)


@dataclass(frozen=True, slots=True)
class DefinitionCatalog:
    """Read-only lookup over the definitions of one shopping response.

    Built once by the normalizer and passed by reference into
    reconciliation and request construction.

    Attributes:
        bundles: Bundle definition id -> definition
        services: Non-bundle service definition id -> definition
        price_classes: Price class id -> price class
    """

    bundles: Mapping[str, BundleDefinition] = field(default_factory=_frozen_map)
    services: Mapping[str, ServiceDefinition] = field(default_factory=_frozen_map)
    price_classes: Mapping[str, PriceClass] = field(default_factory=_frozen_map)

    def __post_init__(self) -> None:
        for name in ("bundles", "services", "price_classes"):
            object.__setattr__(self, name, _frozen_map(getattr(self, name)))

    @classmethod
    def from_definitions(
        cls,
        definitions: Iterable[ServiceDefinition],
        price_classes: Iterable[PriceClass] = (),
    ) -> DefinitionCatalog:
        bundles: dict[str, BundleDefinition] = {}
        services: dict[str, ServiceDefinition] = {}
        for definition in definitions:
            if isinstance(definition, BundleDefinition):
                bundles[definition.service_definition_id] = definition
            else:
                services[definition.service_definition_id] = definition
        return cls(
            bundles=bundles,
            services=services,
            price_classes={pc.price_class_id: pc for pc in price_classes},
        )

    def bundle(self, definition_id: str) -> Optional[BundleDefinition]:
        return self.bundles.get(definition_id)

    def service(self, definition_id: str) -> Optional[ServiceDefinition]:
        return self.services.get(definition_id)

    def price_class(self, price_class_id: str) -> Optional[PriceClass]:
        return self.price_classes.get(price_class_id)


@dataclass(frozen=True, slots=True)
class UpstreamError:
    """An error reported inside an upstream document."""

    code: str
    message: str


@dataclass(frozen=True, slots=True)
class ShoppingResponse:
    """Normalized shopping response.

    Attributes:
        offers: Flight offers with their reconciled bundles
        segments: Flight segments
        journeys: Passenger journeys
        bundle_definitions: Bundle service definitions
        service_definitions: Non-bundle service definitions
        price_classes: Fare family metadata
        alacarte_items: Bundle lines of the a-la-carte offer
        catalog: Lookup over all definitions
        alacarte_offer_id: Id of the a-la-carte offer (ancillary container)
        shopping_response_id: Id to echo back in the pricing request
    """

    offers: tuple[Offer, ...] = ()
    segments: tuple[FlightSegment, ...] = ()
    journeys: tuple[PaxJourney, ...] = ()
    bundle_definitions: tuple[BundleDefinition, ...] = ()
    service_definitions: tuple[ServiceDefinition, ...] = ()
    price_classes: tuple[PriceClass, ...] = ()
    alacarte_items: tuple[ALaCarteOfferItem, ...] = ()
    catalog: DefinitionCatalog = field(default_factory=DefinitionCatalog)
    alacarte_offer_id: Optional[str] = None
    shopping_response_id: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return True

    def segment(self, segment_id: str) -> Optional[FlightSegment]:
        return next((s for s in self.segments if s.segment_id == segment_id), None)


@dataclass(frozen=True, slots=True)
class ShoppingFailure:
    """The upstream document carried an error block; no offers were read."""

    errors: tuple[UpstreamError, ...]

    @property
    def is_success(self) -> bool:
        return False

    @property
    def codes(self) -> tuple[str, ...]:
        return tuple(error.code for error in self.errors)


ShoppingResult = Union[ShoppingResponse, ShoppingFailure]


@dataclass(frozen=True, slots=True)
class PricedOfferSummary:
    """Normalized answer to a price request.

    Attributes:
        offers: Re-priced offers
        total: Sum of offer totals, in the first offer's currency
        warnings: Upstream warnings, including errors that came with data
        expiration: Price guarantee expiry, when published
        removed_category: Ancillary category dropped from the selection
            before the request priced, if any
    """

    offers: tuple[Offer, ...] = ()
    total: Optional[Money] = None
    warnings: tuple[str, ...] = ()
    expiration: Optional[str] = None
    removed_category: Optional[ServiceCategory] = None

    @property
    def is_success(self) -> bool:
        return True
