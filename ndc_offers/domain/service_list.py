"""Service list models.

A service list answers "what can be added to these flights": every
priced ancillary line published under one or more a-la-carte offers,
including the SSR lines that extra-legroom and upfront seats must be
sold with.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .models import Money, ServiceCategory, UpstreamError
from .seating import SSR_REQUIREMENTS, SsrCatalog
from .selection import (
    AncillarySelection,
    Association,
    AssociationKind,
    BundleSelection,
    ServiceSelection,
)

SEAT_SSR_CODES = frozenset(SSR_REQUIREMENTS.values())


@dataclass(frozen=True, slots=True)
class ServiceOffer:
    """One priced line of a service list.

    Attributes:
        offer_id: A-la-carte offer the line belongs to (its container)
        offer_item_id: Item id to request
        service_definition_ref_id: Definition the line sells
        service_code: Product code (e.g. 'BG20', 'LEGX')
        name: Display name
        category: Classification of the definition
        price: Unit price
        pax_ref_ids: Eligible passengers
        association: Segments, journeys or legs the line applies to
        is_ssr: The line is a special service request
    """

    offer_id: str
    offer_item_id: str
    service_definition_ref_id: str
    service_code: str
    name: str
    category: ServiceCategory
    price: Money
    pax_ref_ids: tuple[str, ...] = ()
    association: Association = field(
        default_factory=lambda: Association(AssociationKind.UNKNOWN)
    )
    is_ssr: bool = False

    @property
    def is_seat_ssr(self) -> bool:
        return self.is_ssr and self.service_code.upper() in SEAT_SSR_CODES

    def to_selection(
        self,
        pax_ref_ids: Optional[tuple[str, ...]] = None,
        quantity: int = 1,
    ) -> AncillarySelection:
        """Selection for this line, for all eligible passengers by default.

        Bundles become a BundleSelection without a passenger map, which
        the request builder expands to one line per non-infant passenger.
        """
        pax = pax_ref_ids if pax_ref_ids is not None else self.pax_ref_ids
        if self.category is ServiceCategory.BUNDLE:
            journeys = (
                self.association.ref_ids
                if self.association.kind is AssociationKind.JOURNEY
                else ()
            )
            return BundleSelection(
                bundle_id=self.offer_item_id,
                service_code=self.service_code,
                pax_ref_ids=pax,
                journey_ref_ids=journeys,
                container_offer_id=self.offer_id,
                name=self.name,
            )
        return ServiceSelection(
            offer_item_id=self.offer_item_id,
            category=self.category,
            pax_ref_ids=pax,
            association=self.association,
            container_offer_id=self.offer_id,
            quantity=quantity,
            service_code=self.service_code,
        )


@dataclass(frozen=True, slots=True)
class ServiceList:
    """Normalized service list response.

    Attributes:
        offers: Service lines, bundles grouped once per code and journeys
        ssr_catalog: Seat SSR lines keyed by (code, segment, passenger)
        alacarte_offer_id: Id of the first a-la-carte offer
        warnings: Errors the response carried alongside its data
    """

    offers: tuple[ServiceOffer, ...] = ()
    ssr_catalog: SsrCatalog = field(default_factory=SsrCatalog)
    alacarte_offer_id: Optional[str] = None
    warnings: tuple[UpstreamError, ...] = ()

    @property
    def is_success(self) -> bool:
        return True

    def of_category(self, category: ServiceCategory) -> tuple[ServiceOffer, ...]:
        return tuple(o for o in self.offers if o.category is category)
