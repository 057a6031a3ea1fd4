"""Service list normalizer.

A service list publishes ancillary lines under one or more a-la-carte
offers. Each line points at a service definition and carries its own
passenger and flight eligibility. Besides the lines themselves the
normalizer builds the SSR catalog the seat solver needs: the upfront
and extra-legroom seat products are only sellable together with their
SSR line, and those lines only exist here.

Unlike shopping, a service list that carries errors next to usable data
is a success with warnings. It fails only when nothing could be read.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence, Union

from ..config import ParsingConfig, get_config
from ..domain.models import (
    DefinitionCatalog,
    Money,
    ServiceCategory,
    ServiceDefinition,
    ShoppingFailure,
    unique,
)
from ..domain.seating import SsrCatalog
from ..domain.selection import Association, AssociationKind
from ..domain.service_list import SEAT_SSR_CODES, ServiceList, ServiceOffer
from ..ports.document import DocumentReaderPort, Element
from .extraction import find_first, find_path, first_of, parse_amount, texts
from .normalizer import (
    ALACARTE_ID,
    ALACARTE_ITEM_ID,
    ELIGIBLE_FLIGHTS,
    SERVICE_REF,
    UNIT_PRICE_CURRENCY,
    ShoppingResponseNormalizer,
    extract_errors,
)

# Later kinds win when an item names more than one.
ASSOCIATION_REFS = (
    (AssociationKind.JOURNEY, "PaxJourneyRefID"),
    (AssociationKind.SEGMENT, "PaxSegmentRefID"),
    (AssociationKind.LEG, "DatedOperatingLegRefID"),
)


@dataclass
class ServiceListNormalizer:
    """Normalizes a service list document.

    Attributes:
        config: Parsing defaults and classification codes
        shopping: Reads the service definitions and journeys, shared
            with shopping normalization
    """

    config: ParsingConfig = field(default_factory=lambda: get_config().parsing)
    shopping: Optional[ShoppingResponseNormalizer] = None
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)
        if self.shopping is None:
            self.shopping = ShoppingResponseNormalizer(config=self.config)

    def normalize(self, reader: DocumentReaderPort) -> Union[ServiceList, ShoppingFailure]:
        """Normalize a service list document.

        Args:
            reader: Reader over the parsed document.

        Returns:
            ServiceList, or ShoppingFailure when the document carries
            errors and no service data at all.
        """
        assert self.shopping is not None
        errors = extract_errors(reader)
        definitions = self.shopping.parse_service_definitions(reader)
        catalog = DefinitionCatalog.from_definitions(definitions)

        offer_ids: List[str] = []
        lines: List[ServiceOffer] = []
        for offer_el in reader.get_elements(None, "ALaCarteOffer"):
            offer_id = first_of(reader, offer_el, ALACARTE_ID)
            if not offer_id:
                self._logger.warning("Skipping a-la-carte offer without id")
                continue
            offer_ids.append(offer_id)
            lines.extend(self.parse_lines(reader, offer_el, offer_id, catalog))

        if errors and not definitions and not lines:
            self._logger.warning(
                "Service list response carries errors and no services",
                extra={"codes": [e.code for e in errors]},
            )
            return ShoppingFailure(errors=errors)
        if errors:
            self._logger.warning(
                "Service list response carries errors next to its services",
                extra={"codes": [e.code for e in errors]},
            )

        offers = self.group_bundles(lines)
        ssr_catalog = self.build_ssr_catalog(reader, offers)
        self._logger.info(
            "Normalized service list",
            extra={
                "alacarte_offers": len(offer_ids),
                "service_offers": len(offers),
                "ssr_entries": len(ssr_catalog.entries),
            },
        )
        return ServiceList(
            offers=offers,
            ssr_catalog=ssr_catalog,
            alacarte_offer_id=offer_ids[0] if offer_ids else None,
            warnings=errors,
        )

    def parse_lines(
        self,
        reader: DocumentReaderPort,
        offer_el: Element,
        offer_id: str,
        catalog: DefinitionCatalog,
    ) -> List[ServiceOffer]:
        lines: List[ServiceOffer] = []
        for item_el in reader.get_elements(offer_el, "OfferItem"):
            item_id = first_of(reader, item_el, ALACARTE_ITEM_ID)
            service_ref = first_of(reader, item_el, SERVICE_REF)
            definition: Optional[ServiceDefinition] = None
            if service_ref:
                definition = catalog.bundle(service_ref) or catalog.service(service_ref)
            if not item_id or definition is None:
                self._logger.debug(
                    "Skipping service line without a known definition",
                    extra={"offer_item_id": item_id, "service_ref": service_ref},
                )
                continue

            amount_el = find_path(reader, item_el, ("UnitPrice", "TotalAmount"))
            price = Money(
                parse_amount(reader.text_of(amount_el) if amount_el is not None else None),
                first_of(
                    reader, item_el, UNIT_PRICE_CURRENCY, default=self.config.default_currency
                ),
            )
            code = definition.service_code
            lines.append(
                ServiceOffer(
                    offer_id=offer_id,
                    offer_item_id=item_id,
                    service_definition_ref_id=service_ref,
                    service_code=code,
                    name=definition.name,
                    category=definition.category,
                    price=price,
                    pax_ref_ids=texts(reader, item_el, "PaxRefID", within=("Eligibility",)),
                    association=self.association(reader, item_el),
                    is_ssr=(
                        definition.rfic == self.config.ssr_rfic
                        or code.upper() in SEAT_SSR_CODES
                    ),
                )
            )
        return lines

    def association(self, reader: DocumentReaderPort, item_el: Element) -> Association:
        flights = find_first(reader, item_el, ELIGIBLE_FLIGHTS)
        result = Association(AssociationKind.UNKNOWN)
        if flights is None:
            return result
        for kind, tag in ASSOCIATION_REFS:
            ref_ids = texts(reader, flights, tag)
            if ref_ids:
                result = Association(kind, ref_ids)
        return result

    def group_bundles(self, lines: Sequence[ServiceOffer]) -> tuple[ServiceOffer, ...]:
        """One bundle line per service code and journeys, passengers merged.

        The service list repeats a bundle per passenger with the same
        item id, so the first line of each group stands for all of them.
        """
        grouped: Dict[tuple, ServiceOffer] = {}
        for index, line in enumerate(lines):
            if line.category is not ServiceCategory.BUNDLE:
                grouped[(index,)] = line
                continue
            key = (line.service_code, tuple(sorted(line.association.ref_ids)))
            first = grouped.get(key)
            grouped[key] = line if first is None else replace(
                first, pax_ref_ids=unique((*first.pax_ref_ids, *line.pax_ref_ids))
            )
        return tuple(grouped.values())

    def build_ssr_catalog(
        self, reader: DocumentReaderPort, offers: Sequence[ServiceOffer]
    ) -> SsrCatalog:
        """Seat SSR lines keyed by (code, segment, passenger).

        Journey-associated lines are spread over the journey's segments.
        """
        assert self.shopping is not None
        journey_segments = {
            journey.journey_id: journey.segment_ref_ids
            for journey in self.shopping.parse_journeys(reader)
        }
        entries: Dict[tuple[str, str, str], tuple[str, str]] = {}
        for offer in offers:
            if not offer.is_seat_ssr:
                continue
            match offer.association:
                case Association(kind=AssociationKind.SEGMENT, ref_ids=segment_ids):
                    segments = segment_ids
                case Association(kind=AssociationKind.JOURNEY, ref_ids=journey_ids):
                    segments = unique(
                        s for j in journey_ids for s in journey_segments.get(j, ())
                    )
                case _:
                    segments = ()
            if not segments:
                self._logger.warning(
                    "Seat SSR line has no segment association",
                    extra={"offer_item_id": offer.offer_item_id, "code": offer.service_code},
                )
                continue
            for segment_id in segments:
                for pax_id in offer.pax_ref_ids:
                    entries.setdefault(
                        (offer.service_code.upper(), segment_id, pax_id),
                        (offer.offer_id, offer.offer_item_id),
                    )
        return SsrCatalog(entries=entries)
