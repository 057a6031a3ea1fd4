"""Shopping response normalizer.

Turns a shopping document into typed, immutable entities. Every optional
element may be missing; absent values fall back to None, empty tuples or
configured defaults and never raise. A document carrying an Error block
short-circuits into a ShoppingFailure with no partial offers.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from typing import List, Optional, Sequence

from ..config import ParsingConfig, get_config
from ..domain.models import (
    ALaCarteOfferItem,
    BundleDefinition,
    BundleOfferItem,
    CarrierInfo,
    DefinitionCatalog,
    FlightSegment,
    Money,
    Offer,
    OfferItem,
    PaxJourney,
    PriceClass,
    ServiceCategory,
    ServiceDefinition,
    ShoppingFailure,
    ShoppingResponse,
    ShoppingResult,
    UpstreamError,
    unique,
)
from ..ports.document import DocumentReaderPort, Element
from .extraction import (
    Attr,
    Own,
    Rule,
    Text,
    find_first,
    find_path,
    first_of,
    first_texts,
    money,
    parse_amount,
    texts,
)
from .reconciliation import BundleReconciler

_EMBEDDED_RESPONSE_ID = re.compile(r"id-v2-([a-f0-9-]{36})", re.IGNORECASE)

# Field fallback orders, first non-empty value wins.
ERROR_CODE = (Attr("Code"), Text("Code"), Text("TypeCode"))
ERROR_MESSAGE = (Text("Description"), Text("DescText"), Text("Message"), Own())
SHOPPING_RESPONSE_ID = (Text("ShoppingResponseID"), Text("ResponseID"))

OFFER_ID = (Attr("OfferID"), Text("OfferID"), Attr("OfferRefID"))
OWNER_CODE = (Attr("Owner"), Text("OwnerCode"), Text("Owner"))
OFFER_TOTAL = (("TotalPrice",), ("TotalAmount",), ("Price",))
EXPIRATION = (Text("ExpirationDateTime"), Text("TimeLimits"))

ITEM_ID = (Attr("OfferItemID"), Text("OfferItemID"), Attr("OfferItemRefID"))
ITEM_TOTAL = (
    ("FareDetail", "Price", "TotalAmount"),
    ("UnitPrice", "TotalAmount"),
    ("TotalAmount",),
    ("Price",),
)
ITEM_BASE = (
    ("FareDetail", "Price", "BaseAmount"),
    ("BaseAmount",),
    ("UnitPrice", "BaseAmount"),
)
ITEM_TAX = (
    ("FareDetail", "Price", "TaxSummary", "TotalTaxAmount"),
    ("TaxAmount",),
    ("Taxes",),
    ("UnitPrice", "Taxes"),
)
ITEM_SEGMENT_REFS = ("DatedMarketingSegmentRefID", "PaxSegmentRefID")
FARE_BASIS = (Text("FareBasisCode"), Text("FareCode"))

ALACARTE_ID = (Text("OfferID"), Attr("OfferID"))
ALACARTE_ITEM_ID = (Attr("OfferItemID"), Text("OfferItemID"))
SERVICE_REF = (
    Text("Service", "ServiceDefinitionRefID"),
    Attr("ServiceDefinitionRefID", "Service"),
)
UNIT_PRICE_CURRENCY = (
    Text("UnitPrice", "CurCode"),
    Attr("CurCode", "UnitPrice", "TotalAmount"),
)
ELIGIBLE_FLIGHTS = (
    ("Eligibility", "OfferFlightAssociations"),
    ("Eligibility", "FlightAssociations"),
)

PRICE_CLASS_ID = (Text("PriceClassID"), Attr("PriceClassID"))
PRICE_CLASS_RBD = (Text("ClassOfService"), Text("RBD"))

SEGMENT_ELEMENTS = ("DatedMarketingSegment", "PaxSegment")
SEGMENT_ID = (
    Text("DatedMarketingSegmentId"),
    Attr("PaxSegmentID"),
    Text("PaxSegmentID"),
)
DEPARTURE = (("Dep",), ("Departure",))
ARRIVAL = (("Arrival",), ("Arr",))
CABIN_CODE = (Text("CabinCode"), Text("CabinTypeCode"))
CLASS_OF_SERVICE = (Text("ClassOfService"), Text("RBD"))

JOURNEY_ID = (Attr("PaxJourneyID"), Text("PaxJourneyID"))
JOURNEY_SEGMENT_REFS = ("DatedMarketingSegmentRefID", "PaxSegmentRefID")


def extract_errors(
    reader: DocumentReaderPort,
    element: Optional[Element] = None,
) -> tuple[UpstreamError, ...]:
    """Read every Error block under ``element`` (the root by default)."""
    return tuple(
        UpstreamError(
            code=first_of(reader, error_el, ERROR_CODE, default="UNKNOWN"),
            message=first_of(reader, error_el, ERROR_MESSAGE, default="Unknown error"),
        )
        for error_el in reader.get_elements(element, "Error")
    )


@dataclass
class OfferParser:
    """Reads Offer elements.

    Shared by the shopping and pricing normalizers; both documents
    publish offers in the same shape.

    Attributes:
        config: Parsing defaults
        reconciler: Matches a-la-carte bundles to each offer
        offer_id_rules: Fallback order for the offer id
        item_id_rules: Fallback order for item ids
        item_tags: Item element names, first one present wins
    """

    config: ParsingConfig = field(default_factory=lambda: get_config().parsing)
    reconciler: BundleReconciler = field(default_factory=BundleReconciler)
    offer_id_rules: Sequence[Rule] = OFFER_ID
    item_id_rules: Sequence[Rule] = ITEM_ID
    item_tags: Sequence[str] = ("OfferItem",)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def parse_offers(
        self,
        reader: DocumentReaderPort,
        offer_elements: Sequence[Element],
        catalog: DefinitionCatalog,
        alacarte_items: Sequence[ALaCarteOfferItem] = (),
    ) -> tuple[Offer, ...]:
        offers: List[Offer] = []
        for offer_el in offer_elements:
            offer = self.parse_offer(reader, offer_el, catalog, alacarte_items)
            if offer is not None:
                offers.append(offer)
        return tuple(offers)

    def parse_offer(
        self,
        reader: DocumentReaderPort,
        offer_el: Element,
        catalog: DefinitionCatalog,
        alacarte_items: Sequence[ALaCarteOfferItem] = (),
    ) -> Optional[Offer]:
        """Read one offer, reconciling a-la-carte bundles to it.

        Returns:
            The offer, or None when it has no identifier.
        """
        offer_id = first_of(reader, offer_el, self.offer_id_rules)
        if not offer_id:
            self._logger.warning("Skipping offer without identifier")
            return None

        default_currency = self.config.default_currency
        total = money(
            reader, find_first(reader, offer_el, OFFER_TOTAL), default_currency
        ) or Money(0.0, default_currency)

        items = tuple(
            item
            for item in (
                self._parse_item(reader, item_el, catalog, offer_id)
                for item_el in self._item_elements(reader, offer_el)
            )
            if item is not None
        )
        offer = Offer(
            offer_id=offer_id,
            owner_code=first_of(
                reader, offer_el, OWNER_CODE, default=self.config.default_owner_code
            ),
            total_price=total,
            offer_items=items,
            expiration=first_of(reader, offer_el, EXPIRATION),
        )

        bundles: tuple[BundleOfferItem, ...] = ()
        if alacarte_items:
            bundles = self.reconciler.match_bundles_to_offer(
                alacarte_items,
                catalog,
                offer.segment_ref_ids,
                offer.journey_ref_ids,
                offer_id=offer_id,
            )

        currency = self._refine_currency(total.currency, bundles, items)
        self._logger.debug(
            "Parsed offer",
            extra={
                "offer_id": offer_id,
                "items": len(items),
                "bundles": [b.service_code for b in bundles],
                "total": total.value,
                "currency": currency,
            },
        )
        return replace(
            offer, total_price=Money(total.value, currency), bundle_offers=bundles
        )

    def _item_elements(self, reader: DocumentReaderPort, offer_el: Element) -> Sequence[Element]:
        for tag in self.item_tags:
            elements = reader.get_elements(offer_el, tag)
            if elements:
                return elements
        return ()

    def _refine_currency(
        self,
        currency: str,
        bundles: Sequence[BundleOfferItem],
        items: Sequence[OfferItem],
    ) -> str:
        # A defaulted currency is replaced by the first concrete one seen.
        default = self.config.default_currency
        if currency != default:
            return currency
        if bundles and bundles[0].price.currency != default:
            return bundles[0].price.currency
        if items and items[0].total_amount.currency != default:
            return items[0].total_amount.currency
        return currency

    def _parse_item(
        self,
        reader: DocumentReaderPort,
        item_el: Element,
        catalog: DefinitionCatalog,
        offer_id: str,
    ) -> Optional[OfferItem]:
        item_id = first_of(reader, item_el, self.item_id_rules)
        if not item_id:
            self._logger.warning(
                "Skipping offer item without identifier",
                extra={"offer_id": offer_id},
            )
            return None

        pax_ref_ids = texts(reader, item_el, "PaxRefID", within=("FareDetail",))
        if not pax_ref_ids:
            pax_ref_ids = texts(reader, item_el, "PaxRefID")
        if not pax_ref_ids:
            self._logger.warning(
                "Skipping offer item without passengers",
                extra={"offer_id": offer_id, "offer_item_id": item_id},
            )
            return None

        default_currency = self.config.default_currency
        fare_basis = first_of(reader, item_el, FARE_BASIS)
        cabin_type: Optional[str] = None
        rbd: Optional[str] = None
        fare_detail = reader.get_element(item_el, "FareDetail")
        components = (
            reader.get_elements(fare_detail, "FareComponent")
            if fare_detail is not None
            else ()
        )
        for component in components:
            ref = reader.get_text(component, "PriceClassRefID")
            price_class = catalog.price_class(ref) if ref else None
            if price_class is None:
                continue
            fare_basis = fare_basis or price_class.fare_basis_code
            cabin_type = cabin_type or price_class.cabin_type
            rbd = rbd or price_class.rbd

        return OfferItem(
            offer_item_id=item_id,
            pax_ref_ids=pax_ref_ids,
            total_amount=money(
                reader, find_first(reader, item_el, ITEM_TOTAL), default_currency
            ) or Money(0.0, default_currency),
            base_amount=money(reader, find_first(reader, item_el, ITEM_BASE), default_currency),
            tax_amount=money(reader, find_first(reader, item_el, ITEM_TAX), default_currency),
            fare_basis_code=fare_basis,
            cabin_type=cabin_type,
            rbd=rbd,
            segment_ref_ids=first_texts(reader, item_el, ITEM_SEGMENT_REFS),
            journey_ref_ids=self._journey_refs(reader, item_el),
        )

    def _journey_refs(self, reader: DocumentReaderPort, item_el: Element) -> tuple[str, ...]:
        refs: List[Optional[str]] = []
        service = reader.get_element(item_el, "Service")
        if service is not None:
            refs.append(
                first_of(
                    reader,
                    service,
                    (Text("OfferServiceAssociation", "PaxJourneyRef", "PaxJourneyRefID"),),
                )
            )
            refs.append(reader.get_text(service, "PaxJourneyRefID"))
        refs.append(reader.get_text(item_el, "PaxJourneyRefID"))
        return unique(ref for ref in refs if ref)


@dataclass
class ShoppingResponseNormalizer:
    """Normalizes a shopping response document.

    Attributes:
        config: Parsing defaults and classification codes
        offer_parser: Offer reader, shared with the pricing normalizer
    """

    config: ParsingConfig = field(default_factory=lambda: get_config().parsing)
    offer_parser: Optional[OfferParser] = None
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)
        if self.offer_parser is None:
            self.offer_parser = OfferParser(config=self.config)

    def normalize(self, reader: DocumentReaderPort) -> ShoppingResult:
        """Normalize a shopping document.

        Args:
            reader: Reader over the parsed document.

        Returns:
            ShoppingResponse, or ShoppingFailure when the document
            carries an Error block.
        """
        errors = extract_errors(reader)
        if errors:
            self._logger.warning(
                "Shopping response carries errors",
                extra={"codes": [e.code for e in errors]},
            )
            return ShoppingFailure(errors=errors)

        segments = self.parse_segments(reader)
        definitions = self.parse_service_definitions(reader)
        price_classes = self.parse_price_classes(reader)
        catalog = DefinitionCatalog.from_definitions(definitions, price_classes)
        alacarte_offer_id, alacarte_items = self.parse_alacarte_offer(reader, catalog)

        assert self.offer_parser is not None
        offers = self.offer_parser.parse_offers(
            reader, reader.get_elements(None, "Offer"), catalog, alacarte_items
        )

        response = ShoppingResponse(
            offers=offers,
            segments=segments,
            journeys=self.parse_journeys(reader),
            bundle_definitions=tuple(catalog.bundles.values()),
            service_definitions=tuple(catalog.services.values()),
            price_classes=price_classes,
            alacarte_items=alacarte_items,
            catalog=catalog,
            alacarte_offer_id=alacarte_offer_id,
            shopping_response_id=self.shopping_response_id(reader),
        )
        self._logger.info(
            "Normalized shopping response",
            extra={
                "offers": len(offers),
                "segments": len(segments),
                "bundles": len(catalog.bundles),
                "alacarte_items": len(alacarte_items),
            },
        )
        return response

    def shopping_response_id(self, reader: DocumentReaderPort) -> Optional[str]:
        """Explicit response id, else the UUID embedded in the first offer id."""
        explicit = first_of(reader, reader.root, SHOPPING_RESPONSE_ID)
        if explicit:
            return explicit
        first_offer_id = first_of(
            reader, reader.get_element(None, "Offer"), (Attr("OfferID"), Text("OfferID"))
        )
        if first_offer_id:
            found = _EMBEDDED_RESPONSE_ID.search(first_offer_id)
            if found:
                return found.group(1)
        return None

    def classify(self, rfic: str, rfisc: str, has_bundle_element: bool) -> ServiceCategory:
        """Service category from RFIC/RFISC and ServiceBundle presence."""
        if (
            has_bundle_element
            and rfic == self.config.bundle_rfic
            and rfisc == self.config.bundle_rfisc
        ):
            return ServiceCategory.BUNDLE
        category = self.config.rfic_categories.get(rfic)
        return ServiceCategory(category) if category else ServiceCategory.ANCILLARY

    def parse_service_definitions(
        self, reader: DocumentReaderPort
    ) -> tuple[ServiceDefinition, ...]:
        definitions: List[ServiceDefinition] = []
        for service_el in reader.get_elements(None, "ServiceDefinition"):
            definition_id = reader.get_text(service_el, "ServiceDefinitionID")
            if not definition_id:
                continue
            service_code = reader.get_text(service_el, "ServiceCode") or ""
            rfic = reader.get_text(service_el, "RFIC") or ""
            rfisc = reader.get_text(service_el, "RFISC") or ""
            bundle_el = reader.get_element(service_el, "ServiceBundle")
            category = self.classify(rfic, rfisc, bundle_el is not None)
            common = dict(
                service_definition_id=definition_id,
                service_code=service_code,
                name=reader.get_text(service_el, "Name") or service_code,
                category=category,
                rfic=rfic or None,
                rfisc=rfisc or None,
                description=first_of(reader, service_el, (Text("Desc", "DescText"),)),
            )
            if category is ServiceCategory.BUNDLE:
                definitions.append(
                    BundleDefinition(
                        **common,
                        included_service_ref_ids=texts(
                            reader, bundle_el, "ServiceDefinitionRefID"
                        ),
                    )
                )
            else:
                definitions.append(ServiceDefinition(**common))
        return tuple(definitions)

    def parse_price_classes(self, reader: DocumentReaderPort) -> tuple[PriceClass, ...]:
        classes: List[PriceClass] = []
        for pc_el in reader.get_elements(None, "PriceClass"):
            price_class_id = first_of(reader, pc_el, PRICE_CLASS_ID)
            if not price_class_id:
                continue
            classes.append(
                PriceClass(
                    price_class_id=price_class_id,
                    code=reader.get_text(pc_el, "Code"),
                    name=reader.get_text(pc_el, "Name"),
                    fare_basis_code=reader.get_text(pc_el, "FareBasisCode"),
                    cabin_type=first_of(reader, pc_el, (Text("CabinType", "CabinTypeCode"),)),
                    rbd=first_of(reader, pc_el, PRICE_CLASS_RBD),
                )
            )
        return tuple(classes)

    def parse_alacarte_offer(
        self,
        reader: DocumentReaderPort,
        catalog: DefinitionCatalog,
    ) -> tuple[Optional[str], tuple[ALaCarteOfferItem, ...]]:
        """Read the bundle lines of the a-la-carte offer.

        Lines that sell anything other than a known bundle are left out.

        Returns:
            The a-la-carte offer id and its bundle lines.
        """
        offer_el = reader.get_element(None, "ALaCarteOffer")
        if offer_el is None:
            return None, ()

        items: List[ALaCarteOfferItem] = []
        for item_el in reader.get_elements(offer_el, "OfferItem"):
            item_id = first_of(reader, item_el, ALACARTE_ITEM_ID)
            service_ref = first_of(reader, item_el, SERVICE_REF)
            if not item_id or not service_ref or catalog.bundle(service_ref) is None:
                continue

            amount_el = find_path(reader, item_el, ("UnitPrice", "TotalAmount"))
            price = Money(
                value=parse_amount(reader.text_of(amount_el)),
                currency=first_of(
                    reader, item_el, UNIT_PRICE_CURRENCY, default=self.config.default_currency
                ),
            ) if amount_el is not None else Money(0.0, self.config.default_currency)

            flights = find_first(reader, item_el, ELIGIBLE_FLIGHTS)
            items.append(
                ALaCarteOfferItem(
                    offer_item_id=item_id,
                    service_definition_ref_id=service_ref,
                    price=price,
                    pax_ref_ids=texts(reader, item_el, "PaxRefID"),
                    journey_ref_ids=texts(
                        reader, flights, "PaxJourneyRefID", within=("PaxJourneyRef",)
                    ),
                    segment_ref_ids=texts(reader, flights, "PaxSegmentRefID"),
                )
            )

        return first_of(reader, offer_el, ALACARTE_ID), tuple(items)

    def parse_segments(self, reader: DocumentReaderPort) -> tuple[FlightSegment, ...]:
        elements: Sequence[Element] = ()
        for tag in SEGMENT_ELEMENTS:
            elements = reader.get_elements(None, tag)
            if elements:
                break

        segments: List[FlightSegment] = []
        for seg_el in elements:
            segment_id = first_of(reader, seg_el, SEGMENT_ID)
            if not segment_id:
                continue
            dep_el = find_first(reader, seg_el, DEPARTURE)
            arr_el = find_first(reader, seg_el, ARRIVAL)
            dep_date, dep_time = self._schedule(reader, seg_el, dep_el, "Departure")
            arr_date, arr_time = self._schedule(reader, seg_el, arr_el, "Arrival")

            carrier_code = reader.get_text(seg_el, "CarrierDesigCode") or ""
            flight_number = reader.get_text(seg_el, "MarketingCarrierFlightNumberText") or ""
            marketing = CarrierInfo(carrier_code, flight_number)
            operating = (
                marketing
                if reader.get_text(seg_el, "DatedOperatingSegmentRefId")
                else None
            )

            segments.append(
                FlightSegment(
                    segment_id=segment_id,
                    origin=self._airport(reader, seg_el, dep_el, "OriginCode"),
                    destination=self._airport(reader, seg_el, arr_el, "DestinationCode"),
                    departure_date=dep_date,
                    departure_time=dep_time,
                    arrival_date=arr_date,
                    arrival_time=arr_time,
                    marketing_carrier=marketing,
                    operating_carrier=operating,
                    duration=reader.get_text(seg_el, "Duration"),
                    cabin_code=first_of(reader, seg_el, CABIN_CODE),
                    class_of_service=first_of(reader, seg_el, CLASS_OF_SERVICE),
                    fare_basis_code=reader.get_text(seg_el, "FareBasisCode"),
                )
            )
        return tuple(segments)

    @staticmethod
    def _airport(
        reader: DocumentReaderPort,
        seg_el: Element,
        point_el: Optional[Element],
        fallback_tag: str,
    ) -> str:
        code = reader.get_text(point_el, "IATA_LocationCode") if point_el is not None else None
        return code or reader.get_text(seg_el, fallback_tag) or ""

    @staticmethod
    def _schedule(
        reader: DocumentReaderPort,
        seg_el: Element,
        point_el: Optional[Element],
        direction: str,
    ) -> tuple[str, str]:
        scheduled = (
            reader.get_text(point_el, "AircraftScheduledDateTime")
            if point_el is not None
            else None
        )
        if scheduled:
            date, _, time = scheduled.partition("T")
            return date, time
        scope = point_el if point_el is not None else seg_el
        date = reader.get_text(scope, "Date") or reader.get_text(seg_el, f"{direction}Date")
        time = reader.get_text(scope, "Time") or reader.get_text(seg_el, f"{direction}Time")
        return date or "", time or ""

    def parse_journeys(self, reader: DocumentReaderPort) -> tuple[PaxJourney, ...]:
        journeys: List[PaxJourney] = []
        for journey_el in reader.get_elements(None, "PaxJourney"):
            journey_id = first_of(reader, journey_el, JOURNEY_ID)
            if not journey_id:
                continue
            journeys.append(
                PaxJourney(
                    journey_id=journey_id,
                    segment_ref_ids=first_texts(reader, journey_el, JOURNEY_SEGMENT_REFS),
                    duration=reader.get_text(journey_el, "Duration"),
                )
            )
        return tuple(journeys)
