"""Domain layer - Core business models and errors.

This module contains immutable domain models and typed errors
used throughout the engine. No external dependencies.
"""

from .distribution import ChainLink, DistributionChain
from .errors import (
    ConfigurationError,
    DocumentParseError,
    OfferEngineError,
    RenderingError,
    RequestConstructionError,
    SeatPricingUnavailableError,
    SeatRestrictionError,
    SeatShortageError,
    SeatUnavailableError,
    ShortageReason,
    StaleResultError,
    UpstreamRejectionError,
)
from .models import (
    ALaCarteOfferItem,
    BundleDefinition,
    BundleInclusion,
    BundleInclusions,
    BundleOfferItem,
    CarrierInfo,
    DefinitionCatalog,
    FlightSegment,
    Money,
    Offer,
    OfferItem,
    PaxJourney,
    PricedOfferSummary,
    PriceClass,
    ServiceCategory,
    ServiceDefinition,
    ShoppingFailure,
    ShoppingResponse,
    ShoppingResult,
    UpstreamError,
)
from .seating import (
    CabinCompartment,
    OccupationStatus,
    Passenger,
    PassengerType,
    Seat,
    SeatAvailability,
    SeatMap,
    SeatRow,
    SeatSelection,
    SeatTier,
    SsrCatalog,
    SsrItem,
)
from .selection import (
    AncillarySelection,
    Association,
    AssociationKind,
    BlockKind,
    BundleSelection,
    FareItemRef,
    FareSelection,
    PriceRequest,
    PricingSelection,
    RequestOfferItem,
    SeatChoice,
    SelectedOfferBlock,
    ServiceSelection,
    seat_selections_to_ancillaries,
)
from .service_list import SEAT_SSR_CODES, ServiceList, ServiceOffer

__all__ = [
    # Shopping models
    "ServiceCategory",
    "Money",
    "CarrierInfo",
    "FlightSegment",
    "PaxJourney",
    "ServiceDefinition",
    "BundleDefinition",
    "PriceClass",
    "OfferItem",
    "ALaCarteOfferItem",
    "BundleInclusion",
    "BundleInclusions",
    "BundleOfferItem",
    "Offer",
    "DefinitionCatalog",
    "UpstreamError",
    "ShoppingResponse",
    "ShoppingFailure",
    "ShoppingResult",
    "PricedOfferSummary",
    # Seating
    "PassengerType",
    "Passenger",
    "OccupationStatus",
    "SeatTier",
    "Seat",
    "SeatRow",
    "CabinCompartment",
    "SeatMap",
    "SeatAvailability",
    "SsrItem",
    "SsrCatalog",
    "SeatSelection",
    # Service lists
    "SEAT_SSR_CODES",
    "ServiceOffer",
    "ServiceList",
    # Selections and requests
    "AssociationKind",
    "Association",
    "BundleSelection",
    "ServiceSelection",
    "SeatChoice",
    "AncillarySelection",
    "seat_selections_to_ancillaries",
    "FareItemRef",
    "FareSelection",
    "PricingSelection",
    "BlockKind",
    "RequestOfferItem",
    "SelectedOfferBlock",
    "PriceRequest",
    # Distribution
    "ChainLink",
    "DistributionChain",
    # Errors
    "OfferEngineError",
    "DocumentParseError",
    "RequestConstructionError",
    "SeatRestrictionError",
    "SeatUnavailableError",
    "SeatPricingUnavailableError",
    "ShortageReason",
    "SeatShortageError",
    "UpstreamRejectionError",
    "StaleResultError",
    "RenderingError",
    "ConfigurationError",
]
