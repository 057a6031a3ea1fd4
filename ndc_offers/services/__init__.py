"""Services layer - Application orchestration.

Available services:
- ShoppingResponseNormalizer: Shopping documents into offers and bundles
- BundleReconciler: Matches a-la-carte bundle lines to flight offers
- SeatAvailabilityNormalizer: Seat maps with per-passenger-type items
- ServiceListNormalizer: Service lists into ancillary lines and the SSR catalog
- PriceRequestBuilder: Groups selections into a price request
- PriceResponseNormalizer: Price responses into summaries or rejections
- PricingService: Build, render, submit and recover once
"""

from .normalizer import OfferParser, ShoppingResponseNormalizer
from .price_request import PriceRequestBuilder
from .price_response import PriceResponseNormalizer
from .pricing_service import PricingService, PricingSession
from .reconciliation import BundleReconciler
from .seat_availability import SeatAvailabilityNormalizer
from .service_list import ServiceListNormalizer

__all__ = [
    "OfferParser",
    "ShoppingResponseNormalizer",
    "BundleReconciler",
    "SeatAvailabilityNormalizer",
    "ServiceListNormalizer",
    "PriceRequestBuilder",
    "PriceResponseNormalizer",
    "PricingService",
    "PricingSession",
]
