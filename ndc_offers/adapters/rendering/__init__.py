"""Rendering adapters - Implementations of RequestRendererPort.

Available implementations:
- OfferPriceXmlRenderer: IATA_OfferPriceRQ documents built with lxml
"""

from .offer_price_xml import OfferPriceXmlRenderer

__all__ = ["OfferPriceXmlRenderer"]
