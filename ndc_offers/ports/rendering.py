"""Rendering port - Abstraction for price request serialization."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..domain.distribution import DistributionChain
    from ..domain.selection import PriceRequest


class RequestRendererPort(Protocol):
    """Port for serializing a price request.

    Implementation: adapters/rendering/offer_price_xml.py
    """

    def render(self, request: PriceRequest, chain: DistributionChain) -> bytes:
        """Serialize ``request`` for the pricing system.

        Raises:
            RenderingError: If the request cannot be serialized.
        """
        ...
