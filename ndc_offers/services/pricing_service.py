"""Pricing service - Main orchestrator.

Runs one pricing round trip: build the request, render it, hand it to
the host's gateway and normalize the answer. When the pricing system
rejects a category it cannot sell (bundles whose SSRs fail), the
category is stripped and the request resubmitted once.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field, replace
from typing import Optional, TypeVar

from .. import metrics
from ..domain.distribution import DistributionChain
from ..domain.errors import StaleResultError, UpstreamRejectionError
from ..domain.models import PricedOfferSummary
from ..domain.selection import PricingSelection
from ..ports.document import DocumentParserPort
from ..ports.gateway import PriceGatewayPort
from ..ports.rendering import RequestRendererPort
from .price_request import PriceRequestBuilder
from .price_response import PriceResponseNormalizer

T = TypeVar("T")


@dataclass
class PricingService:
    """Prices a selection against the upstream pricing system.

    Attributes:
        builder: Groups the selection into a price request
        renderer: Serializes the request
        gateway: Host-provided transport
        parser: Parses the response payload
        normalizer: Turns the response into a summary
    """

    builder: PriceRequestBuilder
    renderer: RequestRendererPort
    gateway: PriceGatewayPort
    parser: DocumentParserPort
    normalizer: PriceResponseNormalizer

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def price(
        self,
        selection: PricingSelection,
        chain: DistributionChain,
        shopping_response_id: Optional[str] = None,
    ) -> PricedOfferSummary:
        """Price ``selection``, recovering once from a category rejection.

        Args:
            selection: Chosen fares and ancillaries.
            chain: Distribution chain to send with the request.
            shopping_response_id: Id of the shopping round being priced.

        Returns:
            The priced summary. ``removed_category`` is set when a
            category had to be stripped for the request to price.

        Raises:
            RequestConstructionError: The selection cannot be grouped.
            RenderingError: The request cannot be serialized.
            DocumentParseError: The response is not well-formed.
            UpstreamRejectionError: The request was rejected and could
                not be recovered, or was rejected again after recovery.
        """
        try:
            return self._round_trip(selection, chain, shopping_response_id)
        except UpstreamRejectionError as e:
            category = e.rejected_category
            if category is None or not selection.has_category(category):
                raise
            self._logger.warning(
                "Price request rejected, retrying without category",
                extra={
                    "rejected_category": category.value,
                    "codes": [err.code for err in e.errors],
                },
            )
            metrics.inc_counter(metrics.PRICING_RECOVERY, {"category": category.value})
            reduced = selection.without_category(category)

        summary = self._round_trip(reduced, chain, shopping_response_id)
        return replace(
            summary,
            warnings=summary.warnings
            + (f"Removed {category.value} selections the pricing system could not sell",),
            removed_category=category,
        )

    def _round_trip(
        self,
        selection: PricingSelection,
        chain: DistributionChain,
        shopping_response_id: Optional[str],
    ) -> PricedOfferSummary:
        request = self.builder.build(selection, shopping_response_id)
        payload = self.renderer.render(request, chain)
        self._logger.debug("Submitting price request", extra={"bytes": len(payload)})
        response = self.gateway.submit(payload)
        return self.normalizer.normalize(self.parser.parse(response))


@dataclass
class PricingSession:
    """Last-request-wins guard for concurrent pricing calls.

    Each call takes a ticket before it starts. Only the result carrying
    the most recent ticket may be accepted.

    Usage:
        ticket = session.begin()
        summary = service.price(selection, chain)
        summary = session.accept(ticket, summary)
    """

    _current: int = field(default=0, init=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    @property
    def current(self) -> int:
        with self._lock:
            return self._current

    def begin(self) -> int:
        with self._lock:
            self._current += 1
            return self._current

    def is_current(self, ticket: int) -> bool:
        with self._lock:
            return ticket == self._current

    def accept(self, ticket: int, result: T) -> T:
        """Return ``result`` if ``ticket`` is still the latest.

        Raises:
            StaleResultError: A newer request was started.
        """
        with self._lock:
            if ticket != self._current:
                raise StaleResultError(
                    f"Discarding result of pricing request {ticket}, latest is {self._current}",
                    ticket=ticket,
                    current=self._current,
                )
            return result
