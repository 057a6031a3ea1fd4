"""Price response normalizer.

The pricing system may answer with priced offers and errors side by
side, for example when an SSR attached to a bundle cannot be sold but
the fares still price. Errors that come with data are kept as warnings;
errors without data are a rejection.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..config import ParsingConfig, get_config
from ..domain.errors import UpstreamRejectionError
from ..domain.models import (
    DefinitionCatalog,
    Money,
    Offer,
    PricedOfferSummary,
    ServiceCategory,
    UpstreamError,
)
from ..ports.document import DocumentReaderPort, Element
from .extraction import Attr, Text, first_of
from .normalizer import ITEM_ID, OfferParser, extract_errors

PRICED_OFFER_ID = (Attr("OfferID"), Text("OfferID"), Text("OfferRefID"))
PRICED_ITEM_ID = (*ITEM_ID, Text("OfferItemRefID"))
EXPIRATION = (Text("ExpirationDateTime"),)

BUNDLE_REJECTION_CODES = frozenset({"OF4053"})
BUNDLE_REJECTION_PHRASES = (
    "selling ssrs for service bundle",
    "error encountered selling",
)


def rejected_category(errors: Sequence[UpstreamError]) -> Optional[ServiceCategory]:
    """The selection category an upstream rejection points at, if any."""
    for error in errors:
        message = error.message.lower()
        if error.code in BUNDLE_REJECTION_CODES or any(
            phrase in message for phrase in BUNDLE_REJECTION_PHRASES
        ):
            return ServiceCategory.BUNDLE
    return None


@dataclass
class PriceResponseNormalizer:
    """Normalizes a price response document.

    Attributes:
        config: Parsing defaults
        offer_parser: Offer reader configured for priced offers
    """

    config: ParsingConfig = field(default_factory=lambda: get_config().parsing)
    offer_parser: Optional[OfferParser] = None
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)
        if self.offer_parser is None:
            self.offer_parser = OfferParser(
                config=self.config,
                offer_id_rules=PRICED_OFFER_ID,
                item_id_rules=PRICED_ITEM_ID,
                item_tags=("OfferItem", "PricedOfferItem"),
            )

    def normalize(self, reader: DocumentReaderPort) -> PricedOfferSummary:
        """Normalize a price response.

        Raises:
            UpstreamRejectionError: Errors were returned and no offer
                was priced.
        """
        warnings: List[str] = []
        for warning_el in reader.get_elements(None, "Warning"):
            message = reader.get_text(warning_el, "Message") or reader.text_of(warning_el)
            if message:
                warnings.append(message)

        assert self.offer_parser is not None
        offers = self.offer_parser.parse_offers(
            reader, self.offer_elements(reader), DefinitionCatalog()
        )
        errors = extract_errors(reader)

        if errors and not offers:
            category = rejected_category(errors)
            self._logger.warning(
                "Price request rejected",
                extra={
                    "codes": [e.code for e in errors],
                    "rejected_category": category.value if category else None,
                },
            )
            raise UpstreamRejectionError(
                "; ".join(f"{e.code}: {e.message}" for e in errors),
                errors=errors,
                rejected_category=category,
            )
        if errors:
            self._logger.warning(
                "Price response carries errors alongside priced offers",
                extra={"codes": [e.code for e in errors]},
            )
            warnings.extend(f"{e.code}: {e.message}" for e in errors)

        summary = PricedOfferSummary(
            offers=offers,
            total=self.total(offers),
            warnings=tuple(warnings),
            expiration=first_of(reader, reader.root, EXPIRATION),
        )
        self._logger.info(
            "Normalized price response",
            extra={
                "offers": len(offers),
                "total": summary.total.value if summary.total else None,
                "warnings": len(warnings),
            },
        )
        return summary

    @staticmethod
    def offer_elements(reader: DocumentReaderPort) -> Sequence[Element]:
        """PricedOffer elements, else Offer elements."""
        return reader.get_elements(None, "PricedOffer") or reader.get_elements(None, "Offer")

    @staticmethod
    def total(offers: Sequence[Offer]) -> Optional[Money]:
        if not offers:
            return None
        return Money(
            value=round(sum(o.total_price.value for o in offers), 2),
            currency=offers[0].total_price.currency,
        )
