"""OfferPrice XML renderer.

Serializes a PriceRequest as an IATA_OfferPriceRQ document with lxml.
The envelope lives in the message namespace; distribution chain links
and everything under PricedOffer live in the common-types namespace.

A-la-carte lines expand differently by association:
- segment lines become one SelectedOfferItem per segment, because each
  segment is charged separately
- journey and leg lines stay a single SelectedOfferItem carrying every
  ref in one OfferFlightAssociations block
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from lxml import etree

from ...config import RequestConfig, get_config
from ...domain.distribution import DistributionChain
from ...domain.errors import RenderingError
from ...domain.selection import (
    AssociationKind,
    PriceRequest,
    RequestOfferItem,
    SelectedOfferBlock,
)

# Association kind -> (wrapper element, ref element)
FLIGHT_REF_ELEMENTS = {
    AssociationKind.JOURNEY: ("PaxJourneyRef", "PaxJourneyRefID"),
    AssociationKind.LEG: ("DatedOperatingLegRef", "DatedOperatingLegRefID"),
    AssociationKind.SEGMENT: ("PaxSegmentReferences", "PaxSegmentRefID"),
}


@dataclass
class OfferPriceXmlRenderer:
    """Renders price requests as IATA_OfferPriceRQ.

    This adapter implements RequestRendererPort.

    Attributes:
        config: Namespaces and the segment prefix to strip
    """

    config: RequestConfig = field(default_factory=lambda: get_config().request)
    pretty_print: bool = False
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def _msg(self, tag: str) -> str:
        return "{%s}%s" % (self.config.message_namespace, tag)

    def _ct(self, tag: str) -> str:
        return "{%s}%s" % (self.config.common_types_namespace, tag)

    def _text(self, parent: etree._Element, tag: str, value: object) -> etree._Element:
        element = etree.SubElement(parent, self._ct(tag))
        element.text = str(value)
        return element

    def render(self, request: PriceRequest, chain: DistributionChain) -> bytes:
        """Serialize ``request``.

        Raises:
            RenderingError: The distribution chain is empty, or a value
                cannot be written as XML text.
        """
        if chain.is_empty:
            raise RenderingError(
                "Distribution chain is required to price offers",
                renderer_type=type(self).__name__,
            )

        try:
            root = etree.Element(
                self._msg("IATA_OfferPriceRQ"),
                nsmap={None: self.config.message_namespace},
            )
            self._render_chain(root, chain)
            request_el = etree.SubElement(root, self._msg("Request"))
            priced = etree.SubElement(
                request_el,
                self._ct("PricedOffer"),
                nsmap={None: self.config.common_types_namespace},
            )
            offer_list = etree.SubElement(priced, self._ct("SelectedOfferList"))
            for block in request.selected_offers:
                self._render_block(offer_list, block)
        except ValueError as e:
            # lxml rejects control characters and NULs in text
            raise RenderingError(
                "Price request contains a value that is not valid XML",
                renderer_type=type(self).__name__,
                cause=e,
            )

        payload = etree.tostring(
            root,
            xml_declaration=True,
            encoding="UTF-8",
            pretty_print=self.pretty_print,
        )
        self._logger.debug(
            "Rendered price request",
            extra={"blocks": len(request.selected_offers), "bytes": len(payload)},
        )
        return payload

    def _render_chain(self, root: etree._Element, chain: DistributionChain) -> None:
        chain_el = etree.SubElement(root, self._msg("DistributionChain"))
        for link in chain.links:
            link_el = etree.SubElement(
                chain_el,
                self._ct("DistributionChainLink"),
                nsmap={None: self.config.common_types_namespace},
            )
            self._text(link_el, "Ordinal", link.ordinal)
            self._text(link_el, "OrgRole", link.org_role)
            org = etree.SubElement(link_el, self._ct("ParticipatingOrg"))
            self._text(org, "Name", link.org_name)
            self._text(org, "OrgID", link.org_id)

    def _render_block(self, parent: etree._Element, block: SelectedOfferBlock) -> None:
        offer_el = etree.SubElement(parent, self._ct("SelectedOffer"))
        self._text(offer_el, "OfferRefID", block.offer_id)
        self._text(offer_el, "OwnerCode", block.owner_code)

        for item in block.items:
            if not item.is_alacarte:
                self._selected_item(offer_el, item)
                continue

            association = item.association
            assert association is not None
            refs = association.ref_ids
            if association.kind is AssociationKind.SEGMENT and refs:
                for ref in refs:
                    item_el = self._selected_item(offer_el, item)
                    self._alacarte(item_el, AssociationKind.SEGMENT, (ref,), item.quantity)
                    if item.is_seat:
                        seat_el = etree.SubElement(item_el, self._ct("SelectedSeat"))
                        self._text(seat_el, "SeatRowNumber", item.seat_row)
                        self._text(seat_el, "ColumnID", item.seat_column)
            else:
                item_el = self._selected_item(offer_el, item)
                self._alacarte(item_el, association.kind, refs, item.quantity)

    def _selected_item(
        self, parent: etree._Element, item: RequestOfferItem
    ) -> etree._Element:
        item_el = etree.SubElement(parent, self._ct("SelectedOfferItem"))
        self._text(item_el, "OfferItemRefID", item.offer_item_id)
        for pax_ref_id in item.pax_ref_ids:
            self._text(item_el, "PaxRefID", pax_ref_id)
        return item_el

    def _alacarte(
        self,
        parent: etree._Element,
        kind: AssociationKind,
        refs: Sequence[str],
        quantity: int,
    ) -> None:
        alacarte = etree.SubElement(parent, self._ct("SelectedALaCarteOfferItem"))
        elements = FLIGHT_REF_ELEMENTS.get(kind)
        if refs and elements is not None:
            wrapper_tag, ref_tag = elements
            associations = etree.SubElement(alacarte, self._ct("OfferFlightAssociations"))
            wrapper = etree.SubElement(associations, self._ct(wrapper_tag))
            for ref in refs:
                self._text(wrapper, ref_tag, self._clean_ref(kind, ref))
        self._text(alacarte, "Qty", quantity)

    def _clean_ref(self, kind: AssociationKind, ref: str) -> str:
        prefix: Optional[str] = self.config.segment_ref_strip_prefix
        if kind is AssociationKind.SEGMENT and prefix and ref.startswith(prefix):
            return ref[len(prefix):]
        return ref
