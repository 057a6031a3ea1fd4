"""Price request construction.

The pricing system is stricter than the shopping response it answers:
ancillaries must be grouped under the a-la-carte offer that published
them, bundles must be requested once per passenger with that passenger's
own item id, and fare blocks may not carry ancillary items. This module
turns a PricingSelection into a PriceRequest that satisfies those rules.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence

from .. import metrics
from ..config import RequestConfig, get_config
from ..domain.errors import ConfigurationError, RequestConstructionError
from ..domain.models import ServiceCategory, unique
from ..domain.selection import (
    AncillarySelection,
    AssociationKind,
    BlockKind,
    BundleSelection,
    FareSelection,
    PriceRequest,
    PricingSelection,
    RequestOfferItem,
    SeatChoice,
    SelectedOfferBlock,
    ServiceSelection,
)


@dataclass
class _BlockDraft:
    offer_id: str
    owner_code: str
    kind: BlockKind
    items: Dict[object, RequestOfferItem] = field(default_factory=dict)

    def add(self, key: object, item: RequestOfferItem) -> None:
        self.items.setdefault(key, item)

    def freeze(self) -> SelectedOfferBlock:
        return SelectedOfferBlock(
            offer_id=self.offer_id,
            owner_code=self.owner_code,
            kind=self.kind,
            items=tuple(self.items.values()),
        )


@dataclass
class PriceRequestBuilder:
    """Builds grouped price requests from user selections.

    Attributes:
        config: Owner code, synthetic-bundle suffix and container rules
    """

    config: RequestConfig = field(default_factory=lambda: get_config().request)
    _container_pattern: re.Pattern = field(init=False, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)
        try:
            self._container_pattern = re.compile(
                self.config.container_id_pattern, re.IGNORECASE
            )
        except re.error as e:
            raise ConfigurationError(
                "Invalid container id pattern",
                setting_name="container_id_pattern",
                expected_type="regular expression",
                cause=e,
            )

    def build(
        self,
        selection: PricingSelection,
        shopping_response_id: Optional[str] = None,
    ) -> PriceRequest:
        """Build the price request for ``selection``.

        Args:
            selection: Chosen fares and ancillaries.
            shopping_response_id: Id of the shopping round being priced.

        Returns:
            PriceRequest with fare blocks first, then one ancillary block
            per container offer id in order of first appearance.

        Raises:
            RequestConstructionError: Ancillaries were selected but none
                could be placed in the request, or a container id
                collides with a fare offer id.
        """
        ancillary_item_ids = self._ancillary_item_ids(selection.ancillaries)
        fare_blocks = self._fare_blocks(selection.fares, ancillary_item_ids)
        ancillary_blocks = self._ancillary_blocks(selection)

        collisions = sorted(set(fare_blocks) & set(ancillary_blocks))
        if collisions:
            raise RequestConstructionError(
                f"Ancillary container ids collide with fare offers: {collisions}",
                selection_count=len(selection.ancillaries),
                container_ids=tuple(ancillary_blocks),
            )

        eligible = [a for a in selection.ancillaries if not self._is_synthetic(a)]
        placed = sum(len(d.items) for d in ancillary_blocks.values())
        if eligible and placed == 0:
            self._logger.error(
                "No ancillary item survived request construction",
                extra={"selections": len(eligible)},
            )
            raise RequestConstructionError(
                "No ancillary items could be placed in the price request",
                selection_count=len(eligible),
                container_ids=tuple(ancillary_blocks),
            )

        blocks = tuple(d.freeze() for d in fare_blocks.values()) + tuple(
            d.freeze() for d in ancillary_blocks.values() if d.items
        )
        self._logger.info(
            "Built price request",
            extra={
                "fare_blocks": len(fare_blocks),
                "ancillary_blocks": len(blocks) - len(fare_blocks),
                "ancillary_items": placed,
            },
        )
        return PriceRequest(selected_offers=blocks, shopping_response_id=shopping_response_id)

    def _ancillary_item_ids(self, ancillaries: Sequence[AncillarySelection]) -> set[str]:
        ids: set[str] = set()
        for ancillary in ancillaries:
            match ancillary:
                case BundleSelection(bundle_id=bundle_id, pax_offer_item_ids=pax_map):
                    ids.add(bundle_id)
                    ids.update((pax_map or {}).values())
                case ServiceSelection(offer_item_id=item_id) | SeatChoice(offer_item_id=item_id):
                    ids.add(item_id)
        return ids

    def _fare_blocks(
        self,
        fares: Sequence[FareSelection],
        ancillary_item_ids: set[str],
    ) -> Dict[str, _BlockDraft]:
        drafts: Dict[str, _BlockDraft] = {}
        for fare in fares:
            draft = drafts.setdefault(
                fare.offer_id,
                _BlockDraft(fare.offer_id, fare.owner_code, BlockKind.FARE),
            )
            for ref in fare.items:
                if ref.offer_item_id in ancillary_item_ids:
                    self._logger.debug(
                        "Excluding ancillary item from fare block",
                        extra={"offer_id": fare.offer_id, "offer_item_id": ref.offer_item_id},
                    )
                    continue
                existing = draft.items.get(ref.offer_item_id)
                pax_ref_ids = ref.pax_ref_ids
                if existing is not None:
                    pax_ref_ids = (*existing.pax_ref_ids, *ref.pax_ref_ids)
                draft.items[ref.offer_item_id] = RequestOfferItem(
                    ref.offer_item_id, unique(pax_ref_ids)
                )

        empty = [offer_id for offer_id, d in drafts.items() if not d.items]
        if empty:
            self._logger.warning(
                "Dropping fare offers left without fare items",
                extra={"offer_ids": empty},
            )
        return {offer_id: d for offer_id, d in drafts.items() if d.items}

    def _ancillary_blocks(self, selection: PricingSelection) -> Dict[str, _BlockDraft]:
        drafts: Dict[str, _BlockDraft] = {}
        resolved: Dict[ServiceCategory, str] = {}

        for ancillary in selection.ancillaries:
            if self._is_synthetic(ancillary):
                self._logger.debug("Skipping synthetic bundle selection")
                continue

            container_id = self.resolve_container_id(ancillary, selection, resolved)
            if not container_id:
                self._logger.error(
                    "Cannot resolve container offer id, skipping selection",
                    extra={"category": ancillary.category.value},
                )
                continue
            resolved.setdefault(ancillary.category, container_id)

            draft = drafts.setdefault(
                container_id,
                _BlockDraft(container_id, self.config.owner_code, BlockKind.ANCILLARY),
            )
            match ancillary:
                case BundleSelection():
                    self._add_bundle(draft, ancillary)
                case ServiceSelection():
                    self._add_service(draft, ancillary)
                case SeatChoice():
                    self._add_seat(draft, ancillary)
        return drafts

    def _is_synthetic(self, ancillary: AncillarySelection) -> bool:
        return isinstance(ancillary, BundleSelection) and ancillary.bundle_id.endswith(
            self.config.synthetic_bundle_suffix
        )

    def resolve_container_id(
        self,
        ancillary: AncillarySelection,
        selection: PricingSelection,
        resolved: Dict[ServiceCategory, str],
    ) -> Optional[str]:
        """Container offer id for one ancillary.

        Tried in order: the id carried on the ancillary, the selection's
        active container, the container already used for the same
        category, and finally a derivation that strips the numeric
        suffix from the item id. The derivation is a heuristic and is
        logged and counted whenever it is used.
        """
        if ancillary.container_offer_id:
            return ancillary.container_offer_id
        if selection.active_container_id:
            return selection.active_container_id
        if ancillary.category in resolved:
            return resolved[ancillary.category]

        item_id = (
            ancillary.bundle_id
            if isinstance(ancillary, BundleSelection)
            else ancillary.offer_item_id
        )
        found = self._container_pattern.match(item_id)
        if found is None:
            return None
        derived = found.group(1)
        self._logger.warning(
            "Derived container offer id from item id",
            extra={"offer_item_id": item_id, "container_offer_id": derived},
        )
        metrics.inc_counter(
            metrics.CONTAINER_ID_DERIVED, {"category": ancillary.category.value}
        )
        return derived

    def _add_bundle(self, draft: _BlockDraft, bundle: BundleSelection) -> None:
        if not bundle.pax_ref_ids:
            self._logger.warning(
                "Skipping bundle without passengers",
                extra={"bundle_id": bundle.bundle_id},
            )
            return
        if not bundle.journey_ref_ids:
            self._logger.warning(
                "Skipping bundle without journey refs",
                extra={"bundle_id": bundle.bundle_id},
            )
            return

        association = bundle.association
        pax_map = bundle.pax_offer_item_ids
        for pax_ref_id in bundle.pax_ref_ids:
            if pax_map:
                item_id = pax_map.get(pax_ref_id)
                if not item_id:
                    # Lap infants are typically not offered bundles.
                    self._logger.info(
                        "No bundle item for passenger",
                        extra={"bundle_id": bundle.bundle_id, "pax_ref_id": pax_ref_id},
                    )
                    metrics.inc_counter(metrics.BUNDLE_PAX_SKIPPED)
                    continue
            else:
                if pax_ref_id.startswith(self.config.infant_pax_prefix):
                    continue
                item_id = bundle.bundle_id
            item = RequestOfferItem(item_id, (pax_ref_id,), association)
            draft.add(item.key, item)

    def _add_service(self, draft: _BlockDraft, service: ServiceSelection) -> None:
        if not service.offer_item_id.strip():
            self._logger.error(
                "Skipping service with empty offer item id",
                extra={"service_code": service.service_code, "category": service.category.value},
            )
            return
        if service.association.kind is AssociationKind.UNKNOWN:
            self._logger.warning(
                "Skipping service with unknown association",
                extra={"offer_item_id": service.offer_item_id},
            )
            return

        existing = draft.items.get(service.offer_item_id)
        if existing is not None:
            # Same item selected twice already covers both directions:
            # merge passengers, keep the quantity.
            draft.items[service.offer_item_id] = RequestOfferItem(
                existing.offer_item_id,
                unique((*existing.pax_ref_ids, *service.pax_ref_ids)),
                existing.association,
                quantity=existing.quantity,
            )
            return
        draft.add(
            service.offer_item_id,
            RequestOfferItem(
                service.offer_item_id,
                unique(service.pax_ref_ids),
                service.association,
                quantity=service.quantity,
            ),
        )

    def _add_seat(self, draft: _BlockDraft, seat: SeatChoice) -> None:
        if not seat.offer_item_id.strip():
            self._logger.error(
                "Skipping seat with empty offer item id",
                extra={"pax_id": seat.pax_id, "segment_id": seat.segment_id},
            )
            return
        draft.add(
            (seat.offer_item_id, seat.pax_id, seat.segment_id),
            RequestOfferItem(
                seat.offer_item_id,
                (seat.pax_id,),
                seat.association,
                seat_row=seat.row,
                seat_column=seat.column,
            ),
        )

