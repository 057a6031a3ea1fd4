"""Bundle reconciliation.

A-la-carte bundle lines are published once for the whole shopping
response, not per flight offer. Their eligibility names journeys like
``fl913653037`` while flight offers name segments like ``seg913653037``.
The two share a numeric core; this module uses it to decide which
bundle lines price which offer, then collapses the matched lines into
one BundleOfferItem per product code.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from .. import metrics
from ..config import MatchingConfig, get_config
from ..domain.models import (
    ALaCarteOfferItem,
    BundleDefinition,
    BundleInclusion,
    BundleInclusions,
    BundleOfferItem,
    DefinitionCatalog,
    ServiceCategory,
)


def strip_prefix(value: str, prefixes: Sequence[str]) -> str:
    """Remove the first matching prefix from ``value``."""
    for prefix in prefixes:
        if prefix and value.startswith(prefix):
            return value[len(prefix):]
    return value


@dataclass
class BundleReconciler:
    """Matches a-la-carte bundle lines to a flight offer.

    Attributes:
        config: Correlation prefixes and the no-match fallback switch
    """

    config: MatchingConfig = field(default_factory=lambda: get_config().matching)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def numeric_core(self, journey_ref_id: str) -> str:
        return strip_prefix(journey_ref_id, self.config.journey_ref_prefixes)

    def matches(
        self,
        item: ALaCarteOfferItem,
        segment_cores: set[str],
        offer_journey_refs: Sequence[str],
    ) -> bool:
        """Whether ``item`` prices the offer described by the refs.

        An item matches when its journey's numeric core equals the core
        of any offer segment, or when the offer's journey refs contain
        the item's journey ref or its numeric core.
        """
        journey_ref = item.journey_ref_id
        if not journey_ref:
            return False
        core = self.numeric_core(journey_ref)
        if core in segment_cores:
            return True
        if journey_ref in offer_journey_refs:
            return True
        return bool(core) and any(core in ref for ref in offer_journey_refs)

    def match_bundles_to_offer(
        self,
        alacarte_items: Sequence[ALaCarteOfferItem],
        catalog: DefinitionCatalog,
        offer_segment_refs: Sequence[str],
        offer_journey_refs: Sequence[str] = (),
        offer_id: Optional[str] = None,
    ) -> tuple[BundleOfferItem, ...]:
        """Resolve the bundles one flight offer can be sold with.

        Args:
            alacarte_items: Every bundle line of the a-la-carte offer.
            catalog: Definitions of the same shopping response.
            offer_segment_refs: Segment ids the offer's items cover.
            offer_journey_refs: Journey ids the offer's items name.
            offer_id: Used for logging only.

        Returns:
            At most one BundleOfferItem per bundle product code, in the
            order the product codes first appear.
        """
        segment_cores = {
            core
            for core in (
                strip_prefix(ref, self.config.segment_ref_prefixes)
                for ref in offer_segment_refs
            )
            if core
        }
        matched = [
            item
            for item in alacarte_items
            if self.matches(item, segment_cores, offer_journey_refs)
        ]

        candidates: Sequence[ALaCarteOfferItem] = matched
        if not matched and alacarte_items:
            if self.config.include_all_on_no_match:
                self._logger.warning(
                    "No bundle line matched the offer, considering all lines",
                    extra={
                        "offer_id": offer_id,
                        "alacarte_items": len(alacarte_items),
                        "segment_refs": list(offer_segment_refs),
                    },
                )
                metrics.inc_counter(metrics.RECONCILIATION_FALLBACK)
                candidates = alacarte_items
            else:
                self._logger.info(
                    "No bundle line matched the offer",
                    extra={"offer_id": offer_id},
                )

        grouped: Dict[str, List[ALaCarteOfferItem]] = {}
        definitions: Dict[str, BundleDefinition] = {}
        for item in candidates:
            definition = catalog.bundle(item.service_definition_ref_id)
            if definition is None:
                self._logger.debug(
                    "Skipping line with unknown bundle definition",
                    extra={
                        "offer_item_id": item.offer_item_id,
                        "service_definition_ref_id": item.service_definition_ref_id,
                    },
                )
                continue
            grouped.setdefault(definition.service_code, []).append(item)
            definitions.setdefault(definition.service_code, definition)

        bundles = tuple(
            self._build_bundle(items, definitions[code], catalog)
            for code, items in grouped.items()
        )
        self._logger.debug(
            "Matched bundles to offer",
            extra={
                "offer_id": offer_id,
                "bundles": [b.service_code for b in bundles],
                "matched": len(matched),
                "considered": len(candidates),
            },
        )
        return bundles

    def _build_bundle(
        self,
        items: Sequence[ALaCarteOfferItem],
        definition: BundleDefinition,
        catalog: DefinitionCatalog,
    ) -> BundleOfferItem:
        primary = items[0]
        pax_offer_item_ids: Dict[str, str] = {}
        for item in items:
            for pax_ref_id in item.pax_ref_ids:
                pax_offer_item_ids[pax_ref_id] = item.offer_item_id

        return BundleOfferItem(
            offer_item_id=primary.offer_item_id,
            service_definition_ref_id=primary.service_definition_ref_id,
            service_code=definition.service_code,
            bundle_name=definition.name,
            description=definition.description,
            price=primary.price,
            pax_ref_ids=tuple(pax_offer_item_ids),
            pax_offer_item_ids=pax_offer_item_ids,
            journey_ref_ids=primary.journey_ref_ids,
            inclusions=self.resolve_inclusions(definition, catalog),
        )

    def resolve_inclusions(
        self,
        definition: BundleDefinition,
        catalog: DefinitionCatalog,
    ) -> BundleInclusions:
        """Bucket a bundle's included services by category."""
        buckets: Dict[ServiceCategory, List[BundleInclusion]] = {}
        for ref_id in definition.included_service_ref_ids:
            service = catalog.service(ref_id)
            if service is None:
                continue
            buckets.setdefault(service.category, []).append(
                BundleInclusion(
                    service_code=service.service_code,
                    name=service.name,
                    description=service.description,
                )
            )
        known = (ServiceCategory.BAGGAGE, ServiceCategory.SEAT, ServiceCategory.MEAL)
        return BundleInclusions(
            baggage=tuple(buckets.get(ServiceCategory.BAGGAGE, ())),
            seats=tuple(buckets.get(ServiceCategory.SEAT, ())),
            meals=tuple(buckets.get(ServiceCategory.MEAL, ())),
            other=tuple(
                inclusion
                for category, inclusions in buckets.items()
                if category not in known
                for inclusion in inclusions
            ),
        )
