"""Distribution chain carried on every pricing request."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ChainLink:
    """One participant in the distribution chain.

    Attributes:
        ordinal: Position in the chain, starting at 1
        org_role: Role code, e.g. 'Seller' or 'Carrier'
        org_id: Organization identifier
        org_name: Organization display name
    """

    ordinal: int
    org_role: str
    org_id: str
    org_name: str = ""


@dataclass(frozen=True, slots=True)
class DistributionChain:
    links: tuple[ChainLink, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.links

    @classmethod
    def seller_and_carrier(
        cls,
        seller_id: str,
        seller_name: str,
        carrier_id: str,
        carrier_name: str = "",
    ) -> DistributionChain:
        return cls(
            links=(
                ChainLink(1, "Seller", seller_id, seller_name),
                ChainLink(2, "Carrier", carrier_id, carrier_name),
            )
        )
