"""Market records - shared dataclass definitions.

Records are plain data. Stores hand out copies, so mutating a loaded record
has no effect until it is saved back.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from decimal import Decimal
from typing import Any, TypedDict


@dataclass(frozen=True)
class Coin:
    """An amount of one denomination."""
    amount: int
    denom: str

    def to_dict(self) -> dict[str, Any]:
        return {"amount": self.amount, "denom": self.denom}


@dataclass(frozen=True)
class Royalty:
    """Share of secondary sales owed to an address (0 <= rate <= 1)."""
    address: str
    rate: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {"address": self.address, "rate": str(self.rate)}


@dataclass(frozen=True)
class Metadata:
    """Descriptor attached permanently to a minted asset."""
    name: str
    real_share_count: int
    unit_count: int
    initial_price: int
    collection: int
    description: str | None = None
    external_link: str | None = None
    royalties: tuple[Royalty, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "external_link": self.external_link,
            "collection": self.collection,
            "real_share_count": self.real_share_count,
            "unit_count": self.unit_count,
            "royalties": [r.to_dict() for r in self.royalties],
            "initial_price": self.initial_price,
        }


@dataclass
class Listing:
    """An auction for one escrowed asset."""
    listing_id: str
    asset_id: str
    custodian_address: str
    seller: str
    max_bid: Coin | None
    max_bidder: str  # market identity until the first accepted bid
    closing_height: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "listing_id": self.listing_id,
            "asset_id": self.asset_id,
            "custodian_address": self.custodian_address,
            "seller": self.seller,
            "max_bid": self.max_bid.to_dict() if self.max_bid else None,
            "max_bidder": self.max_bidder,
            "closing_height": self.closing_height,
        }


@dataclass
class MinterInfo:
    """Whitelist entry. A window of 0 means not authorized."""
    expiration_time: int = 0
    registered_at: int = 0


@dataclass
class Config:
    """Administrative parameters of one market instance."""
    owner: str
    expiration_time: int
    custodian_address: str
    listing_count: int = 0
    mint_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class BlockInfo:
    """Chain position a request executes at."""
    height: int


@dataclass(frozen=True)
class MessageInfo:
    """Who sent a request and which funds came with it."""
    sender: str
    funds: tuple[Coin, ...] = field(default_factory=tuple)


class ListingResponse(TypedDict):
    """Result of a resolve_listing query."""
    asset_id: str
    custodian_address: str
    seller: str
    best_bid: dict[str, Any] | None
    best_bidder: str
    closing_height: int


__all__ = [
    "Coin",
    "Royalty",
    "Metadata",
    "Listing",
    "MinterInfo",
    "Config",
    "BlockInfo",
    "MessageInfo",
    "ListingResponse",
]
