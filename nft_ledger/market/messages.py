"""Request and query messages.

Messages are tagged by their `type` field and validated with Pydantic:

    request = parse_request({"type": "bid_listing", "listing_id": "1",
                             "bid_amount": {"amount": 120, "denom": "u"}})

Unknown fields are rejected, so a typo fails instead of being ignored.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated, Any, Literal, Union

from pydantic import Field, TypeAdapter

from ..config_schema import StrictModel
from .types import Coin, Royalty


class CoinMsg(StrictModel):
    """An amount of one denomination."""

    amount: int = Field(ge=0)
    denom: str = Field(min_length=1)

    def to_coin(self) -> Coin:
        return Coin(amount=self.amount, denom=self.denom)


class RoyaltyMsg(StrictModel):
    """Royalty owed to an address. The per-asset total is checked on mint."""

    address: str
    rate: Decimal = Field(ge=0)

    def to_royalty(self) -> Royalty:
        return Royalty(address=self.address, rate=self.rate)


# =============================================================================
# REQUESTS
# =============================================================================

class PlaceListingRequest(StrictModel):
    """Put an asset up for auction."""

    type: Literal["place_listing"] = "place_listing"
    asset_id: str = Field(min_length=1)
    minimum_bid: CoinMsg | None = None
    custodian_address: str | None = Field(
        default=None,
        description="Custodian holding the asset; the configured one if omitted"
    )


class BidListingRequest(StrictModel):
    """Bid on an open listing."""

    type: Literal["bid_listing"] = "bid_listing"
    listing_id: str = Field(min_length=1)
    bid_amount: CoinMsg | None = Field(
        default=None,
        description="Declared bid; the attached funds must cover it"
    )


class WithdrawListingRequest(StrictModel):
    """Settle a closed listing."""

    type: Literal["withdraw_listing"] = "withdraw_listing"
    listing_id: str = Field(min_length=1)


class MintRequest(StrictModel):
    """Mint a new asset through the custodian."""

    type: Literal["mint"] = "mint"
    owner: str
    name: str = Field(min_length=1)
    image_uri: str | None = None
    external_link: str | None = None
    description: str | None = None
    collection: int | None = Field(default=None, ge=0)
    real_share_count: int = Field(ge=0)
    unit_count: int = Field(ge=0)
    royalties: list[RoyaltyMsg] = Field(default_factory=list)
    initial_price: int = Field(ge=0)


class RegisterMinterRequest(StrictModel):
    """Whitelist a minter (owner only)."""

    type: Literal["register_minter"] = "register_minter"
    identity: str


class RemoveMinterRequest(StrictModel):
    """Remove a minter from the whitelist (owner only)."""

    type: Literal["remove_minter"] = "remove_minter"
    identity: str


Request = Annotated[
    Union[
        PlaceListingRequest,
        BidListingRequest,
        WithdrawListingRequest,
        MintRequest,
        RegisterMinterRequest,
        RemoveMinterRequest,
    ],
    Field(discriminator="type"),
]


# =============================================================================
# QUERIES
# =============================================================================

class ConfigQuery(StrictModel):
    """Fetch the Config record."""

    type: Literal["config"] = "config"


class ResolveListingQuery(StrictModel):
    """Fetch one listing."""

    type: Literal["resolve_listing"] = "resolve_listing"
    id: str = Field(min_length=1)


class MintersQuery(StrictModel):
    """List whitelisted minters."""

    type: Literal["minters"] = "minters"


_REQUEST_ADAPTER: TypeAdapter[Any] = TypeAdapter(Request)


def parse_request(data: dict[str, Any]) -> Any:
    """Validate a request dict into its message model.

    Raises:
        pydantic.ValidationError: If the type is unknown or a field is invalid
    """
    return _REQUEST_ADAPTER.validate_python(data)


__all__ = [
    "CoinMsg",
    "RoyaltyMsg",
    "PlaceListingRequest",
    "BidListingRequest",
    "WithdrawListingRequest",
    "MintRequest",
    "RegisterMinterRequest",
    "RemoveMinterRequest",
    "Request",
    "ConfigQuery",
    "ResolveListingQuery",
    "MintersQuery",
    "parse_request",
]
