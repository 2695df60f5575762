"""Auction engine - listing, bidding and settlement of escrowed assets.

This module handles the listing state machine:
- place: escrow an asset with the market and open bidding
- bid: replace the best bid, refunding the previous bidder
- withdraw: after the closing height, settle and delete the listing

    Open --bid--> Open --withdraw (height > closing)--> Closed (deleted)

Engines never touch the custodian or move value themselves; every effect
is an outbound intent in the returned Response.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from ..constants import SEQUENCE_LISTINGS
from .errors import AuctionEnded, AuctionNotEnded, InsufficientFundsSend, MixedDenominations, Unauthorized
from .intents import ApproveTransferIntent, Response, SendValueIntent, TransferCustodyIntent
from .stores import validate_address
from .types import BlockInfo, Coin, Listing, MessageInfo

if TYPE_CHECKING:
    from ..config_schema import AppConfig
    from .stores import ConfigStore, ListingStore


logger = logging.getLogger(__name__)


def _total_by_denom(funds: Sequence[Coin]) -> dict[str, int]:
    totals: dict[str, int] = {}
    for coin in funds:
        totals[coin.denom] = totals.get(coin.denom, 0) + coin.amount
    return totals


def sufficient_coin(
    funds: Sequence[Coin],
    required: Coin | None,
    declared: Coin | None = None,
) -> Coin:
    """Pick the coin a bid is made with.

    Coins of one denomination are added up first, and zero amounts are
    ignored. The funds must then hold exactly one denomination, so every
    coin sent is escrowed as the bid. With a required coin, that
    denomination must match and the amount must reach it. A declared bid
    must be covered by the funds as well.

    Raises:
        MixedDenominations: If non-zero coins of several denominations are sent
        InsufficientFundsSend: If the funds do not cover the required or declared coin
    """
    totals = {denom: amount for denom, amount in _total_by_denom(funds).items() if amount > 0}
    if len(totals) > 1:
        raise MixedDenominations(
            f"Bid funds must be a single denomination, sent {', '.join(sorted(totals))}",
            denoms=sorted(totals),
        )
    if not totals:
        raise InsufficientFundsSend("Insufficient funds sent: no funds attached to the bid")
    [(denom, amount)] = totals.items()
    sent = Coin(amount=amount, denom=denom)

    for needed in (required, declared):
        if needed is None:
            continue
        if sent.denom != needed.denom or sent.amount < needed.amount:
            raise InsufficientFundsSend(
                f"Insufficient funds sent: need at least {needed.amount}{needed.denom}, "
                f"sent {sent.amount}{sent.denom}",
                required=needed.to_dict(),
                sent=sent.to_dict(),
            )
    return sent


class AuctionEngine:
    """Runs PlaceListing / BidListing / WithdrawListing.

    Dependencies:
        configs: Config record (listing counter, default custodian)
        listings: Listing records
        identity: Address the market acts as; a listing whose best bidder
            is this identity has no bid yet
        app_config: Timing and settlement settings (uses global if not provided)
    """

    def __init__(
        self,
        configs: ConfigStore,
        listings: ListingStore,
        identity: str,
        app_config: AppConfig | None = None,
    ) -> None:
        if app_config is None:
            from ..config import get_validated_config
            app_config = get_validated_config()
        self._configs = configs
        self._listings = listings
        self._identity = identity
        self._duration_blocks = app_config.auction.duration_blocks
        self._approval_window_blocks = app_config.auction.approval_window_blocks
        self._shared_counter = app_config.sequencing.shared_counter
        self._proceeds_recipient = app_config.settlement.proceeds_recipient

    @property
    def identity(self) -> str:
        return self._identity

    def has_bid(self, listing: Listing) -> bool:
        """True once a real bidder holds the best bid."""
        return listing.max_bidder != self._identity

    def place_listing(
        self,
        info: MessageInfo,
        block: BlockInfo,
        asset_id: str,
        minimum_bid: Coin | None = None,
        custodian_address: str | None = None,
    ) -> Response:
        """Escrow an asset and open an auction for it.

        Args:
            info: Sender becomes the seller
            block: Placement height; bidding closes duration_blocks later
            asset_id: Asset to auction, as known to the custodian
            minimum_bid: Lowest acceptable first bid (any non-zero bid if None)
            custodian_address: Custodian holding the asset (configured one if None)

        Returns:
            Response with listing_id and the approve + transfer intents
        """
        config = self._configs.load()
        custodian = validate_address(custodian_address or config.custodian_address)
        seller = validate_address(info.sender)

        listing_id = str(self._configs.next_sequence(SEQUENCE_LISTINGS, shared=self._shared_counter))
        listing = Listing(
            listing_id=listing_id,
            asset_id=asset_id,
            custodian_address=custodian,
            seller=seller,
            max_bid=minimum_bid,
            max_bidder=self._identity,
            closing_height=block.height + self._duration_blocks,
        )
        self._listings.save(listing)

        logger.info(
            "Listing %s placed by %s for asset %s, closes at %d",
            listing_id, seller, asset_id, listing.closing_height,
        )

        # Approval expires before the closing height; custody moves to the
        # market within this same request.
        return (
            Response()
            .add_attribute("action", "place_listing")
            .add_attribute("listing_id", listing_id)
            .add_attribute("asset_id", asset_id)
            .add_intent(ApproveTransferIntent(
                custodian_address=custodian,
                spender=self._identity,
                asset_id=asset_id,
                expires_at_height=block.height + self._approval_window_blocks,
            ))
            .add_intent(TransferCustodyIntent(
                custodian_address=custodian,
                recipient=self._identity,
                asset_id=asset_id,
            ))
        )

    def bid_listing(
        self,
        info: MessageInfo,
        block: BlockInfo,
        listing_id: str,
        funds: Sequence[Coin],
        declared: Coin | None = None,
    ) -> Response:
        """Replace the best bid on an open listing.

        The attached funds are the bid and stay escrowed with the market.
        They must cover the current best bid, or the minimum bid while
        nobody has bid, and the declared bid when one is stated. The
        previous bidder is refunded in full.

        Raises:
            NotFound: If the listing does not exist
            AuctionEnded: If the closing height has passed
            InsufficientFundsSend: If the funds do not cover the required bid
            MixedDenominations: If the funds hold several denominations
        """
        bidder = validate_address(info.sender)
        if bidder == self._identity:
            raise Unauthorized("The market cannot bid on its own listings")
        listing = self._listings.load(listing_id)
        if block.height > listing.closing_height:
            raise AuctionEnded(
                f"Auction Ended: listing {listing_id} closed at height {listing.closing_height}",
                listing_id=listing_id,
                closing_height=listing.closing_height,
            )

        sent = sufficient_coin(funds, listing.max_bid, declared)
        previous_bid = listing.max_bid
        previous_bidder = listing.max_bidder
        had_bid = self.has_bid(listing)

        listing.max_bidder = bidder
        listing.max_bid = sent
        self._listings.save(listing)

        response = (
            Response()
            .add_attribute("action", "bid_listing")
            .add_attribute("listing_id", listing_id)
            .add_attribute("bidder", bidder)
            .add_attribute("amount", f"{sent.amount}{sent.denom}")
        )
        if had_bid and previous_bid is not None:
            response.add_intent(SendValueIntent(recipient=previous_bidder, amount=previous_bid))
            logger.info("Listing %s: %s outbid %s, refunding %s", listing_id, bidder, previous_bidder, previous_bid)
        else:
            logger.info("Listing %s: first bid by %s", listing_id, bidder)
        return response

    def withdraw_listing(
        self,
        info: MessageInfo,
        block: BlockInfo,
        listing_id: str,
    ) -> Response:
        """Settle a closed auction and delete the listing.

        Sold: the asset goes to the best bidder and the bid to the proceeds
        recipient (the seller, or the bidder under legacy routing).
        Unsold: the asset goes back to the seller.

        Raises:
            NotFound: If the listing does not exist
            AuctionNotEnded: If the height has not passed the closing height
        """
        listing = self._listings.load(listing_id)
        if block.height <= listing.closing_height:
            raise AuctionNotEnded(
                f"Auction Not Ended Yet: listing {listing_id} closes at height {listing.closing_height}",
                listing_id=listing_id,
                closing_height=listing.closing_height,
            )

        self._listings.remove(listing_id)
        response = Response().add_attribute("listing_id", listing_id)

        if self.has_bid(listing) and listing.max_bid is not None:
            proceeds_to = listing.seller if self._proceeds_recipient == "seller" else listing.max_bidder
            response.add_attribute("action", "listing_sold")
            response.add_intent(TransferCustodyIntent(
                custodian_address=listing.custodian_address,
                recipient=listing.max_bidder,
                asset_id=listing.asset_id,
            ))
            response.add_intent(SendValueIntent(recipient=proceeds_to, amount=listing.max_bid))
            logger.info(
                "Listing %s sold to %s for %s, proceeds to %s (withdrawn by %s)",
                listing_id, listing.max_bidder, listing.max_bid, proceeds_to, info.sender,
            )
        else:
            response.add_attribute("action", "listing_unsold")
            response.add_intent(TransferCustodyIntent(
                custodian_address=listing.custodian_address,
                recipient=listing.seller,
                asset_id=listing.asset_id,
            ))
            logger.info("Listing %s unsold, asset returned to %s", listing_id, listing.seller)
        return response


__all__ = [
    "AuctionEngine",
    "sufficient_coin",
]
