"""Tests for the auction engine: place, bid and withdraw."""

from __future__ import annotations

import pytest

from nft_ledger.config_schema import AppConfig, validate_config_dict
from nft_ledger.market.auction import AuctionEngine, sufficient_coin
from nft_ledger.market.errors import (
    AuctionEnded,
    AuctionNotEnded,
    InsufficientFundsSend,
    MixedDenominations,
    NotFound,
    Unauthorized,
)
from nft_ledger.market.intents import (
    ApproveTransferIntent,
    IntentType,
    SendValueIntent,
    TransferCustodyIntent,
)
from nft_ledger.market.stores import ConfigStore, ListingStore, MemoryStorage
from nft_ledger.market.types import BlockInfo, Coin, Config, MessageInfo


MARKET = "nft_ledger_market"


def info(sender: str, *coins: tuple[int, str]) -> MessageInfo:
    return MessageInfo(sender=sender, funds=tuple(Coin(amount=a, denom=d) for a, d in coins))


def build_engine(app_config: AppConfig) -> tuple[AuctionEngine, ConfigStore, ListingStore]:
    storage = MemoryStorage()
    configs = ConfigStore(storage)
    configs.save(Config(owner="admin", expiration_time=1000, custodian_address="nft_custodian"))
    listings = ListingStore(storage)
    return AuctionEngine(configs, listings, MARKET, app_config), configs, listings


@pytest.fixture
def engine(app_config: AppConfig) -> AuctionEngine:
    return build_engine(app_config)[0]


@pytest.fixture
def listings(engine: AuctionEngine) -> ListingStore:
    return engine._listings


class TestSufficientCoin:
    """Tests for picking the bid coin out of the sent funds."""

    def test_equal_amount_accepted(self) -> None:
        coin = sufficient_coin([Coin(100, "u")], Coin(100, "u"))
        assert coin == Coin(100, "u")

    def test_same_denom_summed(self) -> None:
        coin = sufficient_coin([Coin(60, "u"), Coin(50, "u")], Coin(100, "u"))
        assert coin == Coin(110, "u")

    def test_other_denom_rejected_not_dropped(self) -> None:
        """Every coin sent must be escrowed as the bid."""
        with pytest.raises(MixedDenominations) as exc_info:
            sufficient_coin([Coin(150, "u"), Coin(50, "x")], Coin(100, "u"))
        assert exc_info.value.details["denoms"] == ["u", "x"]

    def test_zero_amount_of_other_denom_ignored(self) -> None:
        coin = sufficient_coin([Coin(150, "u"), Coin(0, "x")], Coin(100, "u"))
        assert coin == Coin(150, "u")

    def test_wrong_denom_rejected(self) -> None:
        with pytest.raises(InsufficientFundsSend):
            sufficient_coin([Coin(500, "x")], Coin(100, "u"))

    def test_below_required_rejected(self) -> None:
        with pytest.raises(InsufficientFundsSend) as exc_info:
            sufficient_coin([Coin(99, "u")], Coin(100, "u"))
        assert exc_info.value.details["sent"] == {"amount": 99, "denom": "u"}

    def test_zero_never_accepted(self) -> None:
        with pytest.raises(InsufficientFundsSend):
            sufficient_coin([Coin(0, "u")], Coin(0, "u"))

    def test_no_minimum_single_nonzero_denom(self) -> None:
        coin = sufficient_coin([Coin(0, "x"), Coin(7, "u")], None)
        assert coin == Coin(7, "u")

    def test_no_minimum_mixed_denoms_rejected(self) -> None:
        with pytest.raises(MixedDenominations):
            sufficient_coin([Coin(7, "u"), Coin(3, "x")], None)

    def test_no_minimum_no_funds(self) -> None:
        with pytest.raises(InsufficientFundsSend):
            sufficient_coin([], None)

    def test_declared_bid_must_be_covered(self) -> None:
        with pytest.raises(InsufficientFundsSend) as exc_info:
            sufficient_coin([Coin(120, "u")], Coin(100, "u"), declared=Coin(1_000_000, "u"))
        assert exc_info.value.details["required"] == {"amount": 1_000_000, "denom": "u"}

    def test_declared_bid_without_funds_rejected(self) -> None:
        with pytest.raises(InsufficientFundsSend):
            sufficient_coin([], None, declared=Coin(1_000_000, "u"))

    def test_funds_above_declared_bid_are_the_bid(self) -> None:
        coin = sufficient_coin([Coin(120, "u")], Coin(100, "u"), declared=Coin(110, "u"))
        assert coin == Coin(120, "u")


@pytest.mark.feature("auction")
class TestPlaceListing:
    def test_creates_open_listing(self, engine: AuctionEngine, listings: ListingStore) -> None:
        response = engine.place_listing(info("seller"), BlockInfo(100), "GF.1", Coin(100, "u"))

        assert response.attributes == {"action": "place_listing", "listing_id": "1", "asset_id": "GF.1"}
        listing = listings.load("1")
        assert listing.seller == "seller"
        assert listing.max_bidder == MARKET
        assert listing.max_bid == Coin(100, "u")
        assert listing.closing_height == 100 + 50_000
        assert listing.custodian_address == "nft_custodian"
        assert engine.has_bid(listing) is False

    def test_emits_approve_then_transfer(self, engine: AuctionEngine) -> None:
        response = engine.place_listing(info("seller"), BlockInfo(100), "GF.1")
        approve, transfer = response.intents

        assert isinstance(approve, ApproveTransferIntent)
        assert approve.target == "nft_custodian"
        assert approve.spender == MARKET
        assert approve.asset_id == "GF.1"
        assert approve.expires_at_height == 100 + 20_000
        assert isinstance(transfer, TransferCustodyIntent)
        assert transfer.recipient == MARKET
        assert transfer.asset_id == "GF.1"

    def test_listing_keys_increase(self, engine: AuctionEngine) -> None:
        first = engine.place_listing(info("seller"), BlockInfo(1), "GF.1")
        second = engine.place_listing(info("seller"), BlockInfo(1), "GF.2")
        assert first.attributes["listing_id"] == "1"
        assert second.attributes["listing_id"] == "2"

    def test_custodian_override(self, engine: AuctionEngine, listings: ListingStore) -> None:
        response = engine.place_listing(info("seller"), BlockInfo(1), "X.1", custodian_address="other_custodian")
        assert response.intents[0].target == "other_custodian"
        assert listings.load("1").custodian_address == "other_custodian"

    def test_configured_timing(self) -> None:
        config = validate_config_dict({"auction": {"duration_blocks": 10, "approval_window_blocks": 5}})
        engine, _, listings = build_engine(config)
        response = engine.place_listing(info("seller"), BlockInfo(3), "GF.1")
        assert listings.load("1").closing_height == 13
        assert response.intents[0].expires_at_height == 8


@pytest.mark.feature("auction")
class TestBidListing:
    @pytest.fixture
    def listing_id(self, engine: AuctionEngine) -> str:
        response = engine.place_listing(info("seller"), BlockInfo(100), "GF.1", Coin(100, "u"))
        return response.attributes["listing_id"]

    def test_first_bid_has_no_refund(self, engine: AuctionEngine, listings: ListingStore, listing_id: str) -> None:
        response = engine.bid_listing(info("alice"), BlockInfo(200), listing_id, [Coin(120, "u")])

        assert response.intents == []
        assert response.attributes["bidder"] == "alice"
        assert response.attributes["amount"] == "120u"
        listing = listings.load(listing_id)
        assert listing.max_bidder == "alice"
        assert listing.max_bid == Coin(120, "u")

    def test_outbid_refunds_previous(self, engine: AuctionEngine, listings: ListingStore, listing_id: str) -> None:
        engine.bid_listing(info("alice"), BlockInfo(200), listing_id, [Coin(120, "u")])
        response = engine.bid_listing(info("bob"), BlockInfo(300), listing_id, [Coin(150, "u")])

        [refund] = response.intents
        assert isinstance(refund, SendValueIntent)
        assert refund.recipient == "alice"
        assert refund.amount == Coin(120, "u")
        assert listings.load(listing_id).max_bidder == "bob"

    def test_equal_bid_replaces(self, engine: AuctionEngine, listings: ListingStore, listing_id: str) -> None:
        engine.bid_listing(info("alice"), BlockInfo(200), listing_id, [Coin(120, "u")])
        response = engine.bid_listing(info("bob"), BlockInfo(201), listing_id, [Coin(120, "u")])
        assert listings.load(listing_id).max_bidder == "bob"
        assert response.intents[0].recipient == "alice"

    def test_low_bid_rejected(self, engine: AuctionEngine, listings: ListingStore, listing_id: str) -> None:
        with pytest.raises(InsufficientFundsSend):
            engine.bid_listing(info("alice"), BlockInfo(200), listing_id, [Coin(99, "u")])
        assert listings.load(listing_id).max_bidder == MARKET

    def test_bid_at_closing_height_accepted(self, engine: AuctionEngine, listing_id: str) -> None:
        engine.bid_listing(info("alice"), BlockInfo(100 + 50_000), listing_id, [Coin(100, "u")])

    def test_bid_after_close_rejected(self, engine: AuctionEngine, listing_id: str) -> None:
        with pytest.raises(AuctionEnded):
            engine.bid_listing(info("alice"), BlockInfo(100 + 50_001), listing_id, [Coin(500, "u")])

    def test_unknown_listing(self, engine: AuctionEngine) -> None:
        with pytest.raises(NotFound):
            engine.bid_listing(info("alice"), BlockInfo(1), "42", [Coin(1, "u")])

    def test_declared_bid_without_escrow_rejected(
        self, engine: AuctionEngine, listings: ListingStore, listing_id: str
    ) -> None:
        engine.bid_listing(info("alice"), BlockInfo(200), listing_id, [Coin(120, "u")])
        with pytest.raises(InsufficientFundsSend):
            engine.bid_listing(info("mallory"), BlockInfo(201), listing_id, [], declared=Coin(1_000_000, "u"))
        listing = listings.load(listing_id)
        assert listing.max_bidder == "alice"
        assert listing.max_bid == Coin(120, "u")

    def test_mixed_funds_rejected(self, engine: AuctionEngine, listings: ListingStore, listing_id: str) -> None:
        with pytest.raises(MixedDenominations):
            engine.bid_listing(info("alice"), BlockInfo(200), listing_id, [Coin(150, "u"), Coin(50, "x")])
        assert listings.load(listing_id).max_bidder == MARKET

    def test_market_cannot_bid(self, engine: AuctionEngine, listing_id: str) -> None:
        with pytest.raises(Unauthorized):
            engine.bid_listing(info(MARKET), BlockInfo(200), listing_id, [Coin(500, "u")])

    def test_no_minimum_any_nonzero_bid(self, engine: AuctionEngine, listings: ListingStore) -> None:
        listing_id = engine.place_listing(info("seller"), BlockInfo(1), "GF.2").attributes["listing_id"]
        engine.bid_listing(info("alice"), BlockInfo(2), listing_id, [Coin(1, "x")])
        assert listings.load(listing_id).max_bid == Coin(1, "x")


@pytest.mark.feature("auction")
class TestWithdrawListing:
    @pytest.fixture
    def listing_id(self, engine: AuctionEngine) -> str:
        return engine.place_listing(info("seller"), BlockInfo(100), "GF.1", Coin(100, "u")).attributes["listing_id"]

    def test_not_ended(self, engine: AuctionEngine, listings: ListingStore, listing_id: str) -> None:
        with pytest.raises(AuctionNotEnded):
            engine.withdraw_listing(info("seller"), BlockInfo(100 + 50_000), listing_id)
        assert listings.may_load(listing_id) is not None

    def test_sold(self, engine: AuctionEngine, listings: ListingStore, listing_id: str) -> None:
        engine.bid_listing(info("bob"), BlockInfo(300), listing_id, [Coin(150, "u")])
        response = engine.withdraw_listing(info("anyone"), BlockInfo(100 + 50_001), listing_id)

        assert response.attributes["action"] == "listing_sold"
        transfer, payment = response.intents
        assert transfer.intent_type == IntentType.TRANSFER_CUSTODY
        assert transfer.recipient == "bob"
        assert transfer.asset_id == "GF.1"
        assert payment.intent_type == IntentType.SEND
        assert payment.recipient == "seller"
        assert payment.amount == Coin(150, "u")
        assert listings.may_load(listing_id) is None

    def test_unsold_returns_asset(self, engine: AuctionEngine, listings: ListingStore, listing_id: str) -> None:
        response = engine.withdraw_listing(info("seller"), BlockInfo(100 + 50_001), listing_id)

        assert response.attributes["action"] == "listing_unsold"
        [transfer] = response.intents
        assert transfer.recipient == "seller"
        assert transfer.asset_id == "GF.1"
        assert listings.may_load(listing_id) is None

    def test_second_withdraw_not_found(self, engine: AuctionEngine, listing_id: str) -> None:
        engine.withdraw_listing(info("seller"), BlockInfo(100 + 50_001), listing_id)
        with pytest.raises(NotFound):
            engine.withdraw_listing(info("seller"), BlockInfo(100 + 50_002), listing_id)

    def test_legacy_proceeds_to_bidder(self) -> None:
        engine, _, _ = build_engine(validate_config_dict({"settlement": {"proceeds_recipient": "bidder"}}))
        listing_id = engine.place_listing(info("seller"), BlockInfo(0), "GF.1").attributes["listing_id"]
        engine.bid_listing(info("bob"), BlockInfo(1), listing_id, [Coin(150, "u")])
        response = engine.withdraw_listing(info("seller"), BlockInfo(50_001), listing_id)
        assert response.intents[1].recipient == "bob"
