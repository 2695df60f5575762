"""Market kernel - dispatches requests to the engines atomically.

Each request runs against a storage snapshot: if the engine raises, the
snapshot is restored and no intent leaves the market. On success the
engine's intents are returned for the environment to carry out.

Usage:
    market = Market(app_config)
    market.instantiate(MessageInfo(sender="owner"), custodian_address="custodian")
    result = market.execute(
        PlaceListingRequest(asset_id="GF.1"),
        MessageInfo(sender="alice"),
        BlockInfo(height=100),
    )
"""

from __future__ import annotations

import logging
from typing import Any, TYPE_CHECKING

from pydantic import ValidationError

from .auction import AuctionEngine
from .errors import ErrorCategory, ErrorCode, MarketError, Unauthorized
from .intents import ExecutionResult, Response
from .messages import (
    BidListingRequest,
    MintRequest,
    PlaceListingRequest,
    RegisterMinterRequest,
    RemoveMinterRequest,
    WithdrawListingRequest,
    parse_request,
)
from .minting import MintingEngine
from .queries import QueryService
from .stores import ConfigStore, ListingStore, MemoryStorage, MinterRegistry, validate_address
from .types import BlockInfo, Config, MessageInfo

if TYPE_CHECKING:
    from ..config_schema import AppConfig
    from .logger import EventLogger


logger = logging.getLogger(__name__)


class Market:
    """One market instance: stores, engines and the request dispatcher.

    Dependencies:
        app_config: Validated config (uses global if not provided)
        event_logger: Optional JSONL log of every executed request
        storage: Storage substrate (fresh in-memory storage if not provided)
    """

    def __init__(
        self,
        app_config: AppConfig | None = None,
        event_logger: EventLogger | None = None,
        storage: MemoryStorage | None = None,
    ) -> None:
        if app_config is None:
            from ..config import get_validated_config
            app_config = get_validated_config()
        self._app_config = app_config
        self._event_logger = event_logger
        self.identity = validate_address(app_config.market.identity)

        self.storage = storage or MemoryStorage()
        self.configs = ConfigStore(self.storage)
        self.listings = ListingStore(self.storage)
        self.minters = MinterRegistry(self.storage)

        self.auction = AuctionEngine(self.configs, self.listings, self.identity, app_config)
        self.minting = MintingEngine(self.configs, self.minters, app_config)
        self.queries = QueryService(self.configs, self.listings, self.minters)

    def instantiate(self, info: MessageInfo, custodian_address: str) -> ExecutionResult:
        """Create the Config record. The sender becomes the permanent owner."""
        block = BlockInfo(height=0)
        return self._run("instantiate", info, block, lambda: self._instantiate(info, custodian_address))

    def _instantiate(self, info: MessageInfo, custodian_address: str) -> Response:
        if self.configs.exists():
            raise Unauthorized("Unauthorized: market is already instantiated")
        config = Config(
            owner=validate_address(info.sender),
            expiration_time=self._app_config.minting.default_authorization_window,
            custodian_address=validate_address(custodian_address),
        )
        self.configs.save(config)
        logger.info("Market %s instantiated by %s", self.identity, config.owner)
        return (
            Response()
            .add_attribute("action", "instantiate")
            .add_attribute("owner", config.owner)
        )

    def execute(self, request: Any, info: MessageInfo, block: BlockInfo) -> ExecutionResult:
        """Execute one validated request message."""
        return self._run(request.type, info, block, lambda: self._dispatch(request, info, block))

    def execute_raw(self, data: dict[str, Any], info: MessageInfo, block: BlockInfo) -> ExecutionResult:
        """Validate a request dict, then execute it."""
        try:
            request = parse_request(data)
        except ValidationError as e:
            result = ExecutionResult(
                success=False,
                message=f"Invalid request: {e.error_count()} validation error(s)",
                error_code=ErrorCode.INVALID_ARGUMENT.value,
                error_category=ErrorCategory.VALIDATION.value,
                error_details={"errors": [err["msg"] for err in e.errors()]},
            )
            self._log(str(data.get("type", "unknown")), info, block, result)
            return result
        return self.execute(request, info, block)

    def query(self, data: dict[str, Any] | Any) -> dict[str, Any]:
        """Run a read-only query, given as a dict or a query message."""
        if isinstance(data, dict):
            params = {k: v for k, v in data.items() if k != "type"}
            return self.queries.execute(str(data.get("type", "")), params)
        return self.queries.execute(data.type, data.model_dump(exclude={"type"}))

    def _dispatch(self, request: Any, info: MessageInfo, block: BlockInfo) -> Response:
        if isinstance(request, PlaceListingRequest):
            return self.auction.place_listing(
                info,
                block,
                asset_id=request.asset_id,
                minimum_bid=request.minimum_bid.to_coin() if request.minimum_bid else None,
                custodian_address=request.custodian_address,
            )
        if isinstance(request, BidListingRequest):
            declared = request.bid_amount.to_coin() if request.bid_amount else None
            return self.auction.bid_listing(info, block, request.listing_id, info.funds, declared)
        if isinstance(request, WithdrawListingRequest):
            return self.auction.withdraw_listing(info, block, request.listing_id)
        if isinstance(request, MintRequest):
            return self.minting.mint(
                info,
                block,
                owner=request.owner,
                name=request.name,
                real_share_count=request.real_share_count,
                unit_count=request.unit_count,
                initial_price=request.initial_price,
                royalties=[r.to_royalty() for r in request.royalties],
                image_uri=request.image_uri,
                external_link=request.external_link,
                description=request.description,
                collection=request.collection,
            )
        if isinstance(request, RegisterMinterRequest):
            return self.minting.register_minter(info, block, request.identity)
        if isinstance(request, RemoveMinterRequest):
            return self.minting.remove_minter(info, block, request.identity)
        raise TypeError(f"Unsupported request: {type(request).__name__}")

    def _run(self, request_type: str, info: MessageInfo, block: BlockInfo, operation: Any) -> ExecutionResult:
        snapshot = self.storage.snapshot()
        try:
            response: Response = operation()
        except MarketError as e:
            self.storage.restore(snapshot)
            logger.info("%s from %s rejected: %s", request_type, info.sender, e.message)
            result = ExecutionResult(
                success=False,
                message=e.message,
                error_code=e.code.value,
                error_category=e.category.value,
                retriable=e.retriable,
                error_details=dict(e.details) if e.details else None,
            )
        except Exception:
            self.storage.restore(snapshot)
            raise
        else:
            result = ExecutionResult(
                success=True,
                message=f"{request_type} executed",
                data=dict(response.attributes),
                intents=list(response.intents),
            )
        self._log(request_type, info, block, result)
        return result

    def _log(self, request_type: str, info: MessageInfo, block: BlockInfo, result: ExecutionResult) -> None:
        if self._event_logger is not None:
            self._event_logger.log_request(request_type, info.sender, block.height, result.to_dict())


__all__ = [
    "Market",
]
