# Market kernel package
from .market import Market
from .types import (
    Coin, Royalty, Metadata, Listing, MinterInfo, Config,
    BlockInfo, MessageInfo, ListingResponse,
)
from .intents import (
    IntentType, OutboundIntent, ApproveTransferIntent, TransferCustodyIntent,
    MintAssetIntent, SendValueIntent, Response, ExecutionResult,
)
from .messages import (
    CoinMsg, RoyaltyMsg,
    PlaceListingRequest, BidListingRequest, WithdrawListingRequest,
    MintRequest, RegisterMinterRequest, RemoveMinterRequest,
    ConfigQuery, ResolveListingQuery, MintersQuery,
    parse_request,
)
from .errors import (
    ErrorCategory, ErrorCode, MarketError, Unauthorized, UnregisteredMinter,
    InsufficientFundsSend, AuctionEnded, AuctionNotEnded, MixedDenominations, InvalidRoyaltyRate,
    StorageError, NotFound, InvalidAddress,
)
from .stores import MemoryStorage, ConfigStore, ListingStore, MinterRegistry, validate_address
from .auction import AuctionEngine, sufficient_coin
from .minting import MintingEngine, check_royalties
from .queries import QueryService, QUERY_SCHEMA
from .logger import EventLogger

__all__ = [
    "Market",
    "Coin", "Royalty", "Metadata", "Listing", "MinterInfo", "Config",
    "BlockInfo", "MessageInfo", "ListingResponse",
    "IntentType", "OutboundIntent", "ApproveTransferIntent", "TransferCustodyIntent",
    "MintAssetIntent", "SendValueIntent", "Response", "ExecutionResult",
    "CoinMsg", "RoyaltyMsg",
    "PlaceListingRequest", "BidListingRequest", "WithdrawListingRequest",
    "MintRequest", "RegisterMinterRequest", "RemoveMinterRequest",
    "ConfigQuery", "ResolveListingQuery", "MintersQuery",
    "parse_request",
    "ErrorCategory", "ErrorCode", "MarketError", "Unauthorized", "UnregisteredMinter",
    "InsufficientFundsSend", "AuctionEnded", "AuctionNotEnded", "MixedDenominations", "InvalidRoyaltyRate",
    "StorageError", "NotFound", "InvalidAddress",
    "MemoryStorage", "ConfigStore", "ListingStore", "MinterRegistry", "validate_address",
    "AuctionEngine", "sufficient_coin",
    "MintingEngine", "check_royalties",
    "QueryService", "QUERY_SCHEMA",
    "EventLogger",
]
