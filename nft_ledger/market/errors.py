"""Error kinds and standardized error responses for market requests.

Engines raise `MarketError` subclasses. The dispatcher turns them into
structured responses so callers can switch on a machine-readable code:

    try:
        engine.bid_listing(...)
    except MarketError as e:
        return e.to_response()      # {"success": False, "code": ...}

Every error aborts the whole request: no state change, no outbound intent.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Categories for error classification.

    - VALIDATION: Caller provided bad input
    - PERMISSION: Caller lacks a role, whitelist entry or funds
    - RESOURCE: Record not found
    - EXECUTION: Request arrived at the wrong point of the auction timeline
    """

    VALIDATION = "validation"
    PERMISSION = "permission"
    RESOURCE = "resource"
    EXECUTION = "execution"


class ErrorCode(str, Enum):
    """Specific error codes for programmatic handling."""

    # Validation errors
    MISSING_ARGUMENT = "missing_argument"
    INVALID_ARGUMENT = "invalid_argument"
    INVALID_ADDRESS = "invalid_address"
    INVALID_ROYALTY_RATE = "invalid_royalty_rate"
    INVALID_FUNDS = "invalid_funds"
    INVALID_QUERY_TYPE = "invalid_query_type"
    INVALID_PARAM = "invalid_param"

    # Permission errors
    NOT_AUTHORIZED = "not_authorized"
    UNREGISTERED_MINTER = "unregistered_minter"
    INSUFFICIENT_FUNDS = "insufficient_funds"

    # Resource errors
    NOT_FOUND = "not_found"

    # Execution errors
    AUCTION_ENDED = "auction_ended"
    AUCTION_NOT_ENDED = "auction_not_ended"


@dataclass
class ErrorResponse:
    """Standardized error response.

    All error responses include:
    - success: Always False
    - error: Human-readable message
    - code: Machine-readable error code
    - category: Error category (validation, permission, etc.)
    - retriable: Whether the request may succeed if sent again unchanged
    - details: Optional additional context
    """

    success: bool = False
    error: str = ""
    code: str = ""
    category: str = ""
    retriable: bool = False
    details: dict[str, object] | None = None

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for serialization."""
        result: dict[str, object] = {
            "success": self.success,
            "error": self.error,
            "code": self.code,
            "category": self.category,
            "retriable": self.retriable,
        }
        if self.details:
            result["details"] = self.details
        return result


# Factory functions for creating error responses


def validation_error(
    message: str,
    code: ErrorCode = ErrorCode.INVALID_ARGUMENT,
    **details: object,
) -> dict[str, object]:
    """Create a validation error response.

    Use when the caller provided invalid input.
    """
    return ErrorResponse(
        error=message,
        code=code.value,
        category=ErrorCategory.VALIDATION.value,
        retriable=False,
        details=dict(details) if details else None,
    ).to_dict()


# Exception hierarchy raised by the engines


class MarketError(Exception):
    """Base class for every failure a market request can end with."""

    code: ErrorCode = ErrorCode.INVALID_ARGUMENT
    category: ErrorCategory = ErrorCategory.VALIDATION
    retriable: bool = False
    default_message: str = "Invalid request"

    def __init__(self, message: str | None = None, **details: Any) -> None:
        self.message = message or self.default_message
        self.details: dict[str, Any] = details
        super().__init__(self.message)

    def to_response(self) -> dict[str, object]:
        """Structured error response for this failure."""
        return ErrorResponse(
            error=self.message,
            code=self.code.value,
            category=self.category.value,
            retriable=self.retriable,
            details=dict(self.details) if self.details else None,
        ).to_dict()


class Unauthorized(MarketError):
    """Caller lacks the required role or whitelist entry."""

    code = ErrorCode.NOT_AUTHORIZED
    category = ErrorCategory.PERMISSION
    default_message = "Unauthorized"


class UnregisteredMinter(Unauthorized):
    """Caller is not on the minter whitelist (or its entry has lapsed)."""

    code = ErrorCode.UNREGISTERED_MINTER
    default_message = "unregistered minter"


class InsufficientFundsSend(MarketError):
    """Bid does not cover the current best bid or the minimum bid."""

    code = ErrorCode.INSUFFICIENT_FUNDS
    category = ErrorCategory.PERMISSION
    default_message = "Insufficient funds sent"


class AuctionEnded(MarketError):
    """Bid arrived after the listing's closing height."""

    code = ErrorCode.AUCTION_ENDED
    category = ErrorCategory.EXECUTION
    default_message = "Auction Ended"


class AuctionNotEnded(MarketError):
    """Withdrawal requested at or before the listing's closing height."""

    code = ErrorCode.AUCTION_NOT_ENDED
    category = ErrorCategory.EXECUTION
    retriable = True
    default_message = "Auction Not Ended Yet"


class MixedDenominations(MarketError):
    """Bid funds hold more than one denomination."""

    code = ErrorCode.INVALID_FUNDS
    default_message = "Bid funds must be a single denomination"


class InvalidRoyaltyRate(MarketError):
    """Royalty rates of a mint request add up to more than 1."""

    code = ErrorCode.INVALID_ROYALTY_RATE
    default_message = "some of royalty rates are larger than 1"


class StorageError(MarketError):
    """Wraps failures of the storage substrate and address validation."""


class NotFound(StorageError):
    """Requested record does not exist."""

    code = ErrorCode.NOT_FOUND
    category = ErrorCategory.RESOURCE
    default_message = "not found"


class InvalidAddress(StorageError):
    """Identity or contract address failed format validation."""

    code = ErrorCode.INVALID_ADDRESS
    default_message = "invalid address"


__all__ = [
    "ErrorCategory",
    "ErrorCode",
    "ErrorResponse",
    "validation_error",
    "MarketError",
    "Unauthorized",
    "UnregisteredMinter",
    "InsufficientFundsSend",
    "AuctionEnded",
    "AuctionNotEnded",
    "MixedDenominations",
    "InvalidRoyaltyRate",
    "StorageError",
    "NotFound",
    "InvalidAddress",
]
