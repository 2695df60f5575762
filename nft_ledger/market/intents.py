"""Outbound intents and request results.

Engines never call collaborators. They return intents that the execution
environment carries out after the request commits:
- Asset Custodian: approve_transfer, transfer_custody, mint_asset
- Value transfer service: send
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .types import Coin, Metadata


class IntentType(str, Enum):
    """Collaborator operations the core can request."""

    APPROVE_TRANSFER = "approve_transfer"
    TRANSFER_CUSTODY = "transfer_custody"
    MINT_ASSET = "mint_asset"
    SEND = "send"


@dataclass
class OutboundIntent:
    """Base class for outbound intents.

    `target` is the collaborator the environment dispatches to: a custodian
    contract address, or the recipient for value transfers.
    """

    intent_type: IntentType
    target: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "intent_type": self.intent_type.value,
            "target": self.target,
        }


@dataclass
class ApproveTransferIntent(OutboundIntent):
    """Let `spender` move `asset_id` until `expires_at_height`"""

    spender: str
    asset_id: str
    expires_at_height: int

    def __init__(self, custodian_address: str, spender: str, asset_id: str, expires_at_height: int) -> None:
        super().__init__(IntentType.APPROVE_TRANSFER, custodian_address)
        self.spender = spender
        self.asset_id = asset_id
        self.expires_at_height = expires_at_height

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        d["spender"] = self.spender
        d["asset_id"] = self.asset_id
        d["expires"] = {"at_height": self.expires_at_height}
        return d


@dataclass
class TransferCustodyIntent(OutboundIntent):
    """Move custody of `asset_id` to `recipient`"""

    recipient: str
    asset_id: str

    def __init__(self, custodian_address: str, recipient: str, asset_id: str) -> None:
        super().__init__(IntentType.TRANSFER_CUSTODY, custodian_address)
        self.recipient = recipient
        self.asset_id = asset_id

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        d["recipient"] = self.recipient
        d["asset_id"] = self.asset_id
        return d


@dataclass
class MintAssetIntent(OutboundIntent):
    """Create a new asset on the custodian"""

    asset_id: str
    owner: str
    token_uri: str | None
    metadata: Metadata

    def __init__(
        self,
        custodian_address: str,
        asset_id: str,
        owner: str,
        token_uri: str | None,
        metadata: Metadata,
    ) -> None:
        super().__init__(IntentType.MINT_ASSET, custodian_address)
        self.asset_id = asset_id
        self.owner = owner
        self.token_uri = token_uri
        self.metadata = metadata

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        d["asset_id"] = self.asset_id
        d["owner"] = self.owner
        d["token_uri"] = self.token_uri
        d["metadata"] = self.metadata.to_dict()
        return d


@dataclass
class SendValueIntent(OutboundIntent):
    """Pay `amount` to `target`"""

    amount: Coin

    def __init__(self, recipient: str, amount: Coin) -> None:
        super().__init__(IntentType.SEND, recipient)
        self.amount = amount

    @property
    def recipient(self) -> str:
        return self.target

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        d["amount"] = [self.amount.to_dict()]
        return d


@dataclass
class Response:
    """What a successful engine operation hands back to the environment."""

    attributes: dict[str, str] = field(default_factory=dict)
    intents: list[OutboundIntent] = field(default_factory=list)

    def add_attribute(self, key: str, value: str) -> Response:
        self.attributes[key] = value
        return self

    def add_intent(self, intent: OutboundIntent) -> Response:
        self.intents.append(intent)
        return self


@dataclass
class ExecutionResult:
    """Result of executing one request against the market.

    Error fields for structured error handling:
    - error_code: Machine-readable error code (e.g., "auction_ended")
    - error_category: Error category (e.g., "execution", "permission")
    - retriable: Whether the same request may succeed later
    - error_details: Additional context for programmatic handling

    `intents` is always empty when `success` is False.
    """

    success: bool
    message: str
    data: dict[str, Any] | None = None
    intents: list[OutboundIntent] = field(default_factory=list)
    error_code: str | None = None
    error_category: str | None = None
    retriable: bool = False
    error_details: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"success": self.success, "message": self.message, "data": self.data}
        if self.intents:
            result["intents"] = [intent.to_dict() for intent in self.intents]
        if self.error_code is not None:
            result["error_code"] = self.error_code
        if self.error_category is not None:
            result["error_category"] = self.error_category
        if self.error_code is not None:  # Only include retriable when there's an error
            result["retriable"] = self.retriable
        if self.error_details is not None:
            result["error_details"] = self.error_details
        return result


__all__ = [
    "IntentType",
    "OutboundIntent",
    "ApproveTransferIntent",
    "TransferCustodyIntent",
    "MintAssetIntent",
    "SendValueIntent",
    "Response",
    "ExecutionResult",
]
