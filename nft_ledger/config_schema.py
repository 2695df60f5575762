"""Pydantic schema for configuration validation.

All config values are validated at startup. Typos and invalid values
fail fast with clear error messages.

Usage:
    from nft_ledger.config_schema import load_validated_config, AppConfig
    config = load_validated_config("config/config.yaml")
    # config is now a validated AppConfig instance
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import (
    APPROVAL_WINDOW_BLOCKS,
    ASSET_ID_PREFIX,
    AUCTION_DURATION_BLOCKS,
    DEFAULT_AUTHORIZATION_WINDOW,
    MARKET_IDENTITY,
)


# =============================================================================
# BASE MODEL WITH STRICT VALIDATION
# =============================================================================

class StrictModel(BaseModel):
    """Base model that rejects unknown fields (catches typos)."""

    model_config = ConfigDict(extra="forbid")


# =============================================================================
# MARKET MODELS
# =============================================================================

class MarketSection(StrictModel):
    """Identity of the market itself."""

    identity: str = Field(
        default=MARKET_IDENTITY,
        min_length=3,
        description="Address the market acts as; also the 'no bid yet' sentinel"
    )


class AuctionConfig(StrictModel):
    """Auction timing, in block heights."""

    duration_blocks: int = Field(
        default=AUCTION_DURATION_BLOCKS,
        gt=0,
        description="Blocks between placement and closing height"
    )
    approval_window_blocks: int = Field(
        default=APPROVAL_WINDOW_BLOCKS,
        gt=0,
        description="Blocks the custodian transfer approval stays valid"
    )


class MintingConfig(StrictModel):
    """Minter whitelist and asset id settings."""

    default_authorization_window: int = Field(
        default=DEFAULT_AUTHORIZATION_WINDOW,
        gt=0,
        description="Window stored for every registered minter"
    )
    asset_id_prefix: str = Field(
        default=ASSET_ID_PREFIX,
        min_length=1,
        description="Prefix of minted asset ids (prefix.counter)"
    )
    enforce_expiry: bool = Field(
        default=False,
        description="Reject mints once registration height + window has passed"
    )

    @field_validator("asset_id_prefix")
    @classmethod
    def prefix_has_no_separator(cls, v: str) -> str:
        """The prefix must not contain the '.' separator."""
        if "." in v:
            raise ValueError("asset_id_prefix must not contain '.'")
        return v


class SequencingConfig(StrictModel):
    """How listing keys and asset ids are numbered."""

    shared_counter: bool = Field(
        default=False,
        description="Draw listing keys and asset ids from one counter (legacy numbering)"
    )


class SettlementConfig(StrictModel):
    """Where the winning bid goes when a sold listing is withdrawn."""

    proceeds_recipient: Literal["seller", "bidder"] = Field(
        default="seller",
        description="'seller' pays the sale proceeds out; 'bidder' keeps legacy routing"
    )


# =============================================================================
# LOGGING MODEL
# =============================================================================

class LoggingConfig(StrictModel):
    """Logging configuration."""

    output_file: str = Field(
        default="market.jsonl",
        description="JSONL file for market events"
    )
    logs_dir: str = Field(
        default="logs",
        description="Per-run logs directory (e.g., logs/run_20260115_120000/)"
    )
    default_recent: int = Field(
        default=50,
        gt=0,
        description="Default number of recent events to return"
    )
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Level for the standard library loggers"
    )


# =============================================================================
# ROOT CONFIG MODEL
# =============================================================================

class AppConfig(StrictModel):
    """Root configuration model for the entire application.

    All fields have sensible defaults, so an empty config file is valid.
    """

    market: MarketSection = Field(default_factory=MarketSection)
    auction: AuctionConfig = Field(default_factory=AuctionConfig)
    minting: MintingConfig = Field(default_factory=MintingConfig)
    sequencing: SequencingConfig = Field(default_factory=SequencingConfig)
    settlement: SettlementConfig = Field(default_factory=SettlementConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# LOADING FUNCTIONS
# =============================================================================

def load_validated_config(config_path: str | Path = "config/config.yaml") -> AppConfig:
    """Load and validate configuration from YAML file.

    Args:
        config_path: Path to config YAML file.

    Returns:
        Validated AppConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        pydantic.ValidationError: If config is invalid (with detailed error message).
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        raw_config = yaml.safe_load(f) or {}

    return AppConfig.model_validate(raw_config)


def validate_config_dict(config_dict: dict[str, Any]) -> AppConfig:
    """Validate a configuration dictionary.

    Raises:
        pydantic.ValidationError: If config is invalid.
    """
    return AppConfig.model_validate(config_dict)


__all__ = [
    "AppConfig",
    "MarketSection",
    "AuctionConfig",
    "MintingConfig",
    "SequencingConfig",
    "SettlementConfig",
    "LoggingConfig",
    "load_validated_config",
    "validate_config_dict",
]
