"""Tests for Pydantic config schema validation."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from nft_ledger import config as config_module
from nft_ledger.config_schema import (
    AppConfig,
    AuctionConfig,
    load_validated_config,
    validate_config_dict,
)


CONFIG_PATH = Path(__file__).parent.parent / "config" / "config.yaml"


class TestValidConfig:
    """Test that valid configs are accepted."""

    def test_empty_config_uses_defaults(self) -> None:
        """Empty config should use all defaults."""
        config = validate_config_dict({})
        assert config.market.identity == "nft_ledger_market"
        assert config.auction.duration_blocks == 50_000
        assert config.auction.approval_window_blocks == 20_000
        assert config.minting.default_authorization_window == 1_000_000
        assert config.minting.asset_id_prefix == "GF"
        assert config.minting.enforce_expiry is False
        assert config.sequencing.shared_counter is False
        assert config.settlement.proceeds_recipient == "seller"

    def test_partial_config_merges_defaults(self) -> None:
        """Partial config should merge with defaults."""
        config = validate_config_dict({"auction": {"duration_blocks": 10}})
        assert config.auction.duration_blocks == 10
        assert config.auction.approval_window_blocks == 20_000  # Default

    def test_full_config_loads(self) -> None:
        """Shipped config file should load without errors."""
        config = load_validated_config(CONFIG_PATH)
        assert isinstance(config, AppConfig)
        assert config.auction.duration_blocks > 0


class TestInvalidConfig:
    """Test that invalid configs are rejected with clear errors."""

    def test_typo_in_section_rejected(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_config_dict({"auctoin": {}})
        assert "auctoin" in str(exc_info.value)

    def test_typo_in_field_rejected(self) -> None:
        with pytest.raises(ValidationError):
            validate_config_dict({"auction": {"duration": 5}})

    def test_zero_duration_rejected(self) -> None:
        with pytest.raises(ValidationError):
            AuctionConfig(duration_blocks=0)

    def test_prefix_with_separator_rejected(self) -> None:
        with pytest.raises(ValidationError):
            validate_config_dict({"minting": {"asset_id_prefix": "GF.X"}})

    def test_unknown_proceeds_recipient_rejected(self) -> None:
        with pytest.raises(ValidationError):
            validate_config_dict({"settlement": {"proceeds_recipient": "market"}})

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_validated_config(tmp_path / "absent.yaml")


class TestConfigModule:
    """Tests for the global config accessors."""

    def test_get_by_dot_path(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("auction:\n  duration_blocks: 12\n")
        config_module.load_config(path)

        assert config_module.get("auction.duration_blocks") == 12
        assert config_module.get("auction.missing", "fallback") == "fallback"
        assert config_module.get_validated_config().auction.duration_blocks == 12

    def test_set_config_value_revalidates(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("{}\n")
        config_module.load_config(path)

        config_module.set_config_value("settlement.proceeds_recipient", "bidder")
        assert config_module.get_validated_config().settlement.proceeds_recipient == "bidder"

        with pytest.raises(ValidationError):
            config_module.set_config_value("auction.duration_blocks", -1)
