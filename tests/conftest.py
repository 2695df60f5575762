"""Pytest fixtures for nft_ledger tests.

Common fixtures for building a market without external config files.
"""

from __future__ import annotations

# Load environment variables from .env before any tests run
from dotenv import load_dotenv

load_dotenv()

from pathlib import Path

import pytest

from nft_ledger.config_schema import AppConfig, validate_config_dict
from nft_ledger.market import EventLogger, Market, MessageInfo


OWNER = "admin"
CUSTODIAN = "nft_custodian"


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "feature(name): mark test as belonging to a feature. "
        "Usage: @pytest.mark.feature('auction')"
    )


def pytest_addoption(parser: pytest.Parser) -> None:
    """Add custom command-line options."""
    parser.addoption(
        "--feature",
        action="store",
        type=str,
        default=None,
        help="Run tests for a specific feature (e.g., --feature auction)",
    )


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Filter tests based on command-line options."""
    feature_filter = config.getoption("--feature")
    if feature_filter is None:
        return
    selected = []
    deselected = []
    for item in items:
        marker = item.get_closest_marker("feature")
        if marker is not None:
            feature_name = marker.args[0] if marker.args else ""
            if feature_name == feature_filter:
                selected.append(item)
                continue
        deselected.append(item)
    config.hook.pytest_deselected(items=deselected)
    items[:] = selected


@pytest.fixture
def app_config() -> AppConfig:
    """Default configuration, independent of config/config.yaml."""
    return validate_config_dict({})


@pytest.fixture
def event_logger(tmp_path: Path) -> EventLogger:
    """Event logger writing to a temporary file."""
    return EventLogger(output_file=str(tmp_path / "market.jsonl"))


@pytest.fixture
def market(app_config: AppConfig, event_logger: EventLogger) -> Market:
    """Instantiated market owned by OWNER, custodian CUSTODIAN."""
    m = Market(app_config, event_logger=event_logger)
    result = m.instantiate(MessageInfo(sender=OWNER), custodian_address=CUSTODIAN)
    assert result.success, result.message
    return m
