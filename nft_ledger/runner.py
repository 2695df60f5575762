"""Scenario runner - replays a scripted sequence of requests against a market.

A scenario file (YAML or JSON) names the owner and custodian and lists the
steps to run in order:

    owner: admin
    custodian: nft_custodian
    steps:
      - sender: admin
        height: 1
        request: {type: register_minter, identity: studio}
      - sender: alice
        height: 10
        funds: [{amount: 120, denom: u}]
        request: {type: bid_listing, listing_id: "1"}
      - query: {type: resolve_listing, id: "1"}

Each step's result is printed as one JSON line.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, TypedDict

import yaml
from dotenv import load_dotenv

from .config import get_validated_config, load_config, set_config_value
from .market import EventLogger, Market
from .market.messages import CoinMsg
from .market.types import BlockInfo, MessageInfo


logger = logging.getLogger(__name__)


class StepResult(TypedDict):
    """Outcome of one scenario step."""

    step: int
    kind: str
    result: dict[str, Any]


def load_scenario(path: str | Path) -> dict[str, Any]:
    """Read a scenario file. JSON is used for .json files, YAML otherwise.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file does not hold a mapping with a 'steps' list.
    """
    scenario_path = Path(path)
    with open(scenario_path) as f:
        if scenario_path.suffix == ".json":
            loaded: Any = json.load(f)
        else:
            loaded = yaml.safe_load(f)
    if not isinstance(loaded, dict) or not isinstance(loaded.get("steps", []), list):
        raise ValueError(f"Scenario {scenario_path} must be a mapping with a 'steps' list")
    return loaded


def _message_info(step: dict[str, Any]) -> MessageInfo:
    funds = tuple(CoinMsg.model_validate(coin).to_coin() for coin in step.get("funds", []))
    return MessageInfo(sender=str(step["sender"]), funds=funds)


def run_scenario(market: Market, scenario: dict[str, Any]) -> list[StepResult]:
    """Instantiate the market, then run every step in order.

    Failed requests do not stop the scenario; their error result is
    recorded like any other.
    """
    results: list[StepResult] = []
    instantiated = market.instantiate(
        MessageInfo(sender=str(scenario["owner"])),
        custodian_address=str(scenario["custodian"]),
    )
    results.append({"step": 0, "kind": "instantiate", "result": instantiated.to_dict()})
    if not instantiated.success:
        logger.warning("Instantiation failed: %s", instantiated.message)
        return results

    for index, step in enumerate(scenario.get("steps", []), start=1):
        if "query" in step:
            results.append({"step": index, "kind": "query", "result": market.query(step["query"])})
            continue
        result = market.execute_raw(
            step["request"],
            _message_info(step),
            BlockInfo(height=int(step.get("height", 0))),
        )
        results.append({"step": index, "kind": "request", "result": result.to_dict()})
    return results


def main(argv: list[str] | None = None) -> int:
    load_dotenv()

    parser = argparse.ArgumentParser(description="Run an NFT ledger scenario")
    parser.add_argument("scenario", help="Path to scenario YAML/JSON file")
    parser.add_argument(
        "--config", default=None, help="Path to config file (default: config/config.yaml)"
    )
    parser.add_argument(
        "--per-run-logs",
        action="store_true",
        help="Write events to logs/<run_id>/events.jsonl instead of logging.output_file",
    )
    parser.add_argument(
        "--set",
        dest="overrides",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Override a config value (e.g., --set settlement.proceeds_recipient=bidder)",
    )
    parser.add_argument("--quiet", action="store_true", help="Suppress result output")
    args = parser.parse_args(argv)

    load_config(args.config)
    for override in args.overrides:
        key, sep, raw_value = override.partition("=")
        if not sep or not key:
            parser.error(f"--set expects KEY=VALUE, got {override!r}")
        # YAML scalars, so "10" and "true" keep their types
        set_config_value(key, yaml.safe_load(raw_value))
    app_config = get_validated_config()
    logging.basicConfig(
        level=getattr(logging, app_config.logging.level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.per_run_logs:
        run_id = datetime.now().strftime("run_%Y%m%d_%H%M%S")
        event_logger = EventLogger(logs_dir=app_config.logging.logs_dir, run_id=run_id)
    else:
        event_logger = EventLogger(output_file=app_config.logging.output_file)

    market = Market(app_config, event_logger=event_logger)
    results = run_scenario(market, load_scenario(args.scenario))

    if not args.quiet:
        for step in results:
            print(json.dumps(step))

    failed = sum(1 for step in results if not step["result"].get("success"))
    logger.info("Scenario finished: %d steps, %d failed, events in %s",
                len(results), failed, event_logger.output_path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
