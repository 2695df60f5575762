#!/usr/bin/env python3
"""
NFT ledger - scenario runner script

Usage:
    python run.py config/scenarios/auction.yaml
    python run.py config/scenarios/auction.yaml --config config/config.yaml
    python run.py config/scenarios/auction.yaml --per-run-logs
    python run.py config/scenarios/auction.yaml --set settlement.proceeds_recipient=bidder
"""

from __future__ import annotations

import sys

from nft_ledger.runner import main


if __name__ == "__main__":
    sys.exit(main())
