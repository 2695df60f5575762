"""NFT ledger source package.

This package contains the auction-and-mint core:
- config: Configuration loading and management
- market: Stores, engines, queries and the request dispatcher
- runner: Scenario runner behind run.py
"""

from __future__ import annotations

__all__: list[str] = []
