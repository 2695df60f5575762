"""Centralized constants for the market.

Defaults for the configurable windows live in config_schema.py; the values
here are the ones every component must agree on.
"""

# Identity the market uses for itself; doubles as the "no bid yet" sentinel
MARKET_IDENTITY = "nft_ledger_market"

# Asset ids are "<prefix><separator><counter>", e.g. "GF.7"
ASSET_ID_PREFIX = "GF"
ASSET_ID_SEPARATOR = "."

# Counter namespaces on the Config record
SEQUENCE_LISTINGS = "listings"
SEQUENCE_ASSETS = "assets"

# Defaults mirrored by config_schema.py
DEFAULT_AUTHORIZATION_WINDOW = 1_000_000
AUCTION_DURATION_BLOCKS = 50_000
APPROVAL_WINDOW_BLOCKS = 20_000

# Collection marker stamped on minted metadata when the request has none
DEFAULT_COLLECTION = 1
