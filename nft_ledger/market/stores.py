"""Stores for config, listings and the minter whitelist.

All three stores sit on one `MemoryStorage`, a bucketed key-value map that
can be snapshotted and restored. The dispatcher snapshots before each
request and restores on failure, which gives every request all-or-nothing
semantics without any locking.

Usage:
    storage = MemoryStorage()
    configs = ConfigStore(storage)
    listings = ListingStore(storage)
    minters = MinterRegistry(storage)

Thread-safety: Not thread-safe. Requests are applied one at a time.
"""

from __future__ import annotations

import copy
import re
from typing import Any

from ..constants import SEQUENCE_ASSETS, SEQUENCE_LISTINGS
from .errors import InvalidAddress, NotFound
from .types import Config, Listing, MinterInfo


_ADDRESS_PATTERN = re.compile(r"^[A-Za-z0-9_.\-]{3,128}$")

CONFIG_BUCKET = "config"
CONFIG_KEY = "config"
LISTINGS_BUCKET = "listings"
MINTERS_BUCKET = "minters"


def validate_address(address: Any) -> str:
    """Check an identity or contract address and return it unchanged.

    Raises:
        InvalidAddress: If the value is not a 3-128 character token of
            letters, digits, '_', '.' or '-'
    """
    if not isinstance(address, str) or not _ADDRESS_PATTERN.match(address):
        raise InvalidAddress(f"Invalid address: {address!r}", address=repr(address))
    return address


class MemoryStorage:
    """In-memory bucketed key-value storage with snapshot/restore."""

    _buckets: dict[str, dict[str, Any]]

    def __init__(self) -> None:
        self._buckets = {}

    def get(self, bucket: str, key: str) -> Any | None:
        value = self._buckets.get(bucket, {}).get(key)
        return copy.deepcopy(value)

    def set(self, bucket: str, key: str, value: Any) -> None:
        self._buckets.setdefault(bucket, {})[key] = copy.deepcopy(value)

    def delete(self, bucket: str, key: str) -> bool:
        entries = self._buckets.get(bucket, {})
        if key in entries:
            del entries[key]
            return True
        return False

    def keys(self, bucket: str) -> list[str]:
        """Keys of a bucket in ascending order."""
        return sorted(self._buckets.get(bucket, {}))

    def snapshot(self) -> dict[str, dict[str, Any]]:
        """Copy of the full storage contents."""
        return copy.deepcopy(self._buckets)

    def restore(self, snapshot: dict[str, dict[str, Any]]) -> None:
        """Replace the storage contents with a snapshot."""
        self._buckets = copy.deepcopy(snapshot)


class ConfigStore:
    """Single Config record plus the sequence counters it carries."""

    def __init__(self, storage: MemoryStorage) -> None:
        self._storage = storage

    def save(self, config: Config) -> None:
        self._storage.set(CONFIG_BUCKET, CONFIG_KEY, config)

    def load(self) -> Config:
        """Load the config record.

        Raises:
            NotFound: If the market was never instantiated
        """
        config = self._storage.get(CONFIG_BUCKET, CONFIG_KEY)
        if config is None:
            raise NotFound("Config not found: market is not instantiated")
        return config

    def exists(self) -> bool:
        return self._storage.get(CONFIG_BUCKET, CONFIG_KEY) is not None

    def next_sequence(self, namespace: str, shared: bool = False) -> int:
        """Increment and return the counter for a namespace.

        Listings and assets count independently. With `shared` set both
        namespaces draw from the listing counter, so listing keys and asset
        ids interleave.
        """
        if namespace not in (SEQUENCE_LISTINGS, SEQUENCE_ASSETS):
            raise ValueError(f"Unknown sequence namespace: {namespace}")
        config = self.load()
        if shared or namespace == SEQUENCE_LISTINGS:
            config.listing_count += 1
            value = config.listing_count
        else:
            config.mint_count += 1
            value = config.mint_count
        self.save(config)
        return value


class ListingStore:
    """Listings keyed by the decimal string of their sequence number."""

    def __init__(self, storage: MemoryStorage) -> None:
        self._storage = storage

    def save(self, listing: Listing) -> None:
        self._storage.set(LISTINGS_BUCKET, listing.listing_id, listing)

    def may_load(self, listing_id: str) -> Listing | None:
        return self._storage.get(LISTINGS_BUCKET, listing_id)

    def load(self, listing_id: str) -> Listing:
        """Load a listing.

        Raises:
            NotFound: If no listing has this key
        """
        listing = self.may_load(listing_id)
        if listing is None:
            raise NotFound(f"Listing '{listing_id}' not found", listing_id=listing_id)
        return listing

    def remove(self, listing_id: str) -> bool:
        return self._storage.delete(LISTINGS_BUCKET, listing_id)


class MinterRegistry:
    """Minter whitelist. A missing entry reads as a zero window."""

    def __init__(self, storage: MemoryStorage) -> None:
        self._storage = storage

    def save(self, identity: str, info: MinterInfo) -> None:
        self._storage.set(MINTERS_BUCKET, identity, info)

    def remove(self, identity: str) -> bool:
        return self._storage.delete(MINTERS_BUCKET, identity)

    def read_info(self, identity: str) -> MinterInfo:
        info = self._storage.get(MINTERS_BUCKET, identity)
        if info is None:
            return MinterInfo(expiration_time=0)
        return info

    def list_identities(self) -> list[str]:
        """Authorized identities in ascending order."""
        return [
            identity for identity in self._storage.keys(MINTERS_BUCKET)
            if self.read_info(identity).expiration_time != 0
        ]


__all__ = [
    "validate_address",
    "MemoryStorage",
    "ConfigStore",
    "ListingStore",
    "MinterRegistry",
]
