"""Query handlers - read-only projections over the market stores."""

from __future__ import annotations

from typing import Any, TYPE_CHECKING

from .errors import ErrorCode, MarketError, validation_error
from .types import Config, ListingResponse

if TYPE_CHECKING:
    from .stores import ConfigStore, ListingStore, MinterRegistry


# Valid query types and their required/optional parameters
QUERY_SCHEMA: dict[str, dict[str, Any]] = {
    "config": {
        "params": [],
        "required": [],
    },
    "resolve_listing": {
        "params": ["id"],
        "required": ["id"],
    },
    "minters": {
        "params": [],
        "required": [],
    },
}


class QueryService:
    """Read-only access to config, listings and the minter whitelist.

    Queries never mutate a store, so they need no snapshot.
    """

    def __init__(
        self,
        configs: ConfigStore,
        listings: ListingStore,
        minters: MinterRegistry,
    ) -> None:
        self._configs = configs
        self._listings = listings
        self._minters = minters

    def get_config(self) -> Config:
        return self._configs.load()

    def resolve_listing(self, listing_id: str) -> ListingResponse:
        """Details of one listing.

        Raises:
            NotFound: If no listing has this key
        """
        listing = self._listings.load(listing_id)
        return {
            "asset_id": listing.asset_id,
            "custodian_address": listing.custodian_address,
            "seller": listing.seller,
            "best_bid": listing.max_bid.to_dict() if listing.max_bid else None,
            "best_bidder": listing.max_bidder,
            "closing_height": listing.closing_height,
        }

    def list_minters(self) -> list[str]:
        return self._minters.list_identities()

    def execute(self, query_type: str, params: dict[str, Any]) -> dict[str, Any]:
        """Execute a query by name.

        Args:
            query_type: One of QUERY_SCHEMA's keys
            params: Query parameters

        Returns:
            {"success": True, "data": ...} or a structured error response
        """
        if query_type not in QUERY_SCHEMA:
            valid_types = ", ".join(sorted(QUERY_SCHEMA.keys()))
            return validation_error(
                f"Unknown query_type '{query_type}'. Valid types: {valid_types}",
                code=ErrorCode.INVALID_QUERY_TYPE,
            )

        schema = QUERY_SCHEMA[query_type]

        for param in params:
            if param not in schema["params"]:
                valid_params = ", ".join(schema["params"]) or "none"
                return validation_error(
                    f"Unknown param '{param}' for {query_type} query. Valid params: {valid_params}",
                    code=ErrorCode.INVALID_PARAM,
                )

        for required in schema["required"]:
            if required not in params:
                return validation_error(
                    f"Query '{query_type}' requires '{required}' param",
                    code=ErrorCode.MISSING_ARGUMENT,
                )

        try:
            if query_type == "config":
                data: Any = self.get_config().to_dict()
            elif query_type == "resolve_listing":
                data = self.resolve_listing(str(params["id"]))
            else:
                data = self.list_minters()
        except MarketError as e:
            return e.to_response()

        return {"success": True, "data": data}


__all__ = [
    "QUERY_SCHEMA",
    "QueryService",
]
