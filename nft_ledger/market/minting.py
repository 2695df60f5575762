"""Minting engine - whitelist management and mint authorization.

Only the owner recorded in Config manages the whitelist. Whitelisted
minters ask the market to mint; the market validates royalties, assigns
the next asset id and emits one mint intent to the Asset Custodian.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from decimal import Decimal
from typing import TYPE_CHECKING

from ..constants import ASSET_ID_SEPARATOR, DEFAULT_COLLECTION, SEQUENCE_ASSETS
from .errors import InvalidRoyaltyRate, Unauthorized, UnregisteredMinter
from .intents import MintAssetIntent, Response
from .stores import validate_address
from .types import BlockInfo, MessageInfo, Metadata, MinterInfo, Royalty

if TYPE_CHECKING:
    from ..config_schema import AppConfig
    from .stores import ConfigStore, MinterRegistry


logger = logging.getLogger(__name__)


def check_royalties(royalties: Sequence[Royalty]) -> Decimal:
    """Return the total royalty rate.

    Raises:
        InvalidRoyaltyRate: If any rate is outside [0, 1] or the total exceeds 1
    """
    total = Decimal(0)
    for royalty in royalties:
        if royalty.rate < 0 or royalty.rate > 1:
            raise InvalidRoyaltyRate(
                f"Royalty rate {royalty.rate} for {royalty.address} is outside [0, 1]",
                address=royalty.address,
                rate=str(royalty.rate),
            )
        total += royalty.rate
    if total > 1:
        raise InvalidRoyaltyRate(
            f"some of royalty rates are larger than 1: total {total}",
            total=str(total),
        )
    return total


class MintingEngine:
    """Runs RegisterMinter / RemoveMinter / Mint.

    Dependencies:
        configs: Config record (owner, asset counter, custodian address)
        minters: Minter whitelist
        app_config: Minting and sequencing settings (uses global if not provided)
    """

    def __init__(
        self,
        configs: ConfigStore,
        minters: MinterRegistry,
        app_config: AppConfig | None = None,
    ) -> None:
        if app_config is None:
            from ..config import get_validated_config
            app_config = get_validated_config()
        self._configs = configs
        self._minters = minters
        self._asset_id_prefix = app_config.minting.asset_id_prefix
        self._enforce_expiry = app_config.minting.enforce_expiry
        self._shared_counter = app_config.sequencing.shared_counter

    def _require_owner(self, info: MessageInfo) -> int:
        config = self._configs.load()
        if info.sender != config.owner:
            raise Unauthorized(f"Unauthorized: only the owner can manage minters, not {info.sender}")
        return config.expiration_time

    def register_minter(self, info: MessageInfo, block: BlockInfo, identity: str) -> Response:
        """Whitelist an identity, replacing any existing entry.

        Raises:
            Unauthorized: If the sender is not the owner
            InvalidAddress: If the identity is malformed
        """
        window = self._require_owner(info)
        minter = validate_address(identity)
        self._minters.save(minter, MinterInfo(expiration_time=window, registered_at=block.height))
        logger.info("Minter %s registered at height %d", minter, block.height)
        return (
            Response()
            .add_attribute("action", "register_minter")
            .add_attribute("minter", minter)
        )

    def remove_minter(self, info: MessageInfo, block: BlockInfo, identity: str) -> Response:
        """Drop an identity from the whitelist. Absent identities are a no-op.

        Raises:
            Unauthorized: If the sender is not the owner
            InvalidAddress: If the identity is malformed
        """
        self._require_owner(info)
        minter = validate_address(identity)
        removed = self._minters.remove(minter)
        logger.info("Minter %s removed at height %d (was registered: %s)", minter, block.height, removed)
        return (
            Response()
            .add_attribute("action", "remove_minter")
            .add_attribute("minter", minter)
        )

    def _require_minter(self, info: MessageInfo, block: BlockInfo) -> None:
        minter_info = self._minters.read_info(info.sender)
        if minter_info.expiration_time == 0:
            raise UnregisteredMinter(f"Unauthorized: {info.sender} is not a registered minter")
        if self._enforce_expiry:
            expires_at = minter_info.registered_at + minter_info.expiration_time
            if block.height > expires_at:
                raise UnregisteredMinter(
                    f"Unauthorized: minter authorization of {info.sender} expired at height {expires_at}",
                    expired_at=expires_at,
                )

    def mint(
        self,
        info: MessageInfo,
        block: BlockInfo,
        owner: str,
        name: str,
        real_share_count: int,
        unit_count: int,
        initial_price: int,
        royalties: Sequence[Royalty] = (),
        image_uri: str | None = None,
        external_link: str | None = None,
        description: str | None = None,
        collection: int | None = None,
    ) -> Response:
        """Ask the custodian to mint a new asset for `owner`.

        Returns:
            Response with the new asset_id and a single mint intent

        Raises:
            UnregisteredMinter: If the sender is not whitelisted (an Unauthorized)
            InvalidRoyaltyRate: If the royalty rates add up to more than 1
            InvalidAddress: If the owner is malformed
        """
        self._require_minter(info, block)
        check_royalties(royalties)
        owner = validate_address(owner)

        config = self._configs.load()
        counter = self._configs.next_sequence(SEQUENCE_ASSETS, shared=self._shared_counter)
        asset_id = f"{self._asset_id_prefix}{ASSET_ID_SEPARATOR}{counter}"

        metadata = Metadata(
            name=name,
            description=description,
            external_link=external_link,
            collection=collection if collection is not None else DEFAULT_COLLECTION,
            real_share_count=real_share_count,
            unit_count=unit_count,
            royalties=tuple(royalties),
            initial_price=initial_price,
        )
        logger.info("Minting %s for %s (requested by %s)", asset_id, owner, info.sender)
        return (
            Response()
            .add_attribute("action", "mint")
            .add_attribute("asset_id", asset_id)
            .add_attribute("owner", owner)
            .add_intent(MintAssetIntent(
                custodian_address=config.custodian_address,
                asset_id=asset_id,
                owner=owner,
                token_uri=image_uri,
                metadata=metadata,
            ))
        )


__all__ = [
    "MintingEngine",
    "check_royalties",
]
