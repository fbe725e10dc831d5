"""
Account Resolver

Derives the deterministic Nexus smart-account address of a signer, separately
for each account version (addresses differ between versions).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

from ..chains import BASE_CHAIN_ID, rpc_url
from ..errors import AccountResolutionError
from ...config import settings
from ...providers.base import ExecutionRelay, Signer
from ...types import AccountVersion, ChainConfiguration

logger = logging.getLogger(__name__)

ACCOUNT_RESOLUTION_MESSAGE = "Failed to resolve Nexus account. Please try again."


@dataclass
class ResolvedAccounts:
    """Latest resolution outcome, read by the UI layer."""
    addresses: Dict[AccountVersion, Optional[str]] = field(
        default_factory=lambda: {version: None for version in AccountVersion}
    )
    resolving: bool = False
    error: Optional[str] = None

    def address_for(self, version: AccountVersion) -> Optional[str]:
        return self.addresses.get(version)

    def clear(self) -> None:
        self.addresses = {version: None for version in AccountVersion}
        self.error = None


class AccountResolver:
    def __init__(
        self,
        relay: ExecutionRelay,
        *,
        anchor_chain_id: Optional[int] = None,
        alchemy_api_key: Optional[str] = None,
    ) -> None:
        self._relay = relay
        self._anchor_chain_id = anchor_chain_id or settings.anchor_chain_id or BASE_CHAIN_ID
        self._alchemy_api_key = settings.alchemy_api_key if alchemy_api_key is None else alchemy_api_key
        self.state = ResolvedAccounts()

    def chain_configuration(self, version: AccountVersion, chain_id: Optional[int] = None) -> ChainConfiguration:
        chain_id = chain_id or self._anchor_chain_id
        return ChainConfiguration(
            chain_id=chain_id,
            rpc_url=rpc_url(chain_id, self._alchemy_api_key),
            version=version,
        )

    async def resolve_account_address(
        self,
        signer: Signer,
        account_version: AccountVersion,
        anchor_chain: Optional[int] = None,
    ) -> str:
        try:
            address = await self._relay.resolve_account(
                signer,
                account_version,
                self.chain_configuration(account_version, anchor_chain),
            )
        except Exception as exc:
            logger.error(f"Failed to resolve {account_version.value} account: {exc}")
            raise AccountResolutionError(
                ACCOUNT_RESOLUTION_MESSAGE,
                details={"version": account_version.value, "reason": str(exc)},
            ) from exc

        if not address:
            raise AccountResolutionError(
                ACCOUNT_RESOLUTION_MESSAGE,
                details={"version": account_version.value, "reason": "empty address"},
            )
        return address

    async def resolve_all(self, signer: Optional[Signer]) -> ResolvedAccounts:
        """Resolve every version in turn.

        Any failure nulls out all addresses and records the error; calling
        again retries from scratch.
        """
        if signer is None:
            self.state.clear()
            return self.state

        self.state.resolving = True
        self.state.error = None
        try:
            resolved: Dict[AccountVersion, Optional[str]] = {}
            for version in AccountVersion:
                resolved[version] = await self.resolve_account_address(signer, version)
            self.state.addresses = resolved
        except AccountResolutionError as exc:
            self.state.addresses = {version: None for version in AccountVersion}
            self.state.error = exc.message
        finally:
            self.state.resolving = False

        return self.state
