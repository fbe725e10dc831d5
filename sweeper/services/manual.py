"""
Manual sweep session.

For tokens the balance index does not report: the user adds tokens by chain
ID and contract address, and the session sweeps the ones that hold a balance
on a supported chain through the regular orchestrator.
"""

import logging
from typing import List, Optional

from ..core.accounts.resolver import ResolvedAccounts
from ..core.errors import BalanceFetchError, ValidationError
from ..core.sweep.fees import FeeTokenSelection, fee_token_candidates
from ..core.sweep.models import SweepOutcome, SweepResult
from ..core.sweep.orchestrator import RefreshCallback, SweepOrchestrator
from ..core.tokens.balances import BalanceSourceAdapter
from ..core.tokens.lookup import fetch_token_info
from ..core.tokens.models import ManualTokenEntry, TokenRecord
from ..providers.base import Signer
from ..providers.rpc import RpcProvider
from ..types import AccountVersion

logger = logging.getLogger(__name__)

NO_SWEEPABLE_TOKENS_MESSAGE = "No sweepable tokens. Tokens must have balance and be on a supported chain."


class ManualSweepSession:
    def __init__(
        self,
        orchestrator: SweepOrchestrator,
        accounts: ResolvedAccounts,
        *,
        rpc: Optional[RpcProvider] = None,
        version: AccountVersion = AccountVersion.V1,
    ):
        self.orchestrator = orchestrator
        self.accounts = accounts
        self.rpc = rpc
        self.version = version

        self.tokens: List[ManualTokenEntry] = []
        self.eoa_tokens: List[TokenRecord] = []
        self.fee_selection = FeeTokenSelection()
        self.error: Optional[str] = None

    @property
    def account_address(self) -> Optional[str]:
        return self.accounts.address_for(self.version)

    @property
    def sweepable_tokens(self) -> List[ManualTokenEntry]:
        return [token for token in self.tokens if token.balance > 0 and token.is_supported_chain]

    @property
    def fee_candidates(self) -> List[TokenRecord]:
        return fee_token_candidates(self.eoa_tokens)

    @property
    def selected_fee_token(self) -> Optional[TokenRecord]:
        return self.fee_selection.current(self.fee_candidates)

    async def add_token(self, chain_id: int, token_address: str) -> ManualTokenEntry:
        """Look the token up on chain and add it to the list.

        Raises:
            ValidationError: no resolved account, or the token is already listed
            TokenLookupError: the token could not be read from chain
        """
        account = self.account_address
        if not account:
            raise ValidationError("Smart account not resolved")

        address = token_address.strip()
        if any(
            token.chain_id == chain_id and token.address.lower() == address.lower()
            for token in self.tokens
        ):
            raise ValidationError("Token already added")

        entry = await fetch_token_info(chain_id, address, account, rpc=self.rpc)
        self.tokens.append(entry)
        logger.info(f"Added {entry.symbol} on chain {chain_id} (balance {entry.formatted_balance})")
        return entry

    def remove_token(self, index: int) -> None:
        if 0 <= index < len(self.tokens):
            del self.tokens[index]

    def set_version(self, version: AccountVersion) -> None:
        """Switching versions starts over: the token list belongs to one account."""
        if version == self.version:
            return
        self.version = version
        self.tokens = []
        self.orchestrator.reset(version)

    def disconnect(self) -> None:
        self.tokens = []
        self.eoa_tokens = []
        self.error = None
        self.fee_selection.clear()
        self.orchestrator.reset(self.version)

    async def fetch_eoa_tokens(self, adapter: BalanceSourceAdapter, wallet_address: Optional[str]) -> None:
        """Load fee-token candidates. A failure clears the list so no stale token is offered."""
        if not wallet_address:
            return
        self.error = None
        try:
            self.eoa_tokens = await adapter.fetch_eligible_tokens(wallet_address)
        except BalanceFetchError as e:
            logger.error(f"Failed to fetch EOA tokens: {e.message}")
            self.error = e.message
            self.eoa_tokens = []

    async def sweep(
        self,
        signer: Optional[Signer],
        *,
        on_refresh: Optional[RefreshCallback] = None,
    ) -> SweepResult:
        """
        Sweep every listed token that holds a balance on a supported chain.

        Raises:
            ValidationError: none of the listed tokens is sweepable
        """
        tokens = self.sweepable_tokens
        if not tokens:
            raise ValidationError(NO_SWEEPABLE_TOKENS_MESSAGE)

        result = await self.orchestrator.sweep(
            self.version,
            signer,
            self.account_address,
            tokens,
            self.selected_fee_token,
            on_refresh=on_refresh,
        )
        if result.outcome == SweepOutcome.SUCCESS:
            self.tokens = []
        return result
