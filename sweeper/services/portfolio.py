"""
Token portfolio session.

Holds the token lists a sweep UI renders: sweep-worthy tokens per account
version, the connected wallet's tokens, and the fee-token candidates drawn
from them.
"""

import asyncio
import logging
from decimal import Decimal
from typing import Dict, List, Optional

from ..config import settings
from ..core.errors import BalanceFetchError
from ..core.sweep.fees import (
    FeeTokenSelection,
    candidates_on_chains,
    fee_token_candidates,
    required_mode,
)
from ..core.sweep.models import FeeMode
from ..core.tokens.balances import BalanceSourceAdapter, filter_by_min_value
from ..core.tokens.models import TokenRecord
from ..types import AccountVersion

logger = logging.getLogger(__name__)


def format_supertx_hash(tx_hash: Optional[str]) -> Optional[str]:
    """Shorten a hash to ``0x1234...abcd`` for display."""
    if not tx_hash or len(tx_hash) <= 12:
        return tx_hash
    return f"{tx_hash[:6]}...{tx_hash[-4:]}"


class SweepPortfolio:
    def __init__(
        self,
        adapter: BalanceSourceAdapter,
        *,
        min_usd_value: Optional[Decimal] = None,
        candidate_limit: Optional[int] = None,
    ):
        self.adapter = adapter
        self.min_usd_value = settings.min_token_usd_value if min_usd_value is None else min_usd_value
        self.candidate_limit = candidate_limit or settings.fee_token_candidate_limit

        self.tokens: Dict[AccountVersion, List[TokenRecord]] = {version: [] for version in AccountVersion}
        self.eoa_tokens: List[TokenRecord] = []
        self.fee_selection = FeeTokenSelection()
        self.loading = False
        self.error: Optional[str] = None

    @property
    def fee_candidates(self) -> List[TokenRecord]:
        return fee_token_candidates(self.eoa_tokens, self.candidate_limit)

    @property
    def selected_fee_token(self) -> Optional[TokenRecord]:
        return self.fee_selection.current(self.fee_candidates)

    def needs_fee_selector(self, version: AccountVersion) -> bool:
        return required_mode(version, self.tokens[version]) == FeeMode.EXTERNALLY_FUNDED

    def fee_candidates_for(self, version: AccountVersion) -> List[TokenRecord]:
        """Fee candidates on the same chains as the version's sweep tokens."""
        if not self.needs_fee_selector(version):
            return self.fee_candidates
        return candidates_on_chains(self.fee_candidates, self.tokens[version])

    def clear(self) -> None:
        self.tokens = {version: [] for version in AccountVersion}
        self.eoa_tokens = []

    def disconnect(self) -> None:
        self.clear()
        self.error = None
        self.fee_selection.clear()

    async def _eligible(self, owner: Optional[str]) -> List[TokenRecord]:
        if not owner:
            return []
        return await self.adapter.fetch_eligible_tokens(owner)

    async def fetch_tokens(
        self,
        account_addresses: Dict[AccountVersion, Optional[str]],
        wallet_address: Optional[str],
    ) -> None:
        """
        Refresh every list in one batch.

        A failure anywhere clears every list, so no stale token stays sweepable.
        """
        if not any(account_addresses.get(version) for version in AccountVersion):
            self.clear()
            return

        self.loading = True
        self.error = None
        try:
            versions = list(AccountVersion)
            results = await asyncio.gather(
                *(self._eligible(account_addresses.get(version)) for version in versions),
                self._eligible(wallet_address),
            )
        except BalanceFetchError as e:
            logger.error(f"Token refresh failed: {e.message}")
            self.error = e.message
            self.clear()
            return
        finally:
            self.loading = False

        # Only tokens worth sweeping; fee candidates have no minimum
        for version, tokens in zip(versions, results):
            self.tokens[version] = filter_by_min_value(tokens, self.min_usd_value)
        self.eoa_tokens = results[-1]
        logger.info(
            "Tokens refreshed: "
            + ", ".join(f"{version.value}={len(self.tokens[version])}" for version in versions)
            + f", eoa={len(self.eoa_tokens)}"
        )
