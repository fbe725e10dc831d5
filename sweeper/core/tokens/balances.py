"""
Balance Source Adapter

Normalizes balance-index responses into TokenRecords and applies the
eligibility rules shared by sweep discovery and fee-token selection.
"""

from __future__ import annotations

import asyncio
import logging
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence

from ..chains import ChainRegistry, get_chain_registry
from ..errors import BalanceFetchError
from .models import Portfolio, TokenRecord, TotalBalance
from ...providers.base import BalanceIndexProvider

logger = logging.getLogger(__name__)


def select_eligible_tokens(
    tokens: Iterable[TokenRecord],
    registry: Optional[ChainRegistry] = None,
    *,
    include_native: bool = True,
) -> List[TokenRecord]:
    """Filter to verified, wallet-held, positive balances on supported chains; highest USD value first."""
    registry = registry or get_chain_registry()

    eligible: List[TokenRecord] = []
    for token in tokens:
        if not token.verified or not token.wallet_owned:
            continue
        if not registry.is_supported(registry.resolve_internal_id(token.chain_external_id)):
            continue
        if not token.resolved_address:
            continue
        if token.quantity <= 0:
            continue
        if not include_native and token.is_native:
            continue
        eligible.append(token)

    # sorted() is stable, so equal-value tokens keep index order
    return sorted(eligible, key=lambda t: t.usd_value, reverse=True)


def filter_by_min_value(tokens: Iterable[TokenRecord], min_usd_value: Decimal) -> List[TokenRecord]:
    """Keep tokens worth sweeping (value >= threshold)."""
    return [token for token in tokens if token.usd_value >= min_usd_value]


class BalanceSourceAdapter:
    """Fetch and normalize an owner's token balances from the balance index."""

    def __init__(
        self,
        index: BalanceIndexProvider,
        registry: Optional[ChainRegistry] = None,
    ) -> None:
        self._index = index
        self._registry = registry or get_chain_registry()

    @property
    def default_scope(self) -> List[str]:
        return self._registry.external_ids

    async def fetch_portfolio(
        self,
        owner: str,
        chain_scope: Optional[Sequence[str]] = None,
    ) -> Portfolio:
        """Query total balance and token list concurrently; any failure fails the whole batch."""
        scope = list(chain_scope) if chain_scope is not None else self.default_scope
        try:
            total_raw, tokens_raw = await asyncio.gather(
                self._index.get_total_balance(owner),
                self._index.get_token_list(owner, scope),
            )
            tokens = [TokenRecord.from_index(raw, self._registry) for raw in tokens_raw or []]
        except Exception as exc:
            logger.error(f"Balance fetch for {owner} failed: {exc}")
            raise BalanceFetchError(
                "Failed to fetch token balances. Please try again.",
                details={"owner": owner, "reason": str(exc)},
            ) from exc

        return Portfolio(total_balance=TotalBalance.from_index(total_raw), tokens=tokens)

    async def fetch_eligible_tokens(
        self,
        owner: str,
        chain_scope: Optional[Sequence[str]] = None,
        *,
        include_native: bool = True,
    ) -> List[TokenRecord]:
        portfolio = await self.fetch_portfolio(owner, chain_scope)
        eligible = select_eligible_tokens(
            portfolio.tokens,
            self._registry,
            include_native=include_native,
        )
        logger.debug(f"{len(eligible)}/{len(portfolio.tokens)} eligible tokens for {owner}")
        return eligible
