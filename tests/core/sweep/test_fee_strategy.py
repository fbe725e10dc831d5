"""
Tests for the Fee Strategy Selector and fee-token selection
"""

from decimal import Decimal

import pytest

from sweeper.core.chains import ZERO_ADDRESS, ChainRegistry
from sweeper.core.errors import ValidationError
from sweeper.core.sweep import (
    FEE_TOKEN_REQUIRED_MESSAGE,
    FeeMode,
    FeeStrategySelector,
    FeeTokenSelection,
    candidates_on_chains,
    fee_token_candidates,
    required_mode,
)
from sweeper.core.tokens import ManualTokenEntry, TokenRecord, token_key
from sweeper.types import AccountVersion


def _token(address: str, value: str, chain: str = "base", native: bool = False) -> TokenRecord:
    return TokenRecord(
        chain_external_id=chain,
        token_id=chain if native else address,
        symbol="TKN",
        name="Token",
        decimals=18,
        price_usd=Decimal(value),
        quantity=Decimal("1"),
        verified=True,
        wallet_owned=True,
        resolved_address=address,
        is_native=native,
    )


def _addr(n: int) -> str:
    return "0x" + f"{n:040x}"


@pytest.fixture
def selector() -> FeeStrategySelector:
    return FeeStrategySelector(ChainRegistry())


# =============================================================================
# Decision table
# =============================================================================

class TestFeeStrategySelector:
    def test_v1_with_erc20_is_self_funded_highest_value(self, selector):
        """Two eligible tokens worth $50 and $10: the $50 token pays."""
        fifty = _token(_addr(0x50), "50")
        ten = _token(_addr(0x10), "10")

        selection = selector.select(AccountVersion.V1, [ten, fifty])

        assert selection.mode == FeeMode.SELF_FUNDED
        assert selection.token is fifty
        assert selection.chain_id == 8453
        assert selection.token_address == _addr(0x50)

    def test_v1_self_funded_ignores_native_even_if_larger(self, selector):
        native = _token(ZERO_ADDRESS, "900", native=True)
        erc20 = _token(_addr(0x10), "10", chain="arb")

        selection = selector.select(AccountVersion.V1, [native, erc20])

        assert selection.mode == FeeMode.SELF_FUNDED
        assert selection.token is erc20
        assert selection.chain_id == 42161

    def test_v1_native_only_requires_fee_selection(self, selector):
        """Only a native token worth $5 and no EOA pick: validation fails."""
        native = _token(ZERO_ADDRESS, "5", native=True)

        assert required_mode(AccountVersion.V1, [native]) == FeeMode.EXTERNALLY_FUNDED
        with pytest.raises(ValidationError) as exc_info:
            selector.select(AccountVersion.V1, [native])
        assert exc_info.value.message == FEE_TOKEN_REQUIRED_MESSAGE

    def test_v1_native_only_uses_eoa_selection(self, selector):
        native = _token(ZERO_ADDRESS, "5", native=True)
        eoa = _token(_addr(0xEE), "100", chain="op")

        selection = selector.select(AccountVersion.V1, [native], eoa)

        assert selection.mode == FeeMode.EXTERNALLY_FUNDED
        assert selection.token is eoa
        assert selection.chain_id == 10

    def test_v2_always_externally_funded(self, selector):
        eoa = _token(_addr(0xEE), "100")
        tokens = [_token(_addr(0x50), "50")]

        assert required_mode(AccountVersion.V2, tokens) == FeeMode.EXTERNALLY_FUNDED
        selection = selector.select(AccountVersion.V2, tokens, eoa)
        assert selection.mode == FeeMode.EXTERNALLY_FUNDED
        assert selection.token is eoa

    def test_unknown_fee_chain(self, selector):
        eoa = _token(_addr(0xEE), "100", chain="solana")

        with pytest.raises(ValidationError, match="Invalid fee token chain."):
            selector.select(AccountVersion.V2, [_token(_addr(1), "1")], eoa)

    def test_manual_entries_pay_with_first_erc20(self, selector):
        entries = [
            ManualTokenEntry(8453, ZERO_ADDRESS, "ETH", "Ethereum", 18, 10**18, True, is_native=True),
            ManualTokenEntry(8453, _addr(0xA), "AAA", "A", 18, 1, True),
            ManualTokenEntry(42161, _addr(0xB), "BBB", "B", 18, 1, True),
        ]

        selection = selector.select(AccountVersion.V1, entries)

        assert selection.mode == FeeMode.SELF_FUNDED
        assert selection.token_address == _addr(0xA)
        assert selection.chain_id == 8453


# =============================================================================
# Candidates
# =============================================================================

class TestFeeCandidates:
    def test_top_candidates_by_value(self):
        tokens = [_token(_addr(i), str(i)) for i in range(1, 15)]

        candidates = fee_token_candidates(tokens, limit=10)

        assert len(candidates) == 10
        assert candidates[0].usd_value == Decimal("14")
        assert candidates[-1].usd_value == Decimal("5")

    def test_no_minimum_value(self):
        dust = _token(_addr(1), "0.001")
        assert fee_token_candidates([dust], limit=10) == [dust]

    def test_candidates_on_sweep_chains(self):
        on_base = _token(_addr(1), "5", chain="base")
        on_arb = _token(_addr(2), "9", chain="arb")
        sweep = [_token(_addr(3), "1", chain="base")]

        assert candidates_on_chains([on_arb, on_base], sweep) == [on_base]
        assert candidates_on_chains([on_arb, on_base], []) == [on_arb, on_base]


class TestFeeTokenSelection:
    def test_defaults_to_highest_value(self):
        selection = FeeTokenSelection()
        candidates = [_token(_addr(2), "9"), _token(_addr(1), "5")]

        assert selection.current(candidates) is candidates[0]
        assert selection.selected_key == token_key(candidates[0])

    def test_pick_persists(self):
        selection = FeeTokenSelection()
        candidates = [_token(_addr(2), "9"), _token(_addr(1), "5")]

        selection.select(token_key(candidates[1]))

        assert selection.current(candidates) is candidates[1]

    def test_falls_back_when_pick_leaves_candidates(self):
        selection = FeeTokenSelection()
        selection.select("base-0xgone")
        candidates = [_token(_addr(2), "9")]

        assert selection.current(candidates) is candidates[0]
        assert selection.selected_key == token_key(candidates[0])

    def test_clear_and_empty(self):
        selection = FeeTokenSelection()
        selection.select("base-x")
        selection.clear()

        assert selection.selected_key is None
        assert selection.current([]) is None
