"""
Tests for the Sweep Token Normalizer
"""

from decimal import Decimal

from sweeper.core.chains import ZERO_ADDRESS, ChainRegistry
from sweeper.core.tokens import (
    ManualTokenEntry,
    TokenRecord,
    normalize,
    normalize_sweep_set,
)

USDC_BASE = "0x833589fcd6edb6e08f4c7c32d4f71b54bda02913"


def _record(**overrides) -> TokenRecord:
    values = dict(
        chain_external_id="base",
        token_id=USDC_BASE,
        symbol="USDC",
        name="USD Coin",
        decimals=6,
        price_usd=Decimal("1"),
        quantity=Decimal("12.5"),
        verified=True,
        wallet_owned=True,
        resolved_address=USDC_BASE,
    )
    values.update(overrides)
    return TokenRecord(**values)


class TestNormalizeRecord:
    def test_erc20(self):
        token = normalize(_record(), 8453)

        assert token.chain_id == 8453
        assert token.address == USDC_BASE
        assert token.is_native is False

    def test_native_snapshots_amount_and_decimals(self):
        record = _record(
            token_id="base",
            symbol="ETH",
            decimals=18,
            quantity=Decimal("1.5"),
            resolved_address=ZERO_ADDRESS,
            is_native=True,
        )

        token = normalize(record, 8453)

        assert token.is_native is True
        assert token.amount == "1.5"
        assert token.decimals == 18

    def test_unresolved_address_returns_none(self):
        assert normalize(_record(resolved_address=None), 8453) is None

    def test_sweep_set_drops_unknown_chains(self):
        kept = _record()
        pairs = normalize_sweep_set(
            [kept, _record(chain_external_id="solana")],
            ChainRegistry(),
        )

        assert len(pairs) == 1
        record, token = pairs[0]
        assert record is kept
        assert token.chain_id == 8453

    def test_sweep_set_drops_unresolved_addresses(self):
        kept = _record(token_id="other", resolved_address="0x" + "a" * 40)
        pairs = normalize_sweep_set([_record(resolved_address=None), kept], ChainRegistry())

        assert [record for record, _ in pairs] == [kept]


class TestNormalizeManualEntry:
    def test_balance_formatted_without_precision_loss(self):
        entry = ManualTokenEntry(
            chain_id=1,
            address=ZERO_ADDRESS,
            symbol="ETH",
            name="Ethereum",
            decimals=18,
            balance=1_234_567_890_123_456_789,
            is_supported_chain=True,
            is_native=True,
        )

        token = normalize(entry, entry.chain_id)

        assert token.amount == "1.234567890123456789"
        assert token.decimals == 18
        assert token.is_native is True

    def test_native_detected_from_sentinel(self):
        entry = ManualTokenEntry(
            chain_id=137,
            address="0x0000000000000000000000000000000000001010",
            symbol="POL",
            name="POL",
            decimals=18,
            balance=1,
            is_supported_chain=True,
        )

        assert normalize(entry, 137).is_native is True

    def test_sweep_set_with_manual_entries(self):
        entry = ManualTokenEntry(
            chain_id=8453,
            address=USDC_BASE,
            symbol="USDC",
            name="USD Coin",
            decimals=6,
            balance=5,
            is_supported_chain=True,
        )
        unsupported = ManualTokenEntry(31337, USDC_BASE, "USDC", "USD Coin", 6, 5, False)

        pairs = normalize_sweep_set([entry, unsupported], ChainRegistry())

        assert [record for record, _ in pairs] == [entry]
        assert pairs[0][1].address == USDC_BASE
        assert pairs[0][1].is_native is False
