"""
Tests for manual token lookup over RPC
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from sweeper.core.chains import ZERO_ADDRESS
from sweeper.core.errors import TokenLookupError
from sweeper.core.tokens import TOKEN_NOT_FOUND_MESSAGE, fetch_token_info
from sweeper.providers.rpc import RpcError

OWNER = "0x1234567890123456789012345678901234567890"
TOKEN = "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913"


@pytest.fixture
def rpc():
    provider = MagicMock()
    provider.erc20_metadata = AsyncMock(return_value={
        "symbol": "USDC",
        "name": "USD Coin",
        "decimals": 6,
        "balance": 2_000_000,
    })
    provider.get_native_balance = AsyncMock(return_value=10**18)
    return provider


class TestFetchTokenInfo:
    @pytest.mark.asyncio
    async def test_erc20(self, rpc):
        entry = await fetch_token_info(8453, TOKEN, OWNER, rpc=rpc)

        assert entry.symbol == "USDC"
        assert entry.decimals == 6
        assert entry.balance == 2_000_000
        assert entry.is_supported_chain is True
        assert entry.is_native is False
        rpc.erc20_metadata.assert_awaited_once_with(8453, TOKEN, OWNER)

    @pytest.mark.asyncio
    async def test_native(self, rpc):
        entry = await fetch_token_info(137, ZERO_ADDRESS, OWNER, rpc=rpc)

        assert entry.is_native is True
        assert entry.symbol == "POL"
        assert entry.decimals == 18
        assert entry.balance == 10**18
        rpc.erc20_metadata.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unsupported_chain_is_flagged(self, rpc):
        entry = await fetch_token_info(31337, TOKEN, OWNER, rpc=rpc)

        assert entry.is_supported_chain is False

    @pytest.mark.asyncio
    async def test_rpc_failure(self, rpc):
        rpc.erc20_metadata.side_effect = RpcError("execution reverted")

        with pytest.raises(TokenLookupError) as exc_info:
            await fetch_token_info(8453, TOKEN, OWNER, rpc=rpc)

        assert exc_info.value.message == TOKEN_NOT_FOUND_MESSAGE

    @pytest.mark.asyncio
    async def test_invalid_address(self, rpc):
        with pytest.raises(TokenLookupError):
            await fetch_token_info(8453, "0x1234", OWNER, rpc=rpc)
        rpc.erc20_metadata.assert_not_awaited()
