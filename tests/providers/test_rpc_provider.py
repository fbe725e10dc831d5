"""
Tests for the JSON-RPC provider and ABI helpers
"""

import json

import httpx
import pytest

from sweeper.providers.rpc import (
    ERC20_BALANCE_OF,
    ERC20_DECIMALS,
    ERC20_NAME,
    ERC20_SYMBOL,
    RpcError,
    RpcProvider,
    decode_address,
    decode_string,
    decode_uint,
    encode_address,
    encode_uint,
    selector,
)

TOKEN = "0x833589fcd6edb6e08f4c7c32d4f71b54bda02913"
OWNER = "0x1111111111111111111111111111111111111111"


def _word(value: int) -> str:
    return format(value, "064x")


def _abi_string(text: str) -> str:
    data = text.encode()
    return "0x" + _word(32) + _word(len(data)) + data.ljust(32, b"\x00").hex()


def _provider(handler) -> RpcProvider:
    return RpcProvider(
        alchemy_api_key="",
        url_overrides={8453: "https://rpc.test/base"},
        transport=httpx.MockTransport(handler),
    )


# =============================================================================
# ABI helpers
# =============================================================================

class TestAbiHelpers:
    def test_selector(self):
        assert selector("transfer(address,uint256)") == "0xa9059cbb"
        assert ERC20_BALANCE_OF == "0x70a08231"

    def test_encode(self):
        assert encode_uint(1) == "0" * 63 + "1"
        assert encode_address(OWNER) == "0" * 24 + OWNER[2:]
        with pytest.raises(ValueError):
            encode_address("0x1234")
        with pytest.raises(ValueError):
            encode_uint(-1)

    def test_decode(self):
        assert decode_uint("0x" + _word(6)) == 6
        assert decode_address("0x" + "0" * 24 + OWNER[2:]) == OWNER
        assert decode_string(_abi_string("USDC")) == "USDC"

    def test_decode_bytes32_string(self):
        raw = "0x" + b"MKR".ljust(32, b"\x00").hex()
        assert decode_string(raw) == "MKR"

    def test_decode_empty(self):
        with pytest.raises(RpcError):
            decode_uint("0x")


# =============================================================================
# Provider calls
# =============================================================================

class TestRpcProvider:
    @pytest.mark.asyncio
    async def test_erc20_metadata(self):
        responses = {
            ERC20_SYMBOL: _abi_string("USDC"),
            ERC20_NAME: _abi_string("USD Coin"),
            ERC20_DECIMALS: "0x" + _word(6),
            ERC20_BALANCE_OF: "0x" + _word(2_500_000),
        }

        def handler(request: httpx.Request) -> httpx.Response:
            assert str(request.url) == "https://rpc.test/base"
            body = json.loads(request.content)
            call = body["params"][0]
            assert call["to"] == TOKEN
            result = responses[call["data"][:10]]
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})

        provider = _provider(handler)
        metadata = await provider.erc20_metadata(8453, TOKEN, OWNER)

        assert metadata == {"symbol": "USDC", "name": "USD Coin", "decimals": 6, "balance": 2_500_000}
        await provider.close()

    @pytest.mark.asyncio
    async def test_native_balance(self):
        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            assert body["method"] == "eth_getBalance"
            assert body["params"] == [OWNER, "latest"]
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": hex(10**18)})

        provider = _provider(handler)
        assert await provider.get_native_balance(8453, OWNER) == 10**18

    @pytest.mark.asyncio
    async def test_json_rpc_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "error": {"message": "execution reverted"}})

        provider = _provider(handler)

        with pytest.raises(RpcError, match="execution reverted"):
            await provider.eth_call(8453, TOKEN, ERC20_SYMBOL)

    @pytest.mark.asyncio
    async def test_empty_call_result(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": "0x"})

        provider = _provider(handler)

        with pytest.raises(RpcError, match="returned no data"):
            await provider.eth_call(8453, TOKEN, ERC20_SYMBOL)

    @pytest.mark.asyncio
    async def test_http_failure(self):
        provider = _provider(lambda request: httpx.Response(502, text="bad gateway"))

        with pytest.raises(RpcError, match="eth_getBalance on chain 8453 failed"):
            await provider.get_native_balance(8453, OWNER)

    def test_url_falls_back_to_chain_endpoint(self):
        provider = RpcProvider(alchemy_api_key="")
        assert provider.url_for(8453).startswith("https://")
