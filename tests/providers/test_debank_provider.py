"""
Tests for the DeBank balance index provider
"""

import httpx
import pytest

from sweeper.providers.debank import DebankConfig, DebankError, DebankProvider

ADDRESS = "0x1111111111111111111111111111111111111111"


def _provider(handler) -> DebankProvider:
    config = DebankConfig(access_key="test-key", base_url="https://debank.test/v1")
    return DebankProvider(config, transport=httpx.MockTransport(handler))


class TestDebankProvider:
    @pytest.mark.asyncio
    async def test_token_list_request(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["params"] = dict(request.url.params)
            seen["key"] = request.headers.get("AccessKey")
            return httpx.Response(200, json=[{"id": "eth", "chain": "eth", "amount": 1}])

        provider = _provider(handler)
        tokens = await provider.get_token_list(ADDRESS, ["base", "arb"])

        assert tokens == [{"id": "eth", "chain": "eth", "amount": 1}]
        assert seen["path"] == "/v1/user/all_token_list"
        assert seen["params"] == {"id": ADDRESS, "is_all": "true", "chain_ids": "base,arb"}
        assert seen["key"] == "test-key"
        await provider.close()

    @pytest.mark.asyncio
    async def test_total_balance(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/v1/user/total_balance"
            return httpx.Response(200, json={"total_usd_value": 12.5, "chain_list": []})

        provider = _provider(handler)
        assert (await provider.get_total_balance(ADDRESS))["total_usd_value"] == 12.5

    @pytest.mark.asyncio
    async def test_http_error(self):
        provider = _provider(lambda request: httpx.Response(429, text="rate limited"))

        with pytest.raises(DebankError) as exc_info:
            await provider.get_token_list(ADDRESS)

        assert exc_info.value.status_code == 429

    @pytest.mark.asyncio
    async def test_unexpected_payload(self):
        provider = _provider(lambda request: httpx.Response(200, json={"not": "a list"}))

        with pytest.raises(DebankError, match="Unexpected all_token_list payload"):
            await provider.get_token_list(ADDRESS)

    @pytest.mark.asyncio
    async def test_network_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        provider = _provider(handler)

        with pytest.raises(DebankError, match="Request failed"):
            await provider.get_total_balance(ADDRESS)

    @pytest.mark.asyncio
    async def test_ready_requires_access_key(self):
        provider = DebankProvider(DebankConfig(access_key=""))

        assert await provider.ready() is False
        assert (await provider.health_check())["status"] == "disabled"
