"""
Tests for the Account Resolver and multichain account view
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from sweeper.core.accounts import ACCOUNT_RESOLUTION_MESSAGE, AccountResolver, NexusAccount
from sweeper.core.errors import AccountResolutionError
from sweeper.types import AccountVersion

V1_ADDRESS = "0x1111111111111111111111111111111111111111"
V2_ADDRESS = "0x2222222222222222222222222222222222222222"


@pytest.fixture
def relay():
    mock = MagicMock()

    async def resolve(signer, version, chain_config):
        return V1_ADDRESS if version == AccountVersion.V1 else V2_ADDRESS

    mock.resolve_account = AsyncMock(side_effect=resolve)
    return mock


@pytest.fixture
def signer():
    return MagicMock()


class TestAccountResolver:
    @pytest.mark.asyncio
    async def test_resolves_each_version(self, relay, signer):
        resolver = AccountResolver(relay, anchor_chain_id=8453, alchemy_api_key="")

        state = await resolver.resolve_all(signer)

        assert state.address_for(AccountVersion.V1) == V1_ADDRESS
        assert state.address_for(AccountVersion.V2) == V2_ADDRESS
        assert state.error is None
        assert state.resolving is False
        assert relay.resolve_account.await_count == 2

    @pytest.mark.asyncio
    async def test_chain_configuration_uses_anchor(self, relay, signer):
        resolver = AccountResolver(relay, anchor_chain_id=10, alchemy_api_key="")

        await resolver.resolve_account_address(signer, AccountVersion.V2)

        chain_config = relay.resolve_account.await_args.args[2]
        assert chain_config.chain_id == 10
        assert chain_config.version == AccountVersion.V2
        assert chain_config.version_check is False

    @pytest.mark.asyncio
    async def test_failure_wraps_error(self, relay, signer):
        relay.resolve_account.side_effect = RuntimeError("factory reverted")
        resolver = AccountResolver(relay, anchor_chain_id=8453)

        with pytest.raises(AccountResolutionError) as exc_info:
            await resolver.resolve_account_address(signer, AccountVersion.V1)

        assert exc_info.value.message == ACCOUNT_RESOLUTION_MESSAGE
        assert exc_info.value.details["reason"] == "factory reverted"

    @pytest.mark.asyncio
    async def test_empty_address_is_failure(self, relay, signer):
        relay.resolve_account.side_effect = None
        relay.resolve_account.return_value = ""
        resolver = AccountResolver(relay, anchor_chain_id=8453)

        with pytest.raises(AccountResolutionError):
            await resolver.resolve_account_address(signer, AccountVersion.V1)

    @pytest.mark.asyncio
    async def test_failure_clears_previous_addresses(self, relay, signer):
        resolver = AccountResolver(relay, anchor_chain_id=8453)
        await resolver.resolve_all(signer)

        relay.resolve_account.side_effect = RuntimeError("rpc down")
        state = await resolver.resolve_all(signer)

        assert state.address_for(AccountVersion.V1) is None
        assert state.address_for(AccountVersion.V2) is None
        assert state.error == ACCOUNT_RESOLUTION_MESSAGE

    @pytest.mark.asyncio
    async def test_retry_after_failure(self, relay, signer):
        resolver = AccountResolver(relay, anchor_chain_id=8453)
        original = relay.resolve_account.side_effect
        relay.resolve_account.side_effect = RuntimeError("rpc down")
        await resolver.resolve_all(signer)

        relay.resolve_account.side_effect = original
        state = await resolver.resolve_all(signer)

        assert state.error is None
        assert state.address_for(AccountVersion.V1) == V1_ADDRESS

    @pytest.mark.asyncio
    async def test_no_signer_clears_state(self, relay, signer):
        resolver = AccountResolver(relay, anchor_chain_id=8453)
        await resolver.resolve_all(signer)

        state = await resolver.resolve_all(None)

        assert state.address_for(AccountVersion.V1) is None
        relay.resolve_account.assert_awaited()


class TestNexusAccount:
    def test_address_on_configured_chain(self):
        account = NexusAccount.on_chains(AccountVersion.V1, V1_ADDRESS, [8453, 10])

        assert account.address_on(8453) == V1_ADDRESS
        assert account.address_on(1) is None

    def test_override(self):
        account = NexusAccount.on_chains(AccountVersion.V1, V1_ADDRESS, [8453])
        account.overrides[1] = V2_ADDRESS

        assert account.address_on(1) == V2_ADDRESS
