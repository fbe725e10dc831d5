"""Manual token lookup against a chain node."""

from __future__ import annotations

import logging
from typing import Optional

from ..chains import get_chain_registry, is_native_token_address, native_token_info
from ..errors import TokenLookupError
from .models import ManualTokenEntry, is_address
from ...providers.rpc import RpcError, RpcProvider, get_rpc_provider

logger = logging.getLogger(__name__)

TOKEN_NOT_FOUND_MESSAGE = "Cannot find token. Please check chain ID and token address."


async def fetch_token_info(
    chain_id: int,
    token_address: str,
    owner_address: str,
    rpc: Optional[RpcProvider] = None,
) -> ManualTokenEntry:
    """Read token metadata and the owner's balance.

    Chains outside the registry are still queried (through a generic
    endpoint) so the user can see the token, but are flagged unsupported.
    """
    if not is_address(token_address) or not is_address(owner_address):
        raise TokenLookupError("Invalid token or owner address.")

    rpc = rpc or get_rpc_provider()
    is_supported = get_chain_registry().is_supported(chain_id)

    try:
        if is_native_token_address(token_address):
            info = native_token_info(chain_id)
            balance = await rpc.get_native_balance(chain_id, owner_address)
            return ManualTokenEntry(
                chain_id=chain_id,
                address=token_address,
                symbol=info["symbol"],
                name=info["name"],
                decimals=info["decimals"],
                balance=balance,
                is_supported_chain=is_supported,
                is_native=True,
            )

        metadata = await rpc.erc20_metadata(chain_id, token_address, owner_address)
    except (RpcError, ValueError) as exc:
        logger.error(f"Failed to fetch token info for {token_address} on {chain_id}: {exc}")
        raise TokenLookupError(
            TOKEN_NOT_FOUND_MESSAGE,
            details={"chain_id": chain_id, "address": token_address},
        ) from exc

    return ManualTokenEntry(
        chain_id=chain_id,
        address=token_address,
        symbol=metadata["symbol"],
        name=metadata["name"],
        decimals=metadata["decimals"],
        balance=metadata["balance"],
        is_supported_chain=is_supported,
    )
