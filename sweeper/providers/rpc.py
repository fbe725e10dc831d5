"""
Chain node JSON-RPC provider.

Only the read calls needed for manual token lookup and account derivation:
``eth_call`` against ERC-20 metadata/balance functions and factory views.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional

import httpx
from eth_utils import keccak

from ..config import settings
from ..core.chains import rpc_url


class RpcError(Exception):
    """JSON-RPC call failed."""
    pass


def _strip_0x(value: str) -> str:
    return value[2:] if value.startswith("0x") else value


def encode_uint(value: int) -> str:
    if value < 0:
        raise ValueError("Value must be non-negative")
    return format(value, "064x")


def encode_address(address: str) -> str:
    addr = _strip_0x(address).lower()
    if len(addr) != 40:
        raise ValueError(f"Invalid address length: {address}")
    return addr.rjust(64, "0")


def selector(signature: str) -> str:
    return "0x" + keccak(text=signature)[:4].hex()


def decode_uint(result: str) -> int:
    raw = _strip_0x(result or "")
    if not raw:
        raise RpcError("Empty eth_call result")
    return int(raw[:64], 16)


def decode_address(result: str) -> str:
    raw = _strip_0x(result or "")
    if len(raw) < 64:
        raise RpcError("eth_call result too short for an address")
    return "0x" + raw[24:64]


def decode_string(result: str) -> str:
    """Decode an ABI ``string`` return, tolerating legacy ``bytes32`` tokens."""
    raw = bytes.fromhex(_strip_0x(result or ""))
    if not raw:
        raise RpcError("Empty eth_call result")

    if len(raw) == 32:
        return raw.rstrip(b"\x00").decode("utf-8", errors="replace")

    offset = int.from_bytes(raw[:32], "big")
    length = int.from_bytes(raw[offset:offset + 32], "big")
    data = raw[offset + 32:offset + 32 + length]
    return data.decode("utf-8", errors="replace")


ERC20_SYMBOL = selector("symbol()")
ERC20_NAME = selector("name()")
ERC20_DECIMALS = selector("decimals()")
ERC20_BALANCE_OF = selector("balanceOf(address)")


class RpcProvider:
    """Minimal async JSON-RPC client keyed by chain ID."""

    timeout_s = 20

    def __init__(
        self,
        *,
        alchemy_api_key: Optional[str] = None,
        url_overrides: Optional[Dict[int, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._alchemy_api_key = settings.alchemy_api_key if alchemy_api_key is None else alchemy_api_key
        self._url_overrides = url_overrides or {}
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def url_for(self, chain_id: int) -> str:
        return self._url_overrides.get(chain_id) or rpc_url(chain_id, self._alchemy_api_key)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport)
        return self._client

    async def _rpc_call(self, chain_id: int, method: str, params: List[Any]) -> Any:
        try:
            response = await self._get_client().post(
                self.url_for(chain_id),
                json={"jsonrpc": "2.0", "id": 1, "method": method, "params": params},
            )
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise RpcError(f"{method} on chain {chain_id} failed: {exc}") from exc

        if "error" in payload:
            raise RpcError(str(payload["error"]))
        return payload.get("result")

    async def eth_call(self, chain_id: int, to: str, data: str) -> str:
        result = await self._rpc_call(chain_id, "eth_call", [{"to": to, "data": data}, "latest"])
        if not isinstance(result, str) or result in ("0x", ""):
            raise RpcError(f"eth_call to {to} returned no data")
        return result

    async def get_native_balance(self, chain_id: int, address: str) -> int:
        result = await self._rpc_call(chain_id, "eth_getBalance", [address, "latest"])
        if not isinstance(result, str):
            raise RpcError(f"eth_getBalance for {address} returned no data")
        return int(result, 16)

    async def erc20_metadata(self, chain_id: int, token: str, owner: str) -> Dict[str, Any]:
        """Read symbol, name, decimals and ``balanceOf(owner)`` concurrently."""
        symbol_raw, name_raw, decimals_raw, balance_raw = await asyncio.gather(
            self.eth_call(chain_id, token, ERC20_SYMBOL),
            self.eth_call(chain_id, token, ERC20_NAME),
            self.eth_call(chain_id, token, ERC20_DECIMALS),
            self.eth_call(chain_id, token, ERC20_BALANCE_OF + encode_address(owner)),
        )
        return {
            "symbol": decode_string(symbol_raw),
            "name": decode_string(name_raw),
            "decimals": decode_uint(decimals_raw),
            "balance": decode_uint(balance_raw),
        }

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None


_rpc_provider: Optional[RpcProvider] = None


def get_rpc_provider() -> RpcProvider:
    global _rpc_provider
    if _rpc_provider is None:
        _rpc_provider = RpcProvider()
    return _rpc_provider
