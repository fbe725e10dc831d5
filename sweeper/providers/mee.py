"""
Biconomy MEE (Modular Execution Environment) relay provider.

Quotes, signs and executes supertransactions for Nexus smart accounts and
reports their receipts. Account addresses are derived from the per-version
Nexus factory with a read-only ``eth_call``.

Docs: https://docs.biconomy.io/
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx
from eth_utils import to_checksum_address

from .base import ExecutionRelay, Signer
from .rpc import RpcError, RpcProvider, decode_address, encode_address, encode_uint, get_rpc_provider, selector
from ..config import settings
from ..types import (
    AccountVersion,
    ChainConfiguration,
    ExecutionHandle,
    FeeTokenConfig,
    Quote,
    QuoteRequest,
    SignedQuote,
    SupertransactionReceipt,
)

logger = logging.getLogger(__name__)

COMPUTE_ACCOUNT_ADDRESS = selector("computeAccountAddress(address,uint256)")


class MeeError(Exception):
    """Base MEE provider error."""
    pass


class MeeApiError(MeeError):
    """API request failed."""
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class MeeConfig:
    api_key: str = ""
    base_url: str = "https://network.biconomy.io/v1"
    timeout_s: float = 30.0
    factory_addresses: Dict[str, str] = field(default_factory=dict)
    account_index: int = 0


class MeeProvider(ExecutionRelay):
    """
    HTTP client for an MEE node.

    Usage:
        relay = MeeProvider()

        quote = await relay.get_quote(request)
        handle = await relay.execute_quote(quote, signer)
        receipt = await relay.get_receipt(handle.hash)
    """

    name = "mee"

    def __init__(
        self,
        config: Optional[MeeConfig] = None,
        rpc: Optional[RpcProvider] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config or MeeConfig(
            api_key=settings.mee_api_key,
            base_url=settings.mee_api_base,
            timeout_s=settings.request_timeout_seconds,
            factory_addresses=dict(settings.account_factory_addresses),
            account_index=settings.account_index,
        )
        self._rpc = rpc or get_rpc_provider()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            headers = {"Content-Type": "application/json"}
            if self._config.api_key:
                headers["X-API-Key"] = self._config.api_key
            self._client = httpx.AsyncClient(
                base_url=self._config.base_url.rstrip("/"),
                headers=headers,
                timeout=self._config.timeout_s,
                transport=self._transport,
            )
        return self._client

    async def ready(self) -> bool:
        return bool(self._config.base_url)

    async def health_check(self) -> Dict[str, Any]:
        try:
            response = await self._get_client().get("/info")
            if response.status_code == 200:
                return {"status": "healthy"}
            return {"status": "degraded", "code": response.status_code}
        except Exception as e:
            return {"status": "error", "reason": str(e)}

    async def _request(self, method: str, path: str, *, json: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        try:
            response = await self._get_client().request(method, path, json=json)
        except httpx.RequestError as exc:
            logger.error(f"MEE {path} request failed: {exc}")
            raise MeeApiError(f"Request failed: {exc}") from exc

        if response.status_code not in (200, 201):
            raise MeeApiError(_error_message(response), status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as exc:
            raise MeeApiError(f"MEE {path} returned invalid JSON") from exc
        if not isinstance(data, dict):
            raise MeeApiError(f"Unexpected MEE {path} payload")
        return data

    async def resolve_account(
        self,
        signer: Signer,
        version: AccountVersion,
        chain_config: ChainConfiguration,
    ) -> str:
        factory = self._config.factory_addresses.get(version.value)
        if not factory:
            raise MeeError(f"No Nexus factory configured for version {version.value}")

        owner = await signer.get_address()
        calldata = (
            COMPUTE_ACCOUNT_ADDRESS
            + encode_address(owner)
            + encode_uint(self._config.account_index)
        )
        try:
            result = await self._rpc.eth_call(chain_config.chain_id, factory, calldata)
        except RpcError as exc:
            raise MeeError(f"Account derivation failed: {exc}") from exc
        return to_checksum_address(decode_address(result))

    async def get_quote(self, request: QuoteRequest) -> Quote:
        data = await self._request("POST", "/quote", json=request.to_payload())
        quote = _parse_quote(data, request.fee_token, on_chain=False)
        logger.info(f"Quote received: {quote.hash}")
        return quote

    async def get_on_chain_quote(self, request: QuoteRequest) -> Quote:
        if request.trigger is None:
            raise MeeError("On-chain quotes require a trigger")
        payload = {**request.to_payload(), "quoteType": "onchain"}
        data = await self._request("POST", "/quote", json=payload)
        quote = _parse_quote(data, request.fee_token, on_chain=True)
        logger.info(f"On-chain quote received: {quote.hash}")
        return quote

    async def sign_on_chain_quote(self, quote: Quote, signer: Signer) -> SignedQuote:
        signature = await signer.sign_typed_data(_typed_data_for(quote))
        return SignedQuote(quote=quote, signature=signature)

    async def execute_quote(self, quote: Quote, signer: Signer) -> ExecutionHandle:
        signature = await signer.sign_typed_data(_typed_data_for(quote))
        return await self.execute_signed_quote(SignedQuote(quote=quote, signature=signature))

    async def execute_signed_quote(self, signed_quote: SignedQuote) -> ExecutionHandle:
        payload = {**signed_quote.quote.raw, "signature": signed_quote.signature}
        if not signed_quote.quote.raw:
            payload.update(signed_quote.quote.to_payload())
        data = await self._request("POST", "/exec", json=payload)
        supertx_hash = data.get("hash") or data.get("supertxHash")
        if not supertx_hash:
            raise MeeApiError("MEE /exec response is missing the supertransaction hash")
        logger.info(f"Supertransaction submitted: {supertx_hash}")
        return ExecutionHandle(hash=supertx_hash)

    async def get_receipt(self, supertx_hash: str) -> SupertransactionReceipt:
        data = await self._request("GET", f"/explorer/{supertx_hash}")
        status = data.get("transactionStatus") or data.get("status") or "PENDING"
        return SupertransactionReceipt(
            hash=supertx_hash,
            status=str(status).upper(),
            explorer_links=list(data.get("explorerLinks") or []),
        )

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"MEE request failed with status {response.status_code}"
    if isinstance(body, dict):
        for key in ("message", "error", "errors"):
            if body.get(key):
                return str(body[key])
    return str(body)


def _parse_quote(data: Dict[str, Any], fee_token: FeeTokenConfig, *, on_chain: bool) -> Quote:
    quote_hash = data.get("hash") or (data.get("quote") or {}).get("hash")
    if not quote_hash:
        raise MeeApiError("MEE quote response is missing a hash")
    payment = data.get("paymentInfo") or {}
    value_usd = payment.get("tokenValue")
    return Quote(
        hash=quote_hash,
        fee_token=fee_token,
        payment_amount=payment.get("tokenAmount"),
        payment_value_usd=float(value_usd) if value_usd is not None else None,
        on_chain=on_chain,
        typed_data=data.get("typedData"),
        raw=data,
    )


def _typed_data_for(quote: Quote) -> Dict[str, Any]:
    if quote.typed_data:
        return quote.typed_data
    # Nodes without typed data expect a signature over the raw quote hash
    return {"message": {"raw": quote.hash}}

