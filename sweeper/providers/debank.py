"""
DeBank Pro OpenAPI provider (balance index).

Docs: https://docs.cloud.debank.com/en/readme/api-pro-reference/user
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import httpx

from .base import BalanceIndexProvider
from ..config import settings

logger = logging.getLogger(__name__)


class DebankError(Exception):
    """DeBank request failed."""
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class DebankConfig:
    access_key: str = ""
    base_url: str = "https://pro-openapi.debank.com/v1"
    timeout_s: float = 30.0


class DebankProvider(BalanceIndexProvider):
    name = "debank"

    def __init__(
        self,
        config: Optional[DebankConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config or DebankConfig(
            access_key=settings.debank_access_key,
            base_url=settings.debank_api_base,
            timeout_s=settings.request_timeout_seconds,
        )
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._config.base_url.rstrip("/"),
                headers={
                    "Content-Type": "application/json",
                    "AccessKey": self._config.access_key,
                },
                timeout=self._config.timeout_s,
                transport=self._transport,
            )
        return self._client

    async def ready(self) -> bool:
        return bool(self._config.access_key)

    async def health_check(self) -> Dict[str, Any]:
        if not await self.ready():
            return {"status": "disabled", "reason": "DeBank access key not configured"}
        return {"status": "healthy"}

    async def _get(self, path: str, params: Dict[str, Any]) -> Any:
        try:
            response = await self._get_client().get(path, params=params)
        except httpx.RequestError as exc:
            logger.error(f"DeBank request failed: {exc}")
            raise DebankError(f"Request failed: {exc}") from exc

        if response.status_code != 200:
            raise DebankError(
                f"DeBank {path} failed: {response.status_code} {response.text}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise DebankError(f"DeBank {path} returned invalid JSON") from exc

    async def get_total_balance(self, address: str) -> Dict[str, Any]:
        data = await self._get("/user/total_balance", {"id": address})
        if not isinstance(data, dict):
            raise DebankError("Unexpected total_balance payload")
        return data

    async def get_token_list(
        self,
        address: str,
        chain_ids: Optional[Sequence[str]] = None,
    ) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {"id": address, "is_all": "true"}
        if chain_ids:
            params["chain_ids"] = ",".join(chain_ids)

        data = await self._get("/user/all_token_list", params)
        if not isinstance(data, list):
            raise DebankError("Unexpected all_token_list payload")
        return data

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

