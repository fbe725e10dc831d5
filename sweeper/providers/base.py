from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from ..types import (
    AccountVersion,
    ChainConfiguration,
    ExecutionHandle,
    Quote,
    QuoteRequest,
    SignedQuote,
    SupertransactionReceipt,
)


class Provider(ABC):
    """Base provider interface"""

    name: str
    timeout_s: int = 10

    @abstractmethod
    async def ready(self) -> bool:
        """Check if provider is ready to serve requests"""
        pass

    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        """Return provider health status"""
        pass


class BalanceIndexProvider(Provider):
    """Read-only portfolio index (balances + token metadata per address)"""

    @abstractmethod
    async def get_total_balance(self, address: str) -> Dict[str, Any]:
        """Total USD value and per-chain breakdown for an address"""
        pass

    @abstractmethod
    async def get_token_list(self, address: str, chain_ids: Optional[Sequence[str]] = None) -> List[Dict[str, Any]]:
        """Raw token balances for an address, scoped to index chain ids"""
        pass


class Signer(ABC):
    """Connected wallet (EOA) capability"""

    @abstractmethod
    async def get_address(self) -> str:
        pass

    @abstractmethod
    async def get_chain_id(self) -> int:
        """Chain the wallet is currently connected to"""
        pass

    @abstractmethod
    async def sign_typed_data(self, typed_data: Dict[str, Any]) -> str:
        """Sign an EIP-712 payload; raise if the user rejects"""
        pass

    @abstractmethod
    async def switch_chain(self, chain_id: int) -> bool:
        """Ask the wallet to switch network; False or raise on failure"""
        pass


class ExecutionRelay(Provider):
    """Smart-account / cross-chain execution network"""

    @abstractmethod
    async def resolve_account(
        self,
        signer: Signer,
        version: AccountVersion,
        chain_config: ChainConfiguration,
    ) -> str:
        """Deterministic smart account address for ``signer`` under ``version``"""
        pass

    @abstractmethod
    async def get_quote(self, request: QuoteRequest) -> Quote:
        """Quote for a self-funded supertransaction"""
        pass

    @abstractmethod
    async def get_on_chain_quote(self, request: QuoteRequest) -> Quote:
        """Quote for an externally-funded supertransaction (requires trigger)"""
        pass

    @abstractmethod
    async def sign_on_chain_quote(self, quote: Quote, signer: Signer) -> SignedQuote:
        pass

    @abstractmethod
    async def execute_quote(self, quote: Quote, signer: Signer) -> ExecutionHandle:
        """Sign and execute a self-funded quote in one call"""
        pass

    @abstractmethod
    async def execute_signed_quote(self, signed_quote: SignedQuote) -> ExecutionHandle:
        pass

    @abstractmethod
    async def get_receipt(self, supertx_hash: str) -> SupertransactionReceipt:
        pass
