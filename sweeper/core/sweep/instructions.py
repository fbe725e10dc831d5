"""
Instruction builder for sweep supertransactions.

ERC-20 transfers sweep whatever balance the account holds when the relay
executes them (a runtime balance marker). Native balances cannot be read that
way, so they are swept as a fixed value taken from the discovery snapshot.
"""

import logging
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from ..accounts.models import NexusAccount
from ..chains import ChainRegistry, get_chain_registry
from ..tokens.models import SweepToken, parse_units
from ...config import settings
from ...providers.rpc import encode_address, selector
from ...types import Instruction, InstructionType, RuntimeErc20Balance

logger = logging.getLogger(__name__)

FORWARD_SELECTOR = selector("forward(address)")


class NativeTransferStrategy(ABC):
    """Turns a fixed native amount into one relay instruction."""

    name: str = ""

    @abstractmethod
    def build(self, chain_id: int, recipient: str, amount: int) -> Instruction:
        pass


class DirectValueTransfer(NativeTransferStrategy):
    """Plain value transfer from the smart account to the recipient."""

    name = "direct"

    def __init__(self, gas_limit: Optional[int] = None):
        self.gas_limit = gas_limit or settings.instruction_gas_limit

    def build(self, chain_id: int, recipient: str, amount: int) -> Instruction:
        return Instruction(
            type=InstructionType.NATIVE_TRANSFER,
            chain_id=chain_id,
            to=recipient,
            value=amount,
            gas_limit=self.gas_limit,
        )


class ForwarderTransfer(NativeTransferStrategy):
    """Call ``forward(recipient)`` on the ETH forwarder contract, attaching the value."""

    name = "forwarder"

    def __init__(self, forwarder_address: Optional[str] = None, gas_limit: Optional[int] = None):
        self.forwarder_address = forwarder_address or settings.eth_forwarder_address
        self.gas_limit = gas_limit or settings.forwarder_gas_limit

    def build(self, chain_id: int, recipient: str, amount: int) -> Instruction:
        # Encode: forward(address recipient)
        calldata = FORWARD_SELECTOR + encode_address(recipient)
        return Instruction(
            type=InstructionType.RAW_CALLDATA,
            chain_id=chain_id,
            to=self.forwarder_address,
            value=amount,
            calldata=calldata,
            gas_limit=self.gas_limit,
        )


NATIVE_STRATEGIES = {
    DirectValueTransfer.name: DirectValueTransfer,
    ForwarderTransfer.name: ForwarderTransfer,
}


def get_native_strategy(name: Optional[str] = None) -> NativeTransferStrategy:
    name = (name or settings.native_transfer_strategy).strip().lower()
    try:
        return NATIVE_STRATEGIES[name]()
    except KeyError:
        raise ValueError(
            f"Unknown native transfer strategy: {name}. "
            f"Expected one of {sorted(NATIVE_STRATEGIES)}"
        ) from None


class InstructionBuilder:
    """
    Builds the instruction batch that moves every swept token to the recipient.

    Handles:
    - ERC-20 transfers with a runtime balance amount
    - Native transfers through the configured NativeTransferStrategy
    """

    def __init__(
        self,
        native_strategy: Optional[NativeTransferStrategy] = None,
        registry: Optional[ChainRegistry] = None,
        gas_limit: Optional[int] = None,
    ):
        self.native_strategy = native_strategy or get_native_strategy()
        self.registry = registry or get_chain_registry()
        self.gas_limit = gas_limit or settings.instruction_gas_limit

    def build(
        self,
        account: NexusAccount,
        recipient: str,
        tokens: Iterable[SweepToken],
    ) -> List[Instruction]:
        """
        Build one instruction per sweepable token.

        Tokens on unsupported chains, or on chains where the account has no
        address, are skipped. An empty result is left for the caller to reject.
        """
        instructions: List[Instruction] = []

        for token in tokens:
            if not self.registry.is_supported(token.chain_id):
                continue
            account_address = account.address_on(token.chain_id)
            if not account_address:
                continue

            if token.is_native:
                instruction = self._build_native(token, recipient)
            else:
                instruction = self._build_erc20(token, account_address, recipient)

            if instruction is not None:
                instructions.append(instruction)

        return instructions

    def _build_erc20(self, token: SweepToken, account_address: str, recipient: str) -> Instruction:
        return Instruction(
            type=InstructionType.TRANSFER,
            chain_id=token.chain_id,
            to=recipient,
            token_address=token.address,
            amount=RuntimeErc20Balance(
                target_address=account_address,
                token_address=token.address,
            ),
            gas_limit=self.gas_limit,
        )

    def _build_native(self, token: SweepToken, recipient: str) -> Optional[Instruction]:
        if token.amount is None or token.decimals is None:
            logger.warning(f"Skipping native token on chain {token.chain_id}: no balance snapshot")
            return None

        try:
            amount = parse_units(token.amount, token.decimals)
        except ValueError as e:
            logger.warning(f"Skipping native token on chain {token.chain_id}: {e}")
            return None

        if amount <= 0:
            logger.info(f"Skipping native token on chain {token.chain_id}: zero balance")
            return None

        return self.native_strategy.build(token.chain_id, recipient, amount)
