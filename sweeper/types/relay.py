"""Typed request/response shapes exchanged with the execution relay."""

from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

_HEX_ADDRESS_LENGTH = 42


def _check_address(value: str) -> str:
    value = value.strip()
    if not value.startswith("0x") or len(value) != _HEX_ADDRESS_LENGTH:
        raise ValueError(f"Invalid address: {value}")
    int(value[2:], 16)
    return value


class RelayModel(BaseModel):
    """Serializes with the camelCase field names the relay API expects."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class AccountVersion(str, Enum):
    """Nexus account implementation versions (MEE versions)."""

    V1 = "2.1.0"
    V2 = "2.2.0"


class RuntimeErc20Balance(RelayModel):
    """Amount resolved by the relay at execution time: ``token.balanceOf(target_address)``."""

    kind: Literal["runtimeErc20Balance"] = "runtimeErc20Balance"
    target_address: str
    token_address: str

    @field_validator("target_address", "token_address")
    @classmethod
    def validate_addresses(cls, value: str) -> str:
        return _check_address(value)


class InstructionType(str, Enum):
    TRANSFER = "transfer"
    NATIVE_TRANSFER = "nativeTokenTransfer"
    RAW_CALLDATA = "rawCalldata"


class Instruction(RelayModel):
    """One composable call in a supertransaction."""

    type: InstructionType
    chain_id: int
    to: str
    value: int = 0
    token_address: Optional[str] = None
    amount: Optional[Union[RuntimeErc20Balance, int]] = None
    calldata: Optional[str] = None
    gas_limit: int = Field(default=100_000, ge=21_000)

    @property
    def uses_runtime_balance(self) -> bool:
        return isinstance(self.amount, RuntimeErc20Balance)


class ChainConfiguration(RelayModel):
    chain_id: int
    rpc_url: str
    version: AccountVersion
    version_check: bool = False


class FeeTokenConfig(RelayModel):
    address: str
    chain_id: int

    @field_validator("address")
    @classmethod
    def validate_address(cls, value: str) -> str:
        return _check_address(value)


class TriggerConfig(RelayModel):
    """On-chain trigger for externally-funded quotes (a token pull from the EOA)."""

    chain_id: int
    token_address: str
    amount: int = Field(default=1, gt=0)

    @field_validator("token_address")
    @classmethod
    def validate_token_address(cls, value: str) -> str:
        return _check_address(value)


class QuoteRequest(RelayModel):
    account_address: str
    owner_address: str
    version: AccountVersion
    instructions: List[Instruction] = Field(min_length=1)
    fee_token: FeeTokenConfig
    trigger: Optional[TriggerConfig] = None
    chain_configurations: List[ChainConfiguration] = Field(default_factory=list)


class Quote(RelayModel):
    hash: str
    fee_token: FeeTokenConfig
    payment_amount: Optional[str] = None
    payment_value_usd: Optional[float] = None
    on_chain: bool = False
    typed_data: Optional[Dict[str, Any]] = None
    raw: Dict[str, Any] = Field(default_factory=dict, exclude=True)


class SignedQuote(RelayModel):
    quote: Quote
    signature: str


class ExecutionHandle(RelayModel):
    hash: str


class ReceiptStatus(str, Enum):
    PENDING = "PENDING"
    MINING = "MINING"
    MINED_SUCCESS = "MINED_SUCCESS"
    MINED_FAIL = "MINED_FAIL"
    FAILED = "FAILED"


class SupertransactionReceipt(RelayModel):
    hash: str
    status: str
    explorer_links: List[str] = Field(default_factory=list)

    @property
    def is_success(self) -> bool:
        return self.status == ReceiptStatus.MINED_SUCCESS.value

    @property
    def is_pending(self) -> bool:
        return self.status in (ReceiptStatus.PENDING.value, ReceiptStatus.MINING.value)
