from .relay import (
    AccountVersion,
    ChainConfiguration,
    ExecutionHandle,
    FeeTokenConfig,
    Instruction,
    InstructionType,
    Quote,
    QuoteRequest,
    ReceiptStatus,
    RuntimeErc20Balance,
    SignedQuote,
    SupertransactionReceipt,
    TriggerConfig,
)

__all__ = [
    "AccountVersion",
    "ChainConfiguration",
    "ExecutionHandle",
    "FeeTokenConfig",
    "Instruction",
    "InstructionType",
    "Quote",
    "QuoteRequest",
    "ReceiptStatus",
    "RuntimeErc20Balance",
    "SignedQuote",
    "SupertransactionReceipt",
    "TriggerConfig",
]
