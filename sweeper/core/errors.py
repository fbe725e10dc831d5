"""
Error Taxonomy

Every failure the sweep engine surfaces derives from SweeperError. None of
them is retried automatically; recovery is always a user re-trigger.
"""

from enum import Enum
from typing import Any, Dict, Optional

DEFAULT_SWEEP_ERROR_MESSAGE = "Sweep failed. Please try again."


class ErrorCategory(str, Enum):
    """Categories used to route an error to the right piece of UI state."""

    VALIDATION = "validation"              # Sweep never started
    ACCOUNT = "account"                    # Smart account address derivation
    BALANCE = "balance"                    # Balance index query
    TOKEN_LOOKUP = "token_lookup"          # Manual token RPC read
    QUOTE = "quote"                        # Relay quote request
    SIGNATURE = "signature"                # Wallet signature / rejection
    EXECUTION = "execution"                # Relay execution submit
    CHAIN_SWITCH = "chain_switch"          # Wallet network switch
    RECEIPT = "receipt"                    # Mined but unsuccessful / unconfirmed
    PROVIDER = "provider"                  # Other external provider failure


class SweeperError(Exception):
    """Base class for sweep engine errors."""

    category: ErrorCategory = ErrorCategory.PROVIDER

    def __init__(
        self,
        message: str,
        category: Optional[ErrorCategory] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        if category is not None:
            self.category = category
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "category": self.category.value,
            "details": self.details,
        }


class ValidationError(SweeperError):
    """Preconditions for a sweep are not met; state stays idle."""
    category = ErrorCategory.VALIDATION


class AccountResolutionError(SweeperError):
    """Smart account address could not be derived."""
    category = ErrorCategory.ACCOUNT


class BalanceFetchError(SweeperError):
    """Balance index query failed; callers must drop any partial token list."""
    category = ErrorCategory.BALANCE


class TokenLookupError(SweeperError):
    """Manual token metadata could not be read from chain."""
    category = ErrorCategory.TOKEN_LOOKUP


class QuoteError(SweeperError):
    category = ErrorCategory.QUOTE


class SignatureError(SweeperError):
    category = ErrorCategory.SIGNATURE


class ExecutionError(SweeperError):
    category = ErrorCategory.EXECUTION


class ChainSwitchError(SweeperError):
    category = ErrorCategory.CHAIN_SWITCH


class ReceiptStatusError(SweeperError):
    """Supertransaction reached a non-success status (or never confirmed)."""

    category = ErrorCategory.RECEIPT

    def __init__(self, status: str, tx_hash: Optional[str] = None, message: Optional[str] = None):
        super().__init__(
            message or f"Transaction failed: {status}",
            details={"status": status, "hash": tx_hash},
        )
        self.status = status
        self.tx_hash = tx_hash


def describe_error(error: BaseException) -> str:
    """Return the underlying message verbatim, or the generic fallback when it says nothing."""
    message = getattr(error, "message", None) or str(error)
    message = message.strip() if isinstance(message, str) else ""
    return message or DEFAULT_SWEEP_ERROR_MESSAGE
