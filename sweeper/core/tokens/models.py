"""
Token models shared by discovery, normalization and instruction building.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from decimal import ROUND_DOWN, Decimal, InvalidOperation, localcontext
from typing import Any, Dict, List, Optional

from ..chains import ZERO_ADDRESS, ChainRegistry, is_native_token_address

_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")
_ID_SEPARATORS = re.compile(r"[:_]")


def _to_decimal(value: Any) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal("0")


def extract_address(value: Optional[str]) -> Optional[str]:
    """Find an address-shaped value, either the whole string or one ``:``/``_`` segment."""
    if not value:
        return None

    trimmed = value.strip()
    if _ADDRESS_RE.fullmatch(trimmed):
        return trimmed.lower()

    for segment in _ID_SEPARATORS.split(trimmed):
        segment = segment.strip()
        if _ADDRESS_RE.fullmatch(segment):
            return segment.lower()

    return None


def is_address(value: Optional[str]) -> bool:
    return bool(value) and bool(_ADDRESS_RE.fullmatch(value.strip()))


@dataclass
class TokenRecord:
    """A token balance as reported by the balance index."""
    chain_external_id: str
    token_id: str
    symbol: str
    name: str
    decimals: int
    price_usd: Decimal
    quantity: Decimal
    verified: bool
    wallet_owned: bool
    resolved_address: Optional[str] = None
    is_native: bool = False
    display_symbol: Optional[str] = None
    logo_url: Optional[str] = None

    @property
    def usd_value(self) -> Decimal:
        return self.quantity * self.price_usd

    @property
    def key(self) -> str:
        return token_key(self)

    @classmethod
    def from_index(cls, data: Dict[str, Any], registry: ChainRegistry) -> "TokenRecord":
        """Create a TokenRecord from a DeBank token payload.

        The on-chain address is resolved here, once: an address-shaped id (or id
        segment) wins; otherwise a token whose id equals its chain id is the
        chain's native asset.
        """
        token_id = str(data.get("id") or "")
        chain = str(data.get("chain") or "")

        resolved = extract_address(token_id)
        if resolved is None and token_id and token_id.strip().lower() == chain.strip().lower():
            resolved = ZERO_ADDRESS

        chain_id = registry.resolve_internal_id(chain)
        is_native = resolved is not None and (
            registry.is_native_sentinel(chain_id, resolved) or is_native_token_address(resolved)
        )

        return cls(
            chain_external_id=chain,
            token_id=token_id,
            symbol=data.get("optimized_symbol") or data.get("symbol") or "",
            display_symbol=data.get("display_symbol"),
            name=data.get("name") or "",
            decimals=int(data.get("decimals") or 0),
            logo_url=data.get("logo_url"),
            price_usd=_to_decimal(data.get("price")),
            quantity=_to_decimal(data.get("amount")),
            verified=bool(data.get("is_verified")),
            wallet_owned=bool(data.get("is_wallet")),
            resolved_address=resolved,
            is_native=is_native,
        )


def token_key(token: TokenRecord) -> str:
    """Stable identifier used for fee-token selection."""
    return f"{token.chain_external_id}-{token.token_id}"


@dataclass
class ManualTokenEntry:
    """A token the user added by chain ID + contract address."""
    chain_id: int
    address: str
    symbol: str
    name: str
    decimals: int
    balance: int  # atomic units
    is_supported_chain: bool
    is_native: bool = False

    @property
    def formatted_balance(self) -> str:
        return format_units(self.balance, self.decimals)


@dataclass
class SweepToken:
    """Canonical token shape consumed by the instruction builder.

    ``amount``/``decimals`` are mandatory for native tokens (fixed-value
    transfer) and ignored otherwise (balance read at execution time).
    """
    chain_id: int
    address: str
    is_native: bool
    amount: Optional[str] = None
    decimals: Optional[int] = None


@dataclass
class TotalBalance:
    total_usd_value: Decimal = Decimal("0")
    chain_list: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_index(cls, data: Optional[Dict[str, Any]]) -> "TotalBalance":
        data = data or {}
        return cls(
            total_usd_value=_to_decimal(data.get("total_usd_value")),
            chain_list=list(data.get("chain_list") or []),
        )


@dataclass
class Portfolio:
    total_balance: Optional[TotalBalance]
    tokens: List[TokenRecord] = field(default_factory=list)


@dataclass
class PortfolioSummary:
    total_value: Decimal
    token_value: Decimal
    token_count: int


def calculate_portfolio_summary(portfolio: Portfolio) -> PortfolioSummary:
    token_value = sum((token.usd_value for token in portfolio.tokens), Decimal("0"))
    total = portfolio.total_balance.total_usd_value if portfolio.total_balance else Decimal("0")
    return PortfolioSummary(
        total_value=total,
        token_value=token_value,
        token_count=len(portfolio.tokens),
    )


def format_units(value: int, decimals: int) -> str:
    """Format an atomic amount as a plain decimal string without precision loss."""
    negative = value < 0
    digits = str(abs(value))
    if decimals <= 0:
        result = digits
    else:
        digits = digits.rjust(decimals + 1, "0")
        whole, fraction = digits[:-decimals], digits[-decimals:].rstrip("0")
        result = f"{whole}.{fraction}" if fraction else whole
    return f"-{result}" if negative else result


def parse_units(amount: str, decimals: int) -> int:
    """Convert a human-readable decimal string to atomic units, truncating extra precision."""
    try:
        value = Decimal(str(amount).strip())
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(f"Invalid token amount: {amount!r}") from exc
    if not value.is_finite():
        raise ValueError(f"Invalid token amount: {amount!r}")
    with localcontext() as ctx:
        ctx.prec = 96
        scaled = value.scaleb(decimals)
        return int(scaled.to_integral_value(rounding=ROUND_DOWN))
