"""
Token discovery and normalization

- BalanceSourceAdapter: balance index → eligible TokenRecords
- normalize: TokenRecord / ManualTokenEntry → SweepToken
- fetch_token_info: manual token lookup over RPC
"""

from .balances import BalanceSourceAdapter, filter_by_min_value, select_eligible_tokens
from .lookup import TOKEN_NOT_FOUND_MESSAGE, fetch_token_info
from .models import (
    ManualTokenEntry,
    Portfolio,
    PortfolioSummary,
    SweepToken,
    TokenRecord,
    TotalBalance,
    calculate_portfolio_summary,
    extract_address,
    format_units,
    parse_units,
    token_key,
)
from .normalizer import normalize, normalize_sweep_set

__all__ = [
    "BalanceSourceAdapter",
    "filter_by_min_value",
    "select_eligible_tokens",
    "TOKEN_NOT_FOUND_MESSAGE",
    "fetch_token_info",
    "ManualTokenEntry",
    "Portfolio",
    "PortfolioSummary",
    "SweepToken",
    "TokenRecord",
    "TotalBalance",
    "calculate_portfolio_summary",
    "extract_address",
    "format_units",
    "parse_units",
    "token_key",
    "normalize",
    "normalize_sweep_set",
]
