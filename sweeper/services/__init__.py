"""Service layer helpers"""

from .manual import NO_SWEEPABLE_TOKENS_MESSAGE, ManualSweepSession
from .portfolio import SweepPortfolio, format_supertx_hash

__all__ = [
    "NO_SWEEPABLE_TOKENS_MESSAGE",
    "ManualSweepSession",
    "SweepPortfolio",
    "format_supertx_hash",
]
