from .models import NexusAccount
from .resolver import ACCOUNT_RESOLUTION_MESSAGE, AccountResolver, ResolvedAccounts

__all__ = [
    "ACCOUNT_RESOLUTION_MESSAGE",
    "AccountResolver",
    "NexusAccount",
    "ResolvedAccounts",
]
