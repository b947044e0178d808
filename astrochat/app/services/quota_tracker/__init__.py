"""Daily question quota keyed by a person's first name and date of birth.

This package derives identity keys, persists per-person counters through a
QuotaStore, and decides per request whether a question is allowed.
"""

from .keys import resolve_key
from .models import PersonData, QuotaDecision, QuotaRecord, StatusView
from .service import DEFAULT_DAILY_LIMIT, QuotaTracker
from .store import InMemoryQuotaStore, QuotaStore, SQLQuotaStore

__all__ = [
    "resolve_key",
    "PersonData",
    "QuotaDecision",
    "QuotaRecord",
    "StatusView",
    "DEFAULT_DAILY_LIMIT",
    "QuotaTracker",
    "QuotaStore",
    "InMemoryQuotaStore",
    "SQLQuotaStore",
]
