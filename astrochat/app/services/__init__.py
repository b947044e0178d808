"""Services package for the AstroChat backend.

This package provides:
- The daily question quota tracker
- Astrology prompt construction
- Reply parsing and fallback replies
"""

from astrochat.app.services.formatting import (
    FALLBACK_RESPONSES,
    ReplySegment,
    parse_reply,
    pick_fallback_response,
)
from astrochat.app.services.prompts import build_astrology_prompt
from astrochat.app.services.quota_tracker import (
    InMemoryQuotaStore,
    PersonData,
    QuotaDecision,
    QuotaStore,
    QuotaTracker,
    SQLQuotaStore,
    StatusView,
    resolve_key,
)

__all__ = [
    # Formatting
    "FALLBACK_RESPONSES",
    "ReplySegment",
    "parse_reply",
    "pick_fallback_response",
    # Prompts
    "build_astrology_prompt",
    # Quota tracker
    "InMemoryQuotaStore",
    "PersonData",
    "QuotaDecision",
    "QuotaStore",
    "QuotaTracker",
    "SQLQuotaStore",
    "StatusView",
    "resolve_key",
]
