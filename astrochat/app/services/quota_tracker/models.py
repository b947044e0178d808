"""Data models for the daily question quota."""

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any, Optional


@dataclass
class PersonData:
    """Birth details submitted with a question.

    Only first_name and date_of_birth take part in the identity key; the
    rest is stored alongside the counters for bookkeeping.
    """
    first_name: str
    date_of_birth: str
    last_name: Optional[str] = None
    place_of_birth: Optional[str] = None
    time_of_birth: Optional[str] = None


@dataclass
class QuotaRecord:
    """Storage-agnostic copy of one persisted quota row.

    Attributes:
        identity_key: SHA-256 hex digest identifying the person
        lifetime_question_count: Questions ever asked
        daily_question_count: Questions asked on last_question_date
        last_question_date: UTC date the daily counter applies to
        daily_limit: Cap on daily_question_count
        version: Optimistic concurrency token, incremented on every write
    """
    identity_key: str
    lifetime_question_count: int
    daily_question_count: int
    last_question_date: date
    daily_limit: int
    version: int = field(default=1)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class QuotaDecision:
    """Outcome of one check-and-consume call.

    `allowed_this_request` is the only flag that may gate the triggering
    question. `can_ask_more` describes the next question and is reported to
    the client for display.
    """
    allowed_this_request: bool
    questions_used_today: int
    daily_limit: int
    questions_remaining: int

    @property
    def can_ask_more(self) -> bool:
        return self.questions_remaining > 0

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["can_ask"] = self.can_ask_more
        return data


@dataclass(frozen=True)
class StatusView:
    """Read-only counter view used to render the remaining questions."""
    questions_used: int
    daily_limit: int
    questions_remaining: int
    can_ask: bool

    @classmethod
    def fresh(cls, daily_limit: int) -> "StatusView":
        """Status of an identity with no questions asked today."""
        return cls(
            questions_used=0,
            daily_limit=daily_limit,
            questions_remaining=daily_limit,
            can_ask=True,
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
