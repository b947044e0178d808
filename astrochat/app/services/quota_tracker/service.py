"""Daily question quota tracker.

Per identity and calendar day (UTC) the counter moves through
UNSEEN_TODAY -> ALLOWED -> EXHAUSTED, and back to UNSEEN_TODAY when the
date changes. Only check_and_consume moves it; peek_status only reads.
"""

from typing import Optional

from astrochat.app.core.clock import Clock, SystemClock
from astrochat.app.core.logging import get_log_context, get_logger
from astrochat.app.exceptions import StorageConflictError, StorageUnavailableError

from .keys import resolve_key
from .models import PersonData, QuotaDecision, QuotaRecord, StatusView
from .store import QuotaStore

logger = get_logger(__name__)

DEFAULT_DAILY_LIMIT = 10
DEFAULT_MAX_RETRIES = 3


class QuotaTracker:
    """Decides whether a person may ask another question today.

    Writes are optimistic: a record is read, the new counters are computed,
    and the write only lands if nobody else wrote in between. On conflict the
    whole read-decide-write step is repeated, up to max_retries more times.

    Args:
        store: Backend holding the quota records
        clock: Source of the current UTC date
        daily_limit: Cap for newly created records and for unseen identities
        max_retries: Extra attempts after a write conflict
        status_fallback_on_unavailable: Report a fresh status from
            peek_status instead of raising when the store is unreachable
    """

    def __init__(
        self,
        store: QuotaStore,
        clock: Optional[Clock] = None,
        daily_limit: int = DEFAULT_DAILY_LIMIT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        status_fallback_on_unavailable: bool = False,
    ) -> None:
        if daily_limit < 1:
            raise ValueError("daily_limit must be at least 1")
        self.store = store
        self.clock = clock or SystemClock()
        self.daily_limit = daily_limit
        self.max_retries = max_retries
        self.status_fallback_on_unavailable = status_fallback_on_unavailable

    @staticmethod
    def resolve_key(first_name: str, date_of_birth: str) -> str:
        return resolve_key(first_name, date_of_birth)

    async def check_and_consume(self, person: PersonData) -> QuotaDecision:
        """Count one question for person if today's limit allows it.

        The question that brings the count up to the limit is allowed; the
        one after it is denied and leaves the record untouched.

        Raises:
            IdentityValidationError: If first name or date of birth is missing
            StorageUnavailableError: If the store cannot be reached
            StorageConflictError: If every attempt lost a write race
        """
        key = resolve_key(person.first_name, person.date_of_birth)
        attempts = self.max_retries + 1

        for attempt in range(1, attempts + 1):
            try:
                decision = await self._consume_once(key, person)
            except StorageConflictError:
                logger.info(
                    f"Quota write conflict, attempt {attempt}/{attempts}",
                    extra=get_log_context(user_key=key),
                )
                continue

            logger.info(
                "Question allowed" if decision.allowed_this_request else "Daily limit reached",
                extra=get_log_context(
                    user_key=key,
                    used=decision.questions_used_today,
                    limit=decision.daily_limit,
                ),
            )
            return decision

        logger.warning(
            f"Quota update abandoned after {attempts} conflicting attempts",
            extra=get_log_context(user_key=key),
        )
        raise StorageConflictError(user_key=key, attempts=attempts)

    async def _consume_once(self, key: str, person: PersonData) -> QuotaDecision:
        now = self.clock.now()
        today = now.date()
        record = await self.store.get(key)

        if record is None:
            await self.store.create(
                QuotaRecord(
                    identity_key=key,
                    lifetime_question_count=1,
                    daily_question_count=1,
                    last_question_date=today,
                    daily_limit=self.daily_limit,
                    version=1,
                    created_at=now,
                    updated_at=now,
                ),
                person,
            )
            return self._allowed(used=1, limit=self.daily_limit)

        limit = record.daily_limit

        if record.last_question_date != today:
            # Rollover: this question is the first one of the new day.
            await self.store.update(
                key,
                expected_version=record.version,
                lifetime_question_count=record.lifetime_question_count + 1,
                daily_question_count=1,
                last_question_date=today,
                updated_at=now,
            )
            return self._allowed(used=1, limit=limit)

        if record.daily_question_count >= limit:
            return QuotaDecision(
                allowed_this_request=False,
                questions_used_today=record.daily_question_count,
                daily_limit=limit,
                questions_remaining=0,
            )

        used = record.daily_question_count + 1
        await self.store.update(
            key,
            expected_version=record.version,
            lifetime_question_count=record.lifetime_question_count + 1,
            daily_question_count=used,
            last_question_date=today,
            updated_at=now,
        )
        return self._allowed(used=used, limit=limit)

    @staticmethod
    def _allowed(used: int, limit: int) -> QuotaDecision:
        return QuotaDecision(
            allowed_this_request=True,
            questions_used_today=used,
            daily_limit=limit,
            questions_remaining=limit - used,
        )

    async def peek_status(self, person: PersonData) -> StatusView:
        """Report today's counters without creating or changing anything.

        A stale record is shown as already rolled over; the reset itself is
        only written by the next check_and_consume.

        Raises:
            IdentityValidationError: If first name or date of birth is missing
            StorageUnavailableError: If the store cannot be reached and
                status_fallback_on_unavailable is off
        """
        key = resolve_key(person.first_name, person.date_of_birth)
        try:
            record = await self.store.get(key)
        except StorageUnavailableError:
            if not self.status_fallback_on_unavailable:
                raise
            logger.warning(
                "Quota store unavailable, reporting default status",
                extra=get_log_context(user_key=key),
            )
            return StatusView.fresh(self.daily_limit)

        if record is None:
            return StatusView.fresh(self.daily_limit)

        if record.last_question_date != self.clock.today():
            return StatusView.fresh(record.daily_limit)

        used = record.daily_question_count
        return StatusView(
            questions_used=used,
            daily_limit=record.daily_limit,
            questions_remaining=max(record.daily_limit - used, 0),
            can_ask=used < record.daily_limit,
        )
