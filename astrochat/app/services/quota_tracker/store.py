"""Persistence backends for quota records.

Every write is conditional: `create` fails if the key already exists and
`update` fails unless the stored version matches the one that was read.
Both failures raise StorageConflictError so the tracker can re-read and
recompute. Network and timeout failures raise StorageUnavailableError.
"""

import asyncio
import copy
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from datetime import date, datetime
from typing import AsyncGenerator, Dict, Optional

from sqlalchemy.exc import (
    DBAPIError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    TimeoutError as PoolTimeoutError,
)

from astrochat.app.core.logging import get_log_context, get_logger
from astrochat.app.db.crud import (
    create_user,
    get_user_by_key,
    update_user_counters,
    user_exists,
)
from astrochat.app.db.database import Database
from astrochat.app.db.models import User
from astrochat.app.exceptions import StorageConflictError, StorageUnavailableError

from .models import PersonData, QuotaRecord

logger = get_logger(__name__)


class QuotaStore(ABC):
    """Abstract base class for quota record backends."""

    @abstractmethod
    async def get(self, identity_key: str) -> Optional[QuotaRecord]:
        """Return the record for identity_key, or None if there is none."""
        pass

    @abstractmethod
    async def create(self, record: QuotaRecord, person: PersonData) -> QuotaRecord:
        """Insert a new record.

        Raises:
            StorageConflictError: If a record with the same key exists
        """
        pass

    @abstractmethod
    async def update(
        self,
        identity_key: str,
        expected_version: int,
        lifetime_question_count: int,
        daily_question_count: int,
        last_question_date: date,
        updated_at: datetime,
    ) -> None:
        """Write new counters if the stored version is expected_version.

        Raises:
            StorageConflictError: If the record changed since it was read
        """
        pass

    @abstractmethod
    async def exists(self, identity_key: str) -> bool:
        pass


class InMemoryQuotaStore(QuotaStore):
    """Dictionary-backed store for tests and single-process development.

    Reads hand out copies and yield to the event loop afterwards, like a
    round-trip to a real database would, so concurrent requests interleave
    between their read and their write.
    """

    def __init__(self) -> None:
        self._records: Dict[str, QuotaRecord] = {}
        self._people: Dict[str, PersonData] = {}
        self._lock = asyncio.Lock()

    async def get(self, identity_key: str) -> Optional[QuotaRecord]:
        record = self._records.get(identity_key)
        snapshot = copy.copy(record) if record is not None else None
        await asyncio.sleep(0)
        return snapshot

    async def create(self, record: QuotaRecord, person: PersonData) -> QuotaRecord:
        async with self._lock:
            if record.identity_key in self._records:
                raise StorageConflictError(user_key=record.identity_key)
            self._records[record.identity_key] = copy.copy(record)
            self._people[record.identity_key] = person
        return record

    async def update(
        self,
        identity_key: str,
        expected_version: int,
        lifetime_question_count: int,
        daily_question_count: int,
        last_question_date: date,
        updated_at: datetime,
    ) -> None:
        async with self._lock:
            current = self._records.get(identity_key)
            if current is None or current.version != expected_version:
                raise StorageConflictError(user_key=identity_key)
            current.lifetime_question_count = lifetime_question_count
            current.daily_question_count = daily_question_count
            current.last_question_date = last_question_date
            current.updated_at = updated_at
            current.version = expected_version + 1

    async def exists(self, identity_key: str) -> bool:
        return identity_key in self._records


def _to_record(user: User) -> QuotaRecord:
    return QuotaRecord(
        identity_key=user.user_key,
        lifetime_question_count=user.questions_count,
        daily_question_count=user.daily_questions_count,
        last_question_date=user.last_question_date,
        daily_limit=user.daily_limit,
        version=user.version,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


class SQLQuotaStore(QuotaStore):
    """Quota records in the `users` table via SQLAlchemy async sessions.

    Each operation runs in its own short transaction. Driver exceptions are
    translated: duplicate keys become StorageConflictError, connection and
    timeout failures become StorageUnavailableError. Anything else (bad SQL,
    schema drift) propagates unchanged.
    """

    def __init__(self, database: Database) -> None:
        self._database = database

    @asynccontextmanager
    async def _translate_errors(self, operation: str, identity_key: str) -> AsyncGenerator[None, None]:
        try:
            yield
        except IntegrityError as exc:
            raise StorageConflictError(user_key=identity_key) from exc
        except (OperationalError, InterfaceError, PoolTimeoutError, OSError) as exc:
            logger.warning(
                f"Quota store unavailable during {operation}: {type(exc).__name__}",
                extra=get_log_context(user_key=identity_key),
            )
            raise StorageUnavailableError() from exc
        except DBAPIError as exc:
            if exc.connection_invalidated:
                logger.warning(
                    f"Quota store connection lost during {operation}",
                    extra=get_log_context(user_key=identity_key),
                )
                raise StorageUnavailableError() from exc
            raise

    async def get(self, identity_key: str) -> Optional[QuotaRecord]:
        async with self._translate_errors("get", identity_key):
            async with self._database.session() as session:
                user = await get_user_by_key(session, identity_key)
                return _to_record(user) if user is not None else None

    async def create(self, record: QuotaRecord, person: PersonData) -> QuotaRecord:
        user = User(
            user_key=record.identity_key,
            first_name=person.first_name,
            last_name=person.last_name,
            date_of_birth=person.date_of_birth,
            place_of_birth=person.place_of_birth,
            time_of_birth=person.time_of_birth,
            questions_count=record.lifetime_question_count,
            daily_questions_count=record.daily_question_count,
            last_question_date=record.last_question_date,
            daily_limit=record.daily_limit,
            version=record.version,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )
        async with self._translate_errors("create", record.identity_key):
            async with self._database.session() as session:
                await create_user(session, user)
        return record

    async def update(
        self,
        identity_key: str,
        expected_version: int,
        lifetime_question_count: int,
        daily_question_count: int,
        last_question_date: date,
        updated_at: datetime,
    ) -> None:
        async with self._translate_errors("update", identity_key):
            async with self._database.session() as session:
                updated = await update_user_counters(
                    session,
                    identity_key,
                    expected_version=expected_version,
                    questions_count=lifetime_question_count,
                    daily_questions_count=daily_question_count,
                    last_question_date=last_question_date,
                    updated_at=updated_at,
                )
        if not updated:
            raise StorageConflictError(user_key=identity_key)

    async def exists(self, identity_key: str) -> bool:
        async with self._translate_errors("exists", identity_key):
            async with self._database.session() as session:
                return await user_exists(session, identity_key)
