"""Quota CRUD operations on the users table."""
from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from astrochat.app.db.models import User


async def get_user_by_key(session: AsyncSession, user_key: str) -> User | None:
    """Fetch the quota row for an identity key.

    Args:
        session: Database session
        user_key: Identity key

    Returns:
        The User row, or None if the identity has never asked a question
    """
    result = await session.execute(select(User).where(User.user_key == user_key))
    return result.scalar_one_or_none()


async def user_exists(session: AsyncSession, user_key: str) -> bool:
    result = await session.execute(select(User.user_key).where(User.user_key == user_key))
    return result.scalar_one_or_none() is not None


async def create_user(session: AsyncSession, user: User) -> User:
    """Insert a new quota row.

    The flush surfaces a duplicate key immediately as IntegrityError, which
    means another request created the row first.
    """
    session.add(user)
    await session.flush()
    return user


async def update_user_counters(
    session: AsyncSession,
    user_key: str,
    expected_version: int,
    questions_count: int,
    daily_questions_count: int,
    last_question_date: date,
    updated_at: datetime,
) -> bool:
    """Write new counter values if the row is still at expected_version.

    A single conditional UPDATE: the WHERE clause on version makes the
    read-modify-write atomic. Zero matched rows means a concurrent request
    wrote first and the caller must re-read.

    Returns:
        True if the row was updated
    """
    result = await session.execute(
        update(User)
        .where(
            User.user_key == user_key,
            User.version == expected_version,
        )
        .values(
            questions_count=questions_count,
            daily_questions_count=daily_questions_count,
            last_question_date=last_question_date,
            updated_at=updated_at,
            version=expected_version + 1,
        )
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1
