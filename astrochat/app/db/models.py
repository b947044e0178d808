from datetime import date, datetime

from sqlalchemy import Date, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from astrochat.app.db.base import Base


class User(Base):
    """Question counters for one person, keyed by the derived identity key."""

    __tablename__ = "users"
    __table_args__ = (
        Index("idx_users_last_question_date", "last_question_date"),
    )

    user_key: Mapped[str] = mapped_column(String(64), primary_key=True)

    # Birth details as submitted with the first question
    first_name: Mapped[str] = mapped_column(String(255))
    last_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    date_of_birth: Mapped[str] = mapped_column(String(32))
    place_of_birth: Mapped[str | None] = mapped_column(String(255), nullable=True)
    time_of_birth: Mapped[str | None] = mapped_column(String(32), nullable=True)

    questions_count: Mapped[int] = mapped_column(Integer, default=0)
    daily_questions_count: Mapped[int] = mapped_column(Integer, default=0)
    last_question_date: Mapped[date] = mapped_column(Date)
    daily_limit: Mapped[int] = mapped_column(Integer, default=10)

    # Optimistic concurrency token, bumped on every write
    version: Mapped[int] = mapped_column(Integer, default=1)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    def __repr__(self) -> str:
        return (
            f"<User(key={self.user_key[:8]}..., daily={self.daily_questions_count}/"
            f"{self.daily_limit}, date={self.last_question_date})>"
        )
