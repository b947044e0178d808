"""Database package for the AstroChat backend.

This package provides:
- The users table holding per-person question counters
- The Database handle (engine, session maker, lifecycle)
- CRUD operations for the quota rows
"""

from astrochat.app.db.base import Base
from astrochat.app.db.models import User
from astrochat.app.db.database import Database, create_engine_for
from astrochat.app.db.crud import (
    create_user,
    get_user_by_key,
    update_user_counters,
    user_exists,
)

__all__ = [
    "Base",
    "User",
    "Database",
    "create_engine_for",
    "create_user",
    "get_user_by_key",
    "update_user_counters",
    "user_exists",
]
