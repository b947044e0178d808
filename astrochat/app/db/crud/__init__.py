"""CRUD operations package."""

from astrochat.app.db.crud.quota import (
    create_user,
    get_user_by_key,
    update_user_counters,
    user_exists,
)

__all__ = [
    "create_user",
    "get_user_by_key",
    "update_user_counters",
    "user_exists",
]
