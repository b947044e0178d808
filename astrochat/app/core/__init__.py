"""Core utilities for the AstroChat backend."""

from astrochat.app.core.clock import Clock, SystemClock, utc_now
from astrochat.app.core.config import Settings, settings
from astrochat.app.core.logging import get_log_context, get_logger, setup_logging

__all__ = [
    "Clock",
    "SystemClock",
    "utc_now",
    "Settings",
    "settings",
    "get_log_context",
    "get_logger",
    "setup_logging",
]
