from datetime import datetime, timezone

import pytest

from astrochat.app.core.clock import Clock, SystemClock, utc_now


def test_system_clock_is_utc():
    now = SystemClock().now()
    assert now.tzinfo is not None
    assert now.utcoffset().total_seconds() == 0


def test_today_is_utc_date():
    clock = SystemClock()
    assert clock.today() == clock.now().date()


def test_frozen_clock_advances(clock):
    assert clock.today().isoformat() == "2024-01-01"
    clock.advance(days=1)
    assert clock.today().isoformat() == "2024-01-02"


def test_utc_now_is_aware():
    assert utc_now().tzinfo == timezone.utc
    assert isinstance(utc_now(), datetime)


def test_clock_requires_now():
    with pytest.raises(TypeError):
        Clock()
