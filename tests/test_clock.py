"""
Tests for UTC timestamp helpers
"""
from datetime import datetime, timedelta, timezone

from offloading.core.clock import as_utc, utcnow


def test_utcnow_is_aware():
    assert utcnow().tzinfo is not None
    assert utcnow().utcoffset() == timedelta(0)


def test_as_utc_naive_is_taken_as_utc():
    assert as_utc(datetime(2025, 1, 1, 12)) == datetime(2025, 1, 1, 12, tzinfo=timezone.utc)


def test_as_utc_converts_other_offsets():
    athens = timezone(timedelta(hours=2))
    assert as_utc(datetime(2025, 1, 1, 14, tzinfo=athens)).hour == 12


def test_as_utc_none():
    assert as_utc(None) is None
