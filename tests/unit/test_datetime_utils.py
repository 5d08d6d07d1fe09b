from datetime import datetime, timedelta, timezone

from timesync.shared.utils.datetime_utils import DateTimeUtils


def test_sync_window_is_utc_with_seconds():
    now = datetime(2025, 3, 31, 12, 30, 15, 987654, tzinfo=timezone(timedelta(hours=2)))
    time_min, time_max = DateTimeUtils.sync_window(90, now)
    assert time_max == "2025-03-31T10:30:15+00:00"
    assert time_min == "2024-12-31T10:30:15+00:00"


def test_naive_datetimes_are_utc():
    assert DateTimeUtils.to_rfc3339(datetime(2025, 1, 15, 6, 30)) == "2025-01-15T06:30:00+00:00"
    assert DateTimeUtils.to_epoch_seconds("2025-01-15T06:30:00") == DateTimeUtils.to_epoch_seconds("2025-01-15T06:30:00Z")


def test_same_instant_different_offsets():
    a = DateTimeUtils.to_epoch_seconds("2025-03-10T10:00:00+02:00")
    b = DateTimeUtils.to_epoch_seconds("2025-03-10T08:00:00.000Z")
    assert a == b


def test_invalid_strings():
    assert DateTimeUtils.from_iso_string(None) is None
    assert DateTimeUtils.from_iso_string("") is None
    assert DateTimeUtils.to_epoch_seconds("ayer") is None


def test_local_day_uses_timezone():
    # 22:30 UTC ya es el dia siguiente en Vilnius (UTC+2 en invierno)
    assert DateTimeUtils.local_day("2025-03-10T22:30:00Z", "Europe/Vilnius") == "2025-03-11"
    assert DateTimeUtils.local_day("2025-03-10T22:30:00Z", "UTC") == "2025-03-10"
