import zoneinfo
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest
from pydantic import ValidationError

from devtimer.reporting_service.logic import windows
from devtimer.reporting_service.logic.windows import (
    day_window,
    resolve_timezone,
    week_start,
    week_window,
)
from devtimer.reporting_service.models import ActivityRecord, ReportWindow
from devtimer.shared.utils import to_epoch_ms

UTC = timezone.utc


def _record_between(start: datetime, end: datetime) -> ActivityRecord:
    return ActivityRecord(
        project="devtimer",
        language="python",
        start_time=to_epoch_ms(start),
        end_time=to_epoch_ms(end),
    )


@pytest.mark.parametrize("day", [date(2024, 1, 7) + timedelta(days=i) for i in range(7)])
def test_week_starts_on_sunday(day):
    assert week_start(day) == date(2024, 1, 7)


def test_week_start_on_saturday_goes_back_six_days():
    assert week_start(date(2024, 1, 13)) == date(2024, 1, 7)
    assert week_start(date(2024, 1, 14)) == date(2024, 1, 14)


def test_day_window_starts_at_local_midnight():
    now = datetime(2024, 1, 10, 15, 30, tzinfo=UTC)
    window = day_window(now)
    assert window.start == datetime(2024, 1, 10, tzinfo=UTC)
    assert window.days == 1
    assert window.end == datetime(2024, 1, 11, tzinfo=UTC)
    assert window.dates == [date(2024, 1, 10)]


def test_week_window_covers_sunday_to_saturday():
    now = datetime(2024, 1, 10, 15, 30, tzinfo=UTC)
    window = week_window(now)
    assert window.start == datetime(2024, 1, 7, tzinfo=UTC)
    assert window.end == datetime(2024, 1, 14, tzinfo=UTC)
    assert window.dates[0] == date(2024, 1, 7)
    assert window.dates[-1] == date(2024, 1, 13)
    assert len(window.dates) == 7


def test_window_uses_the_clock_timezone():
    tokyo = ZoneInfo("Asia/Tokyo")
    # 20:00 UTC on Saturday is already Sunday morning in Tokyo
    now = datetime(2024, 1, 13, 20, 0, tzinfo=UTC).astimezone(tokyo)
    window = week_window(now)
    assert window.start == datetime(2024, 1, 14, tzinfo=tokyo)


def test_window_end_spans_calendar_days_across_dst():
    new_york = ZoneInfo("America/New_York")
    # Clocks spring forward on 2024-03-10
    window = day_window(datetime(2024, 3, 10, 12, 0, tzinfo=new_york))
    assert window.end == datetime(2024, 3, 11, tzinfo=new_york)
    assert window.end_ms - window.start_ms == 23 * 3600 * 1000


def test_contains_excludes_records_crossing_the_end():
    window = ReportWindow(start=datetime(2024, 1, 10, tzinfo=UTC), days=1)
    start = window.start
    assert window.contains(_record_between(start, start + timedelta(hours=1)))
    assert window.contains(_record_between(start + timedelta(hours=1), start + timedelta(hours=2)))
    assert not window.contains(_record_between(start + timedelta(hours=23), start + timedelta(hours=25)))
    assert not window.contains(_record_between(start - timedelta(minutes=5), start + timedelta(minutes=5)))
    assert not window.contains(_record_between(start + timedelta(hours=23), window.end))


def test_window_rejects_naive_start():
    with pytest.raises(ValidationError):
        ReportWindow(start=datetime(2024, 1, 10), days=1)


def test_window_rejects_other_lengths():
    with pytest.raises(ValidationError):
        ReportWindow(start=datetime(2024, 1, 10, tzinfo=UTC), days=3)


def test_resolve_timezone():
    assert resolve_timezone("Europe/Madrid") == ZoneInfo("Europe/Madrid")
    assert resolve_timezone("") is not None
    assert resolve_timezone(None) is not None


def test_local_zone_follows_tz_environment(monkeypatch):
    monkeypatch.setenv("TZ", "America/New_York")
    tz = resolve_timezone("")
    assert tz == ZoneInfo("America/New_York")
    # A zone, not a fixed offset: EST before the March change, EDT after
    assert tz.utcoffset(datetime(2024, 3, 9, 12)) == timedelta(hours=-5)
    assert tz.utcoffset(datetime(2024, 3, 12, 12)) == timedelta(hours=-4)


def test_local_zone_accepts_posix_colon_prefix(monkeypatch):
    monkeypatch.setenv("TZ", ":Europe/Madrid")
    assert resolve_timezone(None) == ZoneInfo("Europe/Madrid")


def test_local_zone_read_from_localtime_file(monkeypatch, tmp_path):
    source = next((Path(p) / "Europe" / "Madrid" for p in zoneinfo.TZPATH
                   if (Path(p) / "Europe" / "Madrid").exists()), None)
    if source is None:
        pytest.skip("system tz database not available")
    localtime = tmp_path / "localtime"
    localtime.write_bytes(source.read_bytes())
    monkeypatch.delenv("TZ", raising=False)
    monkeypatch.setattr(windows, "LOCALTIME_PATH", str(localtime))

    tz = resolve_timezone("")

    assert tz.utcoffset(datetime(2024, 1, 10, 12)) == timedelta(hours=1)
    assert tz.utcoffset(datetime(2024, 7, 10, 12)) == timedelta(hours=2)


def test_local_zone_falls_back_to_current_offset(monkeypatch, tmp_path):
    monkeypatch.setenv("TZ", "Not/AZone")
    monkeypatch.setattr(windows, "LOCALTIME_PATH", str(tmp_path / "missing"))
    tz = resolve_timezone("")
    assert tz.utcoffset(datetime.now()) is not None
