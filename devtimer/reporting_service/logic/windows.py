"""Day and week reporting windows, computed in local time."""

import logging
import os
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Callable, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from devtimer.reporting_service.models import ReportWindow

log = logging.getLogger(__name__)

Clock = Callable[[], datetime]

LOCALTIME_PATH = "/etc/localtime"


def resolve_timezone(name: Optional[str] = None) -> tzinfo:
    """
    Returns the named IANA zone, or the server's local zone when no name is
    configured.

    The local zone comes from the TZ environment variable, then from
    /etc/localtime, so that it keeps following daylight saving changes. Only
    when neither is usable does it fall back to the current fixed UTC offset.
    """
    if name:
        return ZoneInfo(name)

    env_tz = os.environ.get("TZ", "").lstrip(":")
    if env_tz:
        try:
            return ZoneInfo(env_tz)
        except (ZoneInfoNotFoundError, ValueError) as e:
            log.warning(f"TZ={env_tz!r} is not an IANA zone ({e}); trying {LOCALTIME_PATH}")

    if os.path.exists(LOCALTIME_PATH):
        with open(LOCALTIME_PATH, "rb") as f:
            return ZoneInfo.from_file(f, key="localtime")

    log.warning("Could not determine the local zone; using the current UTC offset, which ignores DST")
    return datetime.now().astimezone().tzinfo


def system_clock(tz: tzinfo) -> Clock:
    """A clock returning the current time in `tz`."""
    def now() -> datetime:
        return datetime.now(tz)
    return now


def local_midnight(day: date, tz: tzinfo) -> datetime:
    return datetime.combine(day, time.min, tzinfo=tz)


def week_start(day: date) -> date:
    """Most recent Sunday on or before `day`."""
    # date.weekday(): Monday == 0 ... Sunday == 6
    return day - timedelta(days=(day.weekday() + 1) % 7)


def day_window(now: datetime) -> ReportWindow:
    """The calendar day containing `now`, starting at local midnight."""
    return ReportWindow(start=local_midnight(now.date(), now.tzinfo), days=1)


def week_window(now: datetime) -> ReportWindow:
    """The Sunday-to-Saturday week containing `now`."""
    return ReportWindow(start=local_midnight(week_start(now.date()), now.tzinfo), days=7)
