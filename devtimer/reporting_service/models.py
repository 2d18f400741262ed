# devtimer/reporting_service/models.py

import logging
import uuid
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Optional, List, Literal
from datetime import date, datetime, time, timedelta, tzinfo

from devtimer.shared.utils import duration_seconds, to_epoch_ms

log = logging.getLogger(__name__)

# Placeholders used when a plugin does not report the field
NO_BRANCH = "no-branch"
UNKNOWN_MACHINE = "unknown-machine"
UNKNOWN_PLATFORM = "unknown-platform"


class BaseSchema(BaseModel):
    """Base model: accepts both the camelCase wire names and the attribute names."""
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


# --- Activity records ---
class ActivityRecord(BaseSchema):
    """
    One coding-activity event as stored and aggregated.
    `duration` is always derived from the timestamps (seconds); a value sent by
    the client is overwritten.
    """
    project: str
    file: str = ""
    language: str
    start_time: int = Field(alias="startTime", description="Epoch milliseconds.")
    end_time: int = Field(alias="endTime", description="Epoch milliseconds.")
    duration: float = Field(0.0, description="Seconds, computed from startTime/endTime.")
    branch: Optional[str] = None
    debug: bool = False
    machine: Optional[str] = None
    platform: Optional[str] = None

    @field_validator("debug", mode="before")
    @classmethod
    def default_debug(cls, v):
        return False if v is None else v

    @model_validator(mode="after")
    def calculate_duration(self):
        duration = duration_seconds(self.start_time, self.end_time)
        if duration < 0:
            log.warning(
                f"ActivityRecord: endTime {self.end_time} is before startTime {self.start_time} "
                f"for project '{self.project}'. Clamping duration to 0."
            )
            duration = 0.0
        self.duration = duration
        return self


class StoredActivity(ActivityRecord):
    """An activity record as persisted for a user."""
    id: uuid.UUID
    # Internal only; activities are always listed for their owner
    user_id: Optional[uuid.UUID] = Field(None, alias="userId", exclude=True)
    created_at: Optional[datetime] = Field(None, alias="createdAt")


# --- Report windows ---
class ReportWindow(BaseModel):
    """
    A half-open reporting interval starting at a local midnight and spanning
    `days` calendar days.
    """
    model_config = ConfigDict(frozen=True)

    start: datetime
    days: Literal[1, 7]

    @field_validator("start")
    @classmethod
    def require_timezone(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            raise ValueError("Window start must be timezone-aware")
        return v

    @property
    def tz(self) -> tzinfo:
        return self.start.tzinfo

    @property
    def dates(self) -> List[date]:
        """Every calendar date covered by the window, in order."""
        first = self.start.date()
        return [first + timedelta(days=offset) for offset in range(self.days)]

    @property
    def end(self) -> datetime:
        """Local midnight `days` calendar days after the start (exclusive)."""
        return datetime.combine(self.start.date() + timedelta(days=self.days), time.min, tzinfo=self.tz)

    @property
    def start_ms(self) -> int:
        return to_epoch_ms(self.start)

    @property
    def end_ms(self) -> int:
        return to_epoch_ms(self.end)

    def contains(self, record: ActivityRecord) -> bool:
        """
        True when the record starts inside the window and ends strictly before
        its end. Records crossing the end boundary are excluded, not clipped.
        """
        return record.start_time >= self.start_ms and record.end_time < self.end_ms


# --- Summaries ---
class LanguageSummary(BaseSchema):
    language: str
    duration: float


class BranchSummary(BaseSchema):
    branch: str
    duration: float
    debug_duration: float = Field(alias="debugDuration")


class ProjectSummary(BaseSchema):
    project: str
    duration: float
    debug_duration: float = Field(alias="debugDuration")
    branches: List[BranchSummary] = Field(default_factory=list)


class PlatformSummary(BaseSchema):
    platform: str
    machine: str
    duration: float
    projects: List[ProjectSummary] = Field(default_factory=list)


class DailyDuration(BaseSchema):
    date: date
    duration: float


class DailySummary(BaseSchema):
    """Summary of a one-day window. All durations are in seconds."""
    total_duration: float = Field(alias="totalDuration")
    by_language: List[LanguageSummary] = Field(alias="byLanguage")
    by_platform: List[PlatformSummary] = Field(alias="byPlatform")


class WeeklySummary(DailySummary):
    """Summary of a seven-day window, with one duration entry per calendar day."""
    daily_duration: List[DailyDuration] = Field(alias="dailyDuration")
