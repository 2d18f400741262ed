# devtimer/reporting_service/service.py

import logging
import uuid
from datetime import tzinfo
from typing import Optional

from devtimer.reporting_service.logic.aggregation import aggregate
from devtimer.reporting_service.logic.windows import Clock, day_window, system_clock, week_window
from devtimer.reporting_service.models import DailySummary, ReportWindow, WeeklySummary
from devtimer.reporting_service.store import ActivityStore

log = logging.getLogger(__name__)


class ReportService:
    """Builds a user's daily and weekly summaries from the activity store."""

    def __init__(self, store: ActivityStore, tz: tzinfo, clock: Optional[Clock] = None):
        self.store = store
        self.tz = tz
        self.clock = clock or system_clock(tz)

    def _now(self):
        return self.clock().astimezone(self.tz)

    async def daily_summary(self, user_id: uuid.UUID) -> DailySummary:
        """Summary of today, from local midnight."""
        return await self._summarize(user_id, day_window(self._now()))

    async def weekly_summary(self, user_id: uuid.UUID) -> WeeklySummary:
        """Summary of the current week, which starts on Sunday."""
        return await self._summarize(user_id, week_window(self._now()))

    async def _summarize(self, user_id: uuid.UUID, window: ReportWindow):
        try:
            records = await self.store.list_in_window(user_id, window)
        except Exception as e:
            log.error(f"Failed to load activities for user {user_id} in window starting {window.start.isoformat()}: {e}")
            raise
        log.info(f"Aggregating {len(records)} activities for user {user_id} ({window.days}-day window from {window.start.date()})")
        return aggregate(records, window)
