# devtimer/reporting_service/store.py
"""
Activity stores: where activity records live between ingestion and reporting.

SqlAlchemyActivityStore backs the API with PostgreSQL. InMemoryActivityStore
keeps records in a dict and is what the tests run against. Both implement the
ActivityStore protocol and apply the same window rule (ReportWindow.contains).
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Protocol, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from devtimer.api_service.core.models import Activity as ActivityModel
from devtimer.reporting_service.models import ActivityRecord, ReportWindow, StoredActivity

log = logging.getLogger(__name__)


class ActivityStore(Protocol):
    async def add_many(self, user_id: uuid.UUID, records: Sequence[ActivityRecord]) -> List[StoredActivity]:
        ...

    async def list_for_user(self, user_id: uuid.UUID) -> List[StoredActivity]:
        """All of the user's activities, newest start time first."""
        ...

    async def list_in_window(self, user_id: uuid.UUID, window: ReportWindow) -> List[StoredActivity]:
        """The user's activities inside `window`, oldest start time first."""
        ...


class SqlAlchemyActivityStore:
    """Activity store on top of an async SQLAlchemy session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def add_many(self, user_id: uuid.UUID, records: Sequence[ActivityRecord]) -> List[StoredActivity]:
        rows = [
            ActivityModel(
                id=uuid.uuid4(),
                user_id=user_id,
                project=record.project,
                file=record.file,
                language=record.language,
                start_time=record.start_time,
                end_time=record.end_time,
                duration=record.duration,
                branch=record.branch,
                debug=record.debug,
                machine=record.machine,
                platform=record.platform,
            )
            for record in records
        ]
        self.db.add_all(rows)
        await self.db.flush()
        for row in rows:
            await self.db.refresh(row)
        log.info(f"Stored {len(rows)} activities for user {user_id}")
        return [StoredActivity.model_validate(row) for row in rows]

    async def list_for_user(self, user_id: uuid.UUID) -> List[StoredActivity]:
        result = await self.db.execute(
            select(ActivityModel)
            .where(ActivityModel.user_id == user_id)
            .order_by(ActivityModel.start_time.desc())
        )
        return [StoredActivity.model_validate(row) for row in result.scalars().all()]

    async def list_in_window(self, user_id: uuid.UUID, window: ReportWindow) -> List[StoredActivity]:
        result = await self.db.execute(
            select(ActivityModel)
            .where(
                ActivityModel.user_id == user_id,
                ActivityModel.start_time >= window.start_ms,
                ActivityModel.end_time < window.end_ms,
            )
            .order_by(ActivityModel.start_time, ActivityModel.created_at)
        )
        return [StoredActivity.model_validate(row) for row in result.scalars().all()]


class InMemoryActivityStore:
    """Activity store keeping records per user in insertion order."""

    def __init__(self):
        self._activities: Dict[uuid.UUID, List[StoredActivity]] = {}

    async def add_many(self, user_id: uuid.UUID, records: Sequence[ActivityRecord]) -> List[StoredActivity]:
        created_at = datetime.now(timezone.utc)
        stored = [
            StoredActivity(
                **record.model_dump(),
                id=uuid.uuid4(),
                user_id=user_id,
                created_at=created_at,
            )
            for record in records
        ]
        self._activities.setdefault(user_id, []).extend(stored)
        return stored

    async def list_for_user(self, user_id: uuid.UUID) -> List[StoredActivity]:
        activities = self._activities.get(user_id, [])
        return sorted(activities, key=lambda activity: activity.start_time, reverse=True)

    async def list_in_window(self, user_id: uuid.UUID, window: ReportWindow) -> List[StoredActivity]:
        activities = [a for a in self._activities.get(user_id, []) if window.contains(a)]
        return sorted(activities, key=lambda activity: activity.start_time)
