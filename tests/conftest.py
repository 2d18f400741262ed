import uuid
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

import pytest
from fastapi.testclient import TestClient

from devtimer.api_service.main import app
from devtimer.api_service.auth import get_api_key_user, get_current_user
from devtimer.api_service.api_v1.deps import get_activity_store, get_report_service
from devtimer.api_service.core.models import User
from devtimer.reporting_service.models import ActivityRecord
from devtimer.reporting_service.service import ReportService
from devtimer.reporting_service.store import InMemoryActivityStore
from devtimer.shared.utils import to_epoch_ms

# Wednesday afternoon; its week started on Sunday 2024-01-07
FIXED_NOW = datetime(2024, 1, 10, 15, 30, tzinfo=timezone.utc)
TODAY_START = datetime(2024, 1, 10, tzinfo=timezone.utc)


class FakeUserRepository:
    """In-memory stand-in for UserRepository."""

    def __init__(self):
        self.users: Dict[uuid.UUID, User] = {}

    async def get_by_username(self, username: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.username == username), None)

    async def get_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        return self.users.get(user_id)

    async def get_by_api_key(self, api_key: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.api_key == api_key), None)

    async def create(self, username: str, hashed_password: str, api_key: str) -> User:
        user = User(id=uuid.uuid4(), username=username, hashed_password=hashed_password, api_key=api_key)
        self.users[user.id] = user
        return user

    async def set_api_key(self, user: User, api_key: str) -> User:
        user.api_key = api_key
        return user


@pytest.fixture
def make_activity():
    """Factory for activity records starting `start` after midnight of TODAY_START."""
    def _make(start: timedelta, end: timedelta, **fields) -> ActivityRecord:
        values = {"project": "devtimer", "file": "src/app.py", "language": "python"}
        values.update(fields)
        return ActivityRecord(
            start_time=to_epoch_ms(TODAY_START + start),
            end_time=to_epoch_ms(TODAY_START + end),
            **values,
        )
    return _make


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def user_repo() -> FakeUserRepository:
    return FakeUserRepository()


@pytest.fixture
def user() -> User:
    return User(id=uuid.uuid4(), username="octocat", hashed_password="not-a-hash", api_key="a" * 64)


@pytest.fixture
def store() -> InMemoryActivityStore:
    return InMemoryActivityStore()


@pytest.fixture
def client(user, store):
    """Test client with both auth schemes resolving to `user` and an in-memory store."""
    app.dependency_overrides[get_current_user] = lambda: user
    app.dependency_overrides[get_api_key_user] = lambda: user
    app.dependency_overrides[get_activity_store] = lambda: store
    app.dependency_overrides[get_report_service] = lambda: ReportService(
        store, tz=timezone.utc, clock=lambda: FIXED_NOW
    )
    yield TestClient(app)
    app.dependency_overrides.clear()
