from typing import Annotated
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from devtimer.api_service.core.database import get_db
from devtimer.api_service.core.settings import settings
from devtimer.reporting_service.logic.windows import resolve_timezone
from devtimer.reporting_service.service import ReportService
from devtimer.reporting_service.store import ActivityStore, SqlAlchemyActivityStore

def get_activity_store(db: Annotated[AsyncSession, Depends(get_db)]) -> ActivityStore:
    """
    Dependency providing the activity store for the request.
    Shares the request's database session, so writes commit with it.
    """
    return SqlAlchemyActivityStore(db)

ActivityStoreDep = Annotated[ActivityStore, Depends(get_activity_store)]

def get_report_service(store: ActivityStoreDep) -> ReportService:
    """Dependency providing a report service reading from the request's store."""
    return ReportService(store, tz=resolve_timezone(settings.LOCAL_TZ))

ReportServiceDep = Annotated[ReportService, Depends(get_report_service)]
