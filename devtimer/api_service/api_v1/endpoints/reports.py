from fastapi import APIRouter

from devtimer.api_service import schemas
from devtimer.api_service.auth import ApiKeyUserDep, CurrentUserDep
from devtimer.api_service.api_v1.deps import ReportServiceDep

router = APIRouter()

# Editor plugins authenticate with their API key
@router.get("/daily", response_model=schemas.DailySummary)
async def read_daily_summary(report_service: ReportServiceDep, current_user: ApiKeyUserDep):
    """Today's activity, grouped by language and by platform/project/branch. Durations in seconds."""
    return await report_service.daily_summary(current_user.id)

@router.get("/weekly", response_model=schemas.WeeklySummary)
async def read_weekly_summary(report_service: ReportServiceDep, current_user: ApiKeyUserDep):
    """This week's activity (Sunday to Saturday) with a per-day breakdown."""
    return await report_service.weekly_summary(current_user.id)

# The web dashboard authenticates with a JWT
@router.get("/daily-web", response_model=schemas.DailySummary)
async def read_daily_summary_web(report_service: ReportServiceDep, current_user: CurrentUserDep):
    return await report_service.daily_summary(current_user.id)

@router.get("/weekly-web", response_model=schemas.WeeklySummary)
async def read_weekly_summary_web(report_service: ReportServiceDep, current_user: CurrentUserDep):
    return await report_service.weekly_summary(current_user.id)
