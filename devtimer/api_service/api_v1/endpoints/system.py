import logging
from datetime import datetime, timezone
from typing import Annotated
from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from devtimer.api_service.core.database import get_db, ping
from devtimer.api_service.core.settings import settings
from devtimer.api_service.auth import CurrentUserDep
from devtimer.api_service import schemas

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/status", response_model=schemas.SystemStatus)
async def get_system_status(_: CurrentUserDep, db: Annotated[AsyncSession, Depends(get_db)]):
    """
    Get the current status of the system.
    Reports the API version and whether the database answers queries.
    """
    database_connected = True
    try:
        await ping(db)
    except SQLAlchemyError as e:
        logger.warning(f"Database status check failed: {e}")
        database_connected = False
    return schemas.SystemStatus(
        status="ok" if database_connected else "degraded",
        version=settings.VERSION,
        database_connected=database_connected,
        server_time=datetime.now(timezone.utc),
    )
