import logging
from typing import List, Union
from fastapi import APIRouter, Body, status

from devtimer.api_service import schemas
from devtimer.api_service.auth import ApiKeyUserDep, CurrentUserDep
from devtimer.api_service.api_v1.deps import ActivityStoreDep

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post(
    "",
    response_model=Union[schemas.ActivityBatchResponse, schemas.ActivityCreatedResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_activity(
    store: ActivityStoreDep,
    current_user: ApiKeyUserDep,
    payload: Union[List[schemas.ActivityCreate], schemas.ActivityCreate] = Body(...),
):
    """
    Record coding activity reported by an editor plugin.
    Accepts a single activity or a list of them. Durations are computed from
    startTime/endTime (seconds); any duration sent by the client is ignored.
    """
    if isinstance(payload, list):
        await store.add_many(current_user.id, payload)
        logger.info(f"Recorded {len(payload)} activities for user '{current_user.username}'")
        return schemas.ActivityBatchResponse(message=f"{len(payload)} activities registered")

    stored = await store.add_many(current_user.id, [payload])
    return schemas.ActivityCreatedResponse(activity=stored[0])

@router.get("", response_model=List[schemas.Activity])
async def read_activities(store: ActivityStoreDep, current_user: CurrentUserDep):
    """All of the current user's activities, most recent first."""
    return await store.list_for_user(current_user.id)
