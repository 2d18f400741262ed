from pydantic import Field
from typing import Optional
from datetime import datetime
import uuid

from devtimer.reporting_service.models import (
    BaseSchema,
    ActivityRecord,
    StoredActivity,
    DailySummary,
    WeeklySummary,
)

__all__ = [
    "BaseSchema",
    "Token",
    "UserCreate",
    "LoginRequest",
    "LoginResponse",
    "RegisterResponse",
    "ApiKeyResponse",
    "User",
    "ActivityCreate",
    "Activity",
    "ActivityCreatedResponse",
    "ActivityBatchResponse",
    "DailySummary",
    "WeeklySummary",
    "SystemStatus",
]

# Token schemas
class Token(BaseSchema):
    """Schema for an authentication token."""
    access_token: str
    token_type: str = "bearer"

# User schemas
class UserCreate(BaseSchema):
    """Schema for registering a new account."""
    username: str = Field(..., min_length=3, max_length=20, json_schema_extra={'example': "octocat"})
    password: str = Field(..., min_length=6)

class LoginRequest(BaseSchema):
    """Schema for a JSON login request."""
    username: str
    password: str

class LoginResponse(BaseSchema):
    """Schema for the login response. On failure only `success` and `message` are set."""
    success: bool
    message: Optional[str] = None
    access_token: Optional[str] = None
    api_key: Optional[str] = Field(None, alias="apiKey")

class RegisterResponse(BaseSchema):
    """Schema for the response to a successful registration."""
    username: str
    api_key: str = Field(..., alias="apiKey")

class ApiKeyResponse(BaseSchema):
    """Schema for a freshly generated API key."""
    api_key: str = Field(..., alias="apiKey")

class User(BaseSchema):
    """Schema for a user as returned by the API."""
    id: uuid.UUID
    username: str

# Activity schemas
class ActivityCreate(ActivityRecord):
    """Schema for an activity sent by an editor plugin."""
    project: str = Field(..., min_length=2, json_schema_extra={'example': "devtimer"})
    file: str = Field(..., min_length=3, json_schema_extra={'example': "src/main.py"})
    language: str = Field(..., min_length=1, json_schema_extra={'example': "python"})

# Activities as returned by the API
Activity = StoredActivity

class ActivityCreatedResponse(BaseSchema):
    """Schema for the response to a single activity submission."""
    success: bool = True
    activity: Activity

class ActivityBatchResponse(BaseSchema):
    """Schema for the response to a batch activity submission."""
    success: bool = True
    message: str

# System schemas
class SystemStatus(BaseSchema):
    """Schema for the system status response."""
    status: str
    version: str
    database_connected: bool
    server_time: datetime
