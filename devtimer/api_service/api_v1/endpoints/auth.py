from fastapi import APIRouter, HTTPException, status

from devtimer.api_service.auth import (
    AuthFormDep,
    AuthServiceDep,
    CurrentUserDep,
    UsernameTakenError,
)
from devtimer.api_service import schemas

router = APIRouter()

@router.post("/register", response_model=schemas.RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(user_in: schemas.UserCreate, auth_service: AuthServiceDep):
    """Create an account and return the API key its editor plugins should use."""
    try:
        user = await auth_service.register(user_in.username, user_in.password)
    except UsernameTakenError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Username already registered",
        )
    return schemas.RegisterResponse(username=user.username, api_key=user.api_key)

@router.post("/login", response_model=schemas.LoginResponse, response_model_exclude_none=True)
async def login(credentials: schemas.LoginRequest, auth_service: AuthServiceDep):
    """Log in with a JSON body. Returns a dashboard token and the account's API key."""
    user = await auth_service.authenticate_user(credentials.username, credentials.password)
    if not user:
        return schemas.LoginResponse(success=False, message="Invalid credentials")
    return schemas.LoginResponse(
        success=True,
        access_token=auth_service.issue_token(user),
        api_key=user.api_key,
    )

@router.post("/token", response_model=schemas.Token)
async def login_for_access_token(form_data: AuthFormDep, auth_service: AuthServiceDep):
    """OAuth2 password flow, used by the interactive docs."""
    user = await auth_service.authenticate_user(form_data.username, form_data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return schemas.Token(access_token=auth_service.issue_token(user))

@router.post("/regenerate-api-key", response_model=schemas.ApiKeyResponse)
async def regenerate_api_key(current_user: CurrentUserDep, auth_service: AuthServiceDep):
    """Replace the account's API key. The old key stops working immediately."""
    api_key = await auth_service.regenerate_api_key(current_user)
    return schemas.ApiKeyResponse(api_key=api_key)

@router.get("/me", response_model=schemas.User)
async def read_current_user(current_user: CurrentUserDep):
    """Get current user info"""
    return current_user
