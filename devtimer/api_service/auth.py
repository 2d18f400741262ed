import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional, Annotated
import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer, OAuth2PasswordBearer, OAuth2PasswordRequestForm
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from devtimer.api_service.core.database import get_db
from devtimer.api_service.core.models import User
from devtimer.api_service.core.settings import settings

logger = logging.getLogger(__name__)

# Constants
CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Could not validate credentials",
    headers={"WWW-Authenticate": "Bearer"},
)
INVALID_API_KEY_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid API key",
    headers={"WWW-Authenticate": "Bearer"},
)

# Configuration
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/token")
api_key_scheme = HTTPBearer(auto_error=False, description="API key issued at registration")


class UsernameTakenError(Exception):
    """Raised when registering a username that already exists."""


# --- Password Operations ---
class PasswordManager:
    """Handles password hashing and verification."""

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        return pwd_context.verify(plain_password, hashed_password)

    @staticmethod
    def get_password_hash(password: str) -> str:
        return pwd_context.hash(password)


# --- Token Operations ---
class TokenManager:
    """Handles JWT token creation and validation."""

    @staticmethod
    def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
        to_encode = data.copy()
        expire = TokenManager._calculate_expiry(expires_delta)
        to_encode.update({"exp": expire})
        return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    @staticmethod
    def decode_subject(token: str) -> str:
        """Returns the `sub` claim of a valid token. Raises JWTError otherwise."""
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        subject = payload.get("sub")
        if not subject:
            raise JWTError("Token has no subject")
        return subject

    @staticmethod
    def _calculate_expiry(expires_delta: Optional[timedelta]) -> datetime:
        if expires_delta:
            return datetime.now(timezone.utc) + expires_delta
        return datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)


# --- API Key Operations ---
class ApiKeyManager:
    """Issues the API keys editor plugins authenticate with."""

    @staticmethod
    def generate() -> str:
        return secrets.token_hex(settings.API_KEY_BYTES)


# --- User Repository ---
class UserRepository:
    """Handles user database operations using SQLAlchemy async session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_username(self, username: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def get_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_by_api_key(self, api_key: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.api_key == api_key))
        return result.scalar_one_or_none()

    async def create(self, username: str, hashed_password: str, api_key: str) -> User:
        user = User(id=uuid.uuid4(), username=username, hashed_password=hashed_password, api_key=api_key)
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise
        await self.db.refresh(user)
        return user

    async def set_api_key(self, user: User, api_key: str) -> User:
        user.api_key = api_key
        await self.db.commit()
        return user


# --- Authentication Service ---
class AuthenticationService:
    """Handles registration, login and credential checks."""

    def __init__(self, user_repo: UserRepository):
        self.user_repo = user_repo

    async def register(self, username: str, password: str) -> User:
        if await self.user_repo.get_by_username(username):
            raise UsernameTakenError(username)
        try:
            user = await self.user_repo.create(
                username=username,
                hashed_password=PasswordManager.get_password_hash(password),
                api_key=ApiKeyManager.generate(),
            )
        except IntegrityError as e:
            # Lost a race with a concurrent registration of the same name
            logger.warning(f"Registration of '{username}' hit a unique constraint: {e.orig}")
            raise UsernameTakenError(username) from e
        logger.info(f"Registered user '{username}'")
        return user

    async def authenticate_user(self, username: str, password: str) -> Optional[User]:
        user = await self.user_repo.get_by_username(username)
        if not user or not PasswordManager.verify_password(password, user.hashed_password):
            return None
        return user

    def issue_token(self, user: User) -> str:
        return TokenManager.create_access_token(data={"sub": str(user.id), "username": user.username})

    async def regenerate_api_key(self, user: User) -> str:
        api_key = ApiKeyManager.generate()
        await self.user_repo.set_api_key(user, api_key)
        logger.info(f"Regenerated API key for user '{user.username}'")
        return api_key

    async def get_current_user_from_token(self, token: str) -> User:
        try:
            user_id = uuid.UUID(TokenManager.decode_subject(token))
        except (JWTError, ValueError):
            raise CREDENTIALS_EXCEPTION
        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise CREDENTIALS_EXCEPTION
        return user

    async def get_user_from_api_key(self, api_key: str) -> User:
        user = await self.user_repo.get_by_api_key(api_key)
        if not user:
            raise INVALID_API_KEY_EXCEPTION
        return user


# --- Dependency Functions ---
async def get_auth_service(db: Annotated[AsyncSession, Depends(get_db)]) -> AuthenticationService:
    return AuthenticationService(UserRepository(db))

AuthServiceDep = Annotated[AuthenticationService, Depends(get_auth_service)]

async def get_current_user(
    auth_service: AuthServiceDep,
    token: Annotated[str, Depends(oauth2_scheme)]
) -> User:
    """Dashboard authentication: a JWT issued by /auth/login."""
    return await auth_service.get_current_user_from_token(token)

async def get_api_key_user(
    auth_service: AuthServiceDep,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(api_key_scheme)]
) -> User:
    """Plugin authentication: `Authorization: Bearer <api key>`."""
    if credentials is None or not credentials.credentials:
        raise INVALID_API_KEY_EXCEPTION
    return await auth_service.get_user_from_api_key(credentials.credentials)

# --- Type Aliases ---
AuthFormDep = Annotated[OAuth2PasswordRequestForm, Depends()]
CurrentUserDep = Annotated[User, Depends(get_current_user)]
ApiKeyUserDep = Annotated[User, Depends(get_api_key_user)]
