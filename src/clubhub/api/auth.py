import logging
import uuid
from datetime import UTC, datetime, timedelta

import bcrypt
import jwt
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from clubhub.auth_utils import get_auth_settings
from clubhub.models.db import get_db
from clubhub.models.user import User
from clubhub.repositories.user_repository import UserRepository
from clubhub.schemas.auth import AuthResponse, LoginRequest, MessageResponse, RefreshRequest, RegisterRequest, TokenPair, UserResponse

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


def get_user_repository(db: Session = Depends(get_db)) -> UserRepository:
    return UserRepository(db)


def hash_password(password: str) -> str:
    """Hash a password using bcrypt with a random salt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """Verify a password against its bcrypt hash."""
    return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))


def _create_token(user_id: str, token_type: str, expire_minutes: int) -> str:
    settings = get_auth_settings()
    payload = {"sub": user_id, "exp": datetime.now(UTC) + timedelta(minutes=expire_minutes), "type": token_type}
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(user_id: str) -> str:
    return _create_token(user_id, "access", get_auth_settings().access_token_expire_minutes)


def create_refresh_token(user_id: str) -> str:
    return _create_token(user_id, "refresh", get_auth_settings().refresh_token_expire_minutes)


def issue_tokens(user: User) -> TokenPair:
    return TokenPair(access_token=create_access_token(str(user.id)), refresh_token=create_refresh_token(str(user.id)))


def is_configured_admin(email: str) -> bool:
    return email.lower() in {e.lower() for e in get_auth_settings().admin_emails}


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register_user(request: RegisterRequest, repo: UserRepository = Depends(get_user_repository)) -> AuthResponse:
    if repo.get_user_by_email(request.email):
        raise HTTPException(status_code=400, detail="User with this email already exists")
    if repo.get_user_by_registration_no(request.registration_no):
        raise HTTPException(status_code=400, detail="User with this registration number already exists")

    try:
        user = repo.create_user(
            name=request.name,
            email=request.email,
            password_hash=hash_password(request.password),
            registration_no=request.registration_no,
            branch=request.branch,
            semester=request.semester,
            mobile=request.mobile,
            is_admin=is_configured_admin(request.email),
        )
    except IntegrityError as err:
        raise HTTPException(status_code=400, detail="User already exists") from err

    logger.info("Registered user %s", user.id)
    return AuthResponse(user=UserResponse.model_validate(user), tokens=issue_tokens(user))


@router.post("/login", response_model=AuthResponse)
def login_user(request: LoginRequest, repo: UserRepository = Depends(get_user_repository)) -> AuthResponse:
    user = repo.get_user_by_email(request.email)
    if not user or not verify_password(request.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    user = repo.record_login(user, promote_to_admin=is_configured_admin(user.email))
    return AuthResponse(user=UserResponse.model_validate(user), tokens=issue_tokens(user))


@router.post("/refresh", response_model=TokenPair)
def refresh_token(request: RefreshRequest, repo: UserRepository = Depends(get_user_repository)) -> TokenPair:
    settings = get_auth_settings()
    try:
        payload = jwt.decode(request.refresh_token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Refresh token expired") from None
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid refresh token") from None

    if payload.get("type") != "refresh":
        raise HTTPException(status_code=401, detail="Invalid token type")

    try:
        user_id = uuid.UUID(payload.get("sub") or "")
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid token") from None

    user = repo.get_user_by_id(user_id)
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    return issue_tokens(user)


@router.post("/logout", response_model=MessageResponse)
def logout_user() -> MessageResponse:
    # Tokens are stateless; the client discards them
    return MessageResponse(message="Logged out successfully")
