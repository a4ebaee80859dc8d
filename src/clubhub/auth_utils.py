import uuid
from collections.abc import Callable
from functools import lru_cache

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy import select
from sqlalchemy.orm import Session

from clubhub.models.db import get_db
from clubhub.models.user import User, UserRole


class AuthSettings(BaseSettings):
    """Settings for authentication, loaded from environment variables."""

    jwt_secret_key: str
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 30
    refresh_token_expire_minutes: int = 60 * 24 * 30
    # Members with these e-mails are promoted to admin when they register or log in
    admin_emails: list[str] = []

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@lru_cache(maxsize=1)
def get_auth_settings() -> AuthSettings:
    return AuthSettings()


security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    if not credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")

    settings = get_auth_settings()
    try:
        payload = jwt.decode(credentials.credentials, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired") from None
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid token") from None

    if payload.get("type") != "access":
        raise HTTPException(status_code=401, detail="Invalid token type")

    try:
        user_id = uuid.UUID(payload.get("sub") or "")
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid token") from None

    user = db.execute(select(User).where(User.id == user_id)).scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    return user


def require_roles(*roles: UserRole) -> Callable[..., User]:
    """Dependency factory: the current user must hold one of ``roles``.

    ``is_admin`` counts as the admin role for accounts promoted by e-mail.
    """

    def _check(current_user: User = Depends(get_current_user)) -> User:
        effective = {current_user.role}
        if current_user.is_admin:
            effective.add(UserRole.ADMIN)
        if effective.isdisjoint(roles):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to access this route")
        return current_user

    return _check


require_admin = require_roles(UserRole.ADMIN, UserRole.SUPERADMIN)
require_superadmin = require_roles(UserRole.SUPERADMIN)
