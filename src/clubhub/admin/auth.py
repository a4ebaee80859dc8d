"""Session login for the SQLAdmin dashboard."""

import asyncio
import uuid

from sqladmin.authentication import AuthenticationBackend
from sqlalchemy import select
from starlette.requests import Request

from clubhub.api.auth import verify_password
from clubhub.models.db import get_session_maker
from clubhub.models.user import User


def _find_staff_user(email: str, password: str) -> User | None:
    with get_session_maker()() as db:
        user = db.execute(select(User).where(User.email == email.strip().lower())).scalar_one_or_none()
        if not user or not user.is_staff:
            return None
        if not verify_password(password, user.password_hash):
            return None
        return user


def _is_staff(user_id: str) -> bool:
    try:
        parsed = uuid.UUID(user_id)
    except ValueError:
        return False
    with get_session_maker()() as db:
        user = db.execute(select(User).where(User.id == parsed)).scalar_one_or_none()
        return bool(user and user.is_staff)


class AdminAuth(AuthenticationBackend):
    """Admits admins and superadmins only; the user id lives in the session."""

    async def login(self, request: Request) -> bool:
        form = await request.form()
        email = form.get("username")  # SQLAdmin names the field 'username'
        password = form.get("password")
        if not isinstance(email, str) or not isinstance(password, str) or not email or not password:
            return False

        user = await asyncio.to_thread(_find_staff_user, email, password)
        if not user:
            return False
        request.session.update({"user_id": str(user.id)})
        return True

    async def logout(self, request: Request) -> bool:
        request.session.clear()
        return True

    async def authenticate(self, request: Request) -> bool:
        user_id = request.session.get("user_id")
        if not user_id:
            return False
        return await asyncio.to_thread(_is_staff, user_id)
