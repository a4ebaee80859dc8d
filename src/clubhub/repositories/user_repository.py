import uuid
from datetime import UTC, datetime, timedelta

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from clubhub.models.user import User, UserRole
from clubhub.repositories.base_repository import BaseRepository


class UserRepository(BaseRepository):
    def create_user(
        self,
        *,
        name: str,
        email: str,
        password_hash: str,
        registration_no: str,
        branch: str,
        semester: str,
        mobile: str,
        is_admin: bool = False,
    ) -> User:
        user = User(
            id=uuid.uuid4(),
            name=name,
            email=email,
            password_hash=password_hash,
            registration_no=registration_no,
            branch=branch,
            semester=semester,
            mobile=mobile,
            is_admin=is_admin,
            role=UserRole.ADMIN if is_admin else UserRole.USER,
        )
        self.db.add(user)
        try:
            self.db.commit()
            self.db.refresh(user)
        except IntegrityError:
            self.db.rollback()
            raise
        return user

    def get_user_by_email(self, email: str) -> User | None:
        stmt = select(User).where(User.email == email)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_user_by_registration_no(self, registration_no: str) -> User | None:
        stmt = select(User).where(User.registration_no == registration_no)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_user_by_id(self, user_id: uuid.UUID) -> User | None:
        stmt = select(User).where(User.id == user_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def list_users(self) -> list[User]:
        stmt = select(User).order_by(User.created_at.desc())
        return list(self.db.execute(stmt).scalars().all())

    def record_login(self, user: User, promote_to_admin: bool = False) -> User:
        user.last_login_at = datetime.now(UTC)
        if promote_to_admin and not user.is_admin:
            user.is_admin = True
            user.role = UserRole.ADMIN
        return self._commit_and_refresh(user)

    def update_profile(self, user: User, fields: dict) -> User:
        for key, value in fields.items():
            setattr(user, key, value)
        try:
            return self._commit_and_refresh(user)
        except IntegrityError:
            self.db.rollback()
            raise

    def update_password(self, user: User, password_hash: str) -> User:
        user.password_hash = password_hash
        return self._commit_and_refresh(user)

    def update_role(self, user_id: uuid.UUID, role: UserRole) -> User | None:
        user = self.get_user_by_id(user_id)
        if not user:
            return None
        user.role = role
        user.is_admin = role in (UserRole.ADMIN, UserRole.SUPERADMIN)
        return self._commit_and_refresh(user)

    def count_users(self) -> int:
        return self.db.execute(select(func.count()).select_from(User)).scalar_one()

    def count_active_users(self, days: int = 30) -> int:
        since = datetime.now(UTC) - timedelta(days=days)
        stmt = select(func.count()).select_from(User).where(User.last_login_at >= since)
        return self.db.execute(stmt).scalar_one()
