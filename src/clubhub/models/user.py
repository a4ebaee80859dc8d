import enum
import uuid
from datetime import UTC, datetime

from sqlalchemy import Boolean, DateTime, Enum, String, Uuid
from sqlalchemy.orm import mapped_column, relationship

from clubhub.models.db import Base


class UserRole(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"


class User(Base):
    __tablename__ = "users"

    id = mapped_column(Uuid, primary_key=True, default=uuid.uuid4, unique=True, nullable=False)
    name = mapped_column(String(50), nullable=False)
    email = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash = mapped_column(String(255), nullable=False)
    registration_no = mapped_column(String(64), unique=True, nullable=False, index=True)
    branch = mapped_column(String(128), nullable=False)
    semester = mapped_column(String(32), nullable=False)
    mobile = mapped_column(String(32), nullable=False)
    role = mapped_column(Enum(UserRole, values_callable=lambda roles: [r.value for r in roles]), nullable=False, default=UserRole.USER)
    is_admin = mapped_column(Boolean, nullable=False, default=False)
    last_login_at = mapped_column(DateTime, nullable=True)
    created_at = mapped_column(DateTime, default=lambda: datetime.now(UTC), nullable=False)
    updated_at = mapped_column(DateTime, default=lambda: datetime.now(UTC), onupdate=lambda: datetime.now(UTC), nullable=False)

    galleries = relationship("Gallery", back_populates="owner", passive_deletes=True)
    resources = relationship("Resource", back_populates="uploader", passive_deletes=True)

    @property
    def is_staff(self) -> bool:
        """Admins and superadmins may manage events and other members' content."""
        return self.is_admin or self.role in (UserRole.ADMIN, UserRole.SUPERADMIN)

    def __str__(self) -> str:
        return self.email
