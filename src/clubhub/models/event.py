import enum
import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime, Enum, ForeignKey, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import mapped_column, relationship

from clubhub.models.db import Base


class EventType(str, enum.Enum):
    UPCOMING = "upcoming"
    PAST = "past"


class RegistrationStatus(str, enum.Enum):
    REGISTERED = "registered"
    ATTENDED = "attended"
    CANCELLED = "cancelled"


def _values(enum_cls):
    return [member.value for member in enum_cls]


class Event(Base):
    __tablename__ = "events"

    id = mapped_column(Uuid, primary_key=True, default=uuid.uuid4, unique=True, nullable=False)
    title = mapped_column(String(100), nullable=False)
    description = mapped_column(Text, nullable=False)
    date = mapped_column(DateTime, nullable=False, index=True)
    end_date = mapped_column(DateTime, nullable=False)
    venue = mapped_column(String(255), nullable=False)
    type = mapped_column(Enum(EventType, values_callable=_values), nullable=False)
    created_at = mapped_column(DateTime, default=lambda: datetime.now(UTC), nullable=False, index=True)
    updated_at = mapped_column(DateTime, default=lambda: datetime.now(UTC), onupdate=lambda: datetime.now(UTC), nullable=False)

    registrations = relationship(
        "EventRegistration",
        back_populates="event",
        order_by="EventRegistration.created_at.desc()",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def registration_count(self) -> int:
        return len(self.registrations)

    def __str__(self) -> str:
        return self.title


class EventRegistration(Base):
    __tablename__ = "event_registrations"
    __table_args__ = (UniqueConstraint("event_id", "email", name="uq_event_registration_email"),)

    id = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    event_id = mapped_column(Uuid, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    name = mapped_column(String(100), nullable=False)
    email = mapped_column(String(255), nullable=False, index=True)
    registration_no = mapped_column(String(64), nullable=False)
    mobile_no = mapped_column(String(10), nullable=False)
    semester = mapped_column(String(32), nullable=False)
    status = mapped_column(Enum(RegistrationStatus, values_callable=_values), nullable=False, default=RegistrationStatus.REGISTERED)
    created_at = mapped_column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    event = relationship(Event, back_populates="registrations")

    def __str__(self) -> str:
        return f"{self.name} <{self.email}>"
