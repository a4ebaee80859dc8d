import uuid
from datetime import UTC, datetime

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from clubhub.models.event import Event, EventRegistration
from clubhub.repositories.base_repository import BaseRepository


class EventRepository(BaseRepository):
    def list_events(self, newest_first: bool = False) -> list[Event]:
        order = Event.date.desc() if newest_first else Event.date.asc()
        stmt = select(Event).options(selectinload(Event.registrations)).order_by(order)
        return list(self.db.execute(stmt).scalars().all())

    def get_event(self, event_id: uuid.UUID) -> Event | None:
        stmt = select(Event).options(selectinload(Event.registrations)).where(Event.id == event_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def create_event(self, data: dict) -> Event:
        event = Event(id=uuid.uuid4(), **data)
        self.db.add(event)
        return self._commit_and_refresh(event)

    def update_event(self, event: Event, data: dict) -> Event:
        for key, value in data.items():
            setattr(event, key, value)
        return self._commit_and_refresh(event)

    def delete_event(self, event: Event) -> None:
        # Registrations go with the event (cascade)
        self.db.delete(event)
        self.db.commit()

    def get_registration(self, event_id: uuid.UUID, email: str) -> EventRegistration | None:
        stmt = select(EventRegistration).where(EventRegistration.event_id == event_id, EventRegistration.email == email)
        return self.db.execute(stmt).scalar_one_or_none()

    def create_registration(self, event: Event, data: dict) -> EventRegistration:
        registration = EventRegistration(**data)
        event.registrations.append(registration)
        try:
            return self._commit_and_refresh(registration)
        except IntegrityError:
            self.db.rollback()
            raise

    def registrations_for_email(self, email: str) -> list[EventRegistration]:
        stmt = select(EventRegistration).where(EventRegistration.email == email).order_by(EventRegistration.created_at.desc())
        return list(self.db.execute(stmt).scalars().all())

    def registrations_for_event(self, event_id: uuid.UUID) -> list[EventRegistration]:
        stmt = select(EventRegistration).where(EventRegistration.event_id == event_id).order_by(EventRegistration.created_at.desc())
        return list(self.db.execute(stmt).scalars().all())

    def count_events(self) -> int:
        return self.db.execute(select(func.count()).select_from(Event)).scalar_one()

    def count_upcoming_events(self) -> int:
        stmt = select(func.count()).select_from(Event).where(Event.date >= datetime.now(UTC))
        return self.db.execute(stmt).scalar_one()
