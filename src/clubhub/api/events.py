import logging
import uuid
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from clubhub.auth_utils import get_current_user, require_admin
from clubhub.models.db import get_db
from clubhub.models.event import Event
from clubhub.models.user import User
from clubhub.repositories.event_repository import EventRepository
from clubhub.schemas.auth import MessageResponse
from clubhub.schemas.event import (
    EventCreateRequest,
    EventResponse,
    EventUpdateRequest,
    RegistrationCreatedResponse,
    RegistrationRequest,
    RegistrationResponse,
    UserRegistrationSummary,
)

router = APIRouter(prefix="/events", tags=["events"])
logger = logging.getLogger(__name__)


def get_event_repository(db: Session = Depends(get_db)) -> EventRepository:
    return EventRepository(db)


def get_event_or_404(event_id: uuid.UUID, repo: EventRepository) -> Event:
    event = repo.get_event(event_id)
    if not event:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    return event


def _as_naive_utc(value: datetime) -> datetime:
    # Stored timestamps are naive UTC
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


def queue_confirmation_email(registration_id: uuid.UUID) -> None:
    """Queue the confirmation e-mail; a broker outage never fails the registration."""
    from clubhub.background_tasks import send_event_confirmation_task

    try:
        send_event_confirmation_task.delay(str(registration_id))
    except Exception as e:
        logger.warning("Could not queue confirmation e-mail for registration %s: %s", registration_id, e)


@router.get("", response_model=list[EventResponse])
def list_events(repo: EventRepository = Depends(get_event_repository)) -> list[EventResponse]:
    return [EventResponse.model_validate(e) for e in repo.list_events()]


# Must stay above /{event_id} so "registrations" is not parsed as an id
@router.get("/registrations", response_model=list[UserRegistrationSummary])
def list_my_registrations(
    email: str | None = Query(None),
    repo: EventRepository = Depends(get_event_repository),
) -> list[UserRegistrationSummary]:
    if not email:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email is required")
    return [
        UserRegistrationSummary(event=r.event_id, email=r.email, status=r.status, created_at=r.created_at)
        for r in repo.registrations_for_email(email.strip().lower())
    ]


@router.get("/{event_id}", response_model=EventResponse)
def get_event(
    event_id: uuid.UUID,
    repo: EventRepository = Depends(get_event_repository),
    current_user: User = Depends(get_current_user),
) -> EventResponse:
    return EventResponse.model_validate(get_event_or_404(event_id, repo))


@router.post("/{event_id}/register", response_model=RegistrationCreatedResponse, status_code=status.HTTP_201_CREATED)
def register_for_event(
    event_id: uuid.UUID,
    request: RegistrationRequest,
    repo: EventRepository = Depends(get_event_repository),
) -> RegistrationCreatedResponse:
    event = get_event_or_404(event_id, repo)
    email = request.email.lower()
    if repo.get_registration(event.id, email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Already registered for this event with this email")

    data = request.model_dump()
    data["email"] = email
    try:
        registration = repo.create_registration(event, data)
    except IntegrityError as err:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Already registered for this event with this email") from err

    logger.info("Registration %s created for event %s", registration.id, event.id)
    queue_confirmation_email(registration.id)
    return RegistrationCreatedResponse(
        message="Successfully registered for the event",
        registration=RegistrationResponse.model_validate(registration),
    )


@router.get("/{event_id}/registrations", response_model=list[RegistrationResponse])
def list_event_registrations(
    event_id: uuid.UUID,
    repo: EventRepository = Depends(get_event_repository),
    current_user: User = Depends(require_admin),
) -> list[RegistrationResponse]:
    event = get_event_or_404(event_id, repo)
    return [RegistrationResponse.model_validate(r) for r in repo.registrations_for_event(event.id)]


@router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
def create_event(
    request: EventCreateRequest,
    repo: EventRepository = Depends(get_event_repository),
    current_user: User = Depends(require_admin),
) -> EventResponse:
    event = repo.create_event(request.model_dump())
    logger.info("Event %s created by %s", event.id, current_user.id)
    return EventResponse.model_validate(event)


@router.put("/{event_id}", response_model=EventResponse)
def update_event(
    event_id: uuid.UUID,
    request: EventUpdateRequest,
    repo: EventRepository = Depends(get_event_repository),
    current_user: User = Depends(require_admin),
) -> EventResponse:
    event = get_event_or_404(event_id, repo)
    fields = request.model_dump(exclude_unset=True)
    start = _as_naive_utc(fields.get("date", event.date))
    end = _as_naive_utc(fields.get("end_date", event.end_date))
    if end < start:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="End date cannot be before the start date")
    return EventResponse.model_validate(repo.update_event(event, fields))


@router.delete("/{event_id}", response_model=MessageResponse)
def delete_event(
    event_id: uuid.UUID,
    repo: EventRepository = Depends(get_event_repository),
    current_user: User = Depends(require_admin),
) -> MessageResponse:
    event = get_event_or_404(event_id, repo)
    repo.delete_event(event)
    logger.info("Event %s deleted by %s", event_id, current_user.id)
    return MessageResponse(message="Event deleted")
