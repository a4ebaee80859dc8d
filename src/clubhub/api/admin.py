import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from clubhub.auth_utils import require_admin, require_superadmin
from clubhub.models.db import get_db
from clubhub.models.user import User, UserRole
from clubhub.repositories.event_repository import EventRepository
from clubhub.repositories.gallery_repository import GalleryRepository
from clubhub.repositories.user_repository import UserRepository
from clubhub.schemas.admin import DashboardStats, EventListResponse, RegistrationListResponse, RoleUpdateRequest, UserListResponse
from clubhub.schemas.auth import UserResponse
from clubhub.schemas.event import EventResponse, RegistrationResponse
from clubhub.schemas.gallery import BackfillResponse

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])
logger = logging.getLogger(__name__)


@router.get("/users", response_model=UserListResponse)
def list_users(db: Session = Depends(get_db)) -> UserListResponse:
    users = UserRepository(db).list_users()
    return UserListResponse(count=len(users), users=[UserResponse.model_validate(u) for u in users])


@router.put("/users/{user_id}/role", response_model=UserResponse)
def update_user_role(
    user_id: uuid.UUID,
    request: RoleUpdateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_superadmin),
) -> UserResponse:
    try:
        role = UserRole(request.role)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid role specified") from None

    user = UserRepository(db).update_role(user_id, role)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    logger.info("User %s set role of %s to %s", current_user.id, user_id, role.value)
    return UserResponse.model_validate(user)


@router.get("/stats", response_model=DashboardStats)
def dashboard_stats(db: Session = Depends(get_db)) -> DashboardStats:
    users = UserRepository(db)
    events = EventRepository(db)
    return DashboardStats(
        total_users=users.count_users(),
        active_users=users.count_active_users(days=30),
        total_events=events.count_events(),
        upcoming_events=events.count_upcoming_events(),
    )


@router.get("/events", response_model=EventListResponse)
def list_events_with_registrations(db: Session = Depends(get_db)) -> EventListResponse:
    events = EventRepository(db).list_events(newest_first=True)
    return EventListResponse(count=len(events), events=[EventResponse.model_validate(e) for e in events])


@router.get("/events/{event_id}/registrations", response_model=RegistrationListResponse)
def event_registrations(event_id: uuid.UUID, db: Session = Depends(get_db)) -> RegistrationListResponse:
    repo = EventRepository(db)
    if not repo.get_event(event_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    registrations = repo.registrations_for_event(event_id)
    return RegistrationListResponse(count=len(registrations), registrations=[RegistrationResponse.model_validate(r) for r in registrations])


@router.post("/galleries/backfill-public-ids", response_model=BackfillResponse)
def backfill_public_ids(db: Session = Depends(get_db)) -> BackfillResponse:
    """Fill in missing public_ids on legacy gallery records."""
    filled = GalleryRepository(db).backfill_public_ids()
    logger.info("Back-filled %d public_ids", filled)
    return BackfillResponse(filled=filled)
