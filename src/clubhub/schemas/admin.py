from pydantic import BaseModel

from clubhub.schemas.auth import UserResponse
from clubhub.schemas.event import EventResponse, RegistrationResponse


class RoleUpdateRequest(BaseModel):
    # Validated against UserRole by the route (400 on unknown roles)
    role: str


class DashboardStats(BaseModel):
    total_users: int
    active_users: int
    total_events: int
    upcoming_events: int


class UserListResponse(BaseModel):
    count: int
    users: list[UserResponse]


class EventListResponse(BaseModel):
    count: int
    events: list[EventResponse]


class RegistrationListResponse(BaseModel):
    count: int
    registrations: list[RegistrationResponse]
