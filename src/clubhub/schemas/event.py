from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from clubhub.models.event import EventType, RegistrationStatus


class EventCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1)
    date: datetime
    end_date: datetime
    venue: str = Field(..., min_length=1)
    type: EventType

    @model_validator(mode="after")
    def validate_dates(self):
        if self.end_date < self.date:
            raise ValueError("End date cannot be before the start date")
        return self


class EventUpdateRequest(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, min_length=1)
    date: datetime | None = None
    end_date: datetime | None = None
    venue: str | None = Field(None, min_length=1)
    type: EventType | None = None

    @model_validator(mode="after")
    def validate_payload(self):
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update")
        nulls = sorted(name for name in self.model_fields_set if getattr(self, name) is None)
        if nulls:
            raise ValueError(f"Fields cannot be null: {', '.join(nulls)}")
        return self


class EventResponse(BaseModel):
    id: UUID
    title: str
    description: str
    date: datetime
    end_date: datetime
    venue: str
    type: EventType
    registration_count: int = 0
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RegistrationRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    registration_no: str = Field(..., min_length=1, max_length=64)
    mobile_no: str = Field(..., pattern=r"^[0-9]{10}$", description="10-digit mobile number")
    semester: str = Field(..., min_length=1, max_length=32)


class RegistrationResponse(BaseModel):
    id: UUID
    event_id: UUID
    name: str
    email: EmailStr
    registration_no: str
    mobile_no: str
    semester: str
    status: RegistrationStatus
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RegistrationCreatedResponse(BaseModel):
    message: str
    registration: RegistrationResponse


class UserRegistrationSummary(BaseModel):
    """A person's registration as listed by e-mail lookup."""

    event: UUID
    email: EmailStr
    status: RegistrationStatus
    created_at: datetime
