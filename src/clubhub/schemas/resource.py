from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from clubhub.models.resource import ResourceDomain, ResourceType


class ResourceCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1)
    type: ResourceType
    domain: ResourceDomain | None = None


class ResourceUpdateRequest(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, min_length=1)
    url: str | None = Field(None, min_length=1)
    type: ResourceType | None = None
    domain: ResourceDomain | None = None

    @model_validator(mode="after")
    def validate_payload(self):
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update")
        # domain is optional on the model and may be cleared
        nulls = sorted(name for name in self.model_fields_set - {"domain"} if getattr(self, name) is None)
        if nulls:
            raise ValueError(f"Fields cannot be null: {', '.join(nulls)}")
        return self


class ResourceResponse(BaseModel):
    id: UUID
    title: str
    description: str
    url: str
    type: ResourceType
    domain: ResourceDomain | None = None
    uploaded_by: UUID
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
