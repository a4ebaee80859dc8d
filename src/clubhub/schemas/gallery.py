from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class GalleryPhotoResponse(BaseModel):
    id: UUID
    url: str
    public_id: str | None
    caption: str | None = None
    order: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class GalleryResponse(BaseModel):
    id: UUID
    title: str
    description: str = ""
    thumbnail: str
    thumbnail_public_id: str | None
    created_by: UUID
    photos: list[GalleryPhotoResponse] = Field(default_factory=list)
    photo_count: int = Field(0, description="Number of photos in the gallery")
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_db_gallery(cls, gallery) -> "GalleryResponse":
        response = cls.model_validate(gallery)
        response.photo_count = len(response.photos)
        return response


class ImageUploadResponse(BaseModel):
    url: str
    public_id: str


class BackfillResponse(BaseModel):
    filled: int
