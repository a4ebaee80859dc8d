import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import mapped_column, relationship

from clubhub.models.db import Base


class Gallery(Base):
    __tablename__ = "galleries"

    id = mapped_column(Uuid, primary_key=True, default=uuid.uuid4, unique=True, nullable=False)
    title = mapped_column(String(255), nullable=False)
    # Hosted URL of the cover image and its image-host identifier
    thumbnail = mapped_column(String, nullable=False)
    thumbnail_public_id = mapped_column(String, nullable=True)
    description = mapped_column(Text, nullable=False, default="")
    created_by = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = mapped_column(DateTime, default=lambda: datetime.now(UTC), nullable=False)
    updated_at = mapped_column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    owner = relationship("User", back_populates="galleries")
    photos = relationship(
        "GalleryPhoto",
        back_populates="gallery",
        order_by="GalleryPhoto.order",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __str__(self) -> str:
        return self.title


class GalleryPhoto(Base):
    __tablename__ = "gallery_photos"

    id = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    gallery_id = mapped_column(Uuid, ForeignKey("galleries.id", ondelete="CASCADE"), nullable=False, index=True)
    url = mapped_column(String, nullable=False)
    # Nullable only for legacy rows; filled by normalize_gallery before every save
    public_id = mapped_column(String, nullable=True)
    caption = mapped_column(String, nullable=True)
    order = mapped_column(Integer, nullable=False, default=0)
    created_at = mapped_column(DateTime, default=lambda: datetime.now(UTC), nullable=False)
    updated_at = mapped_column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    gallery = relationship(Gallery, back_populates="photos")

    def __str__(self) -> str:
        return self.public_id or self.url
