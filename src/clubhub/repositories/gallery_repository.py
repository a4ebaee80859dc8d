import logging
import uuid
from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from clubhub.identifiers import GalleryValidationError, normalize_gallery, validate_gallery
from clubhub.models.gallery import Gallery, GalleryPhoto
from clubhub.repositories.base_repository import BaseRepository
from clubhub.uploads import UploadSucceeded

logger = logging.getLogger(__name__)


class GalleryRepository(BaseRepository):
    def save(self, gallery: Gallery) -> Gallery:
        """Normalize, validate and commit a gallery and its photo list.

        This is the single write path for galleries: identifiers missing on
        legacy photos or thumbnails are back-filled before validation runs.
        """
        filled = normalize_gallery(gallery)
        if filled:
            logger.info("Back-filled %d image host identifiers on gallery %s", filled, gallery.id)
        try:
            validate_gallery(gallery)
        except GalleryValidationError:
            self.db.rollback()
            raise
        self.db.add(gallery)
        return self._commit_and_refresh(gallery)

    def list_galleries(self) -> list[Gallery]:
        stmt = select(Gallery).options(selectinload(Gallery.photos)).order_by(Gallery.created_at.desc())
        return list(self.db.execute(stmt).scalars().all())

    def get_gallery(self, gallery_id: uuid.UUID) -> Gallery | None:
        stmt = select(Gallery).options(selectinload(Gallery.photos)).where(Gallery.id == gallery_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def create_gallery(
        self,
        *,
        title: str,
        description: str,
        thumbnail: UploadSucceeded,
        photos: Sequence[UploadSucceeded],
        created_by: uuid.UUID,
    ) -> Gallery:
        gallery = Gallery(
            id=uuid.uuid4(),
            title=title,
            description=description or "",
            thumbnail=thumbnail.remote_url,
            thumbnail_public_id=thumbnail.remote_id,
            created_by=created_by,
        )
        gallery.photos = [GalleryPhoto(url=p.remote_url, public_id=p.remote_id, order=index) for index, p in enumerate(photos)]
        return self.save(gallery)

    def append_photos(self, gallery: Gallery, uploaded: Sequence[UploadSucceeded]) -> Gallery:
        """Append a whole uploaded batch; order continues after the existing photos."""
        start = len(gallery.photos)
        for index, item in enumerate(uploaded):
            gallery.photos.append(GalleryPhoto(url=item.remote_url, public_id=item.remote_id, order=start + index))
        return self.save(gallery)

    def find_photo(self, gallery: Gallery, photo_id: uuid.UUID) -> GalleryPhoto | None:
        return next((photo for photo in gallery.photos if photo.id == photo_id), None)

    def remove_photo(self, gallery: Gallery, photo: GalleryPhoto) -> Gallery:
        gallery.photos.remove(photo)
        return self.save(gallery)

    def set_thumbnail(self, gallery: Gallery, thumbnail: UploadSucceeded) -> Gallery:
        gallery.thumbnail = thumbnail.remote_url
        gallery.thumbnail_public_id = thumbnail.remote_id
        return self.save(gallery)

    def delete_gallery(self, gallery: Gallery) -> None:
        self.db.delete(gallery)
        self.db.commit()

    def backfill_public_ids(self) -> int:
        """Derive missing identifiers on every stored gallery. Returns how many were filled."""
        stmt = (
            select(Gallery)
            .options(selectinload(Gallery.photos))
            .where(
                (Gallery.thumbnail_public_id.is_(None))
                | Gallery.id.in_(select(GalleryPhoto.gallery_id).where(GalleryPhoto.public_id.is_(None)))
            )
        )
        total = 0
        for gallery in self.db.execute(stmt).scalars().all():
            total += normalize_gallery(gallery)
        self.db.commit()
        logger.info("Back-filled %d image host identifiers", total)
        return total
