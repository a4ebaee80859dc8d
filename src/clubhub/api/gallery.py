import logging
import time
import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from clubhub.auth_utils import get_current_user
from clubhub.dependencies import get_image_host
from clubhub.exceptions import RemoteDeleteFailure, UploadFailure
from clubhub.identifiers import GalleryValidationError, derive_public_id
from clubhub.image_host import ImageHost
from clubhub.logger import upload_events
from clubhub.models.db import get_db
from clubhub.models.gallery import Gallery
from clubhub.models.user import User
from clubhub.repositories.gallery_repository import GalleryRepository
from clubhub.schemas.gallery import GalleryResponse, ImageUploadResponse
from clubhub.uploads import destroy_best_effort, get_upload_settings, stored_uploads, upload_sequentially

router = APIRouter(prefix="/galleries", tags=["galleries"])
logger = logging.getLogger(__name__)


def get_gallery_repository(db: Session = Depends(get_db)) -> GalleryRepository:
    return GalleryRepository(db)


def get_gallery_or_404(gallery_id: uuid.UUID, repo: GalleryRepository) -> Gallery:
    gallery = repo.get_gallery(gallery_id)
    if not gallery:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Gallery not found")
    return gallery


def _has_file(file: UploadFile | None) -> bool:
    return file is not None and bool(file.filename)


@router.get("", response_model=list[GalleryResponse])
def list_galleries(repo: GalleryRepository = Depends(get_gallery_repository)) -> list[GalleryResponse]:
    return [GalleryResponse.from_db_gallery(g) for g in repo.list_galleries()]


@router.get("/{gallery_id}", response_model=GalleryResponse)
def get_gallery(gallery_id: uuid.UUID, repo: GalleryRepository = Depends(get_gallery_repository)) -> GalleryResponse:
    return GalleryResponse.from_db_gallery(get_gallery_or_404(gallery_id, repo))


@router.post("", response_model=GalleryResponse, status_code=status.HTTP_201_CREATED)
async def create_gallery(
    title: Annotated[str | None, Form()] = None,
    description: Annotated[str, Form()] = "",
    thumbnail: Annotated[UploadFile | None, File()] = None,
    photos: Annotated[list[UploadFile] | None, File()] = None,
    repo: GalleryRepository = Depends(get_gallery_repository),
    current_user: User = Depends(get_current_user),
    image_host: ImageHost = Depends(get_image_host),
) -> GalleryResponse:
    """Create a gallery from a thumbnail and an optional initial photo set.

    The thumbnail goes up first, then the photos one by one. Any failure
    aborts the creation and removes what was already uploaded.
    """
    settings = get_upload_settings()
    if not title or not title.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Title is required")
    if not _has_file(thumbnail):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Thumbnail is required")
    photo_files = [f for f in photos or [] if _has_file(f)]
    if len(photo_files) > settings.max_create_photos:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"At most {settings.max_create_photos} photos per gallery creation")

    logger.info("Creating gallery %r with %d photos", title, len(photo_files))
    async with stored_uploads([thumbnail, *photo_files], settings.dir) as stored:
        thumbnail_stored, photos_stored = stored[0], stored[1:]
        (thumbnail_asset,) = await upload_sequentially(image_host, [thumbnail_stored], folder=settings.folder, timeout=settings.timeout_seconds)

        try:
            uploaded = await upload_sequentially(
                image_host,
                photos_stored,
                folder=settings.folder,
                timeout=settings.timeout_seconds,
                delay=settings.delay_seconds,
            )
        except UploadFailure:
            await destroy_best_effort(image_host, [thumbnail_asset.remote_id], reason="gallery creation aborted")
            raise

        try:
            gallery = repo.create_gallery(
                title=title.strip(),
                description=description,
                thumbnail=thumbnail_asset,
                photos=uploaded,
                created_by=current_user.id,
            )
        except Exception as err:
            remote_ids = [thumbnail_asset.remote_id, *(u.remote_id for u in uploaded)]
            await destroy_best_effort(image_host, remote_ids, reason="gallery creation not persisted")
            if isinstance(err, GalleryValidationError):
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err)) from err
            raise

    logger.info("Gallery created successfully: %s", gallery.id)
    return GalleryResponse.from_db_gallery(gallery)


@router.post("/upload", response_model=ImageUploadResponse)
async def upload_image(
    image: Annotated[UploadFile | None, File()] = None,
    current_user: User = Depends(get_current_user),
    image_host: ImageHost = Depends(get_image_host),
) -> ImageUploadResponse:
    """Upload a single image and return its hosted URL."""
    if not _has_file(image):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded")

    settings = get_upload_settings()
    async with stored_uploads([image], settings.dir) as stored:
        (asset,) = await upload_sequentially(image_host, stored, folder=settings.folder, timeout=settings.timeout_seconds)
    return ImageUploadResponse(url=asset.remote_url, public_id=asset.remote_id)


@router.put("/{gallery_id}/photos", response_model=GalleryResponse)
async def upload_photos_batch(
    gallery_id: uuid.UUID,
    photos: Annotated[list[UploadFile] | None, File()] = None,
    repo: GalleryRepository = Depends(get_gallery_repository),
    current_user: User = Depends(get_current_user),
    image_host: ImageHost = Depends(get_image_host),
) -> GalleryResponse:
    """Append one batch of photos to a gallery, all or nothing.

    Files are uploaded sequentially to spare the image host. If any of them
    fails, the batch's uploaded assets are destroyed and nothing is persisted.
    """
    settings = get_upload_settings()
    gallery = get_gallery_or_404(gallery_id, repo)

    files = [f for f in photos or [] if _has_file(f)]
    if not files:
        logger.warning("No files provided in batch upload for gallery %s", gallery_id)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No photos uploaded")
    if len(files) > settings.max_batch_files:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"At most {settings.max_batch_files} photos per batch")

    started = time.monotonic()
    logger.info("Processing batch of %d photos for gallery %s", len(files), gallery_id)

    async with stored_uploads(files, settings.dir) as stored:
        uploaded = await upload_sequentially(
            image_host,
            stored,
            folder=settings.folder,
            timeout=settings.timeout_seconds,
            delay=settings.delay_seconds,
        )
        try:
            gallery = repo.append_photos(gallery, uploaded)
        except Exception as err:
            await destroy_best_effort(image_host, [u.remote_id for u in uploaded], reason="batch not persisted")
            if isinstance(err, GalleryValidationError):
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err)) from err
            raise

    upload_events.log_event(
        "batch_upload_completed",
        gallery_id=str(gallery.id),
        files=len(uploaded),
        photo_count=len(gallery.photos),
        duration_s=round(time.monotonic() - started, 3),
    )
    return GalleryResponse.from_db_gallery(gallery)


@router.delete("/{gallery_id}/photos/{photo_id}", response_model=GalleryResponse)
async def delete_photo(
    gallery_id: uuid.UUID,
    photo_id: uuid.UUID,
    repo: GalleryRepository = Depends(get_gallery_repository),
    current_user: User = Depends(get_current_user),
    image_host: ImageHost = Depends(get_image_host),
) -> GalleryResponse:
    gallery = get_gallery_or_404(gallery_id, repo)
    photo = repo.find_photo(gallery, photo_id)
    if not photo:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Photo not found in gallery")

    # The remote delete must succeed before the record goes away
    public_id = photo.public_id or derive_public_id(photo.url)
    try:
        await image_host.destroy(public_id)
    except Exception as e:
        logger.error("Error removing photo %s: %s", photo_id, e)
        raise RemoteDeleteFailure(public_id, str(e)) from e

    gallery = repo.remove_photo(gallery, photo)
    return GalleryResponse.from_db_gallery(gallery)


@router.put("/{gallery_id}/thumbnail", response_model=GalleryResponse)
async def replace_thumbnail(
    gallery_id: uuid.UUID,
    thumbnail: Annotated[UploadFile | None, File()] = None,
    repo: GalleryRepository = Depends(get_gallery_repository),
    current_user: User = Depends(get_current_user),
    image_host: ImageHost = Depends(get_image_host),
) -> GalleryResponse:
    settings = get_upload_settings()
    gallery = get_gallery_or_404(gallery_id, repo)
    if not _has_file(thumbnail):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No thumbnail uploaded")

    old_public_id = gallery.thumbnail_public_id or derive_public_id(gallery.thumbnail)
    async with stored_uploads([thumbnail], settings.dir) as stored:
        (asset,) = await upload_sequentially(image_host, stored, folder=settings.folder, timeout=settings.timeout_seconds)

    try:
        gallery = repo.set_thumbnail(gallery, asset)
    except Exception:
        await destroy_best_effort(image_host, [asset.remote_id], reason="thumbnail not persisted")
        raise

    await destroy_best_effort(image_host, [old_public_id], reason="thumbnail replaced")
    return GalleryResponse.from_db_gallery(gallery)


@router.delete("/{gallery_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_gallery(
    gallery_id: uuid.UUID,
    repo: GalleryRepository = Depends(get_gallery_repository),
    current_user: User = Depends(get_current_user),
    image_host: ImageHost = Depends(get_image_host),
) -> None:
    """Delete a gallery with its thumbnail and every photo asset.

    Each remote delete is independent; failures are reported and do not stop
    the others or the record deletion.
    """
    gallery = get_gallery_or_404(gallery_id, repo)
    remote_ids = [gallery.thumbnail_public_id or derive_public_id(gallery.thumbnail)]
    remote_ids.extend(photo.public_id or derive_public_id(photo.url) for photo in gallery.photos)

    failed = await destroy_best_effort(image_host, remote_ids, reason=f"gallery {gallery_id} deleted")
    if failed:
        logger.warning("Gallery %s deleted with %d orphaned image host assets", gallery_id, len(failed))

    repo.delete_gallery(gallery)
    logger.info("Gallery deleted successfully: %s", gallery_id)
