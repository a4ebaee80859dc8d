"""Image-host identifiers for gallery records.

Older gallery rows were stored with only a hosted URL. The image host needs the
public identifier to delete an asset, so every write path runs the records
through :func:`normalize_gallery` before commit: missing identifiers are derived
from the URL with the same rule the legacy records were created with, and
:func:`validate_gallery` then refuses anything still incomplete.
"""

from datetime import UTC, datetime

from clubhub.models.gallery import Gallery

LEGACY_FOLDER = "genx_gallery"


class GalleryValidationError(ValueError):
    """Raised when a gallery is about to be saved in an inconsistent state."""


def derive_public_id(url: str) -> str:
    """Derive the image-host identifier of a legacy asset from its URL.

    >>> derive_public_id("https://host/genx_gallery/abc123.jpg")
    'genx_gallery/abc123'
    """
    filename = url.split("/")[-1]
    return f"{LEGACY_FOLDER}/{filename.split('.')[0]}"


def normalize_gallery(gallery: Gallery, now: datetime | None = None) -> int:
    """Back-fill missing identifiers and stamp ``updated_at``.

    Returns the number of identifiers that had to be derived.
    """
    now = now or datetime.now(UTC)
    filled = 0

    for photo in gallery.photos:
        if not photo.public_id and photo.url:
            photo.public_id = derive_public_id(photo.url)
            photo.updated_at = now
            filled += 1

    if not gallery.thumbnail_public_id and gallery.thumbnail:
        gallery.thumbnail_public_id = derive_public_id(gallery.thumbnail)
        filled += 1

    gallery.updated_at = now
    return filled


def validate_gallery(gallery: Gallery) -> None:
    if not gallery.title:
        raise GalleryValidationError("Title is required")
    if not gallery.thumbnail:
        raise GalleryValidationError("Thumbnail is required")
    if not gallery.thumbnail_public_id:
        raise GalleryValidationError("Thumbnail is missing its image host identifier")

    for photo in gallery.photos:
        if not photo.url:
            raise GalleryValidationError("URL is required")
        if not photo.public_id:
            raise GalleryValidationError(f"Photo {photo.url} is missing its image host identifier")
