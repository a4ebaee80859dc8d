import uuid
from datetime import UTC, datetime

import pytest

from clubhub.identifiers import GalleryValidationError, derive_public_id, normalize_gallery, validate_gallery
from clubhub.models.gallery import Gallery, GalleryPhoto


def _gallery(**overrides) -> Gallery:
    fields = {
        "id": uuid.uuid4(),
        "title": "Orientation",
        "description": "",
        "thumbnail": "https://res.example.com/image/upload/v1/genx_gallery/cover.jpg",
        "thumbnail_public_id": None,
        "created_by": uuid.uuid4(),
    }
    fields.update(overrides)
    return Gallery(**fields)


def test_derive_public_id_from_url():
    assert derive_public_id("https://host/genx_gallery/abc123.jpg") == "genx_gallery/abc123"


def test_derive_public_id_takes_text_before_first_dot():
    assert derive_public_id("https://host/x/photo.v2.final.png") == "genx_gallery/photo"


def test_derive_public_id_without_extension():
    assert derive_public_id("https://images.example.com/genx_gallery/asset001") == "genx_gallery/asset001"


def test_normalize_fills_missing_photo_and_thumbnail_ids():
    gallery = _gallery()
    gallery.photos = [
        GalleryPhoto(url="https://host/genx_gallery/a1.jpg", public_id=None, order=0),
        GalleryPhoto(url="https://host/genx_gallery/b2.jpg", public_id="genx_gallery/kept", order=1),
    ]
    now = datetime(2024, 3, 1, tzinfo=UTC)

    filled = normalize_gallery(gallery, now=now)

    assert filled == 2
    assert gallery.photos[0].public_id == "genx_gallery/a1"
    assert gallery.photos[0].updated_at == now
    assert gallery.photos[1].public_id == "genx_gallery/kept"
    assert gallery.thumbnail_public_id == "genx_gallery/cover"
    assert gallery.updated_at == now


def test_normalize_keeps_existing_ids():
    gallery = _gallery(thumbnail_public_id="genx_gallery/custom")
    gallery.photos = [GalleryPhoto(url="https://host/genx_gallery/a1.jpg", public_id="genx_gallery/other", order=0)]

    assert normalize_gallery(gallery) == 0
    assert gallery.thumbnail_public_id == "genx_gallery/custom"
    assert gallery.photos[0].public_id == "genx_gallery/other"


def test_validate_accepts_normalized_gallery():
    gallery = _gallery()
    gallery.photos = [GalleryPhoto(url="https://host/genx_gallery/a1.jpg", order=0)]
    normalize_gallery(gallery)
    validate_gallery(gallery)


@pytest.mark.parametrize(
    ("overrides", "message"),
    [
        ({"title": ""}, "Title is required"),
        ({"thumbnail": ""}, "Thumbnail is required"),
        ({"thumbnail_public_id": None}, "identifier"),
    ],
)
def test_validate_rejects_incomplete_gallery(overrides, message):
    gallery = _gallery(**overrides)
    with pytest.raises(GalleryValidationError, match=message):
        validate_gallery(gallery)


def test_validate_rejects_photo_without_url():
    gallery = _gallery(thumbnail_public_id="genx_gallery/cover")
    gallery.photos = [GalleryPhoto(url="", public_id="genx_gallery/x", order=0)]
    with pytest.raises(GalleryValidationError, match="URL is required"):
        validate_gallery(gallery)
