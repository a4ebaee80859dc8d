import asyncio
import io
import uuid
from pathlib import Path
from unittest.mock import patch

import httpx
import pytest
from PIL import Image

from clubhub.client.batch_upload import BatchUploader
from clubhub.client.gallery_client import MAX_FILE_SIZE, GalleryUploadClient, validate_image_file
from clubhub.exceptions import ValidationFailure


def _image(path: Path, fmt: str = "JPEG") -> Path:
    buf = io.BytesIO()
    Image.new("RGB", (8, 8), color=(200, 30, 30)).save(buf, format=fmt)
    path.write_bytes(buf.getvalue())
    return path


class TestValidateImageFile:
    @pytest.mark.parametrize(("fmt", "content_type"), [("JPEG", "image/jpeg"), ("PNG", "image/png"), ("WEBP", "image/webp"), ("GIF", "image/gif")])
    def test_accepts_supported_formats(self, tmp_path, fmt, content_type):
        path = _image(tmp_path / f"pic.{fmt.lower()}", fmt)
        assert validate_image_file(path) == content_type

    def test_detects_type_from_content_not_extension(self, tmp_path):
        path = _image(tmp_path / "actually_png.jpg", "PNG")
        assert validate_image_file(path) == "image/png"

    def test_rejects_non_image(self, tmp_path):
        path = tmp_path / "notes.jpg"
        path.write_text("not an image")
        with pytest.raises(ValidationFailure) as exc_info:
            validate_image_file(path)
        assert exc_info.value.file_name == "notes.jpg"

    def test_rejects_unsupported_image_format(self, tmp_path):
        path = _image(tmp_path / "scan.bmp", "BMP")
        with pytest.raises(ValidationFailure, match="only JPEG, PNG, WebP and GIF"):
            validate_image_file(path)

    def test_rejects_oversized_file(self, tmp_path):
        path = tmp_path / "huge.jpg"
        with path.open("wb") as f:
            f.truncate(MAX_FILE_SIZE + 1)
        with pytest.raises(ValidationFailure, match="10MB"):
            validate_image_file(path)


class TestGalleryUploadClient:
    @pytest.mark.asyncio
    async def test_upload_photos_in_batches(self, tmp_path):
        gallery_id = uuid.uuid4()
        paths = [_image(tmp_path / f"p{i}.jpg") for i in range(5)]
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"id": str(gallery_id), "photo_count": len(requests)})

        http = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://api.test")
        client = GalleryUploadClient("http://api.test", "token-123", client=http, uploader=BatchUploader(batch_delay=0))

        report = await client.upload_photos(gallery_id, paths, batch_size=3)
        await http.aclose()

        assert len(requests) == 2
        assert all(r.method == "PUT" for r in requests)
        assert requests[0].url.path == f"/galleries/{gallery_id}/photos"
        assert requests[0].headers["Authorization"] == "Bearer token-123"
        assert requests[0].content.count(b'name="photos"') == 3
        assert b"image/jpeg" in requests[0].content
        assert requests[1].content.count(b'name="photos"') == 2
        assert len(report.successful) == 2
        assert report.failed == []
        assert report.rejected == []

    @pytest.mark.asyncio
    async def test_rejected_files_never_sent(self, tmp_path):
        good = _image(tmp_path / "good.jpg")
        bad = tmp_path / "bad.jpg"
        bad.write_text("text")
        sent: list[bytes] = []

        def handler(request: httpx.Request) -> httpx.Response:
            sent.append(request.content)
            return httpx.Response(200, json={})

        http = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://api.test")
        client = GalleryUploadClient("http://api.test", client=http, uploader=BatchUploader(batch_delay=0))

        report = await client.upload_photos("g1", [good, bad])
        await http.aclose()

        assert len(sent) == 1
        assert b"good.jpg" in sent[0]
        assert b"bad.jpg" not in sent[0]
        assert [r.file_name for r in report.rejected] == ["bad.jpg"]

    @pytest.mark.asyncio
    async def test_no_valid_files_makes_no_request(self, tmp_path):
        bad = tmp_path / "bad.png"
        bad.write_text("text")

        def handler(request: httpx.Request) -> httpx.Response:  # pragma: no cover
            raise AssertionError("no request expected")

        http = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://api.test")
        client = GalleryUploadClient("http://api.test", client=http)

        report = await client.upload_photos("g1", [bad])
        await http.aclose()

        assert len(report.rejected) == 1
        assert report.successful == []

    @pytest.mark.asyncio
    async def test_server_rejection_retries_files_individually(self, tmp_path):
        paths = [_image(tmp_path / f"p{i}.jpg") for i in range(3)]

        def handler(request: httpx.Request) -> httpx.Response:
            if b'filename="p1.jpg"' in request.content:
                return httpx.Response(502, json={"detail": "Failed to upload p1.jpg: quota exceeded", "file_name": "p1.jpg"})
            return httpx.Response(200, json={"ok": True})

        http = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://api.test")
        client = GalleryUploadClient("http://api.test", client=http, uploader=BatchUploader(batch_delay=0))

        report = await client.upload_photos("g1", paths, batch_size=3)
        await http.aclose()

        assert [f.file for f in report.failed] == [paths[1]]
        assert report.failed[0].error_message == "Failed to upload p1.jpg: quota exceeded"
        assert len(report.successful) == 2
        progress = client.uploader.progress
        assert (progress.completed, progress.successful, progress.failed) == (3, 2, 1)

    @pytest.mark.asyncio
    async def test_upload_batch_raises_on_error_status(self, tmp_path):
        path = _image(tmp_path / "x.jpg")

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"detail": "Gallery not found"})

        async with GalleryUploadClient("http://api.test", client=httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://api.test")) as client:
            with pytest.raises(httpx.HTTPStatusError):
                await client.upload_batch("missing", [path])

    @pytest.mark.asyncio
    async def test_retries_keep_content_type_and_nothing_lingers(self, tmp_path):
        paths = [_image(tmp_path / f"p{i}.png", "PNG") for i in range(2)]
        bodies: list[bytes] = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(request.content)
            if request.content.count(b'name="photos"') > 1:
                return httpx.Response(500, json={"detail": "Internal server error"})
            return httpx.Response(200, json={"ok": True})

        http = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://api.test")
        client = GalleryUploadClient("http://api.test", client=http, uploader=BatchUploader(batch_delay=0))

        with patch("clubhub.client.gallery_client.asyncio.to_thread", wraps=asyncio.to_thread) as to_thread:
            report = await client.upload_photos("g1", paths, batch_size=2)
        await http.aclose()

        # one batch attempt, then each file on its own
        assert len(bodies) == 3
        assert all(b"image/png" in body for body in bodies)
        assert len(report.successful) == 2
        assert to_thread.call_count == 4
        assert client._content_types == {}
