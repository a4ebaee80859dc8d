import asyncio
import logging
import uuid
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import httpx
from PIL import Image, UnidentifiedImageError

from clubhub.client.batch_upload import BatchUploader, FailedUpload, UploadProgress
from clubhub.exceptions import ValidationFailure

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 10 * 1024 * 1024
ALLOWED_FORMATS = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "WEBP": "image/webp",
    "GIF": "image/gif",
}
DEFAULT_CLIENT_BATCH_SIZE = 3


def validate_image_file(path: Path) -> str:
    """Check size and image type of a local file; returns its content type.

    The type is read from the file content, not the extension.

    Raises:
        ValidationFailure: If the file is too large, unreadable or not a supported image
    """
    path = Path(path)
    try:
        size = path.stat().st_size
    except OSError as e:
        raise ValidationFailure(path.name, f"{path.name}: cannot read file ({e})") from e
    if size > MAX_FILE_SIZE:
        raise ValidationFailure(path.name, f"{path.name}: image must be smaller than 10MB")

    try:
        with Image.open(path) as img:
            image_format = img.format
    except (UnidentifiedImageError, OSError) as e:
        raise ValidationFailure(path.name, f"{path.name}: not a valid image file") from e

    content_type = ALLOWED_FORMATS.get(image_format or "")
    if content_type is None:
        raise ValidationFailure(path.name, f"{path.name}: only JPEG, PNG, WebP and GIF images are allowed")
    return content_type


@dataclass
class UploadReport:
    successful: list[Any] = field(default_factory=list)
    failed: list[FailedUpload[Path]] = field(default_factory=list)
    rejected: list[ValidationFailure] = field(default_factory=list)


class GalleryUploadClient:
    """Uploads photos to a gallery through the HTTP API in small batches."""

    def __init__(
        self,
        base_url: str,
        access_token: str | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = 120.0,
        uploader: BatchUploader | None = None,
    ):
        headers = {"Authorization": f"Bearer {access_token}"} if access_token else {}
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self._headers = headers
        self.uploader = uploader or BatchUploader()
        self._content_types: dict[Path, str] = {}

    async def __aenter__(self) -> "GalleryUploadClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def upload_batch(self, gallery_id: uuid.UUID | str, paths: Sequence[Path]) -> dict:
        """Send one batch as a single multipart request.

        Raises:
            httpx.HTTPStatusError: If the server answers with a non-2xx status
        """
        files = []
        for path in map(Path, paths):
            content = await asyncio.to_thread(path.read_bytes)
            files.append(("photos", (path.name, content, self._content_types.get(path, "application/octet-stream"))))
        response = await self._client.put(f"/galleries/{gallery_id}/photos", files=files, headers=self._headers)
        response.raise_for_status()
        return response.json()

    async def upload_photos(
        self,
        gallery_id: uuid.UUID | str,
        paths: Sequence[Path],
        *,
        batch_size: int = DEFAULT_CLIENT_BATCH_SIZE,
        on_progress: Callable[[UploadProgress], None] | None = None,
    ) -> UploadReport:
        """Validate files locally, then upload the accepted ones in batches.

        Rejected files never reach the network and are listed in
        ``UploadReport.rejected``.
        """
        report = UploadReport()
        accepted: list[Path] = []
        for path in map(Path, paths):
            try:
                self._content_types[path] = validate_image_file(path)
            except ValidationFailure as e:
                logger.warning("Rejected %s: %s", path.name, e.message)
                report.rejected.append(e)
                continue
            accepted.append(path)

        if not accepted:
            return report

        def _collect(successful: list[Any], failed: list[FailedUpload[Path]]) -> None:
            report.successful.extend(successful)
            report.failed.extend(failed)

        try:
            await self.uploader.upload_in_batches(
                accepted,
                lambda batch: self.upload_batch(gallery_id, batch),
                batch_size=batch_size,
                on_progress=on_progress,
                on_complete=_collect,
            )
        finally:
            # single-file retries of a failed batch read these too
            for path in accepted:
                self._content_types.pop(path, None)
        return report
