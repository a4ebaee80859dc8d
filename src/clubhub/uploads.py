"""
Server-side photo upload workflow.

Incoming files are first written to a local upload directory
(:func:`stored_uploads`), which guarantees their removal when the request
finishes however it finishes. :func:`upload_sequentially` then pushes them to
the image host one at a time with a short pause between files. The first
failure aborts the batch: assets already uploaded in that batch are deleted
from the host on a best-effort basis and :class:`UploadFailure` is raised with
the offending file name, so callers never persist a partial batch.

Cleanup failures are never raised. They are reported through
``upload_events``; a failed remote delete leaves an orphaned asset on the host
that nothing reconciles later.
"""

import asyncio
import logging
import time
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from fastapi import UploadFile
from pydantic_settings import BaseSettings, SettingsConfigDict

from clubhub.exceptions import UploadFailure
from clubhub.image_host import ImageHost
from clubhub.logger import upload_events

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


class UploadSettings(BaseSettings):
    dir: Path = Path("uploads")
    folder: str = "genx_gallery"
    timeout_seconds: float = 60.0
    delay_seconds: float = 0.1
    max_batch_files: int = 10
    max_create_photos: int = 50
    stale_after_seconds: int = 3600

    model_config = SettingsConfigDict(env_prefix="UPLOAD_", env_file=".env", extra="ignore")


@lru_cache(maxsize=1)
def get_upload_settings() -> UploadSettings:
    return UploadSettings()


@dataclass(frozen=True)
class StoredUpload:
    """A request file persisted to local storage."""

    path: Path
    original_name: str
    content_type: str | None = None


@dataclass(frozen=True)
class UploadSucceeded:
    remote_url: str
    remote_id: str
    file_name: str


@dataclass(frozen=True)
class UploadFailed:
    file_name: str
    error_message: str


UploadOutcome = UploadSucceeded | UploadFailed


def _safe_name(filename: str | None) -> str:
    name = Path(filename or "upload").name
    return name or "upload"


async def save_upload(file: UploadFile, upload_dir: Path) -> StoredUpload:
    """Write an UploadFile to ``upload_dir`` as ``{epoch ms}-{original name}``."""
    original_name = _safe_name(file.filename)
    path = upload_dir / f"{int(time.time() * 1000)}-{original_name}"
    # Same millisecond, same name: keep both
    counter = 1
    while path.exists():
        path = upload_dir / f"{int(time.time() * 1000)}-{counter}-{original_name}"
        counter += 1

    with path.open("wb") as out:
        while chunk := await file.read(CHUNK_SIZE):
            out.write(chunk)
    await file.seek(0)
    return StoredUpload(path=path, original_name=original_name, content_type=file.content_type)


def remove_temp_files(uploads: Sequence[StoredUpload]) -> int:
    """Best-effort removal of local temp files. Returns how many were removed."""
    removed = 0
    for upload in uploads:
        try:
            upload.path.unlink(missing_ok=True)
            removed += 1
        except OSError as e:
            logger.error("Error deleting temp file %s: %s", upload.path, e)
            upload_events.log_event("temp_cleanup_failed", level=logging.ERROR, path=str(upload.path), error=str(e))
    return removed


@asynccontextmanager
async def stored_uploads(files: Sequence[UploadFile], upload_dir: Path | None = None) -> AsyncIterator[list[StoredUpload]]:
    """Persist request files locally for the duration of the block.

    Every file written here is deleted on exit, on success and on error alike.
    """
    upload_dir = upload_dir or get_upload_settings().dir
    upload_dir.mkdir(parents=True, exist_ok=True)
    stored: list[StoredUpload] = []
    try:
        for file in files:
            stored.append(await save_upload(file, upload_dir))
        yield stored
    finally:
        removed = remove_temp_files(stored)
        logger.debug("Cleaned up %d/%d temp files", removed, len(stored))


async def destroy_best_effort(image_host: ImageHost, public_ids: Sequence[str], reason: str) -> list[str]:
    """Delete each asset independently; returns the identifiers that could not be deleted."""
    failed: list[str] = []
    for public_id in public_ids:
        try:
            await image_host.destroy(public_id)
            logger.info("Cleaned up image host asset %s (%s)", public_id, reason)
        except Exception as e:
            failed.append(public_id)
            logger.error("Error deleting %s from image host: %s", public_id, e)
            upload_events.log_event("remote_cleanup_failed", level=logging.ERROR, public_id=public_id, reason=reason, error=str(e))
    return failed


async def upload_one(image_host: ImageHost, upload: StoredUpload, *, folder: str, timeout: float | None) -> UploadOutcome:
    try:
        asset = await image_host.upload(upload.path, folder=folder, timeout=timeout)
    except TimeoutError:
        return UploadFailed(file_name=upload.original_name, error_message=f"Upload timed out after {timeout}s")
    except Exception as e:
        return UploadFailed(file_name=upload.original_name, error_message=str(e) or type(e).__name__)
    return UploadSucceeded(remote_url=asset.secure_url, remote_id=asset.public_id, file_name=upload.original_name)


async def upload_sequentially(
    image_host: ImageHost,
    uploads: Sequence[StoredUpload],
    *,
    folder: str,
    timeout: float | None = None,
    delay: float = 0.0,
) -> list[UploadSucceeded]:
    """Upload files one by one, all or nothing.

    Files go out strictly in order with ``delay`` seconds between them to keep
    the image host from rate limiting us. On the first failure the assets
    uploaded so far are destroyed and UploadFailure is raised.
    """
    succeeded: list[UploadSucceeded] = []
    total = len(uploads)

    for index, upload in enumerate(uploads):
        logger.info("Uploading file %d/%d: %s", index + 1, total, upload.original_name)
        outcome = await upload_one(image_host, upload, folder=folder, timeout=timeout)

        if isinstance(outcome, UploadFailed):
            logger.error("Error uploading file %d/%d (%s): %s", index + 1, total, outcome.file_name, outcome.error_message)
            if succeeded:
                logger.info("Cleaning up %d image host assets due to error", len(succeeded))
                await destroy_best_effort(image_host, [s.remote_id for s in succeeded], reason=f"batch aborted at {outcome.file_name}")
            raise UploadFailure(outcome.file_name, outcome.error_message)

        succeeded.append(outcome)
        logger.info("File %d uploaded successfully: %s", index + 1, outcome.remote_id)

        if delay and index < total - 1:
            await asyncio.sleep(delay)

    return succeeded
