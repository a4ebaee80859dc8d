"""
Client-side batched upload orchestration.

A large selection of files is split into small contiguous batches that are
sent one after another. When a whole batch is rejected, its files are retried
one at a time so a single bad file costs only itself. Progress is tracked in
:class:`UploadProgress` and published to an optional callback; user-facing
messages go through an injected ``notify(level, message)`` callable.
"""

import asyncio
import logging
import math
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field, replace
from typing import Any, Generic, TypeVar

from clubhub.uploads import UploadFailed

logger = logging.getLogger(__name__)

T = TypeVar("T")

Notify = Callable[[str, str], None]

DEFAULT_BATCH_SIZE = 5
DEFAULT_BATCH_DELAY = 0.5


@dataclass
class UploadProgress:
    total: int = 0
    completed: int = 0
    successful: int = 0
    failed: int = 0
    current_batch: int = 0
    total_batches: int = 0
    errors: list[UploadFailed] = field(default_factory=list)

    def snapshot(self) -> "UploadProgress":
        """Copy safe to hand to callbacks; later updates do not leak into it."""
        return replace(self, errors=list(self.errors))


@dataclass(frozen=True)
class FailedUpload(Generic[T]):
    file: T
    error_message: str


def split_into_batches(items: Sequence[T], batch_size: int) -> list[list[T]]:
    """Partition ``items`` into ceil(len / batch_size) contiguous batches."""
    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")
    total_batches = math.ceil(len(items) / batch_size)
    return [list(items[i * batch_size : (i + 1) * batch_size]) for i in range(total_batches)]


def file_name_of(item: Any) -> str:
    name = getattr(item, "name", None) or getattr(item, "filename", None)
    return str(name) if name else str(item)


def extract_error_message(error: BaseException) -> str:
    """Prefer the server's own message over the generic exception text."""
    response = getattr(error, "response", None)
    if response is not None:
        try:
            payload = response.json()
        except Exception:
            payload = None
        if isinstance(payload, dict):
            for key in ("detail", "message"):
                value = payload.get(key)
                if isinstance(value, str) and value:
                    return value
                if value:
                    return str(value)
    return str(error) or "Unknown error"


_NOTIFY_LEVELS = {"success": logging.INFO, "info": logging.INFO, "warning": logging.WARNING, "error": logging.ERROR}


def _log_notification(level: str, message: str) -> None:
    logger.log(_NOTIFY_LEVELS.get(level, logging.INFO), message)


class BatchUploader:
    """Uploads files in sequential batches with per-file fallback.

    ``upload_function`` receives one batch (a list) and either returns a
    result for the whole batch or raises. A failed batch is retried file by
    file; files that still fail are recorded and the rest carry on.
    """

    def __init__(self, batch_delay: float = DEFAULT_BATCH_DELAY, notify: Notify | None = None):
        self.batch_delay = batch_delay
        self.notify = notify or _log_notification
        self._progress = UploadProgress()
        self._is_uploading = False

    @property
    def progress(self) -> UploadProgress:
        return self._progress.snapshot()

    @property
    def is_uploading(self) -> bool:
        return self._is_uploading

    def reset_progress(self) -> None:
        self._progress = UploadProgress()

    def _publish(self, on_progress: Callable[[UploadProgress], None] | None) -> None:
        if on_progress is not None:
            on_progress(self._progress.snapshot())

    async def upload_in_batches(
        self,
        files: Sequence[T],
        upload_function: Callable[[list[T]], Awaitable[Any]],
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        on_progress: Callable[[UploadProgress], None] | None = None,
        on_complete: Callable[[list[Any], list[FailedUpload[T]]], None] | None = None,
        on_error: Callable[[Exception], None] | None = None,
    ) -> None:
        if not files:
            self.notify("warning", "No files selected for upload")
            return

        batches = split_into_batches(files, batch_size)
        successful_results: list[Any] = []
        failed_items: list[FailedUpload[T]] = []

        self._is_uploading = True
        self._progress = UploadProgress(total=len(files), total_batches=len(batches))
        try:
            self._publish(on_progress)

            for index, batch in enumerate(batches):
                current = index + 1
                self._progress.current_batch = current
                self._publish(on_progress)

                try:
                    result = await upload_function(batch)
                except Exception as batch_error:
                    logger.warning("Batch %d/%d failed, trying individual files: %s", current, len(batches), batch_error)
                    batch_failures = await self._upload_individually(batch, upload_function, successful_results, failed_items)
                    if batch_failures:
                        self.notify("error", f"Some files in batch {current} failed to upload")
                else:
                    successful_results.append(result)
                    self._progress.successful += len(batch)
                    self._progress.completed += len(batch)
                    self.notify("success", f"Batch {current}/{len(batches)} uploaded successfully ({len(batch)} files)")

                self._publish(on_progress)

                if index < len(batches) - 1:
                    await asyncio.sleep(self.batch_delay)

            self._progress.current_batch = len(batches)
            self._publish(on_progress)
            self._notify_summary()

            if on_complete is not None:
                on_complete(successful_results, failed_items)
        except Exception as e:
            logger.error("Batch upload error: %s", e)
            self.notify("error", "Upload process failed")
            if on_error is None:
                raise
            on_error(e)
        finally:
            self._is_uploading = False

    async def _upload_individually(
        self,
        batch: list[T],
        upload_function: Callable[[list[T]], Awaitable[Any]],
        successful_results: list[Any],
        failed_items: list[FailedUpload[T]],
    ) -> int:
        failures = 0
        for item in batch:
            try:
                result = await upload_function([item])
            except Exception as single_error:
                error_message = extract_error_message(single_error)
                self._progress.errors.append(UploadFailed(file_name=file_name_of(item), error_message=error_message))
                failed_items.append(FailedUpload(file=item, error_message=error_message))
                self._progress.failed += 1
                failures += 1
            else:
                successful_results.append(result)
                self._progress.successful += 1
            self._progress.completed += 1
        return failures

    def _notify_summary(self) -> None:
        successful = self._progress.successful
        failed = self._progress.failed
        if successful and not failed:
            self.notify("success", f"All {successful} files uploaded successfully!")
        elif successful and failed:
            self.notify("warning", f"Upload completed: {successful} successful, {failed} failed")
        elif failed:
            self.notify("error", f"Upload failed: {failed} files could not be uploaded")
