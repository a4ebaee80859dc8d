"""Client-side helpers for batched gallery uploads."""

from clubhub.client.batch_upload import BatchUploader, FailedUpload, UploadProgress, split_into_batches
from clubhub.client.gallery_client import GalleryUploadClient, UploadReport, validate_image_file

__all__ = [
    "BatchUploader",
    "FailedUpload",
    "GalleryUploadClient",
    "UploadProgress",
    "UploadReport",
    "split_into_batches",
    "validate_image_file",
]
