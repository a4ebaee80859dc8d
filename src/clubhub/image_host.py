"""
Image host client

Gallery images live on an S3-compatible object store. The rest of the
application only sees the narrow :class:`ImageHost` contract: ``upload`` a
local file into a folder and get back a public URL plus a stable identifier,
and ``destroy`` an asset by that identifier.

The object key *is* the public identifier (``{folder}/{hex}``, no extension)
and the URL ends with it, so deriving an identifier from a URL with the legacy
rule in :mod:`clubhub.identifiers` gives back the same identifier.
"""

import asyncio
import io
import logging
import mimetypes
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

import aioboto3
from boto3.s3.transfer import TransferConfig
from botocore.config import Config
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client


class ImageHostSettings(BaseSettings):
    """Configuration for the S3/MinIO bucket that backs the image host"""

    endpoint: str = "localhost:9000"
    access_key: str = Field(default="minioadmin")
    secret_key: str = Field(default="minioadmin")
    bucket: str = "clubhub"
    region: str = "us-east-1"
    use_ssl: bool = False
    signature_version: str = "s3v4"
    # Public base for hosted URLs (CDN or bucket website); defaults to {endpoint}/{bucket}
    public_url: str | None = None

    model_config = SettingsConfigDict(env_prefix="S3_", env_file=".env", extra="ignore")


@dataclass(frozen=True)
class UploadedAsset:
    secure_url: str
    public_id: str


class ImageHost(Protocol):
    async def upload(self, path: Path, *, folder: str, timeout: float | None = None) -> UploadedAsset: ...

    async def destroy(self, public_id: str) -> None: ...


class S3ImageHost:
    """Image host backed by aioboto3.

    A single aioboto3.Session is shared; a client is opened per operation with
    a context manager so connections are released right after the call.
    """

    def __init__(self, settings: ImageHostSettings | None = None):
        self.settings = settings or ImageHostSettings()
        self._session: aioboto3.Session | None = None
        self._endpoint_url = self._get_endpoint_url()
        self._config = Config(
            signature_version=self.settings.signature_version,
            max_pool_connections=50,
            retries={"max_attempts": 3, "mode": "standard"},
            connect_timeout=10,
            read_timeout=60,
            s3={"addressing_style": "path"},
        )
        self._transfer_config = TransferConfig(
            multipart_threshold=8 * 1024 * 1024,
            multipart_chunksize=4 * 1024 * 1024,
            max_concurrency=4,
        )
        logger.info("S3ImageHost initialized: endpoint=%s, bucket=%s", self._endpoint_url, self.settings.bucket)

    def _get_endpoint_url(self) -> str:
        endpoint = self.settings.endpoint
        if not endpoint.startswith(("http://", "https://")):
            protocol = "https" if self.settings.use_ssl else "http"
            return f"{protocol}://{endpoint}"
        return endpoint

    @property
    def public_base_url(self) -> str:
        if self.settings.public_url:
            return self.settings.public_url.rstrip("/")
        return f"{self._endpoint_url}/{self.settings.bucket}"

    @property
    def session(self) -> aioboto3.Session:
        if self._session is None:
            self._session = aioboto3.Session(
                aws_access_key_id=self.settings.access_key,
                aws_secret_access_key=self.settings.secret_key,
                region_name=self.settings.region,
            )
        return self._session

    def _get_s3_client(self) -> "S3Client":
        """Usage: async with self._get_s3_client() as s3:"""
        return self.session.client("s3", endpoint_url=self._endpoint_url, config=self._config)

    def url_for(self, public_id: str) -> str:
        return f"{self.public_base_url}/{public_id}"

    async def upload(self, path: Path, *, folder: str, timeout: float | None = None) -> UploadedAsset:
        """Upload a local file into ``folder``.

        Args:
            path: Local file to upload
            folder: Destination folder tag, becomes the key prefix
            timeout: Seconds before the upload is abandoned (None waits forever)

        Returns:
            UploadedAsset with the hosted URL and public identifier

        Raises:
            TimeoutError: If the upload does not finish in time
            Exception: Any client error from the object store
        """
        path = Path(path)
        public_id = f"{folder.strip('/')}/{uuid.uuid4().hex}"
        # resource type "auto": let the store serve whatever the file is
        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        body = io.BytesIO(await asyncio.to_thread(path.read_bytes))

        async def _put() -> None:
            async with self._get_s3_client() as s3:
                s3: "S3Client"
                await s3.upload_fileobj(
                    body,
                    self.settings.bucket,
                    public_id,
                    ExtraArgs={"ContentType": content_type},
                    Config=self._transfer_config,
                )

        try:
            await asyncio.wait_for(_put(), timeout=timeout)
        except Exception as e:
            logger.error("Failed to upload %s as %s: %s", path.name, public_id, e)
            raise

        logger.info("Uploaded %s as %s", path.name, public_id)
        return UploadedAsset(secure_url=self.url_for(public_id), public_id=public_id)

    async def destroy(self, public_id: str) -> None:
        """Delete an asset by its public identifier.

        Raises:
            Exception: If deletion fails
        """
        try:
            async with self._get_s3_client() as s3:
                s3: "S3Client"
                await s3.delete_object(Bucket=self.settings.bucket, Key=public_id)
        except Exception as e:
            logger.error("Failed to delete %s: %s", public_id, e)
            raise
        logger.info("Deleted %s", public_id)

    async def close(self) -> None:
        if self._session is not None:
            logger.info("Closing S3ImageHost session")
            self._session = None
