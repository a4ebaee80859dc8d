"""
Dependency injection for the image host

The image host client is constructed once during application startup (see the
lifespan in ``clubhub.main``) and handed to route handlers through
``Depends(get_image_host)``. Tests install a fake with
``set_image_host_instance``.
"""

import logging
from collections.abc import AsyncGenerator

from clubhub.image_host import ImageHost

logger = logging.getLogger(__name__)

_image_host_instance: ImageHost | None = None


async def get_image_host() -> AsyncGenerator[ImageHost]:
    """FastAPI dependency yielding the shared image host.

    Example:
        @router.post("/upload")
        async def upload(image: UploadFile, host: ImageHost = Depends(get_image_host)):
            ...
    """
    yield get_image_host_instance()


def set_image_host_instance(host: ImageHost | None) -> None:
    global _image_host_instance
    _image_host_instance = host
    if host is not None:
        logger.info("Image host instance set: %s", type(host).__name__)


def get_image_host_instance() -> ImageHost:
    """Return the shared image host outside of request handling.

    Raises:
        RuntimeError: If the application lifespan has not installed one
    """
    if _image_host_instance is None:
        raise RuntimeError("Image host not initialized. Make sure the application lifespan is properly configured.")
    return _image_host_instance
