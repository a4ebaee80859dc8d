# Repositories package

from .base_repository import BaseRepository
from .event_repository import EventRepository
from .gallery_repository import GalleryRepository
from .resource_repository import ResourceRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "EventRepository",
    "GalleryRepository",
    "ResourceRepository",
    "UserRepository",
]
