from clubhub.models.event import Event, EventRegistration, EventType, RegistrationStatus
from clubhub.models.gallery import Gallery, GalleryPhoto
from clubhub.models.resource import Resource, ResourceDomain, ResourceType
from clubhub.models.user import User, UserRole

__all__ = [
    "Event",
    "EventRegistration",
    "EventType",
    "Gallery",
    "GalleryPhoto",
    "RegistrationStatus",
    "Resource",
    "ResourceDomain",
    "ResourceType",
    "User",
    "UserRole",
]
