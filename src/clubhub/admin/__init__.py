"""SQLAdmin dashboard for club data."""

from clubhub.admin.auth import AdminAuth
from clubhub.admin.views import ADMIN_VIEWS, EventAdmin, GalleryAdmin, GalleryPhotoAdmin, RegistrationAdmin, ResourceAdmin, UserAdmin

__all__ = ["AdminAuth", "ADMIN_VIEWS", "UserAdmin", "GalleryAdmin", "GalleryPhotoAdmin", "EventAdmin", "RegistrationAdmin", "ResourceAdmin"]
