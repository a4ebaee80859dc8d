from sqladmin import ModelView

from clubhub.models.event import Event, EventRegistration
from clubhub.models.gallery import Gallery, GalleryPhoto
from clubhub.models.resource import Resource
from clubhub.models.user import User


class UserAdmin(ModelView, model=User):
    name = "User"
    name_plural = "Users"
    icon = "fa-solid fa-user"

    column_list = [User.id, User.name, User.email, User.registration_no, User.role, User.is_admin, User.last_login_at]
    column_searchable_list = [User.name, User.email, User.registration_no]
    column_sortable_list = [User.name, User.email, User.created_at, User.last_login_at]
    column_default_sort = [(User.created_at, True)]

    # Password hashes never leave the API
    column_details_exclude_list = [User.password_hash]
    form_excluded_columns = [User.password_hash, User.created_at, User.updated_at, User.galleries, User.resources]

    # Accounts are created through registration
    can_create = False
    can_edit = True
    can_delete = True
    can_view_details = True


class GalleryAdmin(ModelView, model=Gallery):
    name = "Gallery"
    name_plural = "Galleries"
    icon = "fa-solid fa-images"

    column_list = [Gallery.id, Gallery.title, Gallery.owner, Gallery.thumbnail_public_id, Gallery.created_at]
    column_searchable_list = [Gallery.title]
    column_sortable_list = [Gallery.title, Gallery.created_at]
    column_default_sort = [(Gallery.created_at, True)]
    column_details_list = [
        Gallery.id,
        Gallery.title,
        Gallery.description,
        Gallery.thumbnail,
        Gallery.thumbnail_public_id,
        Gallery.owner,
        Gallery.photos,
        Gallery.created_at,
        Gallery.updated_at,
    ]

    form_excluded_columns = [Gallery.photos, Gallery.created_at, Gallery.updated_at]

    # Uploads go through the API, which talks to the image host
    can_create = False
    can_edit = True
    can_delete = False
    can_view_details = True


class GalleryPhotoAdmin(ModelView, model=GalleryPhoto):
    name = "Photo"
    name_plural = "Photos"
    icon = "fa-solid fa-image"

    column_list = [GalleryPhoto.id, GalleryPhoto.gallery, GalleryPhoto.order, GalleryPhoto.public_id, GalleryPhoto.caption]
    column_searchable_list = [GalleryPhoto.public_id, GalleryPhoto.caption]
    column_sortable_list = [GalleryPhoto.order, GalleryPhoto.created_at]

    form_columns = [GalleryPhoto.caption, GalleryPhoto.order]

    can_create = False
    can_edit = True
    can_delete = False
    can_view_details = True


class EventAdmin(ModelView, model=Event):
    name = "Event"
    name_plural = "Events"
    icon = "fa-solid fa-calendar"

    column_list = [Event.id, Event.title, Event.date, Event.end_date, Event.venue, Event.type]
    column_searchable_list = [Event.title, Event.venue]
    column_sortable_list = [Event.title, Event.date]
    column_default_sort = [(Event.date, True)]

    form_excluded_columns = [Event.registrations, Event.created_at, Event.updated_at]


class RegistrationAdmin(ModelView, model=EventRegistration):
    name = "Registration"
    name_plural = "Registrations"
    icon = "fa-solid fa-ticket"

    column_list = [EventRegistration.event, EventRegistration.name, EventRegistration.email, EventRegistration.registration_no, EventRegistration.status, EventRegistration.created_at]
    column_searchable_list = [EventRegistration.name, EventRegistration.email, EventRegistration.registration_no]
    column_sortable_list = [EventRegistration.created_at, EventRegistration.status]
    column_default_sort = [(EventRegistration.created_at, True)]

    form_columns = [EventRegistration.status]

    can_create = False


class ResourceAdmin(ModelView, model=Resource):
    name = "Resource"
    name_plural = "Resources"
    icon = "fa-solid fa-book"

    column_list = [Resource.id, Resource.title, Resource.type, Resource.domain, Resource.uploader, Resource.created_at]
    column_searchable_list = [Resource.title]
    column_sortable_list = [Resource.title, Resource.created_at]
    column_default_sort = [(Resource.created_at, True)]

    form_excluded_columns = [Resource.created_at, Resource.updated_at]


ADMIN_VIEWS = [UserAdmin, GalleryAdmin, GalleryPhotoAdmin, EventAdmin, RegistrationAdmin, ResourceAdmin]
