import uuid

from sqlalchemy import select

from clubhub.models.resource import Resource
from clubhub.repositories.base_repository import BaseRepository


class ResourceRepository(BaseRepository):
    def list_resources(self) -> list[Resource]:
        stmt = select(Resource).order_by(Resource.created_at.desc())
        return list(self.db.execute(stmt).scalars().all())

    def get_resource(self, resource_id: uuid.UUID) -> Resource | None:
        stmt = select(Resource).where(Resource.id == resource_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def create_resource(self, uploaded_by: uuid.UUID, data: dict) -> Resource:
        resource = Resource(id=uuid.uuid4(), uploaded_by=uploaded_by, **data)
        self.db.add(resource)
        return self._commit_and_refresh(resource)

    def update_resource(self, resource: Resource, data: dict) -> Resource:
        for key, value in data.items():
            setattr(resource, key, value)
        return self._commit_and_refresh(resource)

    def delete_resource(self, resource: Resource) -> None:
        self.db.delete(resource)
        self.db.commit()
