import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from clubhub.auth_utils import get_current_user
from clubhub.models.db import get_db
from clubhub.models.resource import Resource
from clubhub.models.user import User
from clubhub.repositories.resource_repository import ResourceRepository
from clubhub.schemas.auth import MessageResponse
from clubhub.schemas.resource import ResourceCreateRequest, ResourceResponse, ResourceUpdateRequest

router = APIRouter(prefix="/resources", tags=["resources"])


def get_resource_repository(db: Session = Depends(get_db)) -> ResourceRepository:
    return ResourceRepository(db)


def get_owned_resource(resource_id: uuid.UUID, repo: ResourceRepository, user: User) -> Resource:
    """Fetch a resource the user may modify: its uploader or any admin."""
    resource = repo.get_resource(resource_id)
    if not resource:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resource not found")
    if resource.uploaded_by != user.id and not user.is_staff:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to modify this resource")
    return resource


@router.get("", response_model=list[ResourceResponse])
def list_resources(repo: ResourceRepository = Depends(get_resource_repository)) -> list[ResourceResponse]:
    return [ResourceResponse.model_validate(r) for r in repo.list_resources()]


@router.post("", response_model=ResourceResponse, status_code=status.HTTP_201_CREATED)
def create_resource(
    request: ResourceCreateRequest,
    repo: ResourceRepository = Depends(get_resource_repository),
    current_user: User = Depends(get_current_user),
) -> ResourceResponse:
    resource = repo.create_resource(current_user.id, request.model_dump())
    return ResourceResponse.model_validate(resource)


@router.put("/{resource_id}", response_model=ResourceResponse)
def update_resource(
    resource_id: uuid.UUID,
    request: ResourceUpdateRequest,
    repo: ResourceRepository = Depends(get_resource_repository),
    current_user: User = Depends(get_current_user),
) -> ResourceResponse:
    resource = get_owned_resource(resource_id, repo, current_user)
    resource = repo.update_resource(resource, request.model_dump(exclude_unset=True))
    return ResourceResponse.model_validate(resource)


@router.delete("/{resource_id}", response_model=MessageResponse)
def delete_resource(
    resource_id: uuid.UUID,
    repo: ResourceRepository = Depends(get_resource_repository),
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    resource = get_owned_resource(resource_id, repo, current_user)
    repo.delete_resource(resource)
    return MessageResponse(message="Resource removed")
