from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError

from clubhub.api.auth import get_user_repository, hash_password, verify_password
from clubhub.auth_utils import get_current_user
from clubhub.models.user import User
from clubhub.repositories.user_repository import UserRepository
from clubhub.schemas.auth import ChangePasswordRequest, MessageResponse, UpdateProfileRequest, UserResponse

router = APIRouter(tags=["user"])


@router.get("/me", response_model=UserResponse)
def get_me(current_user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse.model_validate(current_user)


@router.put("/me", response_model=UserResponse)
def update_me(
    req: UpdateProfileRequest,
    repo: UserRepository = Depends(get_user_repository),
    current_user: User = Depends(get_current_user),
) -> UserResponse:
    fields = req.model_dump(exclude_unset=True, exclude_none=True)
    try:
        user = repo.update_profile(current_user, fields)
    except IntegrityError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email or registration number already in use") from None
    return UserResponse.model_validate(user)


@router.put("/me/password", response_model=MessageResponse)
def change_password(
    req: ChangePasswordRequest,
    repo: UserRepository = Depends(get_user_repository),
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    if not verify_password(req.current_password, current_user.password_hash):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Current password is incorrect")
    repo.update_password(current_user, hash_password(req.new_password))
    return MessageResponse(message="Password updated successfully")
