import re
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from clubhub.models.user import UserRole


def _check_mobile(value: str) -> str:
    value = value.strip()
    digits = re.sub(r"\D", "", value)
    if not re.fullmatch(r"\d{10}|\d{11,12}", digits):
        raise ValueError("Please enter a valid mobile number")
    return value


class RegisterRequest(BaseModel):
    name: str = Field(min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    registration_no: str = Field(min_length=1, max_length=64)
    branch: str = Field(min_length=1, max_length=128)
    semester: str = Field(min_length=1, max_length=32)
    mobile: str

    @field_validator("name", "branch", "semester")
    @classmethod
    def strip_text(cls, value: str) -> str:
        return value.strip()

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("registration_no")
    @classmethod
    def upper_registration_no(cls, value: str) -> str:
        return value.strip().upper()

    @field_validator("mobile")
    @classmethod
    def validate_mobile(cls, value: str) -> str:
        return _check_mobile(value)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return value.strip().lower()


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class RefreshRequest(BaseModel):
    refresh_token: str


class UserResponse(BaseModel):
    id: UUID
    name: str
    email: EmailStr
    registration_no: str
    branch: str
    semester: str
    mobile: str
    is_admin: bool
    role: UserRole
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    user: UserResponse
    tokens: TokenPair


class UpdateProfileRequest(BaseModel):
    name: str | None = Field(None, min_length=2, max_length=50)
    email: EmailStr | None = None
    registration_no: str | None = Field(None, min_length=1, max_length=64)
    branch: str | None = Field(None, min_length=1, max_length=128)
    semester: str | None = Field(None, min_length=1, max_length=32)
    mobile: str | None = None

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: str | None) -> str | None:
        return value.strip().lower() if value else value

    @field_validator("registration_no")
    @classmethod
    def upper_registration_no(cls, value: str | None) -> str | None:
        return value.strip().upper() if value else value

    @field_validator("mobile")
    @classmethod
    def validate_mobile(cls, value: str | None) -> str | None:
        return _check_mobile(value) if value is not None else value


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=6, max_length=128)


class MessageResponse(BaseModel):
    message: str
