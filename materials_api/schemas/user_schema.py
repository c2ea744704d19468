from datetime import datetime

from pydantic import BaseModel, field_validator

from materials_api.models.user import UserRole, UserStatus


class RegisterRequest(BaseModel):
    name: str | None = None
    email: str | None = None
    password: str | None = None
    role: str = UserRole.student.value

    @field_validator('role')
    @classmethod
    def normalize_role(cls, value: str) -> str:
        return value.strip().lower()


class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None


class UpdateDetailsRequest(BaseModel):
    name: str | None = None
    email: str | None = None
    profile_picture: str | None = None


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    role: UserRole
    profile_picture: str | None = None
    is_email_verified: bool
    last_login: datetime | None = None
    status: UserStatus
    created_at: datetime

    class Config:
        from_attributes = True


class UserEnvelope(BaseModel):
    success: bool = True
    data: UserResponse


class TokenResponse(BaseModel):
    success: bool = True
    token: str
