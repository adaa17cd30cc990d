"""Authentication schemas."""
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from pprblog.schemas.user import UserOut


class SignupRequest(BaseModel):
    """User signup request."""

    name: str = Field(..., min_length=2, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if len(value.encode("utf-8")) > 72:
            raise ValueError("Password must be at most 72 bytes")
        return value


class LoginRequest(BaseModel):
    """User login request."""

    email: EmailStr
    password: str = Field(..., min_length=6)


class SafeUser(BaseModel):
    """The only user fields returned by signup and login."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: str


class AuthResponse(BaseModel):
    success: bool = True
    user: SafeUser


class SuccessResponse(BaseModel):
    success: bool = True


class SessionStatus(BaseModel):
    is_authenticated: bool
    user: UserOut | None = None
