from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from booking_api.models import Role


def _normalize_email(value):
    if isinstance(value, str):
        return value.strip().lower()
    return value


class UserBase(BaseModel):
    email: EmailStr
    name: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)

    normalize_email = field_validator("email", mode="before")(_normalize_email)


class UserCreate(UserBase):
    # Length policy is enforced by the service so it follows the configured minimum
    password: str = Field(..., max_length=128)


class UserUpdate(BaseModel):
    """Self-service profile changes"""
    name: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)


class User(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: EmailStr
    name: Optional[str] = None
    phone: Optional[str] = None
    role: Role
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str

    normalize_email = field_validator("email", mode="before")(_normalize_email)


class PasswordChangeRequest(BaseModel):
    current_password: str
    new_password: str = Field(..., max_length=128)


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class AuthResponse(Token):
    user: User


class TokenClaims(BaseModel):
    """Verified contents of a session token"""
    identity_id: str
    role: Role
    issued_at: datetime
    expires_at: datetime
