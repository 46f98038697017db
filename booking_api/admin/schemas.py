from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from booking_api.auth.schemas import UserCreate, _normalize_email
from booking_api.models import Role


class AdminUserCreate(UserCreate):
    """Identity created by an admin; may carry any role"""
    role: Role = Role.USER


class AdminUserUpdate(BaseModel):
    """Admin override of any identity field except the password"""
    name: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[EmailStr] = None
    role: Optional[Role] = None
    is_active: Optional[bool] = None

    normalize_email = field_validator("email", mode="before")(_normalize_email)
