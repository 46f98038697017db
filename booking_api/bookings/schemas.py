from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field, field_validator

from booking_api.models import BookingStatus, PaymentStatus

# Older clients send the booking date as ``date``
CALENDAR_DATE_ALIASES = AliasChoices("calendar_date", "calendarDate", "date")


def _strip_required_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


class BookingCreate(BaseModel):
    """New booking request; camelCase aliases match the web client payloads"""
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    calendar_date: str = Field(..., min_length=1, max_length=64, validation_alias=CALENDAR_DATE_ALIASES)
    file_url: Optional[str] = Field(None, max_length=1024, alias="fileUrl")

    strip_required_text = field_validator("name", "calendar_date")(_strip_required_text)


class BookingUpdate(BaseModel):
    """Partial booking update.

    Owners may edit the contact details, the date and the file reference, and
    may set ``status`` to ``cancelled``. Any other status change and every
    payment status change are admin-only.
    """
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    calendar_date: Optional[str] = Field(None, min_length=1, max_length=64, validation_alias=CALENDAR_DATE_ALIASES)
    file_url: Optional[str] = Field(None, max_length=1024, alias="fileUrl")
    status: Optional[BookingStatus] = None
    payment_status: Optional[PaymentStatus] = Field(None, alias="paymentStatus")

    # None is passed through so the service can report an explicit null
    strip_required_text = field_validator("name", "calendar_date")(_strip_required_text)


class Booking(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    owner_id: str
    name: str
    email: str
    calendar_date: str
    file_url: Optional[str] = None
    status: BookingStatus
    payment_status: PaymentStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
