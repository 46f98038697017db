from pydantic import AliasChoices, BaseModel, Field

from booking_api.models import PaymentStatus


class PaymentRequest(BaseModel):
    booking_id: str = Field(..., validation_alias=AliasChoices("booking_id", "bookingId", "bookingUid"))
    amount: float = Field(..., gt=0)


class PaymentSession(BaseModel):
    message: str = "Payment session created successfully"
    booking_id: str
    order_id: str
    payment_session_id: str
    payment_status: PaymentStatus
