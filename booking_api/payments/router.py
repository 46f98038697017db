from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from booking_api.auth.dependencies import get_current_user
from booking_api.config import Settings, get_settings
from booking_api.database import get_db
from booking_api.models import User
from booking_api.payments.gateway import CashfreeClient, FakePaymentGateway
from booking_api.payments.payment_service import PaymentService
from booking_api.payments.schemas import PaymentRequest, PaymentSession

router = APIRouter()


def get_payment_gateway(settings: Settings = Depends(get_settings)) -> CashfreeClient:
    if settings.PAYMENT_GATEWAY == "fake":
        return FakePaymentGateway()
    return CashfreeClient.from_settings(settings)


def get_payment_service(
    db: Session = Depends(get_db),
    gateway: CashfreeClient = Depends(get_payment_gateway),
    settings: Settings = Depends(get_settings),
) -> PaymentService:
    return PaymentService(
        db,
        gateway,
        currency=settings.PAYMENT_CURRENCY,
        default_customer_phone=settings.PAYMENT_DEFAULT_CUSTOMER_PHONE,
    )


@router.post("/process", response_model=PaymentSession)
def process_payment(
    request: PaymentRequest,
    current_user: User = Depends(get_current_user),
    payment_service: PaymentService = Depends(get_payment_service),
):
    """Open a payment session for a booking and return its id for client-side redirect"""
    return payment_service.open_session(request.booking_id, current_user, request.amount)
