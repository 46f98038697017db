import logging
import time
from typing import Callable

from sqlalchemy.orm import Session

from booking_api.bookings.booking_service import BookingService
from booking_api.exceptions import DomainException, PaymentGatewayException
from booking_api.models import User
from booking_api.payments.gateway import CashfreeClient, PaymentGatewayError
from booking_api.payments.schemas import PaymentSession

logger = logging.getLogger(__name__)


def generate_order_id(booking_id: str, now_ms: int) -> str:
    """Short order reference: booking id without dashes plus the last 6 digits of the timestamp"""
    return f"order_{booking_id.replace('-', '')}_{str(now_ms)[-6:]}"


class PaymentService:
    """Opens payment sessions for bookings and records the pending state"""

    def __init__(
        self,
        db: Session,
        gateway: CashfreeClient,
        currency: str = "INR",
        default_customer_phone: str = "9999999999",
        clock_ms: Callable[[], int] = lambda: int(time.time() * 1000),
    ):
        self.booking_service = BookingService(db)
        self.gateway = gateway
        self.currency = currency
        self.default_customer_phone = default_customer_phone
        self._clock_ms = clock_ms

    def open_session(self, booking_id: str, caller: User, amount: float) -> PaymentSession:
        booking = self.booking_service.get_booking_for(booking_id, caller)
        self.booking_service.ensure_payable(booking)

        order_id = generate_order_id(booking.id, self._clock_ms())
        try:
            order = self.gateway.create_order(
                order_id=order_id,
                amount=amount,
                currency=self.currency,
                customer_id=booking.owner_id,
                customer_email=booking.email,
                customer_phone=booking.owner.phone or self.default_customer_phone,
            )
        except PaymentGatewayError as e:
            # Booking state is left untouched on gateway failure
            logger.error("Payment session for booking %s failed: %s", booking_id, e)
            raise PaymentGatewayException("Payment failed", details={"reason": str(e)}) from e

        try:
            booking = self.booking_service.mark_payment_pending(booking)
        except DomainException:
            logger.warning(
                "Gateway order %s was created but booking %s could not be marked pending",
                order_id, booking_id,
            )
            raise
        logger.info("Payment session opened for booking %s (order %s)", booking.id, order_id)
        return PaymentSession(
            booking_id=booking.id,
            order_id=order_id,
            payment_session_id=order["payment_session_id"],
            payment_status=booking.payment_status,
        )
