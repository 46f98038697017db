import logging
from typing import Dict, FrozenSet, List, Optional, Tuple

from sqlalchemy.orm import Session

from booking_api.auth.dependencies import AuthorizationGuard
from booking_api.bookings.schemas import BookingCreate, BookingUpdate
from booking_api.bookings.store import BookingStore
from booking_api.exceptions import (
    ForbiddenException,
    InvalidTransitionException,
    NotFoundException,
    ValidationException,
)
from booking_api.models import Booking, BookingStatus, PaymentStatus, Role, User

logger = logging.getLogger(__name__)

# Reachable booking statuses; confirmed and cancelled are terminal except that
# an admin may still cancel a confirmed booking.
STATUS_TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.CANCELLED}),
    BookingStatus.CANCELLED: frozenset(),
}

# The only status change an owner may make without admin rights
OWNER_STATUS_TRANSITIONS: FrozenSet[Tuple[BookingStatus, BookingStatus]] = frozenset({
    (BookingStatus.PENDING, BookingStatus.CANCELLED),
})

PAYMENT_TRANSITIONS: Dict[PaymentStatus, FrozenSet[PaymentStatus]] = {
    PaymentStatus.UNPAID: frozenset({PaymentStatus.PENDING, PaymentStatus.FAILED}),
    PaymentStatus.PENDING: frozenset({PaymentStatus.PENDING, PaymentStatus.PAID, PaymentStatus.FAILED}),
    PaymentStatus.FAILED: frozenset({PaymentStatus.PENDING}),
    PaymentStatus.PAID: frozenset(),
}

# Payment states an admin may move out of regardless of the table above
PAYMENT_OVERRIDE_SOURCES: FrozenSet[PaymentStatus] = frozenset({PaymentStatus.PAID})

# Fields that cannot be cleared once set
_NON_NULLABLE_FIELDS = ("name", "email", "calendar_date", "status", "payment_status")


def validate_status_transition(current: BookingStatus, target: BookingStatus, role: Role) -> None:
    """Raise unless ``role`` may move a booking from ``current`` to ``target``"""
    if current == target:
        return
    if target not in STATUS_TRANSITIONS[current]:
        raise InvalidTransitionException(
            f"Cannot change booking status from {current.value} to {target.value}",
            details={"from": current.value, "to": target.value},
        )
    if role != Role.ADMIN and (current, target) not in OWNER_STATUS_TRANSITIONS:
        raise ForbiddenException(f"Only an admin can change booking status to {target.value}")


def validate_payment_transition(
    current: PaymentStatus,
    target: PaymentStatus,
    booking_status: BookingStatus,
    role: Role,
) -> None:
    """Raise unless ``role`` may move payment status from ``current`` to ``target``"""
    if current == target:
        return
    if booking_status == BookingStatus.CANCELLED:
        raise InvalidTransitionException(
            "Payment status cannot change on a cancelled booking",
            details={"from": current.value, "to": target.value},
        )
    if role != Role.ADMIN:
        raise ForbiddenException("Only an admin can change payment status")
    if target in PAYMENT_TRANSITIONS[current]:
        return
    if current in PAYMENT_OVERRIDE_SOURCES:
        logger.warning("Admin override of payment status %s -> %s", current.value, target.value)
        return
    raise InvalidTransitionException(
        f"Cannot change payment status from {current.value} to {target.value}",
        details={"from": current.value, "to": target.value},
    )


class BookingService:
    """Booking lifecycle: creation, ownership-checked edits and state changes"""

    def __init__(self, db: Session):
        self.db = db
        self.store = BookingStore(db)

    def create_booking(self, owner: User, request: BookingCreate) -> Booking:
        """Create a new booking; always starts pending and unpaid"""
        booking = self.store.create(
            owner_id=owner.id,
            name=request.name,
            email=str(request.email).lower(),
            calendar_date=request.calendar_date,
            file_url=request.file_url,
        )
        logger.info("Booking %s created by %s", booking.id, owner.id)
        return booking

    def get_booking_for(self, booking_id: str, caller: User) -> Booking:
        """Load a booking the caller owns, or any booking for an admin"""
        booking = self.store.find_by_id(booking_id)
        if not booking:
            raise NotFoundException("Booking not found")
        AuthorizationGuard.ensure_owner_or_admin(caller, booking.owner_id)
        return booking

    def list_for_owner(self, owner_id: str) -> List[Booking]:
        return self.store.find_by_owner(owner_id)

    def list_all(
        self,
        caller: User,
        status: Optional[BookingStatus] = None,
        payment_status: Optional[PaymentStatus] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> Tuple[List[Booking], int]:
        AuthorizationGuard.require_role(caller, Role.ADMIN)
        bookings = self.store.list_all(status=status, payment_status=payment_status, skip=skip, limit=limit)
        total = self.store.count(status=status, payment_status=payment_status)
        return bookings, total

    def update_booking(self, booking_id: str, caller: User, patch: BookingUpdate) -> Booking:
        """Apply a partial update after ownership and transition checks"""
        booking = self.get_booking_for(booking_id, caller)

        update_data = patch.model_dump(exclude_unset=True)
        if not update_data:
            raise ValidationException("No valid modifications provided")
        for field in _NON_NULLABLE_FIELDS:
            if field in update_data and update_data[field] is None:
                raise ValidationException(f"{field} cannot be null", details={"field": field})

        current_status = booking.status
        current_payment = booking.payment_status
        target_status = update_data.get("status", current_status)
        target_payment = update_data.get("payment_status", current_payment)

        validate_status_transition(current_status, target_status, caller.role)
        validate_payment_transition(current_payment, target_payment, target_status, caller.role)

        if "email" in update_data:
            update_data["email"] = str(update_data["email"]).lower()

        rows = self.store.update(
            booking_id,
            update_data,
            expected_status=current_status,
            expected_payment_status=current_payment,
        )
        if rows == 0:
            raise NotFoundException("Booking not found")

        if target_status != current_status or target_payment != current_payment:
            logger.info(
                "Booking %s transitioned by %s: status %s -> %s, payment %s -> %s",
                booking_id, caller.id, current_status.value, target_status.value,
                current_payment.value, target_payment.value,
            )
        return self.store.find_by_id(booking_id)

    def delete_booking(self, booking_id: str, caller: User) -> None:
        """Delete a booking in any state; owner or admin only"""
        self.get_booking_for(booking_id, caller)
        if self.store.delete(booking_id) == 0:
            raise NotFoundException("Booking not found")
        logger.info("Booking %s deleted by %s", booking_id, caller.id)

    def ensure_payable(self, booking: Booking) -> None:
        """Raise unless a payment session may be opened for the booking"""
        if booking.status == BookingStatus.CANCELLED:
            raise InvalidTransitionException("Cannot take payment for a cancelled booking")
        if booking.payment_status not in (PaymentStatus.UNPAID, PaymentStatus.FAILED, PaymentStatus.PENDING):
            raise InvalidTransitionException(
                f"Booking payment is already {booking.payment_status.value}",
                details={"payment_status": booking.payment_status.value},
            )

    def mark_payment_pending(self, booking: Booking) -> Booking:
        """Record an opened payment session; re-opening a pending one is a no-op"""
        current = booking.payment_status
        if current == PaymentStatus.PENDING:
            return booking
        if PaymentStatus.PENDING not in PAYMENT_TRANSITIONS[current]:
            raise InvalidTransitionException(
                f"Cannot change payment status from {current.value} to pending",
                details={"from": current.value, "to": PaymentStatus.PENDING.value},
            )
        booking_id = booking.id
        rows = self.store.update(
            booking_id,
            {"payment_status": PaymentStatus.PENDING},
            expected_status=booking.status,
            expected_payment_status=current,
        )
        if rows == 0:
            raise NotFoundException("Booking not found")
        logger.info("Booking %s payment %s -> pending", booking_id, current.value)
        return self.store.find_by_id(booking_id)
