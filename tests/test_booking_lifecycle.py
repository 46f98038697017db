import pytest

from booking_api.bookings.booking_service import (
    BookingService,
    validate_payment_transition,
    validate_status_transition,
)
from booking_api.bookings.schemas import BookingCreate, BookingUpdate
from booking_api.exceptions import (
    ForbiddenException,
    InvalidTransitionException,
    NotFoundException,
    ValidationException,
)
from booking_api.models import BookingStatus, PaymentStatus, Role

PENDING = BookingStatus.PENDING
CONFIRMED = BookingStatus.CONFIRMED
CANCELLED = BookingStatus.CANCELLED


class TestStatusTransitions:
    @pytest.mark.parametrize("target", [CONFIRMED, CANCELLED])
    def test_admin_moves_pending_anywhere(self, target):
        validate_status_transition(PENDING, target, Role.ADMIN)

    def test_owner_may_cancel_pending(self):
        validate_status_transition(PENDING, CANCELLED, Role.USER)

    def test_owner_may_not_confirm(self):
        with pytest.raises(ForbiddenException):
            validate_status_transition(PENDING, CONFIRMED, Role.USER)

    def test_only_admin_cancels_confirmed(self):
        validate_status_transition(CONFIRMED, CANCELLED, Role.ADMIN)
        with pytest.raises(ForbiddenException):
            validate_status_transition(CONFIRMED, CANCELLED, Role.USER)

    @pytest.mark.parametrize("role", [Role.USER, Role.ADMIN])
    def test_confirmed_never_returns_to_pending(self, role):
        with pytest.raises(InvalidTransitionException):
            validate_status_transition(CONFIRMED, PENDING, role)

    @pytest.mark.parametrize("role", [Role.USER, Role.ADMIN])
    @pytest.mark.parametrize("target", [PENDING, CONFIRMED])
    def test_nothing_leaves_cancelled(self, role, target):
        with pytest.raises(InvalidTransitionException):
            validate_status_transition(CANCELLED, target, role)

    @pytest.mark.parametrize("status", list(BookingStatus))
    def test_same_status_is_a_no_op(self, status):
        validate_status_transition(status, status, Role.USER)


class TestPaymentTransitions:
    @pytest.mark.parametrize(
        "current,target",
        [
            (PaymentStatus.UNPAID, PaymentStatus.PENDING),
            (PaymentStatus.UNPAID, PaymentStatus.FAILED),
            (PaymentStatus.PENDING, PaymentStatus.PAID),
            (PaymentStatus.PENDING, PaymentStatus.FAILED),
            (PaymentStatus.FAILED, PaymentStatus.PENDING),
        ],
    )
    def test_admin_allowed_moves(self, current, target):
        validate_payment_transition(current, target, PENDING, Role.ADMIN)

    @pytest.mark.parametrize(
        "current,target",
        [
            (PaymentStatus.UNPAID, PaymentStatus.PAID),
            (PaymentStatus.PENDING, PaymentStatus.UNPAID),
            (PaymentStatus.FAILED, PaymentStatus.PAID),
            (PaymentStatus.FAILED, PaymentStatus.UNPAID),
        ],
    )
    def test_unreachable_moves_are_rejected(self, current, target):
        with pytest.raises(InvalidTransitionException):
            validate_payment_transition(current, target, PENDING, Role.ADMIN)

    @pytest.mark.parametrize("target", [PaymentStatus.UNPAID, PaymentStatus.PENDING, PaymentStatus.FAILED])
    def test_paid_only_changes_by_admin_override(self, target):
        validate_payment_transition(PaymentStatus.PAID, target, CONFIRMED, Role.ADMIN)
        with pytest.raises(ForbiddenException):
            validate_payment_transition(PaymentStatus.PAID, target, CONFIRMED, Role.USER)

    def test_owner_cannot_set_payment_status(self):
        with pytest.raises(ForbiddenException):
            validate_payment_transition(PaymentStatus.PENDING, PaymentStatus.PAID, PENDING, Role.USER)

    def test_cancelled_booking_payment_is_frozen(self):
        with pytest.raises(InvalidTransitionException):
            validate_payment_transition(PaymentStatus.PENDING, PaymentStatus.PAID, CANCELLED, Role.ADMIN)


class TestBookingService:
    @pytest.fixture
    def service(self, db):
        return BookingService(db)

    @pytest.fixture
    def booking(self, service, test_user):
        return service.create_booking(
            test_user,
            BookingCreate(name="A", email="A@Example.com", calendar_date="2025-01-01"),
        )

    def test_create_starts_pending_unpaid(self, booking, test_user):
        assert booking.owner_id == test_user.id
        assert booking.status == BookingStatus.PENDING
        assert booking.payment_status == PaymentStatus.UNPAID
        assert booking.email == "a@example.com"

    def test_update_unknown_booking_is_not_found(self, service, admin_user):
        with pytest.raises(NotFoundException):
            service.update_booking("missing", admin_user, BookingUpdate(name="B"))

    @pytest.mark.parametrize(
        "patch",
        [
            {"name": "B"},
            {"status": "cancelled"},
            {"payment_status": "pending"},
            {"calendar_date": "2025-02-02"},
        ],
    )
    def test_stranger_is_forbidden_whatever_the_patch(self, service, booking, other_user, patch):
        with pytest.raises(ForbiddenException):
            service.update_booking(booking.id, other_user, BookingUpdate(**patch))

    def test_stranger_cannot_delete(self, service, booking, other_user):
        with pytest.raises(ForbiddenException):
            service.delete_booking(booking.id, other_user)

    def test_empty_patch_is_rejected(self, service, booking, test_user):
        with pytest.raises(ValidationException):
            service.update_booking(booking.id, test_user, BookingUpdate())

    def test_null_required_field_is_rejected(self, service, booking, test_user):
        with pytest.raises(ValidationException):
            service.update_booking(booking.id, test_user, BookingUpdate(name=None))

    def test_stale_state_update_is_not_applied(self, service, booking):
        rows = service.store.update(
            booking.id,
            {"status": BookingStatus.CONFIRMED},
            expected_status=BookingStatus.CANCELLED,
        )

        assert rows == 0
        assert service.store.find_by_id(booking.id).status == BookingStatus.PENDING

    def test_mark_payment_pending_is_idempotent(self, service, booking):
        first = service.mark_payment_pending(booking)
        second = service.mark_payment_pending(first)

        assert second.payment_status == PaymentStatus.PENDING
        assert second.status == BookingStatus.PENDING
