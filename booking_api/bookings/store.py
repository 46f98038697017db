from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from booking_api.models import Booking, BookingStatus, PaymentStatus


class BookingStore:
    """Persistence for booking records.

    ``update`` is a compare-and-set on the primary key plus the state the
    caller validated against, so two concurrent transitions cannot both apply.
    It returns the number of rows written; zero means the row is gone or was
    changed underneath the caller.
    """

    def __init__(self, db: Session):
        self.db = db

    def create(self, owner_id: str, **details: Any) -> Booking:
        booking = Booking(
            owner_id=owner_id,
            status=BookingStatus.PENDING,
            payment_status=PaymentStatus.UNPAID,
            **details,
        )
        self.db.add(booking)
        self.db.commit()
        self.db.refresh(booking)
        return booking

    def find_by_id(self, booking_id: str) -> Optional[Booking]:
        return self.db.query(Booking).filter(Booking.id == booking_id).first()

    def find_by_owner(self, owner_id: str) -> List[Booking]:
        return (
            self.db.query(Booking)
            .filter(Booking.owner_id == owner_id)
            .order_by(Booking.created_at.desc(), Booking.id)
            .all()
        )

    def list_all(
        self,
        status: Optional[BookingStatus] = None,
        payment_status: Optional[PaymentStatus] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Booking]:
        query = self.db.query(Booking)
        if status is not None:
            query = query.filter(Booking.status == status)
        if payment_status is not None:
            query = query.filter(Booking.payment_status == payment_status)
        return query.order_by(Booking.created_at.desc(), Booking.id).offset(skip).limit(limit).all()

    def count(
        self,
        status: Optional[BookingStatus] = None,
        payment_status: Optional[PaymentStatus] = None,
    ) -> int:
        query = self.db.query(Booking)
        if status is not None:
            query = query.filter(Booking.status == status)
        if payment_status is not None:
            query = query.filter(Booking.payment_status == payment_status)
        return query.count()

    def update(
        self,
        booking_id: str,
        values: Dict[str, Any],
        expected_status: Optional[BookingStatus] = None,
        expected_payment_status: Optional[PaymentStatus] = None,
    ) -> int:
        query = self.db.query(Booking).filter(Booking.id == booking_id)
        if expected_status is not None:
            query = query.filter(Booking.status == expected_status)
        if expected_payment_status is not None:
            query = query.filter(Booking.payment_status == expected_payment_status)

        values = dict(values)
        values["updated_at"] = datetime.now(timezone.utc)
        rows = query.update(values, synchronize_session=False)
        self.db.commit()
        return rows

    def delete(self, booking_id: str) -> int:
        rows = self.db.query(Booking).filter(Booking.id == booking_id).delete(synchronize_session=False)
        self.db.commit()
        return rows
