from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from booking_api.auth.dependencies import get_current_user
from booking_api.bookings.booking_service import BookingService
from booking_api.bookings.schemas import Booking, BookingCreate, BookingUpdate
from booking_api.database import get_db
from booking_api.models import BookingStatus, PaymentStatus, User

router = APIRouter()


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    return BookingService(db)


@router.post("", response_model=Booking, status_code=status.HTTP_201_CREATED)
def create_booking(
    request: BookingCreate,
    current_user: User = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
):
    """Create a new booking for the current user"""
    return booking_service.create_booking(current_user, request)


@router.get("/mine", response_model=List[Booking])
def get_my_bookings(
    current_user: User = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
):
    """List the current user's bookings, newest first"""
    return booking_service.list_for_owner(current_user.id)


@router.get("", response_model=List[Booking])
def get_all_bookings(
    response: Response,
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
    payment_status: Optional[PaymentStatus] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    current_user: User = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
):
    """List every booking (admin only)"""
    bookings, total = booking_service.list_all(
        current_user,
        status=status_filter,
        payment_status=payment_status,
        skip=skip,
        limit=limit,
    )
    response.headers["X-Total-Count"] = str(total)
    return bookings


@router.get("/{booking_id}", response_model=Booking)
def get_booking(
    booking_id: str,
    current_user: User = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
):
    return booking_service.get_booking_for(booking_id, current_user)


@router.put("/{booking_id}", response_model=Booking)
def update_booking(
    booking_id: str,
    patch: BookingUpdate,
    current_user: User = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
):
    """Modify a booking; owners may edit details or cancel, admins may change any field"""
    return booking_service.update_booking(booking_id, current_user, patch)


@router.delete("/{booking_id}")
def delete_booking(
    booking_id: str,
    current_user: User = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
):
    booking_service.delete_booking(booking_id, current_user)
    return {"message": "Booking deleted successfully", "booking_id": booking_id}
