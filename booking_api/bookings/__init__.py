"""
Booking Module

- store.py: persistence with compare-and-set updates
- booking_service.py: booking lifecycle state machine and ownership rules
- router.py: /bookings endpoints
- schemas.py: request and response models
"""

from .router import router
from .booking_service import BookingService
from .schemas import Booking, BookingCreate, BookingUpdate

__all__ = [
    "router",
    "BookingService",
    "Booking",
    "BookingCreate",
    "BookingUpdate",
]
