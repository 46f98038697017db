"""
Admin Module

Identity management for administrators: listing and inspecting accounts,
creating accounts with an explicit role, overriding email, role and active
flag, and deleting accounts. Booking administration lives on the /bookings
routes, where the lifecycle rules grant admins the extra transitions.
"""

from . import router, schemas, admin_service

__all__ = [
    "router",
    "schemas",
    "admin_service",
]
