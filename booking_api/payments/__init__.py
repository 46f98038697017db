"""
Payment Module

Opens payment sessions with the external gateway and moves a booking's
payment status to pending. Confirmation (pending -> paid/failed) arrives
outside this service and is recorded by an admin through the booking update
route.
"""

from .router import router

__all__ = ["router"]
