"""Booking request service: identities, booking lifecycle and payment sessions."""

__version__ = "1.0.0"
