"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .booking_service import BookingRepositoryProtocol, BookingService

__all__ = ["BookingRepositoryProtocol", "BookingService"]
