"""
Adapters layer - persistence collaborators for the booking service.
"""

from .in_memory_repository import InMemoryBookingRepository

__all__ = ["InMemoryBookingRepository"]
