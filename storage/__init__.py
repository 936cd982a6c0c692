"""In-memory storage."""

from storage.bookings import BookingStorage, get_storage
from storage.workflows import WorkflowRegistry, get_registry

__all__ = ["BookingStorage", "get_storage", "WorkflowRegistry", "get_registry"]
