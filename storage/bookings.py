"""
In-memory booking storage for demo.

GOVERNANCE:
- No persistent storage (demo only)
- No external database connections
"""

import threading
from functools import lru_cache
from typing import Optional

from api.models.booking import Booking, BookingStatus


class BookingStorage:
    """In-memory booking storage for demo purposes."""

    def __init__(self):
        self._bookings: dict[str, Booking] = {}
        self._lock = threading.Lock()

    def create(self, booking: Booking) -> None:
        """Store a new booking."""
        with self._lock:
            if booking.booking_id in self._bookings:
                raise KeyError(f"Booking {booking.booking_id} already exists")
            self._bookings[booking.booking_id] = booking

    def get(self, booking_id: str) -> Optional[Booking]:
        """Retrieve a booking by ID."""
        return self._bookings.get(booking_id)

    def update(self, booking: Booking) -> None:
        """Update an existing booking."""
        with self._lock:
            if booking.booking_id not in self._bookings:
                raise KeyError(f"Booking {booking.booking_id} not found")
            self._bookings[booking.booking_id] = booking

    def list_all(self) -> list[Booking]:
        """List all bookings, newest first."""
        return sorted(self._bookings.values(), key=lambda b: b.created_at, reverse=True)

    def list_for_patient(self, patient_id: str) -> list[Booking]:
        """List a patient's bookings, newest first."""
        return [b for b in self.list_all() if b.submission.patient_id == patient_id]

    def list_by_status(self, status: BookingStatus) -> list[Booking]:
        """List bookings with a given status, newest first."""
        return [b for b in self.list_all() if b.status == status]

    def count_by_status(self) -> dict[str, int]:
        """Count bookings by status."""
        counts = {status.value: 0 for status in BookingStatus}
        for booking in self._bookings.values():
            counts[booking.status.value] += 1
        return counts


@lru_cache
def get_storage() -> BookingStorage:
    """Get the singleton storage instance."""
    return BookingStorage()
