"""
Scheduling service.

GOVERNANCE:
- Every booking carries its voice analysis report
- New bookings start PENDING until a clinician confirms them
"""

import uuid
from datetime import datetime
from typing import Optional, Protocol

from loguru import logger

from api.models.booking import (
    Booking,
    BookingConfirmation,
    BookingStatus,
    BookingSubmission,
)
from services.directory import ProviderDirectory, StaticProviderDirectory
from storage import BookingStorage, get_storage


class SubmissionError(Exception):
    """Raised by a scheduling service when a booking cannot be created."""


class SchedulingService(Protocol):
    """Creates bookings from completed workflows."""

    async def create_booking(
        self, submission: BookingSubmission
    ) -> BookingConfirmation: ...


class InMemorySchedulingService:
    """Scheduling backed by BookingStorage."""

    def __init__(
        self,
        storage: Optional[BookingStorage] = None,
        directory: Optional[ProviderDirectory] = None,
    ):
        self.storage = storage or get_storage()
        self.directory = directory or StaticProviderDirectory()

    async def create_booking(
        self, submission: BookingSubmission
    ) -> BookingConfirmation:
        """
        Store a new booking.

        Raises:
            SubmissionError: unknown or unavailable doctor
        """
        doctor = self.directory.get_doctor(submission.appointment.doctor_id)
        if doctor is None:
            raise SubmissionError(f"Unknown doctor: {submission.appointment.doctor_id}")
        if not doctor.available:
            raise SubmissionError(f"{doctor.name} is not accepting appointments")

        booking = Booking(
            booking_id=str(uuid.uuid4()),
            status=BookingStatus.PENDING,
            created_at=datetime.utcnow(),
            submission=submission,
            doctor_name=doctor.name,
        )
        self.storage.create(booking)

        logger.info(
            f"Booking {booking.booking_id} created for patient "
            f"{submission.patient_id} with {doctor.name}"
        )
        return BookingConfirmation(
            booking_id=booking.booking_id,
            status=booking.status,
            created_at=booking.created_at,
            message=(
                "Appointment request submitted successfully! Our team will review "
                "your voice analysis and contact you soon."
            ),
        )
