"""
Booking routes for patient history and clinician dashboards.

GOVERNANCE:
- Completed or cancelled bookings are final
- Every status change records who made it and when
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from api.dependencies import get_current_session
from api.models.booking import Booking, BookingStatus
from api.models.session import UserSession
from storage import get_storage

router = APIRouter(prefix="/v1/bookings", tags=["bookings"])

FINAL_STATUSES = (BookingStatus.COMPLETED, BookingStatus.CANCELLED)


class StatusUpdate(BaseModel):
    """Clinician status change."""

    status: BookingStatus
    notes: Optional[str] = None


@router.get("", response_model=list[Booking])
def list_bookings(
    status: Optional[BookingStatus] = None,
    session: UserSession = Depends(get_current_session),
):
    """All bookings, newest first, optionally filtered by status."""
    storage = get_storage()
    if status is not None:
        return storage.list_by_status(status)
    return storage.list_all()


@router.get("/mine", response_model=list[Booking])
def list_my_bookings(session: UserSession = Depends(get_current_session)):
    """The caller's own bookings."""
    return get_storage().list_for_patient(session.user_id)


@router.get("/patient/{patient_id}", response_model=list[Booking])
def list_patient_bookings(
    patient_id: str,
    session: UserSession = Depends(get_current_session),
):
    return get_storage().list_for_patient(patient_id)


@router.get("/stats/counts")
def get_booking_counts(session: UserSession = Depends(get_current_session)):
    """Get counts of bookings by status."""
    return get_storage().count_by_status()


@router.get("/{booking_id}", response_model=Booking)
def get_booking(booking_id: str, session: UserSession = Depends(get_current_session)):
    booking = get_storage().get(booking_id)
    if booking is None:
        raise HTTPException(status_code=404, detail="Booking not found")
    return booking


@router.post("/{booking_id}/status", response_model=Booking)
def update_booking_status(
    booking_id: str,
    update: StatusUpdate,
    session: UserSession = Depends(get_current_session),
):
    """
    Change a booking's status.

    GOVERNANCE:
    - Records clinician name and timestamp
    - Final bookings cannot change
    """
    storage = get_storage()
    booking = storage.get(booking_id)

    if booking is None:
        raise HTTPException(status_code=404, detail="Booking not found")

    if booking.status in FINAL_STATUSES:
        raise HTTPException(
            status_code=400,
            detail=f"Booking is already final (status: {booking.status.value})",
        )

    booking.status = update.status
    booking.updated_at = datetime.utcnow()
    booking.updated_by = session.display_name
    if update.notes:
        booking.clinician_notes = update.notes

    storage.update(booking)
    return booking
