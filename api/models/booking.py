"""
Booking models.

GOVERNANCE:
- No booking without a completed voice analysis
- Clinician status changes are recorded with a timestamp
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from api.models.analysis import VoiceAnalysisReport
from api.models.appointment import AppointmentRequest


class BookingStatus(str, Enum):
    """Booking lifecycle status."""

    PENDING = "pending"  # Waiting for clinician
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class BookingSubmission(BaseModel):
    """Final composite sent to the scheduling service."""

    patient_id: str
    patient_name: str
    appointment: AppointmentRequest
    voice_analysis: VoiceAnalysisReport

    model_config = {"frozen": True}


class BookingConfirmation(BaseModel):
    """Scheduling service acknowledgement."""

    booking_id: str
    status: BookingStatus
    created_at: datetime
    message: str


class Booking(BaseModel):
    """A stored booking."""

    booking_id: str
    status: BookingStatus = BookingStatus.PENDING
    created_at: datetime = Field(default_factory=datetime.utcnow)
    submission: BookingSubmission

    doctor_name: Optional[str] = None

    # Clinician updates
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None
    clinician_notes: Optional[str] = None
