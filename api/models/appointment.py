"""
Appointment models.

GOVERNANCE:
- Doctor must come from the provider directory (no free-text entry)
- Reason for visit is mandatory
"""

import datetime as dt

from pydantic import BaseModel, Field, field_validator

REQUIRED_FIELDS = ("date", "time", "doctor_id", "reason")


class Doctor(BaseModel):
    """A provider from the directory roster."""

    id: str
    name: str
    specialty: str
    available: bool = True


class AppointmentDraft(BaseModel):
    """Scheduling intent while the patient is still editing it."""

    date: str = ""
    time: str = ""
    doctor_id: str = ""
    reason: str = ""
    symptoms: str = ""
    medical_history: str = ""

    def missing_fields(self) -> list[str]:
        """Required fields that are still empty."""
        return [name for name in REQUIRED_FIELDS if not getattr(self, name).strip()]


class AppointmentRequest(BaseModel):
    """Validated scheduling intent, frozen once handed to review."""

    date: dt.date
    time: dt.time
    doctor_id: str = Field(..., min_length=1)
    reason: str = Field(..., min_length=1)
    symptoms: str = ""
    medical_history: str = ""

    model_config = {"frozen": True}

    @field_validator("doctor_id", "reason", "symptoms", "medical_history", mode="before")
    @classmethod
    def strip_text(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v
