"""Booking workflow models."""

from datetime import datetime
from enum import Enum, IntEnum
from typing import Optional

from pydantic import BaseModel

from api.models.analysis import AnalysisStatus, VoiceAnalysisReport
from api.models.appointment import AppointmentDraft
from api.models.booking import BookingConfirmation
from api.models.recording import RecordingView


class WorkflowStep(IntEnum):
    """Wizard step shown to the patient."""

    DETAILS = 1
    RECORDING = 2
    REVIEW = 3


class WorkflowStatus(str, Enum):
    """Workflow instance status."""

    OPEN = "open"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class WorkflowView(BaseModel):
    """Snapshot of a workflow instance for clients."""

    workflow_id: str
    user_id: str
    status: WorkflowStatus
    step: WorkflowStep
    opened_at: datetime
    appointment: Optional[AppointmentDraft] = None
    recording: Optional[RecordingView] = None
    analysis_status: AnalysisStatus = AnalysisStatus.NOT_STARTED
    analysis: Optional[VoiceAnalysisReport] = None
    confirmation: Optional[BookingConfirmation] = None
