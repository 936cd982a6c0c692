"""API models."""

from api.models.analysis import (
    AnalysisStatus,
    CognitiveLoadLevel,
    VoiceAnalysisReport,
)
from api.models.appointment import AppointmentDraft, AppointmentRequest, Doctor
from api.models.booking import (
    Booking,
    BookingConfirmation,
    BookingStatus,
    BookingSubmission,
)
from api.models.recording import RecordingSession, RecordingState, RecordingView
from api.models.session import Role, UserSession
from api.models.workflow import WorkflowStatus, WorkflowStep, WorkflowView

__all__ = [
    "AnalysisStatus",
    "CognitiveLoadLevel",
    "VoiceAnalysisReport",
    "AppointmentDraft",
    "AppointmentRequest",
    "Doctor",
    "Booking",
    "BookingConfirmation",
    "BookingStatus",
    "BookingSubmission",
    "RecordingSession",
    "RecordingState",
    "RecordingView",
    "Role",
    "UserSession",
    "WorkflowStatus",
    "WorkflowStep",
    "WorkflowView",
]
