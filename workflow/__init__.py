"""Appointment booking workflow with voice capture and analysis."""

from workflow.errors import (
    AnalysisFailed,
    InvalidState,
    MissingAnalysis,
    PermissionDenied,
    SubmissionFailed,
    Unauthenticated,
    ValidationError,
    WorkflowError,
)

__all__ = [
    "AnalysisFailed",
    "InvalidState",
    "MissingAnalysis",
    "PermissionDenied",
    "SubmissionFailed",
    "Unauthenticated",
    "ValidationError",
    "WorkflowError",
]
