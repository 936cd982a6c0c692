"""
Booking workflow errors.

Every error except Unauthenticated is recoverable: the stage that raised it
keeps its prior valid state so the user can retry the failing step alone.
"""

from typing import Iterable


class WorkflowError(Exception):
    """Base class for workflow errors."""

    code = "workflow_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class Unauthenticated(WorkflowError):
    """No current session; the workflow must not open."""

    code = "unauthenticated"

    def __init__(self, message: str = "Sign in to book an appointment"):
        super().__init__(message)


class ValidationError(WorkflowError):
    """One or more appointment fields are missing or malformed."""

    code = "validation_error"

    def __init__(self, fields: Iterable[str], message: str | None = None):
        self.fields = list(fields)
        super().__init__(message or f"Invalid or missing fields: {', '.join(self.fields)}")


class PermissionDenied(WorkflowError):
    """Microphone access was refused."""

    code = "permission_denied"

    def __init__(self, message: str = "Unable to access microphone. Please check your permissions."):
        super().__init__(message)


class InvalidState(WorkflowError):
    """Operation is not legal in the current state."""

    code = "invalid_state"


class AnalysisFailed(WorkflowError):
    """The analysis service reported an error."""

    code = "analysis_failed"

    def __init__(self, message: str = "Voice analysis failed. Please try again."):
        super().__init__(message)


class MissingAnalysis(WorkflowError):
    """No voice analysis report is available."""

    code = "missing_analysis"

    def __init__(
        self,
        message: str = "Please complete voice analysis before submitting appointment request.",
    ):
        super().__init__(message)


class SubmissionFailed(WorkflowError):
    """The scheduling service rejected or failed the booking."""

    code = "submission_failed"

    def __init__(self, message: str = "Error submitting appointment. Please try again."):
        super().__init__(message)
