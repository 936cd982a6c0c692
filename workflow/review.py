"""
Review & submit stage.

GOVERNANCE:
- NO booking without a completed voice analysis
- A failed submission keeps the form and the analysis for retry
"""

from typing import Optional

from loguru import logger

from api.models.analysis import VoiceAnalysisReport
from api.models.appointment import AppointmentRequest
from api.models.booking import BookingConfirmation, BookingSubmission
from api.models.session import UserSession
from services.scheduling import SchedulingService, SubmissionError
from workflow.errors import MissingAnalysis, SubmissionFailed


class ReviewSubmitStage:
    """Assembles the booking submission and hands it to scheduling."""

    def __init__(self, scheduling: SchedulingService):
        self.scheduling = scheduling
        self.submission: Optional[BookingSubmission] = None
        self.confirmation: Optional[BookingConfirmation] = None
        self.last_error: Optional[str] = None

    def compose(
        self,
        session: UserSession,
        request: AppointmentRequest,
        report: Optional[VoiceAnalysisReport],
    ) -> BookingSubmission:
        if report is None:
            raise MissingAnalysis()
        return BookingSubmission(
            patient_id=session.user_id,
            patient_name=session.display_name,
            appointment=request,
            voice_analysis=report,
        )

    async def submit(
        self,
        session: UserSession,
        request: AppointmentRequest,
        report: Optional[VoiceAnalysisReport],
    ) -> BookingConfirmation:
        """
        Compose the booking and send it to the scheduling service.

        Raises:
            MissingAnalysis: no report; scheduling is never called
            SubmissionFailed: scheduling rejected or failed the booking
        """
        submission = self.compose(session, request, report)
        self.submission = submission
        try:
            confirmation = await self.scheduling.create_booking(submission)
        except SubmissionError as e:
            self.last_error = str(e)
            logger.warning(f"Booking submission failed: {e}")
            raise SubmissionFailed(f"Error submitting appointment: {e}") from e

        self.confirmation = confirmation
        self.last_error = None
        return confirmation
