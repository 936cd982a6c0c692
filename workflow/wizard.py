"""
Booking workflow.

One instance is one patient's run through the three-step wizard:

    1. Appointment details   (AppointmentFormStage)
    2. Voice recording       (AudioCaptureStage + AnalysisStage)
    3. Review & submit       (ReviewSubmitStage)

GOVERNANCE:
- Stages run strictly one at a time
- NO booking without a completed voice analysis
- Exactly one booking per workflow; a completed workflow cannot reopen
"""

import asyncio
import uuid
from datetime import datetime
from typing import Awaitable, Callable, Optional, TypeVar

from loguru import logger

from api.models.analysis import VoiceAnalysisReport
from api.models.appointment import AppointmentDraft, AppointmentRequest
from api.models.booking import BookingConfirmation
from api.models.recording import RecordingSession
from api.models.session import UserSession
from api.models.workflow import WorkflowStatus, WorkflowStep, WorkflowView
from intelligence.analysis import AnalysisService
from services.directory import ProviderDirectory
from services.media import DeviceMediaService
from services.scheduling import SchedulingService
from workflow.analysis import AnalysisStage
from workflow.capture import AudioCaptureStage, memory_playback_url
from workflow.device import MicrophoneArbiter
from workflow.errors import InvalidState, MissingAnalysis
from workflow.form import AppointmentFormStage
from workflow.review import ReviewSubmitStage
from workflow.timer import Ticker

T = TypeVar("T")


class BookingWorkflow:
    """Composes the booking stages for one user and one booking."""

    def __init__(
        self,
        session: UserSession,
        directory: ProviderDirectory,
        media: DeviceMediaService,
        analysis_service: AnalysisService,
        scheduling: SchedulingService,
        arbiter: Optional[MicrophoneArbiter] = None,
        ticker: Optional[Ticker] = None,
        max_recording_seconds: Optional[int] = None,
        playback_url: Callable[[str, bytes], str] = memory_playback_url,
        workflow_id: Optional[str] = None,
    ):
        self.workflow_id = workflow_id or str(uuid.uuid4())
        self.session = session
        self.opened_at = datetime.utcnow()
        self.status = WorkflowStatus.OPEN
        self.step = WorkflowStep.DETAILS
        self.confirmation: Optional[BookingConfirmation] = None

        self.form = AppointmentFormStage(directory)
        self.capture = AudioCaptureStage(
            media,
            arbiter=arbiter,
            ticker=ticker,
            max_seconds=max_recording_seconds,
            playback_url=playback_url,
        )
        self.analysis = AnalysisStage(analysis_service)
        self.review = ReviewSubmitStage(scheduling)

        # A new recording invalidates the previous report
        self.capture.on_discard(self.analysis.invalidate)

        self._pending: Optional[asyncio.Future] = None
        logger.info(f"Workflow {self.workflow_id} opened for user {session.user_id}")

    @property
    def is_open(self) -> bool:
        return self.status == WorkflowStatus.OPEN

    @property
    def busy(self) -> bool:
        return self._pending is not None

    # Step 1: appointment details

    def update_field(self, field: str, value: str) -> AppointmentDraft:
        self._check_ready()
        if self.step != WorkflowStep.DETAILS:
            raise InvalidState("Go back to the details step to edit the appointment")
        return self.form.update_field(field, value)

    def validate_and_advance(self) -> AppointmentRequest:
        """
        Validate appointment details and move to the recording step.

        Raises:
            ValidationError: names the missing or malformed fields
        """
        self._check_ready()
        if self.step != WorkflowStep.DETAILS:
            raise InvalidState(f"Not on the details step (step: {self.step.value})")
        request = self.form.validate()
        self.step = WorkflowStep.RECORDING
        logger.debug(f"Workflow {self.workflow_id} advanced to recording")
        return request

    # Navigation

    def advance(self) -> WorkflowStep:
        """Move one step forward, enforcing what each step requires."""
        self._check_ready()
        if self.step == WorkflowStep.DETAILS:
            self.validate_and_advance()
        elif self.step == WorkflowStep.RECORDING:
            if self.analysis.report is None:
                raise MissingAnalysis("Complete the voice analysis to continue.")
            self.form.validate()
            self.step = WorkflowStep.REVIEW
        else:
            raise InvalidState("Already on the last step")
        return self.step

    def back(self) -> WorkflowStep:
        self._check_ready()
        if self.step == WorkflowStep.DETAILS:
            raise InvalidState("Already on the first step")
        self.step = WorkflowStep(self.step - 1)
        return self.step

    # Step 2: voice recording

    async def start_recording(self) -> RecordingSession:
        self._check_ready()
        if self.step != WorkflowStep.RECORDING:
            raise InvalidState("Recording is only available on the recording step")
        return await self._run(self.capture.start())

    def pause_recording(self) -> RecordingSession:
        self._check_open()
        return self.capture.pause()

    def resume_recording(self) -> RecordingSession:
        self._check_open()
        return self.capture.resume()

    def stop_recording(self) -> RecordingSession:
        self._check_open()
        return self.capture.stop()

    def re_record(self) -> RecordingSession:
        self._check_ready()
        session = self.capture.re_record()
        if self.step == WorkflowStep.REVIEW:
            self.step = WorkflowStep.RECORDING
        return session

    def push_audio(self, data: bytes) -> int:
        self._check_open()
        return self.capture.push_chunk(data)

    def recorded_audio(self) -> Optional[bytes]:
        return self.capture.session.audio_buffer

    async def analyze(self) -> VoiceAnalysisReport:
        """
        Run voice analysis on the stopped recording.

        Raises:
            InvalidState: recording not stopped
            AnalysisFailed: service error; the recording is kept
        """
        self._check_ready()
        return await self._run(self.analysis.analyze(self.capture.session))

    # Step 3: review & submit

    async def submit(self) -> BookingConfirmation:
        """
        Submit the booking and close the workflow on success.

        Raises:
            MissingAnalysis: no voice analysis report
            ValidationError: appointment details no longer valid
            SubmissionFailed: scheduling error; form and analysis are kept
        """
        self._check_ready()
        report = self.analysis.report
        if report is None:
            raise MissingAnalysis()
        request = self.form.validate()

        confirmation = await self._run(
            self.review.submit(self.session, request, report)
        )
        self.confirmation = confirmation
        self._close(WorkflowStatus.COMPLETED)
        return confirmation

    def cancel(self) -> bool:
        """
        Close the workflow without booking.

        Cancels any pending step and releases the microphone immediately.

        Returns:
            True if the workflow was open
        """
        if not self.is_open:
            return False
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._close(WorkflowStatus.CANCELLED)
        return True

    def snapshot(self) -> WorkflowView:
        view = WorkflowView(
            workflow_id=self.workflow_id,
            user_id=self.session.user_id,
            status=self.status,
            step=self.step,
            opened_at=self.opened_at,
            analysis_status=self.analysis.status,
            confirmation=self.confirmation,
        )
        if self.is_open:
            view.appointment = self.form.draft.model_copy()
            view.recording = self.capture.snapshot()
            view.analysis = self.analysis.report
        return view

    # Internal helpers

    def _check_open(self) -> None:
        if not self.is_open:
            raise InvalidState(f"Workflow is {self.status.value}")

    def _check_ready(self) -> None:
        self._check_open()
        if self.busy:
            raise InvalidState("Another step is still in progress")

    async def _run(self, operation: Awaitable[T]) -> T:
        task = asyncio.ensure_future(operation)
        self._pending = task
        try:
            return await task
        except asyncio.CancelledError:
            if task.cancelled() and self.status == WorkflowStatus.CANCELLED:
                raise InvalidState("Workflow was cancelled") from None
            raise
        finally:
            self._pending = None

    def _close(self, status: WorkflowStatus) -> None:
        self.status = status
        self.capture.close()
        self.analysis.invalidate()
        self.review.submission = None
        self.form.draft = AppointmentDraft()
        logger.info(f"Workflow {self.workflow_id} {status.value}")
