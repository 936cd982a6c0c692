"""
Mock analysis stage.

GOVERNANCE:
- The analysis service is opaque; this stage only dispatches and stores
- A failed analysis keeps the recording so the patient can retry
"""

import asyncio
from typing import Optional

import pydantic
from loguru import logger

from api.models.analysis import AnalysisStatus, VoiceAnalysisReport
from api.models.recording import RecordingSession, RecordingState
from intelligence.analysis import AnalysisError, AnalysisService
from workflow.errors import AnalysisFailed, InvalidState


class AnalysisStage:
    """Submits a finalized recording and keeps the resulting report."""

    def __init__(self, service: AnalysisService):
        self.service = service
        self.status = AnalysisStatus.NOT_STARTED
        self.report: Optional[VoiceAnalysisReport] = None
        self.last_error: Optional[str] = None
        self._recording_id: Optional[str] = None
        self._generation = 0

    async def analyze(self, session: RecordingSession) -> VoiceAnalysisReport:
        """
        Analyze a stopped recording.

        A recording is analyzed once; asking again returns the stored report.

        Raises:
            InvalidState: recording is not STOPPED or analysis already running
            AnalysisFailed: the service reported an error
        """
        if session.state != RecordingState.STOPPED:
            raise InvalidState(
                f"Recording must be stopped before analysis (state: {session.state.value})"
            )
        if self.status == AnalysisStatus.ANALYZING:
            raise InvalidState("Analysis already in progress")
        if self.report is not None and self._recording_id == session.recording_id:
            return self.report

        generation = self._generation
        previous_status = self.status
        self.status = AnalysisStatus.ANALYZING
        logger.info(f"Analyzing recording {session.recording_id}")

        try:
            result = await self.service.analyze(
                session.audio_buffer or b"", session.elapsed_seconds
            )
            report = VoiceAnalysisReport.model_validate(result)
        except AnalysisError as e:
            self._fail(str(e))
            raise AnalysisFailed() from e
        except pydantic.ValidationError as e:
            self._fail(f"invalid report: {e.error_count()} errors")
            raise AnalysisFailed() from e
        except asyncio.CancelledError:
            self.status = previous_status
            logger.info(f"Analysis of recording {session.recording_id} cancelled")
            raise
        except Exception as e:
            # Transport or backend failure of a real service
            self._fail(f"{type(e).__name__}: {e}")
            raise AnalysisFailed() from e

        if generation != self._generation:
            raise InvalidState("Recording was discarded during analysis")

        self.report = report
        self._recording_id = session.recording_id
        self.status = AnalysisStatus.COMPLETE
        self.last_error = None
        logger.info(
            f"Analysis complete for recording {session.recording_id} "
            f"(load={report.cognitive_load_level.value})"
        )
        return report

    def invalidate(self) -> None:
        """Discard any report; called when the recording is discarded."""
        self._generation += 1
        self.report = None
        self._recording_id = None
        self.last_error = None
        self.status = AnalysisStatus.NOT_STARTED

    def _fail(self, reason: str) -> None:
        self.status = AnalysisStatus.FAILED
        self.last_error = reason
        logger.warning(f"Voice analysis failed: {reason}")
