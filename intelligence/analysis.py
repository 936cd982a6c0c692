"""
Voice analysis service.

GOVERNANCE:
- The shipped scorer is a MOCK: random scores after a fixed delay
- No diagnosis; risk text is informational and reviewed by a clinician
- Swap in a real service by implementing AnalysisService
"""

import asyncio
import random
from typing import Optional, Protocol

from loguru import logger

from api.models.analysis import CognitiveLoadLevel, VoiceAnalysisReport
from config import get_settings
from workflow.passage import READING_PASSAGE


class AnalysisError(Exception):
    """Raised by an analysis service when it cannot produce a report."""


class AnalysisService(Protocol):
    """Turns a finalized recording into a scored report."""

    async def analyze(
        self, audio_buffer: bytes, duration_seconds: int
    ) -> VoiceAnalysisReport: ...


DEFAULT_RISK_ASSESSMENT = (
    "Based on the voice analysis, cognitive patterns appear within normal range. "
    "No immediate concerns detected."
)

DEFAULT_RECOMMENDATIONS = (
    "Continue regular voice monitoring",
    "Maintain healthy sleep schedule",
    "Engage in mentally stimulating activities",
    "Follow up in 3 months for reassessment",
)


class MockAnalysisService:
    """
    Stand-in for real voice-biomarker inference.

    Waits a fixed delay, then returns randomized scores in the ranges the
    original demo produced.
    """

    def __init__(
        self,
        delay_seconds: Optional[float] = None,
        rng: Optional[random.Random] = None,
    ):
        if delay_seconds is None:
            delay_seconds = get_settings().analysis_delay_seconds
        self.delay_seconds = delay_seconds
        self.rng = rng or random.Random()

    async def analyze(
        self, audio_buffer: bytes, duration_seconds: int
    ) -> VoiceAnalysisReport:
        """
        Score a recording.

        Args:
            audio_buffer: Finalized audio payload (not inspected by the mock)
            duration_seconds: Recorded duration

        Returns:
            Mock voice analysis report
        """
        if duration_seconds < 0:
            raise AnalysisError("Recording duration cannot be negative")

        if self.delay_seconds > 0:
            await asyncio.sleep(self.delay_seconds)

        load = (
            CognitiveLoadLevel.MEDIUM
            if self.rng.random() > 0.7
            else CognitiveLoadLevel.LOW
        )
        report = VoiceAnalysisReport(
            duration_seconds=duration_seconds,
            transcript=READING_PASSAGE.split(". ")[0] + "...",
            speech_rate_wpm=145 + self.rng.randrange(20),
            clarity_score_pct=80 + self.rng.randrange(15),
            confidence_level_pct=85 + self.rng.randrange(10),
            cognitive_load_level=load,
            risk_assessment=DEFAULT_RISK_ASSESSMENT,
            recommendations=DEFAULT_RECOMMENDATIONS,
        )
        logger.debug(
            f"Mock analysis of {len(audio_buffer)} bytes: "
            f"clarity={report.clarity_score_pct} load={report.cognitive_load_level.value}"
        )
        return report
