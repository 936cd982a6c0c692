"""
Voice analysis report models.

GOVERNANCE:
- Scores come from the analysis service as-is
- Only documented ranges are enforced (0-100 percentages, three load levels)
"""

from enum import Enum

from pydantic import BaseModel, Field


class CognitiveLoadLevel(str, Enum):
    """Three-valued severity classification."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class AnalysisStatus(str, Enum):
    """Status of the analysis stage, reported to the UI layer."""

    NOT_STARTED = "not_started"
    ANALYZING = "analyzing"
    COMPLETE = "complete"
    FAILED = "failed"


class VoiceAnalysisReport(BaseModel):
    """Result of analyzing one finalized recording."""

    duration_seconds: int = Field(..., ge=0)
    transcript: str
    speech_rate_wpm: int = Field(..., ge=0)
    clarity_score_pct: int = Field(..., ge=0, le=100)
    confidence_level_pct: int = Field(..., ge=0, le=100)
    cognitive_load_level: CognitiveLoadLevel
    risk_assessment: str
    recommendations: tuple[str, ...] = ()

    model_config = {"frozen": True}
