"""Recording session models."""

import uuid
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class RecordingState(str, Enum):
    """Audio capture state."""

    IDLE = "idle"
    RECORDING = "recording"
    PAUSED = "paused"
    STOPPED = "stopped"


class RecordingSession(BaseModel):
    """One microphone capture attempt."""

    recording_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    state: RecordingState = RecordingState.IDLE
    elapsed_seconds: int = 0

    # Finalized on stop (all-or-nothing)
    audio_buffer: Optional[bytes] = None
    result_url: Optional[str] = None


class RecordingView(BaseModel):
    """Recording details returned to clients (no raw audio)."""

    recording_id: str
    state: RecordingState
    elapsed_seconds: int
    max_seconds: Optional[int] = None
    result_url: Optional[str] = None
    audio_bytes: int = 0
