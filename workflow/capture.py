"""
Audio capture stage.

State machine for one microphone-backed recording:

    IDLE -> RECORDING <-> PAUSED -> STOPPED -> IDLE (re-record)

GOVERNANCE:
- Audio is finalized all-or-nothing on stop; later stages never see partial audio
- The microphone is released on stop, on cancel, and when preempted
"""

import threading
from enum import Enum
from typing import Callable, Optional

from loguru import logger

from api.models.recording import RecordingSession, RecordingState, RecordingView
from services.media import AudioStreamHandle, DeviceMediaService
from workflow.device import MicrophoneArbiter, get_arbiter
from workflow.errors import InvalidState
from workflow.timer import ThreadTicker, Ticker


class CaptureEvent(str, Enum):
    """Events accepted by the capture state machine."""

    START = "start"
    PAUSE = "pause"
    RESUME = "resume"
    STOP = "stop"
    RE_RECORD = "re_record"
    TICK = "tick"


TRANSITIONS: dict[tuple[RecordingState, CaptureEvent], RecordingState] = {
    (RecordingState.IDLE, CaptureEvent.START): RecordingState.RECORDING,
    (RecordingState.RECORDING, CaptureEvent.PAUSE): RecordingState.PAUSED,
    (RecordingState.PAUSED, CaptureEvent.RESUME): RecordingState.RECORDING,
    (RecordingState.RECORDING, CaptureEvent.STOP): RecordingState.STOPPED,
    (RecordingState.PAUSED, CaptureEvent.STOP): RecordingState.STOPPED,
    (RecordingState.STOPPED, CaptureEvent.RE_RECORD): RecordingState.IDLE,
}

ACTIVE_STATES = (RecordingState.RECORDING, RecordingState.PAUSED)


def memory_playback_url(recording_id: str, audio: bytes) -> str:
    """Default playable reference for a finalized recording."""
    return f"memory://recordings/{recording_id}"


class AudioCaptureStage:
    """Owns the microphone and the recording session of one workflow."""

    def __init__(
        self,
        media: DeviceMediaService,
        arbiter: Optional[MicrophoneArbiter] = None,
        ticker: Optional[Ticker] = None,
        max_seconds: Optional[int] = None,
        playback_url: Callable[[str, bytes], str] = memory_playback_url,
    ):
        self.media = media
        self.arbiter = arbiter or get_arbiter()
        self.ticker = ticker or ThreadTicker()
        self.max_seconds = max_seconds
        self._playback_url = playback_url

        self.session = RecordingSession()
        self._lock = threading.RLock()
        self._handle: Optional[AudioStreamHandle] = None
        self._chunks: list[bytes] = []
        self._starting = False
        self._closed = False
        self._tick_generation = 0
        self._discard_listeners: list[Callable[[], None]] = []

    @property
    def state(self) -> RecordingState:
        return self.session.state

    @property
    def holds_device(self) -> bool:
        return self._handle is not None

    def on_discard(self, callback: Callable[[], None]) -> None:
        """Register a callback run whenever the recording is discarded."""
        self._discard_listeners.append(callback)

    def snapshot(self) -> RecordingView:
        with self._lock:
            session = self.session
            audio = session.audio_buffer or b""
            return RecordingView(
                recording_id=session.recording_id,
                state=session.state,
                elapsed_seconds=session.elapsed_seconds,
                max_seconds=self.max_seconds,
                result_url=session.result_url,
                audio_bytes=len(audio),
            )

    async def start(self) -> RecordingSession:
        """
        Request the microphone and begin recording.

        Raises:
            InvalidState: not IDLE, closed, or a request is already pending
            PermissionDenied: microphone refused; state stays IDLE
        """
        with self._lock:
            self._check_open()
            self._target(CaptureEvent.START)
            if self._starting:
                raise InvalidState("Microphone request already pending")
            self._starting = True

        try:
            handle = await self.media.request_microphone()
        except Exception as e:
            logger.warning(f"Microphone request failed: {e}")
            raise
        finally:
            with self._lock:
                self._starting = False

        if self._closed:
            handle.release()
            raise InvalidState("Workflow closed while waiting for microphone")

        # Outside our own lock: the arbiter may need to stop another stage
        self.arbiter.claim(self)

        with self._lock:
            self._handle = handle
            self._chunks = []
            self.session = RecordingSession(state=RecordingState.RECORDING)
            self._start_ticker()
            session = self.session

        logger.info(f"Recording {session.recording_id} started")
        return session

    def pause(self) -> RecordingSession:
        return self.dispatch(CaptureEvent.PAUSE)

    def resume(self) -> RecordingSession:
        return self.dispatch(CaptureEvent.RESUME)

    def stop(self) -> RecordingSession:
        return self.dispatch(CaptureEvent.STOP)

    def re_record(self) -> RecordingSession:
        return self.dispatch(CaptureEvent.RE_RECORD)

    def tick(self) -> RecordingSession:
        return self.dispatch(CaptureEvent.TICK)

    def dispatch(self, event: CaptureEvent) -> RecordingSession:
        """
        Apply a synchronous event to the state machine.

        START is not accepted here because it waits on the microphone;
        use `await start()`. TICK outside RECORDING is ignored.

        Raises:
            InvalidState: the event is not legal from the current state
        """
        if event is CaptureEvent.START:
            raise InvalidState("Recording must be started with start()")
        if event is CaptureEvent.TICK:
            return self._tick(self._tick_generation)

        discarded = False
        released = False
        with self._lock:
            self._check_open()
            target = self._target(event)

            if event is CaptureEvent.PAUSE:
                self._cancel_ticker()
            elif event is CaptureEvent.RESUME:
                self._start_ticker()
            elif event is CaptureEvent.STOP:
                self._finalize()
                released = True
            elif event is CaptureEvent.RE_RECORD:
                self._chunks = []
                self.session = RecordingSession()
                discarded = True

            self.session.state = target
            session = self.session

        if released:
            self.arbiter.release(self)
            logger.info(
                f"Recording {session.recording_id} stopped after {session.elapsed_seconds}s"
            )
        if discarded:
            for callback in self._discard_listeners:
                callback()
            logger.info("Recording discarded for re-record")
        return session

    def push_chunk(self, data: bytes) -> int:
        """Append captured audio; only accepted while RECORDING."""
        with self._lock:
            self._check_open()
            if self.session.state != RecordingState.RECORDING:
                raise InvalidState(
                    f"Audio can only be captured while recording (state: {self.session.state.value})"
                )
            if data:
                self._chunks.append(bytes(data))
            return sum(len(chunk) for chunk in self._chunks)

    def preempt(self) -> None:
        """Stop this recording because another one needs the microphone."""
        with self._lock:
            active = self.session.state in ACTIVE_STATES
            recording_id = self.session.recording_id
        if not active:
            return
        logger.warning(f"Recording {recording_id} preempted")
        try:
            self.dispatch(CaptureEvent.STOP)
        except InvalidState:
            logger.debug("Recording stopped before preemption completed")

    def close(self) -> bool:
        """
        Release everything held by this stage.

        Returns:
            True if a microphone handle was released
        """
        with self._lock:
            self._closed = True
            self._cancel_ticker()
            released = self._release_handle()
            self._chunks = []
            self.session = RecordingSession()
        self.arbiter.release(self)
        if released:
            logger.info("Microphone released on close")
        return released

    # Internal helpers (callers hold the lock)

    def _check_open(self) -> None:
        if self._closed:
            raise InvalidState("Workflow is closed")

    def _target(self, event: CaptureEvent) -> RecordingState:
        target = TRANSITIONS.get((self.session.state, event))
        if target is None:
            raise InvalidState(
                f"Cannot {event.value} while {self.session.state.value}"
            )
        return target

    def _finalize(self) -> None:
        audio = b"".join(self._chunks)
        url = self._playback_url(self.session.recording_id, audio)
        self._cancel_ticker()
        self._release_handle()
        self._chunks = []
        self.session.audio_buffer = audio
        self.session.result_url = url

    def _release_handle(self) -> bool:
        handle, self._handle = self._handle, None
        if handle is None:
            return False
        handle.release()
        return True

    def _start_ticker(self) -> None:
        self._tick_generation += 1
        generation = self._tick_generation
        self.ticker.start(lambda: self._tick(generation))

    def _cancel_ticker(self) -> None:
        self._tick_generation += 1
        self.ticker.cancel()

    def _tick(self, generation: int) -> RecordingSession:
        with self._lock:
            session = self.session
            if (
                self._closed
                or generation != self._tick_generation
                or session.state != RecordingState.RECORDING
            ):
                return session
            session.elapsed_seconds += 1
            limit_reached = (
                self.max_seconds is not None
                and session.elapsed_seconds >= self.max_seconds
            )
        if limit_reached:
            logger.info(f"Recording {session.recording_id} hit the {self.max_seconds}s limit")
            try:
                return self.dispatch(CaptureEvent.STOP)
            except InvalidState:
                logger.debug("Recording stopped before the limit was applied")
        return session
