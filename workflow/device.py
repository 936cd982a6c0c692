"""
Application-wide microphone ownership.

GOVERNANCE:
- At most one active recording holds the microphone per user (the user's
  browser owns the device; other users are never affected)
- A new claimant stops and releases the previous holder first
"""

import threading
from functools import lru_cache
from typing import Optional, Protocol

from loguru import logger


class DeviceHolder(Protocol):
    """Something that can be forced to give the microphone back."""

    def preempt(self) -> None: ...


class MicrophoneArbiter:
    """Tracks the single holder of the microphone."""

    def __init__(self):
        self._lock = threading.RLock()
        self._holder: Optional[DeviceHolder] = None

    @property
    def holder(self) -> Optional[DeviceHolder]:
        return self._holder

    def claim(self, holder: DeviceHolder) -> None:
        """
        Make `holder` the owner of the microphone.

        Any other current holder is preempted before the claim completes.
        """
        with self._lock:
            current = self._holder
            if current is not None and current is not holder:
                logger.info("Preempting active recording to hand microphone to new owner")
                current.preempt()
            self._holder = holder

    def release(self, holder: DeviceHolder) -> bool:
        """Give up ownership; a no-op if `holder` does not own the device."""
        with self._lock:
            if self._holder is holder:
                self._holder = None
                return True
            return False


@lru_cache(maxsize=None)
def get_arbiter(owner: str = "local") -> MicrophoneArbiter:
    """Get the arbiter shared by every workflow of one owner (a user id)."""
    return MicrophoneArbiter()
