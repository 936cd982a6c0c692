"""
Device media collaborators.

The browser owns the real microphone; the API only sees the chunks it
uploads. ClientMicrophoneService turns the permission result reported by the
client into the request_microphone() contract.
"""

import threading
from typing import Protocol

from loguru import logger

from workflow.errors import PermissionDenied


class AudioStreamHandle(Protocol):
    """A held microphone stream."""

    def release(self) -> None: ...


class DeviceMediaService(Protocol):
    """Grants microphone access or raises PermissionDenied."""

    async def request_microphone(self) -> AudioStreamHandle: ...


class ClientStreamHandle:
    """Handle for a stream captured client-side and uploaded in chunks."""

    def __init__(self, label: str = "client-microphone"):
        self.label = label
        self.released = False

    def release(self) -> None:
        if not self.released:
            self.released = True
            logger.debug(f"Released {self.label}")


class ClientMicrophoneService:
    """Microphone access as reported by the client device."""

    def __init__(self):
        self._lock = threading.Lock()
        self._granted = True

    def report_permission(self, granted: bool) -> None:
        """Record the client's answer to the browser permission prompt."""
        with self._lock:
            self._granted = granted

    async def request_microphone(self) -> AudioStreamHandle:
        with self._lock:
            granted = self._granted
        if not granted:
            raise PermissionDenied()
        return ClientStreamHandle()
