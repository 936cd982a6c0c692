"""Test doubles for the booking workflow."""

from typing import Callable, Optional

from workflow.errors import PermissionDenied

VALID_APPOINTMENT = {
    "date": "2025-03-01",
    "time": "10:00",
    "doctor_id": "dr-chen",
    "reason": "checkup",
}


class FakeTicker:
    """Ticker driven by hand with fire()."""

    def __init__(self):
        self.callback: Optional[Callable[[], None]] = None
        self.starts = 0
        self.cancels = 0

    @property
    def running(self) -> bool:
        return self.callback is not None

    def start(self, callback: Callable[[], None]) -> None:
        self.callback = callback
        self.starts += 1

    def cancel(self) -> None:
        self.callback = None
        self.cancels += 1

    def fire(self, times: int = 1) -> None:
        for _ in range(times):
            if self.callback is not None:
                self.callback()


class FakeHandle:
    def __init__(self):
        self.release_count = 0

    def release(self) -> None:
        self.release_count += 1


class FakeMedia:
    """Device media service that grants or refuses on demand."""

    def __init__(self, granted: bool = True):
        self.granted = granted
        self.requests = 0
        self.handles: list[FakeHandle] = []

    @property
    def last_handle(self) -> FakeHandle:
        return self.handles[-1]

    async def request_microphone(self) -> FakeHandle:
        self.requests += 1
        if not self.granted:
            raise PermissionDenied()
        handle = FakeHandle()
        self.handles.append(handle)
        return handle


def fill_form(workflow, **overrides) -> None:
    fields = dict(VALID_APPOINTMENT, **overrides)
    for field, value in fields.items():
        workflow.update_field(field, value)
