"""Interval tickers driving the recording timer."""

import threading
from typing import Callable, Optional, Protocol


class Ticker(Protocol):
    """Calls a callback once per interval until cancelled."""

    def start(self, callback: Callable[[], None]) -> None: ...

    def cancel(self) -> None: ...


class ThreadTicker:
    """Ticker backed by a daemon thread."""

    def __init__(self, interval_seconds: float = 1.0):
        self.interval_seconds = interval_seconds
        self._stop: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._stop is not None and not self._stop.is_set()

    def start(self, callback: Callable[[], None]) -> None:
        self.cancel()
        stop = threading.Event()

        def _run():
            while not stop.wait(self.interval_seconds):
                callback()

        self._stop = stop
        self._thread = threading.Thread(target=_run, name="recording-ticker", daemon=True)
        self._thread.start()

    def cancel(self) -> None:
        # Not joined: the callback may be the one cancelling its own ticker
        if self._stop is not None:
            self._stop.set()
        self._stop = None
        self._thread = None
