"""
Cancellable periodic tick bound to a game session.
"""
import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class SessionTimer:
    """Calls `on_tick` every `interval` seconds on a daemon thread until stopped."""

    def __init__(self, interval: float, on_tick: Callable[[], None]):
        if interval <= 0:
            raise ValueError(f"Timer interval must be positive, got {interval}")
        self.interval = interval
        self.on_tick = on_tick
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="hanoi-session-timer", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Stop ticking and wait for the worker to exit. Safe to call repeatedly."""
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self.interval + 1)
        self._thread = None

    def _run(self) -> None:
        # Event.wait returns True as soon as stop() is called
        while not self._stop_event.wait(self.interval):
            try:
                self.on_tick()
            except Exception as e:
                logger.error(f"Timer tick failed: {e}", exc_info=True)
