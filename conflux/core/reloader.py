"""Periodic background reload."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class HotReloader:
    """Call ``reload`` every ``interval`` seconds until stopped.

    A failing reload is reported to ``on_error`` and logged; the schedule
    keeps running.
    """

    def __init__(
        self,
        reload: Callable[[], None],
        interval: float,
        on_error: Optional[Callable[[BaseException], None]] = None,
    ):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.interval = interval
        self._reload = reload
        self._on_error = on_error
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name="conflux-hot-reload", daemon=True
        )
        self._thread.start()
        logger.debug("Hot reload started with interval %.3fs", self.interval)

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        self._thread = None

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            try:
                self._reload()
            except Exception as exc:
                logger.exception("Hot reload failed")
                if self._on_error is not None:
                    self._on_error(exc)
