"""Cancellable waits for retry pacing."""

import logging
import threading

logger = logging.getLogger(__name__)


class Pacer:
    """Wraps every pause the supervisor takes.

    ``wait()`` blocks for the requested time unless ``cancel()`` is called
    from another thread or a signal handler, in which case it returns
    immediately and every later wait is skipped too.
    """

    def __init__(self):
        self._cancelled = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self):
        logger.info("Cancellation requested")
        self._cancelled.set()

    def wait(self, seconds: float) -> bool:
        """Pause for ``seconds``. Returns False if cancelled."""
        if seconds <= 0:
            return not self.cancelled
        return not self._cancelled.wait(seconds)
