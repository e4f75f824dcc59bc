"""Caller-driven cancellation of an in-flight acquisition."""

import threading

from .exceptions import Cancelled
from .logger import get_logger

logger = get_logger("cancellation")


class CancelToken:
    """
    Signal shared between a caller and one running acquisition.

    Stages call :meth:`raise_if_cancelled` at each blocking boundary and
    register close callbacks for the resources they hold, so that
    :meth:`cancel` from another thread aborts blocking I/O right away.
    """

    def __init__(self):
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks = []

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        """Mark the token cancelled and run every registered callback once."""
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []

        for callback in reversed(callbacks):
            try:
                callback()
            except OSError as e:
                logger.debug("Cancel callback failed", extra={"error": str(e)})

    def register(self, callback) -> None:
        """
        Run ``callback`` when the token is cancelled.

        If the token is already cancelled the callback runs immediately.
        """
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return
        callback()

    def unregister(self, callback) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    def raise_if_cancelled(self, url: str | None = None) -> None:
        if self._event.is_set():
            raise Cancelled("Acquisition cancelled", url=url)
