"""Cancellation token shared by concurrent process invocations.

A token is set once by its owner (a deadline timer, a signal handler, the
CLI) and observed by every runner holding it. Observers either check
``cancelled`` or register a callback, which lets the runner wake up on the
first of "process exited" and "token fired" without polling.
"""

from __future__ import annotations

import threading
from typing import Callable, List, Optional

Callback = Callable[[], None]


class CancelToken:
    """Thread-safe, one-shot cancellation signal."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._event = threading.Event()
        self._callbacks: List[Callback] = []
        self._timer: Optional[threading.Timer] = None
        self.reason: Optional[str] = None

    @classmethod
    def with_timeout(cls, seconds: float) -> "CancelToken":
        """Create a token that fires automatically after ``seconds``."""
        token = cls()
        token.cancel_after(seconds)
        return token

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "cancelled") -> None:
        """Fire the token. Calling it again has no effect."""
        with self._lock:
            if self._event.is_set():
                return
            self.reason = reason
            self._event.set()
            callbacks = list(self._callbacks)
            self._callbacks.clear()
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

        for callback in callbacks:
            callback()

    def cancel_after(self, seconds: float) -> None:
        """Schedule the token to fire after ``seconds``.

        A later call replaces the previously scheduled deadline.
        """
        timer = threading.Timer(
            seconds, self.cancel, kwargs={"reason": f"deadline of {seconds}s exceeded"}
        )
        timer.daemon = True
        with self._lock:
            if self._event.is_set():
                return
            if self._timer is not None:
                self._timer.cancel()
            self._timer = timer
        timer.start()

    def clear_deadline(self) -> None:
        """Drop a pending deadline without firing the token."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def add_callback(self, callback: Callback) -> None:
        """Register ``callback`` to run when the token fires.

        If the token has already fired the callback runs immediately in
        the calling thread.
        """
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return
        callback()

    def remove_callback(self, callback: Callback) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the token fires or ``timeout`` elapses."""
        return self._event.wait(timeout)

    def __repr__(self) -> str:
        state = f"cancelled ({self.reason})" if self.cancelled else "active"
        return f"<CancelToken {state}>"
