"""Deadline and cancellation handle passed through blocking embedding calls."""

from __future__ import annotations

import threading
import time

from booksearch.errors import OperationCancelledError


class CancelToken:
    """Carries an optional deadline plus an explicit cancel flag.

    Backends call `raise_if_cancelled()` before every request and use
    `timeout_for()` to bound the request's own timeout by the time left, so an
    expired deadline aborts the in-flight request.
    """

    def __init__(self, deadline: float | None = None) -> None:
        self.deadline = deadline
        self._cancelled = threading.Event()

    @classmethod
    def with_timeout(cls, seconds: float) -> "CancelToken":
        return cls(deadline=time.monotonic() + seconds)

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set() or self.expired

    @property
    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    def remaining(self) -> float | None:
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def timeout_for(self, default: float) -> float:
        remaining = self.remaining()
        if remaining is None:
            return default
        return min(default, remaining)

    def raise_if_cancelled(self) -> None:
        if self._cancelled.is_set():
            raise OperationCancelledError("operation cancelled")
        if self.expired:
            raise OperationCancelledError("deadline exceeded")


def check_cancelled(token: CancelToken | None) -> None:
    if token is not None:
        token.raise_if_cancelled()
