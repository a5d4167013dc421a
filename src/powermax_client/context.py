"""Per-call cancellation and deadline handling."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from concurrent.futures import Future
from typing import TypeVar

from .exceptions import TransportError

T = TypeVar("T")


class RequestContext:
    """Cancellation scope for one or more client calls.

    A context may be shared by several calls and cancelled from any thread.
    Cancelling runs every closer currently registered with the context, which
    wakes the calls waiting on the network and aborts their exchanges.
    """

    def __init__(self, deadline: float | None = None) -> None:
        self._deadline = deadline
        self._cancelled = threading.Event()
        self._lock = threading.Lock()
        self._closers: dict[int, Callable[[], None]] = {}
        self._next_id = 0

    @classmethod
    def with_timeout(cls, seconds: float) -> RequestContext:
        return cls(deadline=time.monotonic() + seconds)

    @property
    def deadline(self) -> float | None:
        return self._deadline

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        self._cancelled.set()
        with self._lock:
            closers = list(self._closers.values())
            self._closers.clear()
        for close in closers:
            close()

    def remaining(self) -> float | None:
        """Seconds left before the deadline, ``None`` if there is no deadline."""

        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0

    def raise_if_done(self) -> None:
        if self.cancelled:
            raise TransportError("Request cancelled")
        if self.expired():
            raise TransportError("Request deadline exceeded")

    def bound_timeout(self, timeout: float | None) -> float | None:
        """Narrow ``timeout`` so it never runs past the deadline."""

        remaining = self.remaining()
        if remaining is None:
            return timeout
        if timeout is None:
            return remaining
        return min(timeout, remaining)

    def register(self, close: Callable[[], None]) -> int:
        """Track ``close`` until :meth:`unregister`; runs at once if already cancelled."""

        with self._lock:
            if not self._cancelled.is_set():
                self._next_id += 1
                self._closers[self._next_id] = close
                return self._next_id
        close()
        return 0

    def unregister(self, handle: int) -> None:
        with self._lock:
            self._closers.pop(handle, None)


def call_deadline(context: RequestContext | None, timeout: float | None) -> float | None:
    """Monotonic instant by which a whole call must finish, if any."""

    deadline = None if context is None else context.deadline
    if timeout is not None:
        limit = time.monotonic() + timeout
        deadline = limit if deadline is None else min(deadline, limit)
    return deadline


def run_bounded(
    work: Callable[[], T],
    *,
    context: RequestContext | None,
    deadline: float | None,
    interrupt: Callable[[], None] | None = None,
    discard: Callable[[T], None] | None = None,
) -> T:
    """Run ``work`` until it returns, ``context`` is cancelled or ``deadline`` passes.

    Blocking network I/O cannot be interrupted from the waiting thread, so
    ``work`` runs on a helper thread while the caller waits. When the wait is
    abandoned, ``interrupt`` is called to tear down the exchange and
    ``discard`` receives whatever ``work`` eventually returns. Without a
    context or a deadline there is nothing to wait for and ``work`` runs
    inline.
    """

    if context is None and deadline is None:
        return work()

    future: Future[T] = Future()
    wake = threading.Event()
    future.add_done_callback(lambda _: wake.set())

    def target() -> None:
        if not future.set_running_or_notify_cancel():
            return
        try:
            future.set_result(work())
        except BaseException as exc:
            future.set_exception(exc)

    handle = context.register(wake.set) if context is not None else 0
    try:
        if not wake.is_set():
            threading.Thread(target=target, name="powermax-request", daemon=True).start()
            wake.wait(None if deadline is None else max(0.0, deadline - time.monotonic()))
    finally:
        if context is not None and handle:
            context.unregister(handle)

    if future.done() and not (context is not None and context.cancelled):
        return future.result()

    if discard is not None:
        future.add_done_callback(lambda done: _discard_result(done, discard))
    if interrupt is not None:
        interrupt()
    if context is not None and context.cancelled:
        raise TransportError("Request cancelled")
    raise TransportError("Request deadline exceeded")


def _discard_result(future: Future, discard: Callable[[T], None]) -> None:
    if future.cancelled() or future.exception() is not None:
        return
    discard(future.result())
