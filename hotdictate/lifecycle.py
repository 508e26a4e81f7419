"""Process lifecycle: cancellation token, signal handling and session supervision."""

from __future__ import annotations

import logging
import signal
import threading
import time
from typing import Any, Callable

logger = logging.getLogger(__name__)

DEFAULT_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class Lifecycle:
    """
    Cancellation token for "the process should keep running".

    Transitions from live to cancelled exactly once, either through an OS
    signal or an explicit :meth:`cancel` call. Background sessions started
    with :meth:`spawn` are tracked so shutdown can wait for them.
    """

    def __init__(self) -> None:
        self._cancelled = threading.Event()
        self._lock = threading.Lock()
        self._reason: str | None = None
        self._callbacks: list[Callable[[], None]] = []
        self._sessions: set[threading.Thread] = set()
        self._previous_handlers: dict[int, Any] = {}

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def reason(self) -> str | None:
        return self._reason

    def cancel(self, reason: str) -> bool:
        """Cancel the lifecycle. Returns True only for the call that cancelled it."""
        with self._lock:
            if self._cancelled.is_set():
                return False
            self._reason = reason
            self._cancelled.set()
            callbacks = list(self._callbacks)
            self._callbacks.clear()

        logger.info("Lifecycle cancelled: %s", reason)
        for callback in callbacks:
            self._run_callback(callback)
        return True

    def wait(self, timeout: float | None = None) -> bool:
        """Block until cancelled or the timeout elapses. Returns True if cancelled."""
        return self._cancelled.wait(timeout)

    def on_cancel(self, callback: Callable[[], None]) -> None:
        """Register a callback run once on cancellation (immediately if already cancelled)."""
        with self._lock:
            if not self._cancelled.is_set():
                self._callbacks.append(callback)
                return
        self._run_callback(callback)

    def _run_callback(self, callback: Callable[[], None]) -> None:
        try:
            callback()
        except Exception as e:
            logger.error("Cancel callback %r failed: %s", callback, e)

    def install_signal_handlers(self, signals: tuple[int, ...] = DEFAULT_SIGNALS) -> None:
        """Map OS signals to cancellation. Must be called from the main thread."""
        for signum in signals:
            self._previous_handlers[signum] = signal.signal(signum, self._handle_signal)

    def restore_signal_handlers(self) -> None:
        for signum, handler in self._previous_handlers.items():
            try:
                signal.signal(signum, handler)
            except (ValueError, TypeError) as e:
                logger.warning("Could not restore handler for signal %s: %s", signum, e)
        self._previous_handlers.clear()

    def _handle_signal(self, signum: int, frame: object) -> None:
        # Runs on the main thread: must not take locks the main thread may hold
        name = signal.Signals(signum).name
        threading.Thread(
            target=self._cancel_from_signal,
            args=(name,),
            name="signal-cancel",
            daemon=True,
        ).start()

    def _cancel_from_signal(self, name: str) -> None:
        if self.cancel(f"received {name}"):
            print(f"\n📴 Received {name}.")

    def spawn(self, target: Callable[..., None], *args: Any, name: str | None = None) -> threading.Thread:
        """Run ``target`` on a tracked daemon thread."""

        def run() -> None:
            try:
                target(*args)
            finally:
                with self._lock:
                    self._sessions.discard(threading.current_thread())

        thread = threading.Thread(target=run, name=name, daemon=True)
        with self._lock:
            self._sessions.add(thread)
            try:
                thread.start()
            except RuntimeError:
                self._sessions.discard(thread)
                raise
        return thread

    @property
    def active_sessions(self) -> int:
        with self._lock:
            return len(self._sessions)

    def join_sessions(self, timeout: float) -> bool:
        """
        Wait up to ``timeout`` seconds in total for tracked sessions.

        Returns:
            True if every session finished, False if some were abandoned.
        """
        deadline = time.monotonic() + timeout
        while True:
            with self._lock:
                pending = [t for t in self._sessions if t is not threading.current_thread()]
            if not pending:
                return True
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                logger.warning("Abandoning %d in-flight session(s)", len(pending))
                return False
            pending[0].join(timeout=remaining)
