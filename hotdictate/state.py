"""Shared dictation state."""

from __future__ import annotations

import threading


class DictationState:
    """
    Lock-guarded "is a recording session active" flag.

    Starting is a compare-and-set from idle, and also requires that the
    previous session has released the audio device, so at most one recorder
    ever holds the input stream.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._recording = False
        self._owner: int | None = None
        self._last_session_id = 0

    @property
    def is_recording(self) -> bool:
        with self._lock:
            return self._recording

    @property
    def is_busy(self) -> bool:
        """True while a session still owns the audio device."""
        with self._lock:
            return self._owner is not None

    def try_start(self) -> int | None:
        """Transition idle -> recording. Returns the new session id, or None."""
        with self._lock:
            if self._recording or self._owner is not None:
                return None
            self._last_session_id += 1
            self._recording = True
            self._owner = self._last_session_id
            return self._owner

    def stop(self) -> bool:
        """Transition recording -> idle. Returns False if already idle."""
        with self._lock:
            if not self._recording:
                return False
            self._recording = False
            return True

    def is_active(self, session_id: int) -> bool:
        with self._lock:
            return self._recording and self._owner == session_id

    def release(self, session_id: int) -> None:
        """Force idle and give up the audio device, whatever the outcome of the session."""
        with self._lock:
            if self._owner != session_id:
                return
            self._owner = None
            self._recording = False
