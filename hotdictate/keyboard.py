"""Global keyboard hook producing a stream of KeyEvents."""

from __future__ import annotations

import logging
import queue
import threading
import time
from typing import TYPE_CHECKING, Any, Callable, Iterator

from hotdictate.types import KeyEvent, KeyEventKind

if TYPE_CHECKING:
    from pynput.keyboard import Listener

    from hotdictate.lifecycle import Lifecycle

logger = logging.getLogger(__name__)

SIDED_MODIFIERS = ("ctrl", "shift", "alt", "cmd")
VK_PREFIX = "vk:"
DEFAULT_POLL_INTERVAL_S = 0.25


def _fold_sided(name: str) -> str:
    for base in SIDED_MODIFIERS:
        if name in (f"{base}_l", f"{base}_r"):
            return base
    return name


def key_name(key: Any) -> str | None:
    """
    Return the canonical identifier for a pynput key object.

    ``Key`` members map to their (side-folded) name, character keys to the
    lower-cased character and anything else to ``vk:<code>``.
    """
    if key is None:
        return None

    name = getattr(key, "name", None)
    if isinstance(name, str) and name:
        return _fold_sided(name)

    char = getattr(key, "char", None)
    if char:
        # Ctrl+<letter> arrives as a control character on some platforms
        if len(char) == 1 and 1 <= ord(char) <= 26:
            return chr(ord(char) + 96)
        return char.lower()

    vk = getattr(key, "vk", None)
    if vk is not None:
        return f"{VK_PREFIX}{vk}"
    return None


def normalize_key_spec(spec: str) -> str:
    """Normalize a user-supplied key identifier (e.g. ``"Ctrl_L"``, ``"vk:179"``)."""
    spec = spec.strip()
    if not spec:
        raise ValueError("empty key identifier")

    if spec.lower().startswith(VK_PREFIX):
        code = spec[len(VK_PREFIX):].strip()
        if not code.isdigit():
            raise ValueError(f"invalid virtual key code: {spec!r}")
        return f"{VK_PREFIX}{int(code)}"

    if len(spec) == 1:
        return spec.lower()
    return _fold_sided(spec.lower())


class KeyEventSource:
    """Feeds pynput listener callbacks into an ordered event queue."""

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        poll_interval_s: float = DEFAULT_POLL_INTERVAL_S,
    ) -> None:
        self._clock = clock
        self._poll_interval_s = poll_interval_s
        self._queue: queue.Queue[KeyEvent | None] = queue.Queue()
        self._pressed: set[str] = set()
        self._pressed_lock = threading.Lock()
        self._listener: Listener | None = None

    def start(self) -> None:
        from pynput import keyboard

        self._listener = keyboard.Listener(
            on_press=self._on_press,
            on_release=self._on_release,
        )
        self._listener.start()
        logger.info("Keyboard listener started")

    def stop(self) -> None:
        if self._listener is not None:
            self._listener.stop()
            self._listener = None

    def close(self) -> None:
        """Wake up and end any consumer of :meth:`events`."""
        self._queue.put(None)

    def _on_press(self, key: Any) -> None:
        name = key_name(key)
        if name is None:
            return
        with self._pressed_lock:
            kind = KeyEventKind.HOLD if name in self._pressed else KeyEventKind.DOWN
            self._pressed.add(name)
        self._queue.put(KeyEvent(name, kind, self._clock()))

    def _on_release(self, key: Any) -> None:
        name = key_name(key)
        if name is None:
            return
        with self._pressed_lock:
            self._pressed.discard(name)
        self._queue.put(KeyEvent(name, KeyEventKind.UP, self._clock()))

    def events(self, lifecycle: "Lifecycle") -> Iterator[KeyEvent]:
        """Yield events in arrival order until closed or the lifecycle is cancelled."""
        while not lifecycle.is_cancelled:
            try:
                event = self._queue.get(timeout=self._poll_interval_s)
            except queue.Empty:
                continue
            if event is None:
                return
            yield event
