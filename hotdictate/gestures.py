"""Classification of trigger-key gestures from the raw key event stream."""

from __future__ import annotations

import logging
from enum import Enum

from hotdictate.types import KeyEvent

logger = logging.getLogger(__name__)

DEFAULT_DOUBLE_PRESS_WINDOW_S = 0.5


class Gesture(str, Enum):
    NONE = "none"
    SINGLE_PRESS = "single_press"
    DOUBLE_PRESS = "double_press"
    QUIT = "quit"


class KeyGestureClassifier:
    """
    Turns key events into gestures.

    Two trigger presses closer together than the window form a double press
    (start dictation); any other trigger press is a single press (stop).
    Holding the quit modifier and pressing the quit key is the quit chord,
    after which the classifier ignores everything.
    """

    def __init__(
        self,
        trigger_key: str,
        quit_modifier: str,
        quit_key: str,
        double_press_window_s: float = DEFAULT_DOUBLE_PRESS_WINDOW_S,
    ) -> None:
        self._trigger_key = trigger_key
        self._quit_modifier = quit_modifier
        self._quit_key = quit_key
        self._window_s = double_press_window_s

        self._modifier_held = False
        self._last_press_at: float | None = None
        self._finished = False

    @property
    def modifier_held(self) -> bool:
        return self._modifier_held

    @property
    def finished(self) -> bool:
        return self._finished

    def feed(self, event: KeyEvent) -> Gesture:
        if self._finished:
            return Gesture.NONE

        if not event.is_press:
            if event.key == self._quit_modifier:
                self._modifier_held = False
            return Gesture.NONE

        if event.key == self._quit_modifier:
            self._modifier_held = True
            return Gesture.NONE

        if event.key == self._quit_key and self._modifier_held:
            self._finished = True
            return Gesture.QUIT

        self._modifier_held = False
        if event.key != self._trigger_key:
            return Gesture.NONE
        return self._classify_press(event.timestamp)

    def _classify_press(self, now: float) -> Gesture:
        last = self._last_press_at
        self._last_press_at = now

        if last is not None and now - last < self._window_s:
            logger.debug("Double press (%.3fs apart)", now - last)
            return Gesture.DOUBLE_PRESS
        return Gesture.SINGLE_PRESS
