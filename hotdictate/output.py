"""Text injection: delivering a transcript to the focused application."""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

import pyperclip

if TYPE_CHECKING:
    from hotdictate.config import OutputMode

logger = logging.getLogger(__name__)

# Time for the trigger key release to reach the focused window before typing
DEFAULT_SETTLE_DELAY_S = 0.05


class OutputHandler(ABC):
    """Delivers a transcript somewhere the user can use it."""

    @abstractmethod
    def output(self, text: str) -> None:
        ...


class ClipboardOutput(OutputHandler):
    def output(self, text: str) -> None:
        pyperclip.copy(text)
        logger.info("Copied %d characters to the clipboard", len(text))


class TyperOutput(OutputHandler):
    """
    Types text into whatever window has keyboard focus.

    Uses synthetic key events from pynput, so on macOS the terminal needs the
    Accessibility permission and on Linux an X server must be reachable.
    """

    def __init__(self, settle_delay_s: float = DEFAULT_SETTLE_DELAY_S) -> None:
        from pynput.keyboard import Controller

        self._keyboard = Controller()
        self._settle_delay_s = settle_delay_s

    def output(self, text: str) -> None:
        if self._settle_delay_s > 0:
            time.sleep(self._settle_delay_s)
        try:
            self._keyboard.type(text)
        except Exception as e:
            logger.error("Typing %d characters failed: %s", len(text), e)
            raise


class FallbackOutput(OutputHandler):
    """Tries ``primary``; if it raises, hands the text to ``fallback`` instead."""

    def __init__(self, primary: OutputHandler, fallback: OutputHandler, hint: str = "") -> None:
        self._primary = primary
        self._fallback = fallback
        self._hint = hint

    def output(self, text: str) -> None:
        try:
            self._primary.output(text)
            return
        except Exception as e:
            logger.warning(
                "%s failed (%s), falling back to %s",
                type(self._primary).__name__,
                e,
                type(self._fallback).__name__,
            )
        self._fallback.output(text)
        if self._hint:
            print(self._hint)


def create_output_handler(mode: "OutputMode") -> OutputHandler:
    """
    Build the text injector for an output mode.

    ``clipboard`` only copies. ``type`` types into the focused window and,
    when typing is refused by the OS, leaves the text on the clipboard.
    """
    from hotdictate.config import OutputMode

    if mode == OutputMode.CLIPBOARD:
        return ClipboardOutput()
    return FallbackOutput(
        TyperOutput(),
        ClipboardOutput(),
        hint="   📋 Typing failed, text is on the clipboard. Paste it with Ctrl/Cmd+V.",
    )
