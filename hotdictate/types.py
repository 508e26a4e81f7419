"""Type definitions for the hotdictate application."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, TypedDict


class KeyEventKind(str, Enum):
    DOWN = "down"
    HOLD = "hold"
    UP = "up"


@dataclass(frozen=True)
class KeyEvent:
    """A single key transition delivered by the keyboard hook."""

    key: str
    kind: KeyEventKind
    timestamp: float

    @property
    def is_press(self) -> bool:
        return self.kind in (KeyEventKind.DOWN, KeyEventKind.HOLD)


class TranscriptionResponse(TypedDict, total=False):
    """JSON body returned by the transcription endpoint."""

    text: str
    error: Any
