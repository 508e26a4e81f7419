"""Pytest configuration and fixtures."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Generator

import numpy as np
import pytest

from hotdictate.config import Config
from hotdictate.types import KeyEvent, KeyEventKind

if TYPE_CHECKING:
    from numpy.typing import NDArray


ENV_VARS = [
    "OPENAI_API_KEY",
    "DICTATE_AUDIO_DEVICE",
    "DICTATE_OUTPUT_MODE",
    "DICTATE_TRIGGER_KEY",
    "DICTATE_DOUBLE_PRESS_MS",
    "DICTATE_MODEL",
    "DICTATE_API_URL",
    "DICTATE_RECORDINGS_DIR",
    "DICTATE_TONES",
    "DICTATE_VERBOSE",
]


class FakeInputStream:
    """Stands in for a sounddevice.InputStream in blocking-read mode."""

    def __init__(self, blocks: list["NDArray[np.float32]"], on_read: Callable[[int], None] | None = None) -> None:
        self.blocks = [np.asarray(b, dtype=np.float32).reshape(-1, 1) for b in blocks]
        self.on_read = on_read
        self.reads = 0
        self.started = False
        self.stopped = False
        self.closed = False

    @property
    def read_available(self) -> int:
        return len(self.blocks[0]) if self.blocks else 0

    def start(self) -> None:
        self.started = True

    def stop(self) -> None:
        self.stopped = True

    def close(self) -> None:
        self.closed = True

    def read(self, frames: int) -> tuple["NDArray[np.float32]", bool]:
        block = self.blocks[0]
        data, rest = block[:frames], block[frames:]
        if len(rest):
            self.blocks[0] = rest
        else:
            self.blocks.pop(0)
        self.reads += 1
        if self.on_read:
            self.on_read(self.reads)
        return data, False


@pytest.fixture
def fake_stream() -> type[FakeInputStream]:
    """The FakeInputStream class, for building streams with scripted blocks."""
    return FakeInputStream


@pytest.fixture
def sample_audio() -> NDArray[np.float32]:
    """Generate 0.1 second of a 440Hz sine at 44.1kHz."""
    sample_rate = 44100
    t = np.arange(int(sample_rate * 0.1), dtype=np.float32) / sample_rate
    return (np.sin(2 * np.pi * 440 * t) * 0.5).astype(np.float32)


@pytest.fixture
def temp_wav_file(tmp_path: Path, sample_audio: NDArray[np.float32]) -> Path:
    """Create a WAV file with sample audio."""
    from scipy.io.wavfile import write as wav_write

    path = tmp_path / "recorded_audio_20240101_120000.wav"
    wav_write(str(path), 44100, (sample_audio * 32767).astype(np.int16))
    return path


@pytest.fixture
def quiet_config(tmp_path: Path) -> Config:
    """Configuration without beeps, writing recordings into a temp dir."""
    config = Config()
    config.tones.enabled = False
    config.audio.block_size = 4
    config.audio.poll_interval_s = 0.01
    config.recordings_dir = tmp_path
    config.transcription.api_key = "sk-test"
    config.shutdown_grace_s = 1.0
    return config


@pytest.fixture
def press() -> Callable[..., KeyEvent]:
    """Build a key event: press("c", 1.0) or press("c", 1.0, KeyEventKind.UP)."""

    def make(key: str, at: float, kind: KeyEventKind = KeyEventKind.DOWN) -> KeyEvent:
        return KeyEvent(key=key, kind=kind, timestamp=at)

    return make


@pytest.fixture
def clean_env() -> Generator[None, None, None]:
    """Fixture to clean environment variables before/after tests."""
    original_values = {var: os.environ.get(var) for var in ENV_VARS}

    for var in ENV_VARS:
        os.environ.pop(var, None)

    yield

    for var, value in original_values.items():
        if value is not None:
            os.environ[var] = value
        else:
            os.environ.pop(var, None)
