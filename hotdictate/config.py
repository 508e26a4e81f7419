"""Configuration for the hotdictate application."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from hotdictate.errors import ConfigError
from hotdictate.keyboard import normalize_key_spec

API_KEY_ENV = "OPENAI_API_KEY"
TRUTHY = ("1", "true", "yes")


class OutputMode(str, Enum):
    TYPE = "type"
    CLIPBOARD = "clipboard"


@dataclass
class AudioConfig:
    sample_rate: int = 44_100
    channels: int = 1
    block_size: int = 1024
    device_id: int | None = None
    poll_interval_s: float = 0.05

    @property
    def block_ms(self) -> float:
        return self.block_size / self.sample_rate * 1000.0


@dataclass
class ToneConfig:
    enabled: bool = True
    start_hz: int = 880
    stop_hz: int = 440
    duration_s: float = 0.04
    volume: float = 0.15


@dataclass
class TranscriptionConfig:
    api_url: str = "https://api.openai.com/v1/audio/transcriptions"
    model: str = "whisper-1"
    api_key: str = field(default="", repr=False)
    timeout_s: float | None = None


@dataclass
class KeybindConfig:
    # Raw code the macOS hook reports for the globe/fn key
    trigger_key: str = "vk:179"
    quit_modifier: str = "ctrl"
    quit_key: str = "c"
    double_press_window_s: float = 0.5


@dataclass
class Config:
    audio: AudioConfig = field(default_factory=AudioConfig)
    tones: ToneConfig = field(default_factory=ToneConfig)
    transcription: TranscriptionConfig = field(default_factory=TranscriptionConfig)
    keybinds: KeybindConfig = field(default_factory=KeybindConfig)
    output_mode: OutputMode = OutputMode.TYPE
    recordings_dir: Path = field(default_factory=lambda: Path("."))
    shutdown_grace_s: float = 2.0
    verbose: bool = False

    @classmethod
    def from_env(cls) -> "Config":
        config = cls()

        api_key = os.environ.get(API_KEY_ENV, "").strip()
        if not api_key:
            raise ConfigError(f"{API_KEY_ENV} environment variable not set.")
        config.transcription.api_key = api_key

        if device := os.environ.get("DICTATE_AUDIO_DEVICE"):
            config.audio.device_id = _parse(int, "DICTATE_AUDIO_DEVICE", device)

        if mode := os.environ.get("DICTATE_OUTPUT_MODE"):
            config.output_mode = _parse(OutputMode, "DICTATE_OUTPUT_MODE", mode.lower())

        if key := os.environ.get("DICTATE_TRIGGER_KEY"):
            config.keybinds.trigger_key = _parse(normalize_key_spec, "DICTATE_TRIGGER_KEY", key)

        if window := os.environ.get("DICTATE_DOUBLE_PRESS_MS"):
            window_ms = _parse(int, "DICTATE_DOUBLE_PRESS_MS", window)
            if window_ms <= 0:
                raise ConfigError("DICTATE_DOUBLE_PRESS_MS must be positive")
            config.keybinds.double_press_window_s = window_ms / 1000.0

        if model := os.environ.get("DICTATE_MODEL"):
            config.transcription.model = model

        if url := os.environ.get("DICTATE_API_URL"):
            config.transcription.api_url = url

        if recordings_dir := os.environ.get("DICTATE_RECORDINGS_DIR"):
            config.recordings_dir = Path(recordings_dir).expanduser()

        if tones := os.environ.get("DICTATE_TONES"):
            config.tones.enabled = tones.lower() in TRUTHY

        if verbose := os.environ.get("DICTATE_VERBOSE"):
            config.verbose = verbose.lower() in TRUTHY

        return config


def _parse(convert, name: str, value: str):
    try:
        return convert(value)
    except ValueError as e:
        raise ConfigError(f"Invalid value for {name}: {value!r}") from e
