from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable

import numpy as np
from scipy.io.wavfile import write as wav_write

from hotdictate.errors import RecordingError

if TYPE_CHECKING:
    from numpy.typing import ArrayLike, NDArray

    from hotdictate.config import AudioConfig, ToneConfig
    from hotdictate.lifecycle import Lifecycle

logger = logging.getLogger(__name__)

FADE_DURATION_SECONDS = 0.008
INT16_MAX = 32767.0
FIRST_CHANNEL_INDEX = 0
FILENAME_FORMAT = "recorded_audio_%Y%m%d_%H%M%S.wav"

StreamFactory = Callable[["AudioConfig"], Any]


@dataclass
class AudioDevice:
    index: int
    name: str
    is_default: bool = False

    def __str__(self) -> str:
        marker = " (DEFAULT)" if self.is_default else ""
        return f"[{self.index}] {self.name}{marker}"


def list_input_devices() -> list[AudioDevice]:
    import sounddevice as sd

    devices = sd.query_devices()
    default_input = sd.default.device[FIRST_CHANNEL_INDEX]

    input_devices = []
    for i, dev in enumerate(devices):
        if dev["max_input_channels"] > 0:  # type: ignore[index]
            input_devices.append(
                AudioDevice(
                    index=i,
                    name=dev["name"],  # type: ignore[index]
                    is_default=(i == default_input),
                )
            )
    return input_devices


def get_device_name(device_id: int | None) -> str:
    import sounddevice as sd

    if device_id is not None:
        info = sd.query_devices(device_id)
    else:
        default_id = sd.default.device[FIRST_CHANNEL_INDEX]
        info = sd.query_devices(default_id)
    return info["name"]  # type: ignore[index,return-value]


def play_tone(config: "ToneConfig", frequency_hz: int, sample_rate: int) -> None:
    if not config.enabled:
        return

    import sounddevice as sd

    n_samples = int(sample_rate * config.duration_s)
    t = np.arange(n_samples, dtype=np.float32) / sample_rate
    tone = np.sin(2.0 * np.pi * frequency_hz * t) * config.volume

    fade_samples = max(1, int(FADE_DURATION_SECONDS * sample_rate))
    if fade_samples * 2 < n_samples:
        window = np.ones(n_samples, dtype=np.float32)
        window[:fade_samples] = np.linspace(0, 1, fade_samples, dtype=np.float32)
        window[-fade_samples:] = np.linspace(1, 0, fade_samples, dtype=np.float32)
        tone *= window

    sd.play(tone.astype(np.float32), sample_rate, blocking=False)


def open_input_stream(config: "AudioConfig") -> Any:
    import sounddevice as sd

    return sd.InputStream(
        samplerate=config.sample_rate,
        channels=config.channels,
        dtype="float32",
        blocksize=config.block_size,
        device=config.device_id,
    )


def to_int16(samples: "ArrayLike") -> "NDArray[np.int16]":
    """Scale normalized float samples to 16-bit integers, truncating toward zero."""
    scaled = np.asarray(samples, dtype=np.float32) * np.float32(INT16_MAX)
    return scaled.astype(np.int16)


def recording_path(directory: Path, now: datetime | None = None) -> Path:
    now = now or datetime.now()
    return (directory / now.strftime(FILENAME_FORMAT)).resolve()


def save_wav(
    samples: "ArrayLike",
    sample_rate: int,
    directory: Path,
    now: datetime | None = None,
) -> Path:
    """Write mono 16-bit PCM and return the absolute path of the file."""
    path = recording_path(directory, now)
    path.parent.mkdir(parents=True, exist_ok=True)
    wav_write(str(path), sample_rate, to_int16(samples))
    return path


class Recorder:
    """
    Records one session of microphone audio.

    Blocks are read while ``keep_recording()`` holds and the lifecycle is live;
    whatever was captured is written to a WAV file when either stops.
    """

    def __init__(
        self,
        audio_config: "AudioConfig",
        recordings_dir: Path,
        stream_factory: StreamFactory = open_input_stream,
    ) -> None:
        self._config = audio_config
        self._recordings_dir = recordings_dir
        self._stream_factory = stream_factory

    def record(self, keep_recording: Callable[[], bool], lifecycle: "Lifecycle") -> Path:
        blocks: list["NDArray[np.float32]"] = []

        try:
            stream = self._stream_factory(self._config)
        except Exception as e:
            raise RecordingError(f"opening audio stream: {e}") from e

        try:
            try:
                stream.start()
            except Exception as e:
                raise RecordingError(f"starting audio stream: {e}") from e

            print("🎙️ Recording... press the trigger key again to stop.")
            while keep_recording() and not lifecycle.is_cancelled:
                block = self._read_block(stream, keep_recording, lifecycle)
                if block.size:
                    blocks.append(block)

            try:
                stream.stop()
            except Exception as e:
                raise RecordingError(f"stopping audio stream: {e}") from e
        finally:
            self._close(stream)

        if lifecycle.is_cancelled:
            print("⛔️ Recording interrupted, saving captured audio.")
        else:
            print("🛑 Recording finished.")

        samples = np.concatenate(blocks) if blocks else np.zeros(0, dtype=np.float32)
        duration_s = len(samples) / self._config.sample_rate
        logger.info("Captured %d samples (%.2fs)", len(samples), duration_s)
        return save_wav(samples, self._config.sample_rate, self._recordings_dir)

    def _read_block(
        self,
        stream: Any,
        keep_recording: Callable[[], bool],
        lifecycle: "Lifecycle",
    ) -> "NDArray[np.float32]":
        frames = self._config.block_size
        # Wait in short slices so a stop or cancellation is seen without a full block
        while stream.read_available < frames:
            if not keep_recording() or lifecycle.wait(self._config.poll_interval_s):
                frames = stream.read_available
                if frames <= 0:
                    return np.zeros(0, dtype=np.float32)
                break

        try:
            data, overflowed = stream.read(frames)
        except Exception as e:
            raise RecordingError(f"reading from stream: {e}") from e

        if overflowed:
            logger.warning("Audio input overflow")
        return np.asarray(data, dtype=np.float32)[:, FIRST_CHANNEL_INDEX].copy()

    def _close(self, stream: Any) -> None:
        try:
            stream.close()
        except Exception as e:
            logger.warning("Error closing audio stream: %s", e)
