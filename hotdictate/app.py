"""Main Dictation application."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Iterable

from hotdictate.audio import Recorder, get_device_name, list_input_devices, play_tone
from hotdictate.config import Config
from hotdictate.errors import TranscriptionError
from hotdictate.gestures import Gesture, KeyGestureClassifier
from hotdictate.keyboard import KeyEventSource
from hotdictate.lifecycle import Lifecycle
from hotdictate.output import OutputHandler, create_output_handler
from hotdictate.state import DictationState
from hotdictate.transcribe import TranscriptionClient

if TYPE_CHECKING:
    from hotdictate.types import KeyEvent

logger = logging.getLogger(__name__)


class DictationApp:
    """
    Hotkey-triggered dictation.

    Double-pressing the trigger key starts recording, a single press stops it.
    The recording is transcribed remotely and typed into the focused window.
    """

    def __init__(
        self,
        config: Config | None = None,
        *,
        lifecycle: Lifecycle | None = None,
        state: DictationState | None = None,
        recorder: Recorder | None = None,
        transcriber: TranscriptionClient | None = None,
        output: OutputHandler | None = None,
    ) -> None:
        self._config = config or Config()
        self._lifecycle = lifecycle or Lifecycle()
        self._state = state or DictationState()

        keybinds = self._config.keybinds
        self._classifier = KeyGestureClassifier(
            trigger_key=keybinds.trigger_key,
            quit_modifier=keybinds.quit_modifier,
            quit_key=keybinds.quit_key,
            double_press_window_s=keybinds.double_press_window_s,
        )
        self._recorder = recorder or Recorder(
            self._config.audio, self._config.recordings_dir
        )
        self._transcriber = transcriber or TranscriptionClient(self._config.transcription)
        # Created in setup(): typing needs the OS input facility
        self._output = output

        self._shutdown_lock = threading.Lock()
        self._shut_down = False

    @property
    def lifecycle(self) -> Lifecycle:
        return self._lifecycle

    @property
    def state(self) -> DictationState:
        return self._state

    def setup(self) -> None:
        """Initialize all components."""
        self._print_banner()
        self._print_devices()
        if self._output is None:
            self._output = create_output_handler(self._config.output_mode)
        self._print_instructions()

    def _print_banner(self) -> None:
        print("=" * 60)
        print("🎙️ HOTDICTATE - Double-press to dictate")
        print("=" * 60)

    def _print_devices(self) -> None:
        print("\n🎤 Available audio input devices:")
        print("-" * 50)
        for device in list_input_devices():
            print(f"  {device}")
        print("-" * 50)

        device_name = get_device_name(self._config.audio.device_id)
        if self._config.audio.device_id is not None:
            print(f"\n✅ Using input device [{self._config.audio.device_id}]: {device_name}")
        else:
            print(f"\n✅ Using DEFAULT input device: {device_name}")

        print(f"\n🔊 Output mode: {self._config.output_mode.value}")
        print(f"🌐 Model: {self._config.transcription.model}")

    def _print_instructions(self) -> None:
        keybinds = self._config.keybinds
        window_ms = int(keybinds.double_press_window_s * 1000)
        print("\n" + "=" * 60)
        print("📌 INSTRUCTIONS:")
        print(f"   • Double-press [{keybinds.trigger_key}] (within {window_ms} ms) to start.")
        print(f"   • Press [{keybinds.trigger_key}] once to stop and transcribe.")
        print(f"   • Press {keybinds.quit_modifier}+{keybinds.quit_key} to quit.")
        print("=" * 60)
        print("\n🟢 Ready!\n")

    def handle_event(self, event: "KeyEvent") -> Gesture:
        """Classify one key event and act on the resulting gesture."""
        gesture = self._classifier.feed(event)

        if gesture == Gesture.DOUBLE_PRESS:
            self._on_double_press()
        elif gesture == Gesture.SINGLE_PRESS:
            self._on_single_press()
        elif gesture == Gesture.QUIT:
            print("\n👋 Quit chord pressed.")
            self._lifecycle.cancel("quit chord")
        return gesture

    def process_events(self, events: Iterable["KeyEvent"]) -> None:
        """Classifier loop. Returns on quit or lifecycle cancellation."""
        for event in events:
            if self._lifecycle.is_cancelled:
                break
            if self.handle_event(event) == Gesture.QUIT:
                break

    def _on_double_press(self) -> None:
        session_id = self._state.try_start()
        if session_id is None:
            if self._state.is_recording:
                logger.debug("Double press while recording, ignored")
            else:
                print("⏳ Previous recording is still closing, try again.")
            return

        try:
            self._lifecycle.spawn(self._run_session, session_id, name=f"session-{session_id}")
        except RuntimeError as e:
            logger.error("Could not start session thread: %s", e)
            self._state.release(session_id)
            return
        print("⏩ Double press detected, starting dictation")
        self._play_tone(self._config.tones.start_hz)

    def _on_single_press(self) -> None:
        if not self._state.stop():
            return
        print("⏹️ Single press detected, stopping dictation")
        self._play_tone(self._config.tones.stop_hz)

    def _play_tone(self, frequency_hz: float) -> None:
        try:
            play_tone(self._config.tones, frequency_hz, self._config.audio.sample_rate)
        except Exception as e:
            logger.warning("Could not play tone: %s", e)

    def _run_session(self, session_id: int) -> None:
        """Record, transcribe and type. Errors end this session only."""
        try:
            audio_path = self._recorder.record(
                lambda: self._state.is_active(session_id),
                self._lifecycle,
            )
        except Exception as e:
            logger.exception("Recording failed: %s", e)
            print(f"❌ Error saving audio file: {e}")
            return
        finally:
            self._state.release(session_id)

        if self._lifecycle.is_cancelled:
            print(f"💾 Shutting down, recording kept at {audio_path}")
            return

        try:
            text = self._transcriber.transcribe(audio_path).strip()
        except TranscriptionError as e:
            logger.error("Transcription failed: %s", e)
            print(f"❌ Error transcribing: {e}")
            return
        except Exception as e:
            logger.exception("Unexpected transcription failure: %s", e)
            print(f"❌ Error transcribing: {e}")
            return

        if not text:
            print("🤷 Nothing was recognized.")
            return

        print(f"\n✅ You said: \"{text}\"")
        self._emit_output(text)

    def _emit_output(self, text: str) -> None:
        if self._output is None:
            logger.error("No output handler. Call setup() first.")
            return
        try:
            self._output.output(text)
        except Exception as e:
            logger.error("Output error: %s", e)
            print(f"   ⚠️ Output error: {e}")

    def run(self) -> None:
        """Run until a termination signal or the quit chord."""
        self._lifecycle.install_signal_handlers()
        self.setup()

        source = KeyEventSource()
        self._lifecycle.on_cancel(source.close)
        source.start()
        try:
            self.process_events(source.events(self._lifecycle))
        finally:
            source.stop()

        print("Shutting down now...")

    def shutdown(self) -> None:
        """Stop recording, wait briefly for in-flight sessions, restore signals."""
        with self._shutdown_lock:
            if self._shut_down:
                return
            self._shut_down = True

        logger.info("Shutting down...")
        self._state.stop()
        self._lifecycle.cancel("shutdown")

        if not self._lifecycle.join_sessions(self._config.shutdown_grace_s):
            print("⚠️ Some dictation sessions did not finish in time.")

        self._lifecycle.restore_signal_handlers()
        self._transcriber.close()
