#!/usr/bin/env python3
"""
hotdictate - Hotkey-triggered voice dictation

Double-press the trigger key to start recording, press it once to stop.
The recording is transcribed by the OpenAI API and typed into the focused window.

Usage:
    python dictate_hotkey.py

Environment Variables:
    OPENAI_API_KEY           API key for the transcription endpoint (required)
    DICTATE_AUDIO_DEVICE     Audio input device index
    DICTATE_OUTPUT_MODE      Output mode: 'type' or 'clipboard'
    DICTATE_TRIGGER_KEY      Trigger key, e.g. 'alt_r', 'f13' or 'vk:179'
    DICTATE_DOUBLE_PRESS_MS  Double-press window in milliseconds
    DICTATE_MODEL            Transcription model (default: whisper-1)
    DICTATE_API_URL          Transcription endpoint URL
    DICTATE_RECORDINGS_DIR   Directory for temporary WAV files
    DICTATE_TONES            Start/stop beeps: '1' or 'true'
    DICTATE_VERBOSE          Enable verbose logging: '1' or 'true'
"""

from hotdictate.__main__ import main

if __name__ == "__main__":
    raise SystemExit(main())
