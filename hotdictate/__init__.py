"""
hotdictate - Hotkey-triggered voice dictation

Double-press a hotkey to record, press it again to have the recording
transcribed by a cloud speech-to-text service and typed into the focused app.
"""

__version__ = "1.0.0"

from hotdictate.app import DictationApp
from hotdictate.config import Config

__all__ = ["DictationApp", "Config", "__version__"]
