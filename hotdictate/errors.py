"""Exception types for the hotdictate application."""

from __future__ import annotations


class DictateError(Exception):
    """Base class for all application errors."""


class ConfigError(DictateError):
    """Invalid or missing configuration. Fatal at startup."""


class RecordingError(DictateError):
    """The audio stream could not be opened, started or read."""


class TranscriptionError(DictateError):
    """The audio could not be uploaded or the response could not be decoded."""
