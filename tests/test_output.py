"""Tests for the output module."""

from __future__ import annotations

import types
from typing import Iterator
from unittest.mock import MagicMock, patch

import pytest

from hotdictate.config import OutputMode
from hotdictate.output import (
    ClipboardOutput,
    FallbackOutput,
    OutputHandler,
    TyperOutput,
    create_output_handler,
)


@pytest.fixture
def keyboard_controller() -> Iterator[MagicMock]:
    """Stand in for pynput.keyboard.Controller without touching the display."""
    controller_cls = MagicMock(name="Controller")
    pynput = types.ModuleType("pynput")
    pynput_keyboard = types.ModuleType("pynput.keyboard")
    pynput_keyboard.Controller = controller_cls
    pynput.keyboard = pynput_keyboard
    with patch.dict("sys.modules", {"pynput": pynput, "pynput.keyboard": pynput_keyboard}):
        yield controller_cls


class TestClipboardOutput:
    """Tests for ClipboardOutput."""

    @patch("hotdictate.output.pyperclip.copy")
    def test_copies_text(self, mock_copy: MagicMock) -> None:
        """Test text is placed on the clipboard."""
        ClipboardOutput().output("hello")
        mock_copy.assert_called_once_with("hello")


class TestTyperOutput:
    """Tests for TyperOutput."""

    def test_types_text(self, keyboard_controller: MagicMock) -> None:
        """Test the transcript is typed through the keyboard controller."""
        TyperOutput(settle_delay_s=0).output("hi")
        keyboard_controller.return_value.type.assert_called_once_with("hi")

    @patch("hotdictate.output.time.sleep")
    def test_waits_for_trigger_release(self, mock_sleep: MagicMock, keyboard_controller: MagicMock) -> None:
        """Test typing starts after the settle delay."""
        TyperOutput(settle_delay_s=0.05).output("hi")
        mock_sleep.assert_called_once_with(0.05)

    def test_type_failure_is_raised(self, keyboard_controller: MagicMock) -> None:
        """Test a refused keystroke injection propagates to the caller."""
        keyboard_controller.return_value.type.side_effect = RuntimeError("not trusted")
        with pytest.raises(RuntimeError, match="not trusted"):
            TyperOutput(settle_delay_s=0).output("hi")


class TestFallbackOutput:
    """Tests for FallbackOutput."""

    def test_primary_only_on_success(self) -> None:
        """Test the fallback is untouched when the primary works."""
        primary, fallback = MagicMock(spec=OutputHandler), MagicMock(spec=OutputHandler)
        FallbackOutput(primary, fallback).output("text")
        primary.output.assert_called_once_with("text")
        fallback.output.assert_not_called()

    def test_fallback_on_failure(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test a failing primary hands the text to the fallback and prints the hint."""
        primary = MagicMock(spec=OutputHandler)
        primary.output.side_effect = RuntimeError("no accessibility permission")
        fallback = MagicMock(spec=OutputHandler)

        FallbackOutput(primary, fallback, hint="paste it").output("text")
        fallback.output.assert_called_once_with("text")
        assert "paste it" in capsys.readouterr().out

    def test_fallback_failure_propagates(self) -> None:
        """Test the error surfaces when both handlers fail."""
        primary = MagicMock(spec=OutputHandler)
        primary.output.side_effect = RuntimeError("typing refused")
        fallback = MagicMock(spec=OutputHandler)
        fallback.output.side_effect = RuntimeError("no clipboard")

        with pytest.raises(RuntimeError, match="no clipboard"):
            FallbackOutput(primary, fallback).output("text")


class TestCreateOutputHandler:
    """Tests for create_output_handler."""

    def test_clipboard_mode(self) -> None:
        """Test clipboard mode returns the clipboard handler only."""
        handler = create_output_handler(OutputMode.CLIPBOARD)
        assert isinstance(handler, ClipboardOutput)

    @patch("hotdictate.output.pyperclip.copy")
    def test_type_mode(self, mock_copy: MagicMock, keyboard_controller: MagicMock) -> None:
        """Test type mode types and only copies when typing fails."""
        handler = create_output_handler(OutputMode.TYPE)
        assert isinstance(handler, FallbackOutput)

        handler.output("hello")
        keyboard_controller.return_value.type.assert_called_once_with("hello")
        mock_copy.assert_not_called()

        keyboard_controller.return_value.type.side_effect = RuntimeError("not trusted")
        handler.output("again")
        mock_copy.assert_called_once_with("again")
