"""Speech-to-text through a remote transcription endpoint."""

from __future__ import annotations

import logging
import os
import time
from pathlib import Path
from typing import TYPE_CHECKING

import requests

from hotdictate.errors import TranscriptionError

if TYPE_CHECKING:
    from hotdictate.config import TranscriptionConfig
    from hotdictate.types import TranscriptionResponse

logger = logging.getLogger(__name__)

WAV_CONTENT_TYPE = "audio/wav"


class TranscriptionClient:
    """Uploads a WAV file and returns the recognized text."""

    def __init__(
        self,
        config: "TranscriptionConfig",
        session: requests.Session | None = None,
    ) -> None:
        self._config = config
        self._session = session or requests.Session()

    def transcribe(self, audio_path: Path) -> str:
        """
        Transcribe a WAV file.

        The file is deleted once the response has been decoded; it is left on
        disk when the upload or the decoding fails.

        Args:
            audio_path: Path of the WAV file to upload.

        Returns:
            The recognized text (possibly empty).

        Raises:
            TranscriptionError: If the file cannot be read, the request cannot
                be sent or the response is not a JSON object with text.
        """
        audio_path = Path(audio_path)
        try:
            audio_file = audio_path.open("rb")
        except OSError as e:
            raise TranscriptionError(f"opening audio file: {e}") from e

        logger.info(
            "Uploading %s (%d KB) to %s",
            audio_path.name,
            audio_path.stat().st_size // 1024,
            self._config.api_url,
        )
        t0 = time.time()
        with audio_file:
            try:
                response = self._session.post(
                    self._config.api_url,
                    headers={"Authorization": f"Bearer {self._config.api_key}"},
                    files={"file": (audio_path.name, audio_file, WAV_CONTENT_TYPE)},
                    data={"model": self._config.model},
                    timeout=self._config.timeout_s,
                )
            except (requests.RequestException, UnicodeError, ValueError) as e:
                # Header encoding errors (e.g. a non-latin-1 API key) surface as UnicodeEncodeError
                raise TranscriptionError(f"sending request: {e}") from e
        logger.info("Transcription request done in %.2fs", time.time() - t0)

        text = self._decode(response)
        self._cleanup_file(audio_path)
        return text

    def _decode(self, response: requests.Response) -> str:
        try:
            payload: "TranscriptionResponse" = response.json()
        except ValueError as e:
            raise TranscriptionError(f"decoding response: {e}") from e

        if not isinstance(payload, dict):
            raise TranscriptionError("decoding response: expected a JSON object")

        text = payload.get("text", "")
        if not isinstance(text, str):
            raise TranscriptionError("decoding response: 'text' is not a string")

        if "error" in payload and not text:
            logger.warning(
                "Transcription endpoint returned an error (HTTP %s): %s",
                response.status_code,
                payload["error"],
            )
        return text

    def _cleanup_file(self, path: Path) -> None:
        try:
            os.remove(path)
        except OSError as e:
            logger.warning("Failed to remove temporary audio file %s: %s", path, e)
            print(f"   ⚠️ Could not remove {path}: {e}")

    def close(self) -> None:
        self._session.close()
