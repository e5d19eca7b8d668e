"""Speech-to-text through the OpenAI audio transcription API."""

from pathlib import Path
from typing import Protocol

import openai
import structlog
from openai import OpenAI

from transcript_relay.errors import MISSING_API_KEY, TranscriptionFailed

logger = structlog.get_logger()


class Transcriber(Protocol):
    """Turns an audio file into text."""

    def ensure_configured(self) -> None: ...

    def transcribe(self, audio_path: Path) -> str: ...


class OpenAITranscriber:
    """Uploads the audio file with a fixed model and temperature, JSON response format."""

    def __init__(
        self,
        api_key: str | None,
        model: str = "gpt-4o-mini-transcribe",
        temperature: float = 0.2,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self._client: OpenAI | None = None

    def ensure_configured(self) -> None:
        """Raise TranscriptionFailed if there is no API key."""
        if not self.api_key:
            raise TranscriptionFailed(MISSING_API_KEY)

    @property
    def client(self) -> OpenAI:
        # Created on first use: OpenAI() refuses to build without a key.
        if self._client is None:
            self._client = OpenAI(api_key=self.api_key)
        return self._client

    def transcribe(self, audio_path: Path) -> str:
        """Return the transcript text unmodified. Raises TranscriptionFailed on any service error."""
        self.ensure_configured()
        logger.info("transcribe_audio.start", audio_path=str(audio_path), model=self.model)
        try:
            with open(audio_path, "rb") as audio_file:
                transcription = self.client.audio.transcriptions.create(
                    file=audio_file,
                    model=self.model,
                    response_format="json",
                    temperature=self.temperature,
                )
        except openai.OpenAIError as e:
            raise TranscriptionFailed(
                reason=str(e),
                status_code=getattr(e, "status_code", None),
                response_body=getattr(e, "body", None),
            ) from e
        except OSError as e:
            raise TranscriptionFailed(reason=str(e), audio_path=str(audio_path)) from e
        logger.info("transcribe_audio.success", audio_path=str(audio_path))
        return transcription.text
