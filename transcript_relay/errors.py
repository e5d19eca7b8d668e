"""Failure taxonomy for the fetch-transcript endpoint.

Each error carries the HTTP status and the short human-readable label sent
to the caller. Anything diagnostic (process output, service payloads) goes
into ``details``, which is logged server-side and never returned.
"""

from typing import Any


class TranscriptRelayError(Exception):
    """Base class for all categorized request failures."""

    status_code: int = 500
    default_label: str = "Internal server error."

    def __init__(self, label: str | None = None, **details: Any) -> None:
        self.label = label or self.default_label
        self.details = details
        super().__init__(self.label)


class InvalidInput(TranscriptRelayError):
    """Missing, non-string or non-YouTube video URL."""

    status_code = 400
    default_label = "Please send a valid YouTube URL."


class FilesystemError(TranscriptRelayError):
    """The scratch directory could not be created."""

    default_label = "Could not create tmp directory on the server."


class DownloadFailed(TranscriptRelayError):
    """yt-dlp could not be started, exited non-zero, or produced no audio file."""

    default_label = (
        "Audio download failed. Check yt-dlp is installed and the video is accessible."
    )


class TranscriptionFailed(TranscriptRelayError):
    """Missing credentials, or the transcription service call failed."""

    default_label = "OpenAI transcription failed. Check your API key and model."


class ResponseSerializationError(TranscriptRelayError):
    """The transcript could not be turned into a response body."""

    default_label = "Failed to send transcript response."


VIDEO_URL_REQUIRED = "videoUrl is required"
NO_AUDIO_FILES = "Audio download failed: no audio files found."
MISSING_API_KEY = "OPENAI_API_KEY is not set on the server. Add it and redeploy."
