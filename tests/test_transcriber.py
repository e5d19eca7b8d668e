"""Tests for the OpenAI transcriber. The OpenAI client is always mocked."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import httpx
import openai
import pytest

from transcript_relay.errors import MISSING_API_KEY, TranscriptionFailed
from transcript_relay.transcriber import OpenAITranscriber


def _audio_file(tmp_path: Path) -> Path:
    path = tmp_path / "audio-abc123.m4a"
    path.write_bytes(b"fake_audio")
    return path


def test_transcribe_sends_fixed_model_format_and_temperature(tmp_path: Path) -> None:
    """The file is uploaded with the configured model, json format and temperature."""
    audio_path = _audio_file(tmp_path)
    with patch("transcript_relay.transcriber.OpenAI") as mock_openai_cls:
        create = mock_openai_cls.return_value.audio.transcriptions.create
        create.return_value = MagicMock(text="hello world")
        transcriber = OpenAITranscriber(api_key="sk-test")
        text = transcriber.transcribe(audio_path)

    assert text == "hello world"
    mock_openai_cls.assert_called_once_with(api_key="sk-test")
    kwargs = create.call_args[1]
    assert kwargs["model"] == "gpt-4o-mini-transcribe"
    assert kwargs["response_format"] == "json"
    assert kwargs["temperature"] == 0.2
    assert str(kwargs["file"].name) == str(audio_path)


def test_transcribe_returns_text_unmodified(tmp_path: Path) -> None:
    audio_path = _audio_file(tmp_path)
    with patch("transcript_relay.transcriber.OpenAI") as mock_openai_cls:
        mock_openai_cls.return_value.audio.transcriptions.create.return_value = MagicMock(
            text="  Hello,\nworld.  "
        )
        text = OpenAITranscriber(api_key="sk-test").transcribe(audio_path)
    assert text == "  Hello,\nworld.  "


def test_missing_api_key_fails_without_creating_client(tmp_path: Path) -> None:
    """No key → TranscriptionFailed before any client or upload."""
    audio_path = _audio_file(tmp_path)
    with patch("transcript_relay.transcriber.OpenAI") as mock_openai_cls:
        transcriber = OpenAITranscriber(api_key=None)
        with pytest.raises(TranscriptionFailed) as exc_info:
            transcriber.transcribe(audio_path)

    assert exc_info.value.label == MISSING_API_KEY
    mock_openai_cls.assert_not_called()


def test_ensure_configured_passes_with_key() -> None:
    OpenAITranscriber(api_key="sk-test").ensure_configured()


def test_service_error_raises_transcription_failed_with_payload(tmp_path: Path) -> None:
    """An API status error → TranscriptionFailed carrying status code and body."""
    audio_path = _audio_file(tmp_path)
    request = httpx.Request("POST", "https://api.openai.com/v1/audio/transcriptions")
    response = httpx.Response(401, request=request)
    error = openai.AuthenticationError(
        "Incorrect API key provided",
        response=response,
        body={"error": {"message": "Incorrect API key provided"}},
    )
    with patch("transcript_relay.transcriber.OpenAI") as mock_openai_cls:
        mock_openai_cls.return_value.audio.transcriptions.create.side_effect = error
        with pytest.raises(TranscriptionFailed) as exc_info:
            OpenAITranscriber(api_key="sk-bad").transcribe(audio_path)

    failure = exc_info.value
    assert failure.status_code == 500
    assert failure.label == "OpenAI transcription failed. Check your API key and model."
    assert failure.details["status_code"] == 401
    assert failure.details["response_body"] == {"error": {"message": "Incorrect API key provided"}}
    assert failure.__cause__ is error


def test_connection_error_raises_transcription_failed(tmp_path: Path) -> None:
    audio_path = _audio_file(tmp_path)
    request = httpx.Request("POST", "https://api.openai.com/v1/audio/transcriptions")
    with patch("transcript_relay.transcriber.OpenAI") as mock_openai_cls:
        mock_openai_cls.return_value.audio.transcriptions.create.side_effect = (
            openai.APIConnectionError(request=request)
        )
        with pytest.raises(TranscriptionFailed):
            OpenAITranscriber(api_key="sk-test").transcribe(audio_path)


def test_missing_audio_file_raises_transcription_failed(tmp_path: Path) -> None:
    with patch("transcript_relay.transcriber.OpenAI"):
        with pytest.raises(TranscriptionFailed):
            OpenAITranscriber(api_key="sk-test").transcribe(tmp_path / "audio-missing.m4a")
