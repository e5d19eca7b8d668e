"""Transcript pipeline: yt-dlp best audio into a per-request scratch dir, then OpenAI transcription."""

import shutil
from pathlib import Path
from tempfile import mkdtemp

import structlog
from opentelemetry import trace

from transcript_relay.downloader import AudioDownloader, find_audio_file
from transcript_relay.errors import VIDEO_URL_REQUIRED, FilesystemError, InvalidInput
from transcript_relay.transcriber import Transcriber
from transcript_relay.youtube import is_youtube_url

logger = structlog.get_logger()
tracer = trace.get_tracer(__name__)


def validate_video_url(video_url: object) -> str:
    """Return the URL if it is a YouTube URL string. Raises InvalidInput otherwise."""
    if not video_url or not isinstance(video_url, str):
        raise InvalidInput(VIDEO_URL_REQUIRED)
    if not is_youtube_url(video_url):
        raise InvalidInput(video_url=video_url)
    return video_url


def _make_request_dir(scratch_root: Path) -> Path:
    """Create scratch_root if needed and a fresh subdirectory for one request."""
    try:
        scratch_root.mkdir(parents=True, exist_ok=True)
        return Path(mkdtemp(prefix="request-", dir=scratch_root))
    except OSError as e:
        raise FilesystemError(scratch_root=str(scratch_root), reason=str(e)) from e


def _cleanup(request_dir: Path) -> None:
    try:
        shutil.rmtree(request_dir)
    except OSError as e:
        logger.warning(
            "fetch_transcript.cleanup_failed",
            request_dir=str(request_dir),
            error=str(e),
        )
    else:
        logger.info("fetch_transcript.cleanup_complete", request_dir=str(request_dir))


def fetch_transcript(
    video_url: object,
    *,
    downloader: AudioDownloader,
    transcriber: Transcriber,
    scratch_root: Path,
) -> str:
    """Download the audio of video_url and return its transcript text.

    Raises InvalidInput, FilesystemError, DownloadFailed or TranscriptionFailed.
    Nothing is retried. The request's scratch directory, and the audio file in
    it, are removed whatever the outcome once they have been created.
    """
    video_url = validate_video_url(video_url)
    logger.info("fetch_transcript.start", video_url=video_url)
    # No point downloading audio that cannot be uploaded.
    transcriber.ensure_configured()

    with tracer.start_as_current_span("fetch_transcript") as span:
        span.set_attribute("video.url", video_url)
        request_dir = _make_request_dir(scratch_root)
        try:
            with tracer.start_as_current_span("download_audio"):
                downloader.download(video_url, request_dir)
                audio_path = find_audio_file(request_dir)
            span.set_attribute("audio.file", audio_path.name)

            with tracer.start_as_current_span("transcribe_audio"):
                transcript = transcriber.transcribe(audio_path)
        finally:
            _cleanup(request_dir)

    logger.info("fetch_transcript.success", video_url=video_url)
    return transcript
