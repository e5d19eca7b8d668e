"""Audio download with the yt-dlp executable."""

import subprocess
from pathlib import Path
from typing import Protocol

import structlog

from transcript_relay.errors import NO_AUDIO_FILES, DownloadFailed

logger = structlog.get_logger()

AUDIO_PREFIX = "audio-"
# yt-dlp picks the extension (webm, m4a, ...); no post-processing, no re-encode.
OUTPUT_TEMPLATE = AUDIO_PREFIX + "%(id)s.%(ext)s"
# In-progress download and its resume sidecar.
_PARTIAL_SUFFIXES = (".part", ".ytdl")


class AudioDownloader(Protocol):
    """Fetches the best available audio for a video URL into a directory."""

    def download(self, video_url: str, output_dir: Path) -> None: ...


class YtDlpDownloader:
    """Runs ``yt-dlp -f bestaudio`` as a subprocess."""

    def __init__(self, executable: str = "yt-dlp") -> None:
        self.executable = executable

    def build_command(self, video_url: str, output_dir: Path) -> list[str]:
        return [
            self.executable,
            "-f",
            "bestaudio",
            "-o",
            str(output_dir / OUTPUT_TEMPLATE),
            video_url,
        ]

    def download(self, video_url: str, output_dir: Path) -> None:
        """Download into output_dir. Raises DownloadFailed on spawn error or non-zero exit."""
        cmd = self.build_command(video_url, output_dir)
        logger.info("download_audio.start", video_url=video_url, executable=self.executable)
        try:
            # Titles in the output need not be valid UTF-8.
            result = subprocess.run(
                cmd, capture_output=True, encoding="utf-8", errors="replace"
            )
        except OSError as e:
            raise DownloadFailed(executable=self.executable, reason=str(e)) from e

        logger.info("download_audio.stdout", stdout=result.stdout)
        if result.stderr:
            logger.info("download_audio.stderr", stderr=result.stderr)
        if result.returncode != 0:
            raise DownloadFailed(
                returncode=result.returncode,
                stdout=result.stdout,
                stderr=result.stderr,
            )


def find_audio_file(output_dir: Path) -> Path:
    """Return the downloaded audio file in output_dir, skipping partial downloads.

    Raises DownloadFailed when there is none. With several candidates the most
    recently modified wins.
    """
    candidates = [
        p
        for p in output_dir.iterdir()
        if p.is_file()
        and p.name.startswith(AUDIO_PREFIX)
        and not p.name.endswith(_PARTIAL_SUFFIXES)
    ]
    if not candidates:
        raise DownloadFailed(NO_AUDIO_FILES, output_dir=str(output_dir))
    audio_path = max(candidates, key=lambda p: p.stat().st_mtime)
    logger.info("download_audio.using_file", audio_path=str(audio_path))
    return audio_path
