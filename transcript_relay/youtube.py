"""YouTube URL validation."""

import re

# youtube.com (any subdomain: www., m., music.) and youtu.be; scheme and port optional
_YOUTUBE_HOST_PATTERN = re.compile(
    r"^(https?://)?([a-z0-9-]+\.)*(youtube\.com|youtu\.be)(:\d+)?([/?#]|$)",
    re.IGNORECASE,
)


def is_youtube_url(url: str) -> bool:
    """Return True if url points at an allowed YouTube host, else False."""
    if not isinstance(url, str) or not url.strip():
        return False
    return bool(_YOUTUBE_HOST_PATTERN.match(url.strip()))
