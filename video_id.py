"""
Video identifier resolution.

Turns whatever the caller supplied (a bare ID or one of the common YouTube
URL shapes) into the identifier the extraction strategies work with.
"""

import re
from typing import Optional

# Tried in order; first capture wins
VIDEO_ID_PATTERNS = (
    re.compile(r"[?&]v=([^&]+)"),                 # youtube.com/watch?v=ID
    re.compile(r"youtu\.be/([^?&]+)"),            # youtu.be/ID
    re.compile(r"youtube\.com/embed/([^?&]+)"),   # youtube.com/embed/ID
)

_URL_MARKERS = ("http", "/", ".")


def looks_like_url(value: str) -> bool:
    return any(marker in value for marker in _URL_MARKERS)


def resolve_video_id(value) -> Optional[str]:
    """
    Resolve a raw ID or YouTube URL to a video ID.

    Anything without URL markers is passed through unchanged; the ID is not
    validated here, the strategies fail on garbage later.

    Returns:
        The video ID, or None when no pattern matches.
    """
    if not isinstance(value, str):
        return None

    trimmed = value.strip()
    if not trimmed:
        return None

    if not looks_like_url(trimmed):
        return trimmed

    for pattern in VIDEO_ID_PATTERNS:
        match = pattern.search(trimmed)
        if match:
            return match.group(1)

    return None
