"""
Helpers for reading the player-state JSON YouTube embeds in the watch page.

The watch page is HTML with large JSON documents inlined in <script> tags.
Nothing about that document is guaranteed, so every lookup goes through
dig(), which treats any missing or mistyped level as absent.
"""

import json
import re
from typing import Any, List, Optional

from caption_tracks import CaptionTrack, tracks_from_renderer

PLAYER_RESPONSE_RE = re.compile(r"ytInitialPlayerResponse\s*=\s*\{")
INNERTUBE_API_KEY_RE = re.compile(r'"INNERTUBE_API_KEY":"([^"]+)"')
CAPTCHA_MARKER = 'class="g-recaptcha"'
UNPLAYABLE_STATUSES = frozenset({"ERROR", "UNPLAYABLE"})

CAPTIONS_KEY = '"captions":'
# Sibling keys that follow "captions" in the player response
CAPTIONS_END_MARKERS = (
    ',"videoDetails"',
    ',"microformat"',
    ',"cards"',
    ',"attestation"',
    ',"storyboards"',
)


def dig(document: Any, *path: str) -> Any:
    """Walk nested dicts; None as soon as a level is missing or not a dict."""
    current = document
    for key in path:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def extract_balanced_json(source: str, start: int) -> Optional[str]:
    """
    Return the JSON object text starting at the first "{" at or after start.

    Counts brace depth and skips braces inside string literals (honouring
    backslash escapes). Returns None if the object never closes, e.g. when
    the HTML was truncated.
    """
    begin = source.find("{", start)
    if begin < 0:
        return None

    depth = 0
    in_string = False
    escaped = False

    for index in range(begin, len(source)):
        char = source[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return source[begin:index + 1]

    return None


def extract_initial_player_response(html: str) -> Optional[dict]:
    """Parse the ytInitialPlayerResponse object; None if absent, unbalanced or invalid."""
    match = PLAYER_RESPONSE_RE.search(html)
    if not match:
        return None

    object_text = extract_balanced_json(html, match.end() - 1)
    if object_text is None:
        return None

    try:
        document = json.loads(object_text)
    except ValueError:
        return None
    return document if isinstance(document, dict) else None


def extract_captions_fragment(html: str) -> Optional[str]:
    """
    Cut the value of the first "captions": key out of the page.

    The fragment is not independently balanced, so it is bounded by the
    earliest known sibling key instead of by brace matching.
    """
    parts = html.split(CAPTIONS_KEY, 1)
    if len(parts) < 2:
        return None

    fragment = parts[1]
    end_index = len(fragment)
    for marker in CAPTIONS_END_MARKERS:
        index = fragment.find(marker)
        if 0 < index < end_index:
            end_index = index
    return fragment[:end_index]


def playability_status(player_response: Any) -> Optional[str]:
    status = dig(player_response, "playabilityStatus", "status")
    return status if isinstance(status, str) else None


def is_unplayable(player_response: Any) -> bool:
    return playability_status(player_response) in UNPLAYABLE_STATUSES


def caption_tracks_from(captions: Any) -> List[CaptionTrack]:
    """Tracks listed under a captions object (playerCaptionsTracklistRenderer.captionTracks)."""
    return tracks_from_renderer(dig(captions, "playerCaptionsTracklistRenderer", "captionTracks"))


def player_caption_tracks(player_response: Any) -> List[CaptionTrack]:
    """Tracks listed in a full player response document."""
    return caption_tracks_from(dig(player_response, "captions"))


def find_innertube_api_key(html: str) -> Optional[str]:
    match = INNERTUBE_API_KEY_RE.search(html)
    return match.group(1) if match else None


def is_captcha_page(html: str) -> bool:
    return CAPTCHA_MARKER in html
