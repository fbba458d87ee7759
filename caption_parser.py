"""
Caption body parsing.

Normalizes the raw body of a caption track (json3 events or XML) into one
flat transcript string: entity-decoded, tag-stripped, whitespace-collapsed.
Each strategy reads a slightly different upstream vocabulary, so three entry
points are exposed:

- parse_caption_body: track bodies fetched from a player-response baseUrl
- parse_timedtext_body: responses from the public timedtext endpoint
- parse_innertube_body: track bodies fetched through the youtubei player API
"""

import json
import re
from typing import Any, List, Optional, Sequence, Tuple

# Order matters: &amp; first so "&amp;lt;" decodes to "&lt;", not "<"
FULL_ENTITIES: Tuple[Tuple[str, str], ...] = (
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&nbsp;", " "),
)

BASIC_ENTITIES: Tuple[Tuple[str, str], ...] = (
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&#39;", "'"),
)

TEXT_ELEMENT_RE = re.compile(r"<text[^>]*>(.*?)</text>", re.DOTALL)
P_ELEMENT_RE = re.compile(r"<p[^>]*>([^<]*)</p>")
TAG_RE = re.compile(r"<[^>]+>")
WHITESPACE_RE = re.compile(r"\s+")


def collapse_whitespace(text: str) -> str:
    return WHITESPACE_RE.sub(" ", text).strip()


def decode_entities(text: str, entities: Sequence[Tuple[str, str]] = FULL_ENTITIES) -> str:
    for entity, replacement in entities:
        text = text.replace(entity, replacement)
    return text


def _join_segments(segments: List[str]) -> Optional[str]:
    if not segments:
        return None
    transcript = collapse_whitespace(" ".join(segments))
    return transcript or None


def parse_json3_events(document: Any) -> Optional[str]:
    """
    Flatten a json3 caption document.

    Only events carrying a segs list contribute; each event is the
    concatenation of its segments' utf8 values, events are space-joined.
    """
    if not isinstance(document, dict):
        return None
    events = document.get("events")
    if not isinstance(events, list):
        return None

    parts = []
    for event in events:
        if not isinstance(event, dict) or not isinstance(event.get("segs"), list):
            continue
        parts.append("".join(
            str(seg.get("utf8") or "") if isinstance(seg, dict) else ""
            for seg in event["segs"]
        ))

    transcript = collapse_whitespace(" ".join(parts))
    return transcript or None


def extract_text_segments(body: str, entities: Sequence[Tuple[str, str]] = FULL_ENTITIES,
                          pattern=TEXT_ELEMENT_RE) -> List[str]:
    """Inner text of every matching element, decoded and stripped of nested tags."""
    segments = []
    for match in pattern.finditer(body):
        text = decode_entities(match.group(1), entities)
        text = TAG_RE.sub("", text)
        text = text.replace("\n", " ").strip()
        if text:
            segments.append(text)
    return segments


def parse_caption_body(raw_body: Optional[str]) -> Optional[str]:
    """
    Parse a caption track body into a transcript.

    JSON is tried first when the body looks like an object; an unparsable or
    empty JSON result falls through to <text> element extraction.

    Returns:
        The transcript, or None when neither format yields any text.
    """
    if not raw_body:
        return None

    if raw_body.strip().startswith("{"):
        try:
            transcript = parse_json3_events(json.loads(raw_body))
        except ValueError:
            transcript = None
        if transcript:
            return transcript

    return _join_segments(extract_text_segments(raw_body))


def parse_timedtext_body(raw_body: Optional[str]) -> Optional[str]:
    """
    Parse a timedtext endpoint response.

    A body that is valid JSON is only read through its events list; the XML
    path (with the reduced entity set) is used only when JSON parsing fails.
    """
    if not raw_body or not raw_body.strip():
        return None

    try:
        document = json.loads(raw_body)
    except ValueError:
        return _join_segments(extract_text_segments(raw_body, BASIC_ENTITIES))

    return parse_json3_events(document)


def parse_innertube_body(raw_body: Optional[str]) -> Optional[str]:
    """
    Parse a track body fetched through the youtubei player response.

    Newer responses use <p> elements, older ones <text>; <text> is only
    consulted when <p> produced nothing.
    """
    if not raw_body:
        return None

    segments = extract_text_segments(raw_body, BASIC_ENTITIES, pattern=P_ELEMENT_RE)
    if not segments:
        segments = extract_text_segments(raw_body, BASIC_ENTITIES, pattern=TEXT_ELEMENT_RE)

    return _join_segments(segments)
