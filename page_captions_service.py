"""
Page-captions strategy: caption tracks scraped from the watch page HTML.

Flow:
1. Fetch the watch page (desktop browser identity, consent cookie).
2. Bail out on a CAPTCHA page.
3. Parse ytInitialPlayerResponse with brace matching; an unplayable video
   ends the attempt, a track list is fetched and parsed.
4. Otherwise, or when that track download fails on the network, cut the
   "captions": fragment out of the page and try again.
"""

import json
from typing import List, Optional

import requests

from caption_parser import parse_caption_body
from caption_tracks import CaptionTrack, LanguagePolicy, select_caption_track
from http_client import fetch_watch_page, mask_url_for_logging, response_text
from log_events import EventEmitter
from player_response import (
    caption_tracks_from,
    extract_captions_fragment,
    extract_initial_player_response,
    is_captcha_page,
    is_unplayable,
    playability_status,
    player_caption_tracks,
)
from transcript_strategy import TranscriptStrategy


def fetch_caption_track(session: requests.Session, tracks: List[CaptionTrack], timeout: float,
                        policy: Optional[LanguagePolicy] = None,
                        events: Optional[EventEmitter] = None) -> Optional[str]:
    """
    Select the best track, download its body and parse it.

    Returns:
        Transcript text, or None when no usable track or no text was found.
    """
    events = events or EventEmitter()
    events.emit("caption_tracks_found", count=len(tracks),
                languages=", ".join(track.label for track in tracks))

    track = select_caption_track(tracks, policy)
    if track is None or not track.base_url:
        events.emit("caption_track_unusable", reason="no_base_url")
        return None

    events.emit("caption_track_selected", lang=track.language_code, kind=track.kind,
                url=mask_url_for_logging(track.base_url))

    response = session.get(track.base_url, timeout=timeout)
    body = response_text(response)
    if body is None:
        events.emit("caption_track_fetch_failed", status=response.status_code)
        return None

    transcript = parse_caption_body(body)
    if not transcript:
        events.emit("caption_track_empty", bytes=len(body))
        return None
    return transcript


class PageCaptionsStrategy(TranscriptStrategy):
    """Caption tracks from the player response embedded in the watch page."""

    method = "page-captions"

    def _attempt(self, video_id: str) -> Optional[str]:
        response = fetch_watch_page(self.session, video_id, self.timeout)
        html = response_text(response)
        if html is None:
            self.events.emit("watch_page_failed", video_id=video_id, status=response.status_code)
            return None

        self.events.emit("watch_page_fetched", video_id=video_id, length=len(html))

        if is_captcha_page(html):
            self.events.warning("watch_page_captcha", video_id=video_id)
            return None

        player_response = extract_initial_player_response(html)
        if player_response is not None:
            status = playability_status(player_response)
            self.events.emit("player_response_parsed", video_id=video_id, status=status)

            if is_unplayable(player_response):
                self.events.emit("video_unplayable", video_id=video_id, status=status)
                return None

            tracks = player_caption_tracks(player_response)
            if tracks:
                try:
                    return self._fetch(tracks)
                except requests.RequestException as e:
                    # The fragment path below downloads the track again
                    self.events.warning("caption_track_fetch_error", video_id=video_id,
                                        detail=f"{type(e).__name__}: {str(e)[:100]}")
            else:
                self.events.emit("player_response_no_tracks", video_id=video_id)
        else:
            self.events.emit("player_response_missing", video_id=video_id)

        return self._attempt_captions_fragment(video_id, html)

    def _attempt_captions_fragment(self, video_id: str, html: str) -> Optional[str]:
        fragment = extract_captions_fragment(html)
        if fragment is None:
            self.events.emit("captions_fragment_missing", video_id=video_id)
            return None

        try:
            captions = json.loads(fragment)
        except ValueError as e:
            self.events.emit("captions_fragment_invalid", video_id=video_id,
                             length=len(fragment), detail=str(e)[:100])
            return None

        tracks = caption_tracks_from(captions)
        if not tracks:
            self.events.emit("captions_fragment_no_tracks", video_id=video_id)
            return None
        return self._fetch(tracks)

    def _fetch(self, tracks: List[CaptionTrack]) -> Optional[str]:
        return fetch_caption_track(self.session, tracks, self.timeout, self.policy, self.events)

