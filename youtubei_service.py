"""
Innertube strategy: the youtubei player endpoint with a mobile client identity.

Flow:
1. Fetch the watch page and read INNERTUBE_API_KEY out of it.
2. POST /youtubei/v1/player impersonating the configured client.
3. Pick a caption track from the returned player response (first match per
   preferred language, no prefix fallback) and parse its body.
"""

from typing import Any, Dict, Optional
from urllib.parse import urlencode

from caption_parser import parse_innertube_body
from http_client import YOUTUBEI_PLAYER_URL, fetch_watch_page, mask_url_for_logging, response_text
from player_response import find_innertube_api_key, player_caption_tracks
from transcript_strategy import TranscriptStrategy


def player_request_payload(video_id: str, client_name: str, client_version: str) -> Dict[str, Any]:
    """Body of the youtubei player request."""
    return {
        "context": {
            "client": {
                "clientName": client_name,
                "clientVersion": client_version,
            }
        },
        "videoId": video_id,
    }


class InnertubeStrategy(TranscriptStrategy):
    """Caption tracks from the youtubei player API."""

    method = "innertube"

    def _attempt(self, video_id: str) -> Optional[str]:
        page = fetch_watch_page(self.session, video_id, self.timeout,
                                request_type="desktop_short", accept_html=False)
        html = response_text(page)
        if html is None:
            self.events.emit("watch_page_failed", video_id=video_id, status=page.status_code)
            return None

        api_key = find_innertube_api_key(html)
        if not api_key:
            self.events.emit("innertube_api_key_missing", video_id=video_id)
            return None

        player_data = self._fetch_player(video_id, api_key)
        if player_data is None:
            return None

        tracks = player_caption_tracks(player_data)
        if not tracks:
            self.events.emit("innertube_no_tracks", video_id=video_id)
            return None

        track = self.policy.select(tracks, prefer_manual=False, use_prefix_fallback=False)
        if track is None or not track.base_url:
            self.events.emit("caption_track_unusable", video_id=video_id, reason="no_base_url")
            return None

        self.events.emit("caption_track_selected", video_id=video_id, lang=track.language_code,
                         kind=track.kind, url=mask_url_for_logging(track.base_url))

        caption = self.session.get(track.base_url, timeout=self.timeout)
        body = response_text(caption)
        if body is None:
            self.events.emit("caption_track_fetch_failed", video_id=video_id,
                             status=caption.status_code)
            return None

        transcript = parse_innertube_body(body)
        if not transcript:
            self.events.emit("caption_track_empty", video_id=video_id, bytes=len(body))
        return transcript

    def _fetch_player(self, video_id: str, api_key: str) -> Optional[Any]:
        url = YOUTUBEI_PLAYER_URL + "?" + urlencode({"key": api_key})
        payload = player_request_payload(video_id, self.config.innertube_client_name,
                                         self.config.innertube_client_version)

        response = self.session.post(url, json=payload, timeout=self.timeout)
        if not response.ok:
            self.events.emit("innertube_player_failed", video_id=video_id,
                             status=response.status_code)
            return None

        self.events.emit("innertube_player_fetched", video_id=video_id,
                         client=self.config.innertube_client_name)
        return response.json()
