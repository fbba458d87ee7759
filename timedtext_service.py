"""
Timedtext strategy: direct requests to the public timedtext endpoint.

Each language from the language policy is tried in order with fmt=json3.
A failed request, a non-2xx status or an empty body moves on to the next
language; the first non-empty parse wins.
"""

from typing import Optional
from urllib.parse import urlencode

import requests

from caption_parser import parse_timedtext_body
from http_client import TIMEDTEXT_URL
from transcript_strategy import TranscriptStrategy
from user_agent_manager import user_agent_manager

TIMEDTEXT_FORMAT = "json3"


def timedtext_url(video_id: str, lang: str) -> str:
    return TIMEDTEXT_URL + "?" + urlencode({"v": video_id, "lang": lang, "fmt": TIMEDTEXT_FORMAT})


class TimedtextStrategy(TranscriptStrategy):
    """Language-by-language probe of /api/timedtext."""

    method = "timedtext"

    def _attempt(self, video_id: str) -> Optional[str]:
        headers = user_agent_manager.get_headers(request_type="desktop_short")
        languages = self.policy.timedtext_languages()
        self.events.emit("timedtext_start", video_id=video_id, languages=",".join(languages))

        for lang in languages:
            transcript = self._try_language(video_id, lang, headers)
            if transcript:
                self.events.emit("timedtext_lang_success", video_id=video_id, lang=lang,
                                 length=len(transcript))
                return transcript

        self.events.emit("timedtext_exhausted", video_id=video_id, count=len(languages))
        return None

    def _try_language(self, video_id: str, lang: str, headers: dict) -> Optional[str]:
        try:
            response = self.session.get(timedtext_url(video_id, lang), headers=headers,
                                        timeout=self.timeout)
        except requests.RequestException as e:
            self.events.emit("timedtext_lang_error", video_id=video_id, lang=lang,
                             detail=f"{type(e).__name__}: {str(e)[:100]}")
            return None

        if not response.ok:
            self.events.emit("timedtext_lang_failed", video_id=video_id, lang=lang,
                             status=response.status_code)
            return None

        body = response.text
        if not body or not body.strip():
            self.events.emit("timedtext_lang_empty", video_id=video_id, lang=lang)
            return None

        transcript = parse_timedtext_body(body)
        if not transcript:
            self.events.emit("timedtext_lang_no_text", video_id=video_id, lang=lang, bytes=len(body))
        return transcript
