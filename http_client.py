"""
HTTP plumbing shared by the transcript strategies.

One requests.Session is created per pipeline run and closed when the run
ends; every call passes an explicit timeout. No retries are configured:
falling through to the next strategy is the retry mechanism.
"""

from typing import Dict, Optional
from urllib.parse import urlencode, urlparse, urlunparse, parse_qs

import requests

from user_agent_manager import user_agent_manager

WATCH_URL = "https://www.youtube.com/watch"
TIMEDTEXT_URL = "https://www.youtube.com/api/timedtext"
YOUTUBEI_PLAYER_URL = "https://www.youtube.com/youtubei/v1/player"

SENSITIVE_PARAMS = {'key', 'token', 'auth', 'session', 'sig', 'signature', 'lsig', 'ei'}


def make_http_session() -> requests.Session:
    """Create the HTTP session used for one transcript request."""
    session = requests.Session()
    session.headers.update({"Accept": "*/*"})
    return session


def watch_page_url(video_id: str) -> str:
    return WATCH_URL + "?" + urlencode({"v": video_id, "hl": "en", "gl": "US"})


def fetch_watch_page(session: requests.Session, video_id: str, timeout: float,
                     request_type: str = "desktop", accept_html: bool = True) -> requests.Response:
    """GET the watch page with the consent cookie and English locale."""
    headers = user_agent_manager.get_watch_page_headers(request_type, accept_html=accept_html)
    return session.get(watch_page_url(video_id), headers=headers, timeout=timeout)


def response_text(response: requests.Response) -> Optional[str]:
    """Body of a 2xx response, None for anything else."""
    if not response.ok:
        return None
    return response.text


def mask_url_for_logging(url: str) -> str:
    """Mask sensitive query parameters in URLs for logging."""
    try:
        parsed = urlparse(url)
        if not parsed.query:
            return url
        params = parse_qs(parsed.query, keep_blank_values=True)
        masked_params: Dict[str, list] = {
            key: ['***'] * len(values) if key.lower() in SENSITIVE_PARAMS else values
            for key, values in params.items()
        }
        masked_query = urlencode(masked_params, doseq=True)
        return urlunparse(parsed._replace(query=masked_query))
    except Exception:
        return f"{url.split('?')[0]}?***" if '?' in url else url
