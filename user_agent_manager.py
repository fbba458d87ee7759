"""
UserAgentManager - User-Agent strings and header sets for YouTube requests.

The watch-page scrape presents a full desktop Chrome identity; the timedtext
and youtubei paths use the shorter desktop string they were built against.
"""

import logging
from typing import Dict, Optional


class UserAgentManager:
    """Hands out User-Agent strings and the header sets built on them."""

    USER_AGENT_CONFIG = {
        "desktop": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
        "desktop_short": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
    }

    ACCEPT_LANGUAGE = "en-US,en;q=0.9"
    ACCEPT_HTML = "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8"
    # Skips the EU consent interstitial that otherwise replaces the watch page
    CONSENT_COOKIE = "CONSENT=YES+1"

    def __init__(self, default_request_type: str = "desktop"):
        self.default_user_agent = self.USER_AGENT_CONFIG[default_request_type]

    def get_user_agent(self, request_type: str = "desktop") -> str:
        """
        Get the User-Agent string for a request type.

        Unknown request types fall back to the default desktop string.
        """
        user_agent = self.USER_AGENT_CONFIG.get(request_type)
        if user_agent is None:
            logging.debug(f"Unknown User-Agent type '{request_type}', using default")
            return self.default_user_agent
        return user_agent

    def get_headers(self, additional_headers: Optional[Dict[str, str]] = None,
                    request_type: str = "desktop") -> Dict[str, str]:
        """Headers with User-Agent plus any additional headers (which may override it)."""
        headers = {'User-Agent': self.get_user_agent(request_type)}
        if additional_headers:
            headers.update(additional_headers)
        return headers

    def get_watch_page_headers(self, request_type: str = "desktop", accept_html: bool = True) -> Dict[str, str]:
        """Headers for fetching the watch page: UA, Accept-Language, consent cookie."""
        headers = {
            'Accept-Language': self.ACCEPT_LANGUAGE,
            'Cookie': self.CONSENT_COOKIE,
        }
        if accept_html:
            headers['Accept'] = self.ACCEPT_HTML
        return self.get_headers(headers, request_type)


user_agent_manager = UserAgentManager()
