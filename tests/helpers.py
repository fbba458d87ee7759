"""
Shared fakes for strategy and pipeline tests.
"""

import json
from unittest.mock import MagicMock


def fake_response(text="", status=200, json_data=None):
    """A requests.Response stand-in with ok/status_code/text/json()."""
    response = MagicMock()
    response.status_code = status
    response.ok = 200 <= status < 300
    response.text = text
    if json_data is not None:
        response.json.return_value = json_data
    else:
        response.json.side_effect = ValueError("No JSON object could be decoded")
    return response


def watch_page(player_response=None, extra=""):
    """Minimal watch page HTML embedding a player response."""
    script = ""
    if player_response is not None:
        script = "var ytInitialPlayerResponse = " + json.dumps(player_response) + ";"
    return "<html><head></head><body><script>" + script + "</script>" + extra + "</body></html>"


def captions_block(*tracks):
    return {
        "playerCaptionsTracklistRenderer": {
            "captionTracks": [
                dict(languageCode=code, baseUrl=url, **({"kind": kind} if kind else {}))
                for code, kind, url in tracks
            ]
        }
    }


def json3_body(*lines):
    return json.dumps({"events": [{"segs": [{"utf8": line}]} for line in lines]})
