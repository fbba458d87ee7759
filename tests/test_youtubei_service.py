"""
Tests for the innertube strategy (youtubei player API).
"""

import os
import sys
import unittest
from unittest.mock import MagicMock

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from helpers import captions_block, fake_response
from log_events import EventEmitter
from transcript_config import TranscriptConfig
from youtubei_service import InnertubeStrategy, player_request_payload

WATCH_HTML = '<script>ytcfg.set({"INNERTUBE_API_KEY":"AIzaKey123","INNERTUBE_CONTEXT":{}});</script>'
P_BODY = '<timedtext><body><p t="0">buongiorno</p><p t="900">a tutti</p></body></timedtext>'


class TestInnertubeStrategy(unittest.TestCase):

    def setUp(self):
        self.session = MagicMock()
        self.strategy = InnertubeStrategy(self.session, TranscriptConfig(), EventEmitter(MagicMock()))

    def _player(self, *tracks, status=200):
        return fake_response(status=status, json_data={"captions": captions_block(*tracks)})

    def test_success(self):
        self.session.get.side_effect = [fake_response(WATCH_HTML), fake_response(P_BODY)]
        self.session.post.return_value = self._player(
            ("en", None, "https://example.test/en"), ("it", "asr", "https://example.test/it"),
        )

        self.assertEqual(self.strategy.attempt("abc"), "buongiorno a tutti")

        post = self.session.post.call_args
        self.assertEqual(post.args[0], "https://www.youtube.com/youtubei/v1/player?key=AIzaKey123")
        self.assertEqual(post.kwargs["json"], {
            "context": {"client": {"clientName": "ANDROID", "clientVersion": "20.10.38"}},
            "videoId": "abc",
        })
        self.assertEqual(post.kwargs["timeout"], 10)
        # Italian wins even as ASR: no manual preference on this path
        self.assertEqual(self.session.get.call_args_list[1].args[0], "https://example.test/it")

    def test_watch_page_uses_short_user_agent(self):
        self.session.get.return_value = fake_response("<html></html>")

        self.assertIsNone(self.strategy.attempt("abc"))
        headers = self.session.get.call_args.kwargs["headers"]
        self.assertEqual(headers["User-Agent"], "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36")
        self.assertEqual(headers["Cookie"], "CONSENT=YES+1")
        self.assertNotIn("Accept", headers)

    def test_missing_api_key(self):
        self.session.get.return_value = fake_response("<html>no key</html>")

        self.assertIsNone(self.strategy.attempt("abc"))
        self.session.post.assert_not_called()

    def test_watch_page_error(self):
        self.session.get.return_value = fake_response("", status=503)

        self.assertIsNone(self.strategy.attempt("abc"))
        self.session.post.assert_not_called()

    def test_player_error_status(self):
        self.session.get.return_value = fake_response(WATCH_HTML)
        self.session.post.return_value = fake_response(status=403)

        self.assertIsNone(self.strategy.attempt("abc"))
        self.assertEqual(self.session.get.call_count, 1)

    def test_no_tracks(self):
        self.session.get.return_value = fake_response(WATCH_HTML)
        self.session.post.return_value = fake_response(json_data={"playabilityStatus": {"status": "OK"}})

        self.assertIsNone(self.strategy.attempt("abc"))

    def test_no_prefix_fallback(self):
        """Without it/en the first track is used, not an en-* variant."""
        self.session.get.side_effect = [fake_response(WATCH_HTML), fake_response(P_BODY)]
        self.session.post.return_value = self._player(
            ("fr", None, "https://example.test/fr"), ("en-GB", None, "https://example.test/en-GB"),
        )

        self.strategy.attempt("abc")
        self.assertEqual(self.session.get.call_args_list[1].args[0], "https://example.test/fr")

    def test_selected_track_without_base_url(self):
        self.session.get.return_value = fake_response(WATCH_HTML)
        self.session.post.return_value = fake_response(
            json_data={"captions": {"playerCaptionsTracklistRenderer": {"captionTracks": [
                {"languageCode": "it"}]}}}
        )

        self.assertIsNone(self.strategy.attempt("abc"))
        self.assertEqual(self.session.get.call_count, 1)

    def test_text_elements_fallback(self):
        self.session.get.side_effect = [
            fake_response(WATCH_HTML),
            fake_response('<transcript><text start="0">older &amp; format</text></transcript>'),
        ]
        self.session.post.return_value = self._player(("en", None, "https://example.test/en"))

        self.assertEqual(self.strategy.attempt("abc"), "older & format")

    def test_invalid_player_json_is_contained(self):
        self.session.get.return_value = fake_response(WATCH_HTML)
        self.session.post.return_value = fake_response("<html>", status=200)

        self.assertIsNone(self.strategy.attempt("abc"))

    def test_configured_client(self):
        config = TranscriptConfig(innertube_client_name="IOS", innertube_client_version="19.0")
        self.assertEqual(
            player_request_payload("abc", config.innertube_client_name, config.innertube_client_version),
            {"context": {"client": {"clientName": "IOS", "clientVersion": "19.0"}}, "videoId": "abc"},
        )


if __name__ == '__main__':
    unittest.main()
