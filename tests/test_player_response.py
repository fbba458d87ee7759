"""
Tests for the watch-page player-state helpers.
"""

import json
import os
import sys
import unittest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from caption_tracks import CaptionTrack
from player_response import (
    caption_tracks_from,
    dig,
    extract_balanced_json,
    extract_captions_fragment,
    extract_initial_player_response,
    find_innertube_api_key,
    is_captcha_page,
    is_unplayable,
    playability_status,
    player_caption_tracks,
)

CAPTIONS = {
    "playerCaptionsTracklistRenderer": {
        "captionTracks": [
            {"baseUrl": "https://www.youtube.com/api/timedtext?v=x&lang=en", "languageCode": "en"},
            {"baseUrl": "https://www.youtube.com/api/timedtext?v=x&lang=it&kind=asr",
             "languageCode": "it", "kind": "asr"},
        ]
    }
}


class TestDig(unittest.TestCase):

    def test_nested_lookup(self):
        self.assertEqual(dig({"a": {"b": {"c": 1}}}, "a", "b", "c"), 1)

    def test_missing_or_mistyped_level(self):
        self.assertIsNone(dig({"a": {"b": 1}}, "a", "x"))
        self.assertIsNone(dig({"a": [1, 2]}, "a", "b"))
        self.assertIsNone(dig(None, "a"))


class TestBalancedJson(unittest.TestCase):

    def test_braces_inside_strings_are_ignored(self):
        source = r'var ytInitialPlayerResponse = {"a":"}{","b":{"c":"q\"}"}};var other = {};'
        text = extract_balanced_json(source, source.index("{"))
        self.assertEqual(text, r'{"a":"}{","b":{"c":"q\"}"}}')
        self.assertEqual(json.loads(text), {"a": "}{", "b": {"c": 'q"}'}})

    def test_escaped_backslash_before_quote(self):
        source = r'{"path":"C:\\","n":{}} trailing'
        self.assertEqual(extract_balanced_json(source, 0), r'{"path":"C:\\","n":{}}')

    def test_unbalanced(self):
        self.assertIsNone(extract_balanced_json('{"a":{"b":1}', 0))
        self.assertIsNone(extract_balanced_json("no object here", 0))


class TestInitialPlayerResponse(unittest.TestCase):

    def _page(self, player_response):
        return (
            "<html><script>var ytInitialPlayerResponse = "
            + json.dumps(player_response)
            + ";var meta = {\"x\": 1};</script></html>"
        )

    def test_extracts_document(self):
        document = {"playabilityStatus": {"status": "OK"}, "captions": CAPTIONS,
                    "videoDetails": {"title": "a {tricky} title"}}
        self.assertEqual(extract_initial_player_response(self._page(document)), document)

    def test_absent_or_truncated(self):
        self.assertIsNone(extract_initial_player_response("<html></html>"))
        self.assertIsNone(extract_initial_player_response('ytInitialPlayerResponse = {"a": {'))

    def test_invalid_json(self):
        self.assertIsNone(extract_initial_player_response("ytInitialPlayerResponse = {a: 1};"))

    def test_tracks(self):
        tracks = player_caption_tracks({"captions": CAPTIONS})
        self.assertEqual([t.language_code for t in tracks], ["en", "it"])
        self.assertTrue(tracks[1].is_asr)
        self.assertEqual(player_caption_tracks({"captions": {}}), [])

    def test_playability(self):
        self.assertEqual(playability_status({"playabilityStatus": {"status": "OK"}}), "OK")
        self.assertFalse(is_unplayable({"playabilityStatus": {"status": "OK"}}))
        self.assertTrue(is_unplayable({"playabilityStatus": {"status": "ERROR"}}))
        self.assertTrue(is_unplayable({"playabilityStatus": {"status": "UNPLAYABLE"}}))
        self.assertFalse(is_unplayable({"playabilityStatus": {"status": "LOGIN_REQUIRED"}}))
        self.assertIsNone(playability_status({}))


class TestCaptionsFragment(unittest.TestCase):

    def test_fragment_bounded_by_sibling_key(self):
        html = 'junk "captions":' + json.dumps(CAPTIONS) + ',"videoDetails":{"videoId":"x"}}'
        fragment = extract_captions_fragment(html)
        self.assertEqual(json.loads(fragment), CAPTIONS)
        self.assertEqual(
            caption_tracks_from(json.loads(fragment))[0],
            CaptionTrack("en", "standard", "https://www.youtube.com/api/timedtext?v=x&lang=en"),
        )

    def test_earliest_marker_wins(self):
        html = '"captions":{"a":1},"storyboards":{},"videoDetails":{}'
        self.assertEqual(extract_captions_fragment(html), '{"a":1}')

    def test_marker_at_start_is_ignored(self):
        html = '"captions":,"cards":{},"microformat":{}'
        self.assertEqual(extract_captions_fragment(html), ',"cards":{}')

    def test_no_marker_keeps_rest_of_page(self):
        self.assertEqual(extract_captions_fragment('x"captions":{"a":1}'), '{"a":1}')

    def test_absent(self):
        self.assertIsNone(extract_captions_fragment("<html></html>"))


class TestPageMarkers(unittest.TestCase):

    def test_innertube_api_key(self):
        html = 'ytcfg.set({"INNERTUBE_API_KEY":"AIzaTestKey","INNERTUBE_CLIENT_NAME":"WEB"});'
        self.assertEqual(find_innertube_api_key(html), "AIzaTestKey")
        self.assertIsNone(find_innertube_api_key("<html></html>"))

    def test_captcha(self):
        self.assertTrue(is_captcha_page('<div class="g-recaptcha" data-sitekey="x"></div>'))
        self.assertFalse(is_captcha_page("<div class=\"player\"></div>"))


if __name__ == '__main__':
    unittest.main()
