"""Tests for the Advent of Code leaderboard client."""

import json
import unittest
from datetime import datetime, timezone
from unittest import mock

import aoc_client
from aoc_client import (
    LeaderboardFetchError,
    day_leaderboard,
    fetch_leaderboard_json,
    fetch_names_and_scores,
    format_elapsed,
    leaderboard_url,
    sorted_entries,
)

DAY1_UNLOCK = int(datetime(2024, 12, 1, 5, tzinfo=timezone.utc).timestamp())
DAY2_UNLOCK = int(datetime(2024, 12, 2, 5, tzinfo=timezone.utc).timestamp())


def _leaderboard():
    return {
        "event": "2024",
        "owner_id": 1,
        "members": {
            "1": {
                "id": 1,
                "name": "Alice",
                "local_score": 30,
                "global_score": 0,
                "stars": 3,
                "last_star_ts": DAY2_UNLOCK + 100,
                "completion_day_level": {
                    "1": {
                        "1": {"get_star_ts": DAY1_UNLOCK + 60, "star_index": 1},
                        "2": {"get_star_ts": DAY1_UNLOCK + 300, "star_index": 2},
                    },
                    "2": {"1": {"get_star_ts": DAY2_UNLOCK + 100, "star_index": 3}},
                },
            },
            "2": {
                "id": 2,
                "name": None,
                "local_score": 30,
                "global_score": 0,
                "stars": 1,
                "last_star_ts": DAY2_UNLOCK + 5000,
                "completion_day_level": {
                    "1": {"1": {"get_star_ts": DAY1_UNLOCK + 120, "star_index": 4}},
                },
            },
            "3": {
                "id": 3,
                "name": "Carol",
                "local_score": 10,
                "global_score": 5,
                "stars": 0,
                "last_star_ts": 0,
                "completion_day_level": {},
            },
        },
    }


def _fake_response(body: bytes):
    response = mock.MagicMock()
    response.__enter__.return_value = response
    response.headers.get_content_charset.return_value = "utf-8"
    response.read.return_value = body
    return response


class TestSortedEntries(unittest.TestCase):
    def test_orders_by_score_then_last_star(self):
        self.assertEqual(sorted_entries(_leaderboard()), [
            ["Alice", 30, 0],
            ["(anonymous user #2)", 30, 0],
            ["Carol", 10, 5],
        ])

    def test_no_members(self):
        self.assertEqual(sorted_entries({"members": {}}), [])


class TestDayLeaderboard(unittest.TestCase):
    def test_one_message_per_day_with_stars(self):
        messages = day_leaderboard(_leaderboard())
        self.assertEqual(len(messages), 2)
        self.assertIn("Day 1 (2024)", messages[0])
        self.assertIn("Day 2 (2024)", messages[1])
        for message in messages:
            self.assertTrue(message.startswith("```\n"))
            self.assertTrue(message.endswith("\n```"))

    def test_two_stars_rank_above_one(self):
        lines = day_leaderboard(_leaderboard())[0].split("\n")
        self.assertIn("Alice", lines[2])
        self.assertIn("★★ 00:01:00 00:05:00", lines[2])
        self.assertIn("(anonymous user #2)", lines[3])
        self.assertIn("★☆ 00:02:00 --:--:--", lines[3])

    def test_members_without_stars_are_left_out(self):
        for message in day_leaderboard(_leaderboard()):
            self.assertNotIn("Carol", message)

    def test_no_completions(self):
        self.assertEqual(day_leaderboard({"event": "2024", "members": {}}), [])


class TestFormatElapsed(unittest.TestCase):
    def test_formats_hours_minutes_seconds(self):
        self.assertEqual(format_elapsed(3725), "01:02:05")

    def test_none(self):
        self.assertEqual(format_elapsed(None), "--:--:--")

    def test_long_durations_keep_counting_hours(self):
        self.assertEqual(format_elapsed(26 * 3600), "26:00:00")


class TestFetch(unittest.TestCase):
    def test_url(self):
        self.assertEqual(
            leaderboard_url("2024", "12345"),
            "https://adventofcode.com/2024/leaderboard/private/view/12345",
        )

    def test_fetch_sends_session_cookie(self):
        body = json.dumps(_leaderboard()).encode("utf-8")
        with mock.patch.object(aoc_client.request, "urlopen", return_value=_fake_response(body)) as urlopen:
            data = fetch_leaderboard_json("2024", "12345", "abc", timeout=5)
        req = urlopen.call_args[0][0]
        self.assertEqual(req.full_url, "https://adventofcode.com/2024/leaderboard/private/view/12345.json")
        self.assertEqual(req.get_header("Cookie"), "session=abc")
        self.assertEqual(data["event"], "2024")

    def test_login_page_raises(self):
        body = b"<html><body>Log in</body></html>"
        with mock.patch.object(aoc_client.request, "urlopen", return_value=_fake_response(body)):
            with self.assertRaises(LeaderboardFetchError):
                fetch_leaderboard_json("2024", "12345", "expired")

    def test_missing_members_raises(self):
        with mock.patch.object(aoc_client.request, "urlopen", return_value=_fake_response(b"{}")):
            with self.assertRaises(LeaderboardFetchError):
                fetch_leaderboard_json("2024", "12345", "abc")

    def test_fetch_names_and_scores(self):
        body = json.dumps(_leaderboard()).encode("utf-8")
        with mock.patch.object(aoc_client.request, "urlopen", return_value=_fake_response(body)):
            result = fetch_names_and_scores("12345", "abc", "2024")
        self.assertEqual(result["sorted_entries"][0], ["Alice", 30, 0])
        self.assertIn("members", result["leaderboard"])


if __name__ == "__main__":
    unittest.main()
