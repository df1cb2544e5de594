#!/usr/bin/env python3
"""Fetch an Advent of Code private leaderboard and build per-day summaries."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from urllib import request

AOC_BASE_URL = "https://adventofcode.com"
DEFAULT_TIMEOUT = 30
USER_AGENT = "aoc-leaderboard-notifier/1.0"

# Puzzles unlock at midnight US Eastern (UTC-5 in December).
UNLOCK_HOUR_UTC = 5


class LeaderboardFetchError(RuntimeError):
    """The provider answered, but not with leaderboard JSON."""


# ---------------------------------------------------------------------------
# Fetching
# ---------------------------------------------------------------------------

def leaderboard_url(year: str, leaderboard_id: str) -> str:
    return f"{AOC_BASE_URL}/{year}/leaderboard/private/view/{leaderboard_id}"


def fetch_leaderboard_json(
    year: str,
    leaderboard_id: str,
    session_cookie: str,
    timeout: int = DEFAULT_TIMEOUT,
) -> dict:
    """Download the raw private leaderboard document.

    An expired session makes the site redirect to a login page instead of
    returning JSON, so anything that does not parse is reported as a
    ``LeaderboardFetchError``.
    """
    req = request.Request(
        leaderboard_url(year, leaderboard_id) + ".json",
        headers={
            "Cookie": f"session={session_cookie}",
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        },
    )
    with request.urlopen(req, timeout=timeout) as response:
        charset = response.headers.get_content_charset() or "utf-8"
        body = response.read().decode(charset, errors="replace")

    try:
        data = json.loads(body)
    except json.JSONDecodeError as exc:
        raise LeaderboardFetchError(
            f"leaderboard {leaderboard_id} ({year}) did not return JSON; is SESSION_COOKIE still valid?"
        ) from exc
    if not isinstance(data, dict) or not isinstance(data.get("members"), dict):
        raise LeaderboardFetchError(f"leaderboard {leaderboard_id} ({year}) has no members")
    return data


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def member_name(member: dict) -> str:
    name = member.get("name")
    if name:
        return name
    return f"(anonymous user #{member.get('id')})"


def sorted_entries(leaderboard: dict) -> list[list]:
    """Return ``[name, local_score, global_score]`` triples, best first.

    Ties on local score go to whoever got their last star first, which is
    how the site orders its own table.
    """
    members = list(leaderboard.get("members", {}).values())

    def sort_key(member: dict) -> tuple:
        last_star = member.get("last_star_ts") or 0
        return (-int(member.get("local_score") or 0), int(last_star), int(member.get("id") or 0))

    members.sort(key=sort_key)
    return [
        [member_name(m), int(m.get("local_score") or 0), int(m.get("global_score") or 0)]
        for m in members
    ]


def fetch_names_and_scores(
    leaderboard_id: str,
    session_cookie: str,
    year: str,
    timeout: int = DEFAULT_TIMEOUT,
) -> dict:
    leaderboard = fetch_leaderboard_json(year, leaderboard_id, session_cookie, timeout=timeout)
    return {
        "sorted_entries": sorted_entries(leaderboard),
        "leaderboard": leaderboard,
    }


# ---------------------------------------------------------------------------
# Per-day breakdown
# ---------------------------------------------------------------------------

def _unlock_time(year: int, day: int) -> datetime:
    return datetime(year, 12, day, UNLOCK_HOUR_UTC, tzinfo=timezone.utc)


def format_elapsed(seconds: int | None) -> str:
    if seconds is None:
        return "--:--:--"
    seconds = max(0, int(seconds))
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def _day_results(leaderboard: dict, day: str, unlock_ts: float) -> list[dict]:
    results = []
    for member in leaderboard.get("members", {}).values():
        parts = (member.get("completion_day_level") or {}).get(day)
        if not parts:
            continue
        elapsed = {}
        for part in ("1", "2"):
            star = parts.get(part)
            if star and star.get("get_star_ts") is not None:
                elapsed[part] = int(star["get_star_ts"] - unlock_ts)
        if not elapsed:
            continue
        results.append({
            "name": member_name(member),
            "stars": len(elapsed),
            "part1": elapsed.get("1"),
            "part2": elapsed.get("2"),
            "last": max(elapsed.values()),
        })
    # Two stars beat one; within the same star count, the last star decides.
    results.sort(key=lambda r: (-r["stars"], r["last"], r["name"]))
    return results


def day_leaderboard(leaderboard: dict) -> list[str]:
    """Build one code-block message per puzzle day that has any stars."""
    year = int(leaderboard.get("event") or datetime.now(timezone.utc).year)

    days: set[int] = set()
    for member in leaderboard.get("members", {}).values():
        for day in (member.get("completion_day_level") or {}):
            if str(day).isdigit():
                days.add(int(day))

    messages: list[str] = []
    for day in sorted(days):
        unlock_ts = _unlock_time(year, day).timestamp()
        results = _day_results(leaderboard, str(day), unlock_ts)
        if not results:
            continue
        name_width = max(len(r["name"]) for r in results)
        lines = [f"Day {day} ({year})"]
        for i, r in enumerate(results, start=1):
            stars = "★" * r["stars"] + "☆" * (2 - r["stars"])
            lines.append(
                f"{i:>2}. {r['name'].ljust(name_width)} {stars} "
                f"{format_elapsed(r['part1'])} {format_elapsed(r['part2'])}"
            )
        messages.append("\n".join(["```", *lines, "```"]))
    return messages
