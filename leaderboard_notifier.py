#!/usr/bin/env python3
"""Check an Advent of Code private leaderboard and notify chat webhooks when the ranking changes."""

from __future__ import annotations

import argparse
import os
import re
import sys
import traceback
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from aoc_client import DEFAULT_TIMEOUT, day_leaderboard, fetch_names_and_scores, leaderboard_url
from leaderboard_table import format_leaderboard
from snapshot_diff import compare, format_diff_summary, rank_entries, snapshots_differ
from snapshot_store import DEFAULT_SNAPSHOT_FILE, load_previous, save_snapshot
from webhooks import dispatch, post_json, print_payload

DEFAULT_TOP_N = 25


@dataclass(frozen=True)
class NotifierConfig:
    leaderboard_id: str
    session_cookie: str
    year: str
    slack_url: str | None = None
    teams_url: str | None = None
    state_file: Path = DEFAULT_SNAPSHOT_FILE
    top_n: int = DEFAULT_TOP_N
    timeout: int = DEFAULT_TIMEOUT
    dry_run: bool = False


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Post Advent of Code private leaderboard changes to Slack and/or Teams webhooks."
    )
    parser.add_argument(
        "--leaderboard-id",
        default=os.environ.get("LEADERBOARD_ID"),
        help="Private leaderboard id (or set LEADERBOARD_ID env var)",
    )
    parser.add_argument(
        "--session-cookie",
        default=os.environ.get("SESSION_COOKIE"),
        help="adventofcode.com session cookie (or set SESSION_COOKIE env var)",
    )
    parser.add_argument(
        "--year",
        default=os.environ.get("YEAR"),
        help="Event year, e.g. 2024 (or set YEAR env var)",
    )
    parser.add_argument(
        "--slack-url",
        default=os.environ.get("SLACK_URL_TOKEN"),
        help="Slack-style incoming webhook URL (or set SLACK_URL_TOKEN env var)",
    )
    parser.add_argument(
        "--teams-url",
        default=os.environ.get("TEAMS_WEBHOOK_URL"),
        help="Teams incoming webhook URL (or set TEAMS_WEBHOOK_URL env var)",
    )
    parser.add_argument(
        "--state-file",
        type=Path,
        default=DEFAULT_SNAPSHOT_FILE,
        help=f"Path of the last-known leaderboard snapshot (default: {DEFAULT_SNAPSHOT_FILE.name} next to this script)",
    )
    parser.add_argument(
        "--top-n",
        type=int,
        default=DEFAULT_TOP_N,
        help=f"Number of leading entries to track (default: {DEFAULT_TOP_N})",
    )
    parser.add_argument("--timeout", type=int, default=DEFAULT_TIMEOUT, help="HTTP timeout in seconds")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Do everything except posting to the webhooks",
    )
    return parser.parse_args(argv)


def config_from_args(args: argparse.Namespace) -> NotifierConfig:
    """Validate CLI/env options into a config.

    Raises:
        ValueError: if a required option is missing or malformed.
    """
    missing = [
        flag
        for flag, value in (
            ("--leaderboard-id / LEADERBOARD_ID", args.leaderboard_id),
            ("--session-cookie / SESSION_COOKIE", args.session_cookie),
            ("--year / YEAR", args.year),
        )
        if not value
    ]
    if missing:
        raise ValueError("missing required setting(s): " + ", ".join(missing))
    if not re.fullmatch(r"\d{4}", args.year.strip()):
        raise ValueError(f"year must be four digits, got {args.year!r}")
    if args.top_n <= 0:
        raise ValueError("--top-n must be greater than 0")
    if args.timeout <= 0:
        raise ValueError("--timeout must be greater than 0")

    return NotifierConfig(
        leaderboard_id=args.leaderboard_id.strip(),
        session_cookie=args.session_cookie.strip(),
        year=args.year.strip(),
        slack_url=args.slack_url or None,
        teams_url=args.teams_url or None,
        state_file=Path(args.state_file),
        top_n=args.top_n,
        timeout=args.timeout,
        dry_run=args.dry_run,
    )


def run_once(
    config: NotifierConfig,
    fetch: Callable[..., dict] | None = None,
    post: Callable[[str, dict, int], None] | None = None,
) -> int:
    """Run one fetch/compare/persist/notify pass and return the exit status.

    Fetch errors propagate to the caller. Webhook failures are reported but
    do not change the result, and the snapshot is not rolled back.
    """
    if fetch is None:
        fetch = fetch_names_and_scores
    if post is None:
        post = print_payload if config.dry_run else post_json

    result = fetch(config.leaderboard_id, config.session_cookie, config.year, timeout=config.timeout)
    current = rank_entries(result["sorted_entries"], top_n=config.top_n)
    print(f"Fetched leaderboard {config.leaderboard_id} ({config.year}): {len(current)} entries tracked.")

    previous = load_previous(config.state_file)
    if not snapshots_differ(previous, current):
        print("No leaderboard change detected.")
        return 0

    compared = compare(current, previous)
    print(f"Leaderboard changed: {format_diff_summary(compared)}.")

    if compared:
        table = format_leaderboard(compared, config.year, top_n=config.top_n)
    else:
        table = "(leaderboard is empty)"
    total_text = f"{leaderboard_url(config.year, config.leaderboard_id)}\n{table}"
    daily_messages = day_leaderboard(result["leaderboard"])

    save_snapshot(config.state_file, compared)
    print(f"Snapshot saved: {config.state_file}")

    failed = dispatch(config, compared, total_text, daily_messages, post=post)
    if failed:
        print(f"Warning: notification failed for: {', '.join(failed)}", file=sys.stderr)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        config = config_from_args(args)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    try:
        return run_once(config)
    except Exception as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
