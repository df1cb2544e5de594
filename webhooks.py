#!/usr/bin/env python3
"""Deliver leaderboard updates to a Slack-style webhook and a Teams Adaptive Card webhook."""

from __future__ import annotations

import json
import sys
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Callable
from urllib import error, request

if TYPE_CHECKING:
    from leaderboard_notifier import NotifierConfig

DEFAULT_TIMEOUT = 30
ICON_URL = "https://adventofcode.com/favicon.png"
TOTAL_USERNAME = "Advent of Code - Total"
DAILY_USERNAME = "Advent of Code - Daily"
MAX_DAILY_WORKERS = 4

ADAPTIVE_CARD_CONTENT_TYPE = "application/vnd.microsoft.card.adaptive"
ADAPTIVE_CARD_SCHEMA = "http://adaptivecards.io/schemas/adaptive-card.json"

PostFn = Callable[[str, dict, int], None]


def post_json(url: str, payload: dict, timeout: int = DEFAULT_TIMEOUT) -> None:
    cleaned_url = url.strip()
    if not cleaned_url:
        raise ValueError("webhook URL is empty")

    data = json.dumps(payload, ensure_ascii=False).encode("utf-8")
    req = request.Request(
        cleaned_url,
        data=data,
        headers={
            "Content-Type": "application/json",
            "User-Agent": "aoc-leaderboard-notifier/1.0",
        },
        method="POST",
    )
    with request.urlopen(req, timeout=timeout) as response:
        if response.status < 200 or response.status >= 300:
            raise RuntimeError(f"webhook returned HTTP {response.status}")


def print_payload(url: str, payload: dict, timeout: int = DEFAULT_TIMEOUT) -> None:
    print(f"[dry-run] Would POST to {url}:")
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def _describe_error(exc: Exception) -> str:
    if isinstance(exc, error.HTTPError):
        details = ""
        try:
            details = exc.read().decode("utf-8", errors="replace").strip()
        except Exception:
            details = ""
        message = f"HTTP {exc.code} {exc.reason}"
        return f"{message} | {details}" if details else message
    return str(exc)


# ---------------------------------------------------------------------------
# Backend A: simple text webhook
# ---------------------------------------------------------------------------

def slack_total_payload(text: str) -> dict:
    return {"text": text, "username": TOTAL_USERNAME, "icon_url": ICON_URL}


def slack_daily_payloads(messages: list[str]) -> list[dict]:
    return [{"text": text, "username": DAILY_USERNAME, "icon_url": ICON_URL} for text in messages]


def send_slack(
    url: str,
    total_text: str,
    daily_messages: list[str],
    post: PostFn = post_json,
    timeout: int = DEFAULT_TIMEOUT,
) -> bool:
    """Post the total leaderboard, then the daily breakdowns.

    The daily posts are issued after the total post returns, whether or not
    it succeeded. They are submitted in day order but do not wait on each
    other. Returns False if anything failed; failures are reported on stderr
    and never retried.
    """
    ok = True
    try:
        post(url, slack_total_payload(total_text), timeout)
    except Exception as exc:
        ok = False
        print(f"Warning: failed to send total leaderboard to Slack: {_describe_error(exc)}", file=sys.stderr)
    else:
        print("Slack total leaderboard sent.")

    payloads = slack_daily_payloads(daily_messages)
    if not payloads:
        return ok

    daily_ok = True
    with ThreadPoolExecutor(max_workers=min(MAX_DAILY_WORKERS, len(payloads))) as pool:
        futures = [pool.submit(post, url, payload, timeout) for payload in payloads]
        for index, future in enumerate(futures, start=1):
            try:
                future.result()
            except Exception as exc:
                daily_ok = False
                print(
                    f"Warning: failed to send daily message {index}/{len(futures)} to Slack: {_describe_error(exc)}",
                    file=sys.stderr,
                )
    if daily_ok:
        print(f"Slack daily messages sent ({len(payloads)}).")
    return ok and daily_ok


# ---------------------------------------------------------------------------
# Backend B: Teams Adaptive Card
# ---------------------------------------------------------------------------

def _cell(text: str, **extra) -> dict:
    return {
        "type": "TableCell",
        **extra,
        "items": [{"type": "TextBlock", "text": text, "wrap": True}],
    }


def adaptive_card_row(position: int, name: str, score: int, change: str) -> dict:
    return {
        "type": "TableRow",
        "cells": [
            _cell(str(position)),
            _cell(str(name)),
            _cell(str(score)),
            _cell(change, horizontalAlignment="Center"),
        ],
    }


def _header_row() -> dict:
    return {
        "type": "TableRow",
        "cells": [
            {"type": "TableCell", "items": [{"type": "TextBlock", "text": label, "weight": "Bolder"}]}
            for label in ("Pos", "Name", "Score", "Change")
        ],
    }


def teams_card_payload(entries: list[dict], title: str) -> dict:
    table = {
        "type": "Table",
        "columns": [{"width": 1}, {"width": 6}, {"width": 2}, {"width": 1}],
        "rows": [
            _header_row(),
            *(
                adaptive_card_row(e["position"], e["name"], e["score"], e.get("change", ""))
                for e in entries
            ),
        ],
    }
    body = [
        {"type": "TextBlock", "size": "Medium", "weight": "Bolder", "text": title},
        table,
    ]
    return {
        "type": "message",
        "attachments": [
            {
                "contentType": ADAPTIVE_CARD_CONTENT_TYPE,
                "contentUrl": None,
                "content": {
                    "$schema": ADAPTIVE_CARD_SCHEMA,
                    "type": "AdaptiveCard",
                    "version": "1.5",
                    "body": body,
                    "msteams": {"width": "Full"},
                },
            }
        ],
    }


def send_teams(
    url: str,
    entries: list[dict],
    title: str,
    post: PostFn = post_json,
    timeout: int = DEFAULT_TIMEOUT,
) -> bool:
    try:
        post(url, teams_card_payload(entries, title), timeout)
    except Exception as exc:
        print(f"Warning: failed to send Teams card: {_describe_error(exc)}", file=sys.stderr)
        return False
    print("Teams card sent.")
    return True


# ---------------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------------

def dispatch(
    config: NotifierConfig,
    entries: list[dict],
    total_text: str,
    daily_messages: list[str],
    post: PostFn = post_json,
) -> list[str]:
    """Send to every configured backend and return the names of those that failed."""
    failed: list[str] = []
    if config.slack_url:
        if not send_slack(config.slack_url, total_text, daily_messages, post=post, timeout=config.timeout):
            failed.append("slack")
    if config.teams_url:
        title = f"Advent of Code {config.year}: Top {config.top_n}"
        if not send_teams(config.teams_url, entries, title, post=post, timeout=config.timeout):
            failed.append("teams")
    if not config.slack_url and not config.teams_url:
        print("No webhook configured; nothing to notify.")
    return failed
