#!/usr/bin/env python3
"""Compare a fresh leaderboard against the previous snapshot."""

from __future__ import annotations

UP = "↑"
DOWN = "↓"
UNCHANGED = ""


def rank_entries(sorted_entries: list, top_n: int | None = None) -> list[dict]:
    """Turn ``[name, score, global_score]`` triples into ranked entry dicts."""
    ranked = [
        {"name": name, "score": score, "position": index + 1, "globalScore": global_score}
        for index, (name, score, global_score) in enumerate(sorted_entries)
    ]
    if top_n is not None:
        ranked = ranked[:top_n]
    return ranked


def _change(current_position: int, previous_position: int) -> str:
    if current_position < previous_position:
        return UP
    if current_position > previous_position:
        return DOWN
    return UNCHANGED


def compare(current: list[dict], previous: list[dict]) -> list[dict]:
    """Annotate each current entry with its rank movement since *previous*.

    Entries are matched on ``name``; with duplicate names in *previous* the
    first one wins. Entries with no previous match are marked unchanged.
    Neither input is modified.
    """
    compared: list[dict] = []
    for entry in current:
        last = next((p for p in previous if p.get("name") == entry["name"]), None)
        if last is None or not isinstance(last.get("position"), int):
            change = UNCHANGED
        else:
            change = _change(entry["position"], last["position"])
        compared.append({**entry, "change": change})
    return compared


def strip_changes(entries: list[dict]) -> list[dict]:
    return [{k: v for k, v in entry.items() if k != "change"} for entry in entries]


def snapshots_differ(previous: list[dict], current: list[dict]) -> bool:
    """Return True if the ranking moved since the stored snapshot.

    The stored snapshot carries ``change`` markers from the run that wrote
    it, so those are ignored; everything else must match exactly.
    """
    return strip_changes(previous) != strip_changes(current)


def format_diff_summary(compared: list[dict]) -> str:
    """One-line summary of rank movement, suitable for logging."""
    ups = sum(1 for e in compared if e.get("change") == UP)
    downs = sum(1 for e in compared if e.get("change") == DOWN)
    parts: list[str] = []
    if ups:
        parts.append(f"{ups} up")
    if downs:
        parts.append(f"{downs} down")
    return ", ".join(parts) if parts else "no rank movement"
