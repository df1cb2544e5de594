#!/usr/bin/env python3
"""Persist the last-known ranked leaderboard as a single JSON file."""

from __future__ import annotations

import json
import sys
from pathlib import Path

DEFAULT_SNAPSHOT_FILE = Path(__file__).resolve().parent / "last.json"


def _is_valid_entry(entry: object) -> bool:
    if not isinstance(entry, dict):
        return False
    position = entry.get("position")
    return (
        isinstance(entry.get("name"), str)
        and isinstance(position, int)
        and not isinstance(position, bool)
    )


def load_previous(path: str | Path = DEFAULT_SNAPSHOT_FILE) -> list[dict]:
    """Load the previous snapshot, or ``[]`` when there is none to compare against.

    A missing file is the normal first-run case and is silent. A file that
    cannot be read, does not hold a JSON array, or holds entries without a
    string ``name`` and integer ``position`` is reported on stderr and
    treated as empty; it is never fatal.
    """
    path = Path(path)
    if not path.exists():
        return []
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError, UnicodeDecodeError) as exc:
        print(f"Warning: failed to load snapshot {path}: {exc}", file=sys.stderr)
        return []
    if not isinstance(data, list):
        print(f"Warning: snapshot {path} is not a JSON array; ignoring it.", file=sys.stderr)
        return []
    if not all(_is_valid_entry(entry) for entry in data):
        print(f"Warning: snapshot {path} has malformed entries; ignoring it.", file=sys.stderr)
        return []
    return data


def save_snapshot(path: str | Path, entries: list[dict]) -> Path:
    """Overwrite the snapshot file with *entries*."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    content = json.dumps(entries, indent=2, ensure_ascii=False) + "\n"
    path.write_text(content, encoding="utf-8")
    return path
