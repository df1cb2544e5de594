#!/usr/bin/env python3
"""Render ranked leaderboard entries as a fixed-width text table."""

from __future__ import annotations

CODE_FENCE = "```"
SEPARATOR_CHAR = "━"

DEFAULT_COLUMNS = [
    {"prop": "position", "label": "Pos", "align": "right"},
    {"prop": "change", "align": "left"},
    {"prop": "name", "label": "Name", "align": "left"},
    {"prop": "score", "label": "Score", "align": "right"},
    {"prop": "globalScore", "label": "🌐", "align": "right"},
]


def _pad(value: object, width: int, align: str) -> str:
    text = str(value)
    if align == "right":
        return text.rjust(width)
    return text.ljust(width)


def column_widths(columns: list[dict], rows: list[dict]) -> list[int]:
    """Width of each column: the longest of its label and its values.

    Raises:
        ValueError: if *rows* is empty.
    """
    if not rows:
        raise ValueError("cannot size table columns without at least one row")
    widths = []
    for column in columns:
        longest_value = max(len(str(row[column["prop"]])) for row in rows)
        widths.append(max(len(column.get("label") or ""), longest_value))
    return widths


def format_table(columns: list[dict], rows: list[dict], title: str | None = None) -> str:
    widths = column_widths(columns, rows)

    header = " ".join(
        (column.get("label") or "").ljust(width) for column, width in zip(columns, widths)
    )
    lines = [header, SEPARATOR_CHAR * len(header)]
    for row in rows:
        lines.append(" ".join(
            _pad(row[column["prop"]], width, column.get("align", "left"))
            for column, width in zip(columns, widths)
        ))

    if title:
        lines.insert(0, title)
    return "\n".join([CODE_FENCE, *lines, CODE_FENCE])


def format_leaderboard(rows: list[dict], year: str, top_n: int = 25) -> str:
    return format_table(DEFAULT_COLUMNS, rows, title=f"Leaderboard {year}: Top {top_n}")
