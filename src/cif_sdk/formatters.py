"""Render decoded API results for the command line."""

from __future__ import annotations

import csv
import io
import json
from typing import Any, Callable

Formatter = Callable[[Any], str]

MAX_CELL_WIDTH = 45


def _rows(data: Any) -> list[dict[str, Any]]:
    if isinstance(data, dict):
        return [data]
    if isinstance(data, list):
        return [r if isinstance(r, dict) else {"value": r} for r in data]
    return [{"value": data}]


def _columns(rows: list[dict[str, Any]]) -> list[str]:
    """Union of row keys, in first-seen order."""
    columns: list[str] = []
    for row in rows:
        for key in row:
            if key not in columns:
                columns.append(key)
    return columns


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    if isinstance(value, dict):
        return json.dumps(value, sort_keys=True)
    return str(value)


def format_json(data: Any) -> str:
    return json.dumps(data, indent=2)


def format_csv(data: Any) -> str:
    rows = _rows(data)
    if not rows:
        return ""
    columns = _columns(rows)
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(columns)
    for row in rows:
        writer.writerow([_cell(row.get(c)) for c in columns])
    return buf.getvalue().rstrip("\n")


def format_table(data: Any) -> str:
    """Aligned plain-text columns; long cells are truncated."""
    if not isinstance(data, (dict, list)):
        return _cell(data)
    rows = _rows(data)
    if not rows:
        return "No results."
    columns = _columns(rows)
    cells = [[_cell(row.get(c))[:MAX_CELL_WIDTH] for c in columns] for row in rows]
    widths = [max([len(c)] + [len(r[i]) for r in cells]) for i, c in enumerate(columns)]

    lines = [" ".join(c.upper().ljust(w) for c, w in zip(columns, widths)).rstrip()]
    lines.append("-" * len(lines[0]))
    for r in cells:
        lines.append(" ".join(v.ljust(w) for v, w in zip(r, widths)).rstrip())
    return "\n".join(lines)


FORMATTERS: dict[str, Formatter] = {
    "table": format_table,
    "json": format_json,
    "csv": format_csv,
}


def get_formatter(name: str) -> Formatter:
    """Look up an output formatter by name."""
    try:
        return FORMATTERS[name]
    except KeyError:
        raise ValueError(f"Unknown format '{name}'. Valid formats: {', '.join(FORMATTERS)}") from None
