"""Shared JSONL serialization for sheet rows.

This module centralizes row-level JSON encoding for destination sheets.
Each line holds one JSON array of cell values.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Sequence


def write_rows_jsonl(rows_path: Path, rows: Sequence[Sequence[object]]) -> None:
    """Write sheet rows to a JSONL file.

    Args:
        rows_path: Output JSONL file path.
        rows: Rows to serialize, header included.
    """
    lines = [json.dumps(list(row), ensure_ascii=False) for row in rows]
    payload = "\n".join(lines) + "\n" if lines else ""
    temp_path = rows_path.with_suffix(rows_path.suffix + ".tmp")
    temp_path.write_text(payload, encoding="utf-8")
    temp_path.replace(rows_path)


def read_rows_jsonl(rows_path: Path) -> list[list[Any]]:
    """Read sheet rows from a JSONL file.

    Args:
        rows_path: Input JSONL file path.

    Returns:
        Parsed rows; a missing file reads as an empty sheet.

    Raises:
        ValueError: If a line is not a JSON array.
    """
    if not rows_path.exists():
        return []
    parsed_rows: list[list[Any]] = []
    for line_number, line in enumerate(rows_path.read_text(encoding="utf-8").splitlines(), 1):
        if not line.strip():
            parsed_rows.append([])
            continue
        parsed_rows.append(_parse_row_line(line, line_number))
    return parsed_rows


def _parse_row_line(line: str, line_number: int) -> list[Any]:
    """Parse and validate one JSONL row.

    Args:
        line: Raw JSONL line.
        line_number: One-based line number.

    Returns:
        Parsed row cells.

    Raises:
        ValueError: If JSON row is invalid.
    """
    try:
        payload = json.loads(line)
    except json.JSONDecodeError as error:
        raise ValueError(f"Invalid JSON at line {line_number}: {error.msg}") from error
    if not isinstance(payload, list):
        raise ValueError(f"Invalid row at line {line_number}: expected JSON array")
    return payload
