"""Filesystem-backed destination tables.

This module stores each destination table as a directory holding a JSON
manifest and one JSONL file per sheet. Row indices are zero-based and
row 0 of a sheet is its header.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Sequence

from core.constants import (
    RUN_LOCK_FILE_NAME,
    SHEET_FILE_SUFFIX,
    SHEETS_DIR_NAME,
    TABLE_MANIFEST_FILE_NAME,
    TABLES_DIR_NAME,
)
from core.errors import RollcallStoreError
from core.logging_config import get_logger
from core.types import SheetRef, TableRef
from store.row_payload import read_rows_jsonl, write_rows_jsonl
from store.run_lock import RunLock

_LOGGER = get_logger(__name__)
_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class LocalTableStore:
    """Destination provider persisting sheets under a data root."""

    def __init__(self, data_root: Path) -> None:
        self._tables_dir = data_root / TABLES_DIR_NAME

    def find_or_create_table(self, name: str) -> TableRef:
        """Return the named table, creating its directory and manifest if absent."""
        table_dir = self._table_dir(name)
        manifest_path = table_dir / TABLE_MANIFEST_FILE_NAME
        if manifest_path.exists():
            self._read_manifest(name)
            return TableRef(name=name)
        (table_dir / SHEETS_DIR_NAME).mkdir(parents=True, exist_ok=True)
        self._write_manifest(name, {"name": name, "sheets": []})
        _LOGGER.info("table_created", table=name, path=str(table_dir))
        return TableRef(name=name)

    def find_or_create_sheet(
        self,
        table: TableRef,
        name: str,
        header: Sequence[str],
        hidden: bool = False,
    ) -> SheetRef:
        """Return the named sheet, creating it with a header row if absent.

        Args:
            table: Parent table handle.
            name: Sheet name.
            header: Header row written when the sheet is created.
            hidden: Whether a newly created sheet is marked hidden.

        Returns:
            Sheet handle.
        """
        manifest = self._read_manifest(table.name)
        sheets = manifest["sheets"]
        if any(sheet_entry["name"] == name for sheet_entry in sheets):
            return SheetRef(table_name=table.name, sheet_name=name)
        sheet_entry = {"name": name, "file": _sheet_file_name(name, sheets), "hidden": hidden}
        sheets.append(sheet_entry)
        sheet_ref = SheetRef(table_name=table.name, sheet_name=name)
        (self._table_dir(table.name) / SHEETS_DIR_NAME).mkdir(parents=True, exist_ok=True)
        write_rows_jsonl(self._sheet_path_from_entry(table.name, sheet_entry), [list(header)])
        self._write_manifest(table.name, manifest)
        _LOGGER.info("sheet_created", table=table.name, sheet=name, hidden=hidden)
        return sheet_ref

    def read_rows(self, sheet: SheetRef) -> list[list[object]]:
        """Read all rows of a sheet, header included.

        Raises:
            RollcallStoreError: If the sheet file is unreadable.
        """
        sheet_path = self._sheet_path(sheet)
        try:
            return read_rows_jsonl(sheet_path)
        except (OSError, ValueError) as error:
            raise RollcallStoreError(
                f"Failed to read sheet '{sheet.sheet_name}' at {sheet_path}: {error}. "
                "Repair or remove the sheet file and retry."
            ) from error

    def write_rows(
        self,
        sheet: SheetRef,
        start_row: int,
        rows: Sequence[Sequence[object]],
    ) -> None:
        """Overwrite rows starting at ``start_row``, padding gaps with empty rows."""
        if start_row < 0:
            raise RollcallStoreError(
                f"Invalid start row {start_row} for sheet '{sheet.sheet_name}': "
                "row indices must be zero or greater."
            )
        existing_rows = self.read_rows(sheet)
        while len(existing_rows) < start_row:
            existing_rows.append([])
        for offset, row in enumerate(rows):
            row_index = start_row + offset
            if row_index < len(existing_rows):
                existing_rows[row_index] = list(row)
            else:
                existing_rows.append(list(row))
        self._write_sheet(sheet, existing_rows)

    def clear_rows(self, sheet: SheetRef, start_row: int, count: int) -> None:
        """Blank ``count`` rows from ``start_row``; trailing blank rows are dropped."""
        existing_rows = self.read_rows(sheet)
        end_row = min(start_row + count, len(existing_rows))
        for row_index in range(max(start_row, 0), end_row):
            existing_rows[row_index] = []
        while existing_rows and not existing_rows[-1]:
            existing_rows.pop()
        self._write_sheet(sheet, existing_rows)

    def get_url(self, table: TableRef) -> str:
        """Return the table directory as a ``file://`` URI."""
        return self._table_dir(table.name).resolve().as_uri()

    def is_hidden(self, sheet: SheetRef) -> bool:
        """Return whether a sheet is marked hidden in its table manifest."""
        return bool(self._sheet_entry(sheet).get("hidden", False))

    def lock(self, table: TableRef) -> RunLock:
        """Return an exclusive run lock for the table."""
        return RunLock(self._table_dir(table.name) / RUN_LOCK_FILE_NAME)

    def _write_sheet(self, sheet: SheetRef, rows: list[list[Any]]) -> None:
        sheet_path = self._sheet_path(sheet)
        try:
            write_rows_jsonl(sheet_path, rows)
        except OSError as error:
            raise RollcallStoreError(
                f"Failed to write sheet '{sheet.sheet_name}' at {sheet_path}: {error}. "
                "Check directory permissions and retry."
            ) from error

    def _sheet_path(self, sheet: SheetRef) -> Path:
        return self._sheet_path_from_entry(sheet.table_name, self._sheet_entry(sheet))

    def _sheet_path_from_entry(self, table_name: str, sheet_entry: dict[str, Any]) -> Path:
        return self._table_dir(table_name) / SHEETS_DIR_NAME / str(sheet_entry["file"])

    def _sheet_entry(self, sheet: SheetRef) -> dict[str, Any]:
        manifest = self._read_manifest(sheet.table_name)
        for sheet_entry in manifest["sheets"]:
            if sheet_entry["name"] == sheet.sheet_name:
                return sheet_entry
        raise RollcallStoreError(
            f"Sheet '{sheet.sheet_name}' not found in table '{sheet.table_name}'. "
            "Create the sheet before reading or writing rows."
        )

    def _table_dir(self, name: str) -> Path:
        return self._tables_dir / _safe_name(name)

    def _read_manifest(self, table_name: str) -> dict[str, Any]:
        """Read and validate a table manifest.

        Raises:
            RollcallStoreError: If the manifest is missing or invalid.
        """
        manifest_path = self._table_dir(table_name) / TABLE_MANIFEST_FILE_NAME
        if not manifest_path.exists():
            raise RollcallStoreError(
                f"Table manifest not found at {manifest_path}. "
                "Create the table before opening its sheets."
            )
        try:
            payload = json.loads(manifest_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as error:
            raise RollcallStoreError(
                f"Failed to parse table manifest at {manifest_path}: {error.msg}. "
                "Repair the manifest JSON and retry."
            ) from error
        if not isinstance(payload, dict) or not isinstance(payload.get("sheets"), list):
            raise RollcallStoreError(
                f"Failed to parse table manifest at {manifest_path}: "
                "expected an object with a 'sheets' list. Repair the manifest."
            )
        return payload

    def _write_manifest(self, table_name: str, manifest: dict[str, Any]) -> None:
        manifest_path = self._table_dir(table_name) / TABLE_MANIFEST_FILE_NAME
        manifest_path.write_text(json.dumps(manifest, indent=2) + "\n", encoding="utf-8")


def _safe_name(name: str) -> str:
    """Map a table or sheet name onto a filesystem-safe file name."""
    safe_name = _UNSAFE_NAME_CHARS.sub("_", name.strip()).strip("._")
    return safe_name or "unnamed"


def _sheet_file_name(sheet_name: str, existing_sheets: list[dict[str, Any]]) -> str:
    """Pick a unique sheet file name within a table."""
    taken_files = {str(sheet_entry["file"]) for sheet_entry in existing_sheets}
    base_name = _safe_name(sheet_name)
    candidate = f"{base_name}{SHEET_FILE_SUFFIX}"
    suffix_index = 2
    while candidate in taken_files:
        candidate = f"{base_name}-{suffix_index}{SHEET_FILE_SUFFIX}"
        suffix_index += 1
    return candidate
