"""Unit tests for filesystem-backed destination tables."""

from __future__ import annotations

from pathlib import Path

import pytest

from core.errors import RollcallStoreError
from core.types import SheetRef
from store.table_store import LocalTableStore


def _sheet(tmp_path: Path, name: str = "Attendance") -> tuple[LocalTableStore, SheetRef]:
    tables = LocalTableStore(tmp_path)
    table = tables.find_or_create_table("Master Attendance")
    return tables, tables.find_or_create_sheet(table, name, ["Name", "Email", "Count"])


def test_find_or_create_sheet_writes_header_once(tmp_path: Path) -> None:
    """Re-opening a sheet should not write a second header."""
    tables, sheet = _sheet(tmp_path)
    table = tables.find_or_create_table("Master Attendance")
    tables.find_or_create_sheet(table, "Attendance", ["Other"])

    assert tables.read_rows(sheet) == [["Name", "Email", "Count"]]


def test_write_rows_overwrites_from_start_row(tmp_path: Path) -> None:
    """Writes should replace rows in place and extend the sheet as needed."""
    tables, sheet = _sheet(tmp_path)
    tables.write_rows(sheet, 1, [["A", "a@x.com", 1]])

    tables.write_rows(sheet, 1, [["B", "b@x.com", 2], ["C", "c@x.com", 3]])

    assert tables.read_rows(sheet)[1:] == [["B", "b@x.com", 2], ["C", "c@x.com", 3]]


def test_write_rows_pads_gaps(tmp_path: Path) -> None:
    """Writing past the end should leave blank rows in between."""
    tables, sheet = _sheet(tmp_path)

    tables.write_rows(sheet, 3, [["Z", "z@x.com", 1]])

    assert tables.read_rows(sheet)[1:] == [[], [], ["Z", "z@x.com", 1]]


def test_write_rows_rejects_negative_start(tmp_path: Path) -> None:
    """Negative row indices should be rejected."""
    tables, sheet = _sheet(tmp_path)

    with pytest.raises(RollcallStoreError):
        tables.write_rows(sheet, -1, [["x"]])

    assert len(tables.read_rows(sheet)) == 1


def test_clear_rows_trims_trailing_blank_rows(tmp_path: Path) -> None:
    """Clearing the tail of a sheet should shrink it."""
    tables, sheet = _sheet(tmp_path)
    tables.write_rows(sheet, 1, [["A", "a", 1], ["B", "b", 1], ["C", "c", 1]])

    tables.clear_rows(sheet, 2, 2)

    assert tables.read_rows(sheet) == [["Name", "Email", "Count"], ["A", "a", 1]]


def test_sheets_are_isolated_within_table(tmp_path: Path) -> None:
    """Each sheet should keep its own rows."""
    tables, identity_sheet = _sheet(tmp_path)
    table = tables.find_or_create_table("Master Attendance")
    ledger_sheet = tables.find_or_create_sheet(table, "Processed", ["Processed Form IDs"], hidden=True)
    tables.write_rows(ledger_sheet, 1, [["form-a"]])

    assert (tables.read_rows(identity_sheet), tables.is_hidden(ledger_sheet)) == (
        [["Name", "Email", "Count"]],
        True,
    )


def test_read_rows_unknown_table_raises(tmp_path: Path) -> None:
    """Reading from a table that was never created should fail clearly."""
    tables = LocalTableStore(tmp_path)

    with pytest.raises(RollcallStoreError, match="manifest not found"):
        tables.read_rows(SheetRef(table_name="Missing", sheet_name="Attendance"))

    assert not (tmp_path / "tables" / "Missing").exists()


def test_read_rows_corrupt_sheet_raises(tmp_path: Path) -> None:
    """Corrupt sheet files should surface as store errors."""
    tables, sheet = _sheet(tmp_path)
    sheet_path = tmp_path / "tables" / "Master_Attendance" / "sheets" / "Attendance.jsonl"
    sheet_path.write_text('["Name"]\n{"not": "a row"}\n', encoding="utf-8")

    with pytest.raises(RollcallStoreError, match="Failed to read sheet"):
        tables.read_rows(sheet)

    assert sheet_path.exists()


def test_get_url_points_at_table_directory(tmp_path: Path) -> None:
    """Table URLs should be file URIs of the table directory."""
    tables = LocalTableStore(tmp_path)
    table = tables.find_or_create_table("Master Attendance")

    assert tables.get_url(table) == (tmp_path / "tables" / "Master_Attendance").resolve().as_uri()


def test_lock_blocks_second_holder(tmp_path: Path) -> None:
    """A held table lock should refuse a second acquisition."""
    tables = LocalTableStore(tmp_path)
    table = tables.find_or_create_table("Master")

    with tables.lock(table):
        with pytest.raises(RollcallStoreError, match="locked"):
            tables.lock(table).acquire()

    assert not (tmp_path / "tables" / "Master" / ".rollcall.lock").exists()
