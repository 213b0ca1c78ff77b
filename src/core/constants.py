"""Core constants used across Rollcall modules.

This module centralizes persisted layout names and option defaults.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_DATA_ROOT = Path(".rollcall")
DEFAULT_FORMS_ROOT = Path(".")
TABLES_DIR_NAME = "tables"
SHEETS_DIR_NAME = "sheets"
TABLE_MANIFEST_FILE_NAME = "table.json"
SHEET_FILE_SUFFIX = ".jsonl"
RUN_LOCK_FILE_NAME = ".rollcall.lock"
FORM_FILE_SUFFIX = ".form.json"
FORM_FILE_TYPE = "form"
IDENTITY_HEADERS = ("Name", "Email", "Count")
LEDGER_HEADERS = ("Processed Form IDs",)
DEFAULT_LOG_SHEET_NAME = "Processed"
DEFAULT_SKIP_NAME_TOKEN = "rsvp"
MULTI_ANSWER_SEPARATOR = ","
RUN_SPEC_VERSION = 1
