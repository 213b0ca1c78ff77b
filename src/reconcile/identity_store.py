"""Email-keyed identity store.

This module aggregates display names and response counts per normalized
email. Display names only ever grow: a candidate replaces the stored name
when it is strictly longer, so ties keep the earliest-observed name.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Sequence

from core.errors import RollcallStoreError
from core.types import IdentityRecord


@dataclass
class _IdentityEntry:
    display_name: str
    count: int


def normalize_email(email: str) -> str:
    """Normalize an email into its identity key.

    Args:
        email: Raw email text.

    Returns:
        Lowercased email with surrounding whitespace removed.
    """
    return email.strip().lower()


class IdentityStore:
    """In-memory identity mapping preserving first-seen email order."""

    def __init__(self) -> None:
        self._entries: dict[str, _IdentityEntry] = {}

    def load(self, rows: Iterable[Sequence[object]]) -> None:
        """Seed the store from persisted ``(display_name, email, count)`` rows.

        Rows with a blank email are ignored. A later row for the same email
        replaces an earlier one.

        Args:
            rows: Persisted identity rows without the header.
        """
        for row in rows:
            padded_row = list(row) + [None] * (3 - len(row))
            display_name, email, count = padded_row[:3]
            email_key = normalize_email(_cell_text(email))
            if not email_key:
                continue
            self._entries[email_key] = _IdentityEntry(
                display_name=_cell_text(display_name),
                count=_cell_count(count),
            )

    def merge(self, email: str, candidate_name: str) -> bool:
        """Merge one valid response into the store.

        Args:
            email: Resolved respondent email.
            candidate_name: Name resolved from the same response.

        Returns:
            True when the email was not present before this merge.
        """
        email_key = normalize_email(email)
        entry = self._entries.get(email_key)
        if entry is None:
            self._entries[email_key] = _IdentityEntry(display_name=candidate_name, count=1)
            return True
        entry.count += 1
        if len(candidate_name) > len(entry.display_name):
            entry.display_name = candidate_name
        return False

    def export(self) -> list[IdentityRecord]:
        """Return identity rows in first-seen insertion order."""
        return [
            IdentityRecord(display_name=entry.display_name, email=email, count=entry.count)
            for email, entry in self._entries.items()
        ]

    def get(self, email: str) -> IdentityRecord | None:
        """Return the identity for an email, or None when unknown."""
        email_key = normalize_email(email)
        entry = self._entries.get(email_key)
        if entry is None:
            return None
        return IdentityRecord(display_name=entry.display_name, email=email_key, count=entry.count)

    def __contains__(self, email: object) -> bool:
        return isinstance(email, str) and normalize_email(email) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[IdentityRecord]:
        return iter(self.export())


def _cell_text(value: object) -> str:
    """Render a persisted cell as text."""
    if value is None:
        return ""
    return str(value)


def _cell_count(value: object) -> int:
    """Parse a persisted count cell; blank cells count as zero.

    Raises:
        RollcallStoreError: If the cell is not a non-negative integer.
    """
    if value is None or str(value).strip() == "":
        return 0
    if isinstance(value, bool):
        raise _invalid_count(value)
    if isinstance(value, float):
        if not value.is_integer():
            raise _invalid_count(value)
        count = int(value)
    else:
        try:
            count = int(str(value).strip())
        except ValueError as error:
            raise _invalid_count(value) from error
    if count < 0:
        raise _invalid_count(value)
    return count


def _invalid_count(value: object) -> RollcallStoreError:
    return RollcallStoreError(
        f"Invalid identity count '{value}': expected a non-negative integer. "
        "Fix the Count column in the destination sheet and retry."
    )
