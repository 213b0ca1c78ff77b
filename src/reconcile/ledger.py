"""Processed-source ledger.

This module tracks source ids that have already been reconciled.
It separates ids loaded from prior runs from ids added in the current run
so persistence can append instead of rewriting.
"""

from __future__ import annotations

from typing import Iterable, Iterator


class Ledger:
    """Append-only set of reconciled source ids."""

    def __init__(self) -> None:
        self._known_ids: set[str] = set()
        self._new_ids: dict[str, None] = {}

    def load(self, source_ids: Iterable[object]) -> None:
        """Seed the ledger with ids persisted by earlier runs.

        Args:
            source_ids: Previously ledgered ids; blank values are ignored.
        """
        for source_id in source_ids:
            normalized_id = str(source_id).strip() if source_id is not None else ""
            if normalized_id:
                self._known_ids.add(normalized_id)

    def contains(self, source_id: str) -> bool:
        """Return whether the source has already been reconciled."""
        return source_id in self._known_ids

    def add(self, source_id: str) -> None:
        """Record a source as reconciled in the current run.

        Adding an id that is already present is a no-op.
        """
        if source_id in self._known_ids:
            return
        self._known_ids.add(source_id)
        self._new_ids[source_id] = None

    def new_ids(self) -> list[str]:
        """Return ids added during the current run, in insertion order."""
        return list(self._new_ids)

    def __contains__(self, source_id: object) -> bool:
        return source_id in self._known_ids

    def __len__(self) -> int:
        return len(self._known_ids)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._known_ids))
