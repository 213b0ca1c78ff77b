"""Platform collaborator contracts.

This module declares the destination, folder, and source operations the
reconcile engine consumes. Concrete bindings live in the store package.
"""

from __future__ import annotations

from typing import Any, ContextManager, Protocol, Sequence

from core.types import FolderRef, FormResponse, SheetRef, SourceRef, TableRef


class DestinationProvider(Protocol):
    """Tabular destination used to persist identities and the ledger."""

    def find_or_create_table(self, name: str) -> TableRef: ...

    def find_or_create_sheet(
        self,
        table: TableRef,
        name: str,
        header: Sequence[str],
        hidden: bool = False,
    ) -> SheetRef: ...

    def read_rows(self, sheet: SheetRef) -> list[list[object]]: ...

    def write_rows(
        self,
        sheet: SheetRef,
        start_row: int,
        rows: Sequence[Sequence[object]],
    ) -> None: ...

    def clear_rows(self, sheet: SheetRef, start_row: int, count: int) -> None: ...

    def get_url(self, table: TableRef) -> str: ...

    def lock(self, table: TableRef) -> ContextManager[Any]: ...


class FolderProvider(Protocol):
    """Hierarchical folder tree holding form-like documents."""

    def find_folder_by_name(self, name: str) -> FolderRef | None: ...

    def find_child_folder(self, folder: FolderRef, name: str) -> FolderRef | None: ...

    def list_subfolders(self, folder: FolderRef) -> Sequence[FolderRef]: ...

    def list_typed_files(self, folder: FolderRef, file_type: str) -> Sequence[SourceRef]: ...


class SourceProvider(Protocol):
    """Document reader exposing submitted responses."""

    def open(self, source_id: str) -> Any: ...

    def list_responses(self, source: Any) -> Sequence[FormResponse]: ...
