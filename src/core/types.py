"""Shared typed models.

This module defines immutable data models used by the reconcile engine,
the local platform bindings, and the SDK to keep interfaces explicit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from core.constants import DEFAULT_LOG_SHEET_NAME, DEFAULT_SKIP_NAME_TOKEN

SourceStatus = Literal["reconciled", "failed"]


@dataclass(frozen=True)
class ReconcileOptions:
    """Reconcile command options.

    Attributes:
        parent_folder_name: Name of the folder whose tree holds the forms.
        output_name: Destination table name.
        output_sheet_name: Sheet receiving the identity rows.
        subfolder_name: Optional direct child of the parent to restrict the walk to.
        log_sheet_name: Hidden sheet holding the processed source ledger.
        skip_name_filter: Skip sources whose name contains ``skip_name_token``.
        skip_name_token: Case-insensitive token used by the name filter.
        verbose: Emit progress log events. Never changes behavior.
    """

    parent_folder_name: str
    output_name: str
    output_sheet_name: str
    subfolder_name: str | None = None
    log_sheet_name: str = DEFAULT_LOG_SHEET_NAME
    skip_name_filter: bool = True
    skip_name_token: str = DEFAULT_SKIP_NAME_TOKEN
    verbose: bool = True


@dataclass(frozen=True)
class FolderRef:
    """Opaque handle to a folder exposed by a folder provider.

    Attributes:
        folder_id: Stable folder identifier used for cycle detection.
        name: Display name of the folder.
    """

    folder_id: str
    name: str


@dataclass(frozen=True)
class SourceRef:
    """A discovered source before its document is opened.

    Attributes:
        source_id: Stable identifier recorded in the ledger.
        name: Advisory display name used for skip filtering and logs.
    """

    source_id: str
    name: str


@dataclass(frozen=True)
class FormResponse:
    """One respondent's submitted answers.

    Attributes:
        items: Ordered ``(field_title, answer)`` pairs; answers may be text,
            a list of selected values, or None when left blank.
        respondent_email: Optional platform-collected respondent email.
    """

    items: tuple[tuple[str, object], ...]
    respondent_email: str | None = None


@dataclass(frozen=True)
class ClassifiedResponse:
    """Canonical identity fields extracted from a response."""

    email: str
    name: str


@dataclass(frozen=True)
class IdentityRecord:
    """Exported identity row.

    Attributes:
        display_name: Longest name observed for the email.
        email: Normalized email identity key.
        count: Number of valid responses attributed to the email.
    """

    display_name: str
    email: str
    count: int


@dataclass(frozen=True)
class TableRef:
    """Handle to a destination table."""

    name: str


@dataclass(frozen=True)
class SheetRef:
    """Handle to one sheet inside a destination table."""

    table_name: str
    sheet_name: str


@dataclass(frozen=True)
class SourceOutcome:
    """Per-source reconcile result.

    Attributes:
        source_id: Source identifier.
        source_name: Source display name.
        folder_path: Slash-joined folder names leading to the source.
        status: ``reconciled`` when ledgered, ``failed`` when retry-eligible.
        responses_examined: Responses read from the source.
        responses_without_email: Responses dropped for lack of an email.
        new_identities: Emails first seen while merging this source.
        reason: Failure description when status is ``failed``.
    """

    source_id: str
    source_name: str
    folder_path: str
    status: SourceStatus
    responses_examined: int = 0
    responses_without_email: int = 0
    new_identities: int = 0
    reason: str | None = None

    @property
    def retry_eligible(self) -> bool:
        """Return whether the source stays out of the ledger for a later run."""
        return self.status == "failed"


@dataclass(frozen=True)
class ReconcileSummary:
    """Aggregate statistics for one reconcile run.

    Attributes:
        sources_discovered: Sources yielded by the walk.
        sources_reconciled: Sources newly added to the ledger.
        sources_skipped_ledgered: Sources already present in the ledger.
        sources_skipped_by_name: Sources excluded by the name filter.
        sources_failed: Sources that could not be read this run.
        responses_examined: Responses read from reconciled sources.
        responses_without_email: Examined responses with no resolvable email.
        new_identities: Emails added to the identity store this run.
        total_identities: Identity rows written to the destination.
        table_url: Location of the destination table.
        outcomes: Per-source results in walk order.
    """

    sources_discovered: int
    sources_reconciled: int
    sources_skipped_ledgered: int
    sources_skipped_by_name: int
    sources_failed: int
    responses_examined: int
    responses_without_email: int
    new_identities: int
    total_identities: int
    table_url: str
    outcomes: tuple[SourceOutcome, ...] = field(default_factory=tuple)
