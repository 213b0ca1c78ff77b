"""Reconcile orchestration.

This module wires the ledger, identity store, classifier, and walker into
one run: load prior state, walk the folder tree, merge new sources, then
write identities and append newly ledgered source ids.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from core.config import RollcallConfig
from core.constants import IDENTITY_HEADERS, LEDGER_HEADERS
from core.errors import RollcallConfigError, RollcallLookupError, RollcallSourceError
from core.logging_config import get_logger
from core.providers import DestinationProvider, FolderProvider, SourceProvider
from core.types import (
    FolderRef,
    ReconcileOptions,
    ReconcileSummary,
    SheetRef,
    SourceOutcome,
    SourceRef,
    TableRef,
)
from reconcile.identity_store import IdentityStore
from reconcile.ledger import Ledger
from reconcile.response_classifier import classify_response
from reconcile.source_walker import SourceWalker
from store.form_folders import LocalFormFolders
from store.table_store import LocalTableStore

_LOGGER = get_logger(__name__)


@dataclass
class WalkTally:
    """Mutable counters accumulated during one walk."""

    sources_discovered: int = 0
    sources_skipped_ledgered: int = 0
    sources_skipped_by_name: int = 0
    outcomes: list[SourceOutcome] = field(default_factory=list)


class ReconcileRunner:
    """Single-run reconcile driver over injected platform providers."""

    def __init__(
        self,
        options: ReconcileOptions,
        destination: DestinationProvider,
        folders: FolderProvider,
        sources: SourceProvider,
    ) -> None:
        validate_options(options)
        self._options = options
        self._destination = destination
        self._folders = folders
        self._sources = sources

    def run(self) -> ReconcileSummary:
        """Execute one reconcile run and return its statistics.

        Raises:
            RollcallLookupError: If the parent folder or subfolder is missing.
            RollcallStoreError: If destination tables cannot be read or written.
        """
        self._log_progress(
            "reconcile_started",
            parent_folder=self._options.parent_folder_name,
            subfolder=self._options.subfolder_name,
            output=self._options.output_name,
        )
        table = self._destination.find_or_create_table(self._options.output_name)
        with self._destination.lock(table):
            return self._run_locked(table)

    def _run_locked(self, table: TableRef) -> ReconcileSummary:
        identity_sheet = self._destination.find_or_create_sheet(
            table, self._options.output_sheet_name, IDENTITY_HEADERS
        )
        ledger_sheet = self._destination.find_or_create_sheet(
            table, self._options.log_sheet_name, LEDGER_HEADERS, hidden=True
        )
        identity_rows = self._destination.read_rows(identity_sheet)
        ledger_rows = self._destination.read_rows(ledger_sheet)
        identities = IdentityStore()
        identities.load(identity_rows[1:])
        ledger = Ledger()
        ledger.load(row[0] for row in ledger_rows[1:] if row)
        self._log_progress(
            "prior_state_loaded",
            identities=len(identities),
            ledgered_sources=len(ledger),
        )
        root = self._resolve_root_folder()
        tally = self.reconcile_tree(root, identities, ledger)
        self._write_identities(identity_sheet, len(identity_rows), identities)
        self._append_ledger(ledger_sheet, len(ledger_rows), ledger)
        summary = _build_summary(tally, len(identities), self._destination.get_url(table))
        _log_summary(summary, self._options.verbose)
        return summary

    def reconcile_tree(
        self,
        root: FolderRef,
        identities: IdentityStore,
        ledger: Ledger,
    ) -> WalkTally:
        """Walk ``root`` and merge every eligible source into the given state.

        Args:
            root: Folder the walk starts from.
            identities: Identity store mutated by successful sources.
            ledger: Ledger receiving ids of successful sources.

        Returns:
            Counters and per-source outcomes for the walk.
        """
        tally = WalkTally()
        walker = SourceWalker(self._folders)
        for visited, folder_sources in walker.walk_folders(root):
            self._log_progress("folder_entered", folder=visited.path, depth=visited.depth)
            reconciled_in_folder = 0
            for source in folder_sources:
                tally.sources_discovered += 1
                if ledger.contains(source.source_id):
                    tally.sources_skipped_ledgered += 1
                    continue
                if self._is_name_skipped(source):
                    tally.sources_skipped_by_name += 1
                    self._log_progress("source_skipped", source=source.name, folder=visited.path)
                    continue
                outcome = self.reconcile_source(source, visited.path, identities, ledger)
                tally.outcomes.append(outcome)
                if not outcome.retry_eligible:
                    reconciled_in_folder += 1
            if reconciled_in_folder == 0:
                self._log_progress("folder_has_no_new_sources", folder=visited.path)
        return tally

    def reconcile_source(
        self,
        source: SourceRef,
        folder_path: str,
        identities: IdentityStore,
        ledger: Ledger,
    ) -> SourceOutcome:
        """Read, classify, and merge one source.

        All responses are read and classified before any merge, so a source
        that fails to read leaves the identity store untouched and stays out
        of the ledger for a later retry.

        Args:
            source: Discovered, eligible source.
            folder_path: Folder path for logging and outcome context.
            identities: Identity store to merge into.
            ledger: Ledger to record the source in.

        Returns:
            Reconciled or failed outcome.
        """
        try:
            document = self._sources.open(source.source_id)
            responses = list(self._sources.list_responses(document))
        except RollcallSourceError as error:
            _LOGGER.warning(
                "source_failed",
                source=source.name,
                source_id=source.source_id,
                folder=folder_path,
                reason=str(error),
            )
            return SourceOutcome(
                source_id=source.source_id,
                source_name=source.name,
                folder_path=folder_path,
                status="failed",
                reason=str(error),
            )
        classified_responses = [classify_response(response) for response in responses]
        new_identities = 0
        responses_without_email = 0
        for classified in classified_responses:
            if not classified.email:
                responses_without_email += 1
                continue
            if identities.merge(classified.email, classified.name):
                new_identities += 1
        ledger.add(source.source_id)
        self._log_progress(
            "source_reconciled",
            source=source.name,
            folder=folder_path,
            responses=len(responses),
            new_identities=new_identities,
            total_identities=len(identities),
        )
        return SourceOutcome(
            source_id=source.source_id,
            source_name=source.name,
            folder_path=folder_path,
            status="reconciled",
            responses_examined=len(responses),
            responses_without_email=responses_without_email,
            new_identities=new_identities,
        )

    def _resolve_root_folder(self) -> FolderRef:
        """Resolve the parent folder and optional subfolder.

        Raises:
            RollcallLookupError: If either folder cannot be found.
        """
        parent = self._folders.find_folder_by_name(self._options.parent_folder_name)
        if parent is None:
            raise RollcallLookupError(
                f"Parent folder not found: {self._options.parent_folder_name}. "
                "Check the folder name and the forms root."
            )
        subfolder_name = self._options.subfolder_name
        if not subfolder_name:
            return parent
        subfolder = self._folders.find_child_folder(parent, subfolder_name)
        if subfolder is None:
            raise RollcallLookupError(
                f"Subfolder not found: {subfolder_name} "
                f"(under {self._options.parent_folder_name}). "
                "Subfolders must be direct children of the parent folder."
            )
        return subfolder

    def _is_name_skipped(self, source: SourceRef) -> bool:
        if not self._options.skip_name_filter:
            return False
        return self._options.skip_name_token.lower() in source.name.lower()

    def _write_identities(
        self,
        sheet: SheetRef,
        previous_row_count: int,
        identities: IdentityStore,
    ) -> None:
        """Overwrite identity rows below the header and clear surplus rows."""
        rows = [[record.display_name, record.email, record.count] for record in identities]
        if previous_row_count == 0:
            self._destination.write_rows(sheet, 0, [list(IDENTITY_HEADERS)])
        if rows:
            self._destination.write_rows(sheet, 1, rows)
        new_row_count = len(rows) + 1
        if previous_row_count > new_row_count:
            self._destination.clear_rows(
                sheet, new_row_count, previous_row_count - new_row_count
            )
        self._log_progress("identities_written", rows=len(rows))

    def _append_ledger(self, sheet: SheetRef, previous_row_count: int, ledger: Ledger) -> None:
        """Append ids ledgered during this run after the existing rows."""
        new_ids = ledger.new_ids()
        if previous_row_count == 0:
            self._destination.write_rows(sheet, 0, [list(LEDGER_HEADERS)])
            previous_row_count = 1
        if not new_ids:
            return
        self._destination.write_rows(
            sheet, previous_row_count, [[source_id] for source_id in new_ids]
        )
        self._log_progress("ledger_appended", rows=len(new_ids))

    def _log_progress(self, event: str, **fields: object) -> None:
        if self._options.verbose:
            _LOGGER.info(event, **fields)


def validate_options(options: ReconcileOptions) -> None:
    """Validate reconcile options before any side effect.

    Raises:
        RollcallConfigError: If required options are missing or blank.
    """
    required_fields = {
        "parent_folder_name": options.parent_folder_name,
        "output_name": options.output_name,
        "output_sheet_name": options.output_sheet_name,
        "log_sheet_name": options.log_sheet_name,
    }
    missing_fields = [
        field_name
        for field_name, value in required_fields.items()
        if not isinstance(value, str) or not value.strip()
    ]
    if missing_fields:
        raise RollcallConfigError(
            f"Missing required reconcile options: {', '.join(missing_fields)}. "
            "Provide parent_folder_name, output_name, and output_sheet_name."
        )
    if options.output_sheet_name == options.log_sheet_name:
        raise RollcallConfigError(
            f"Sheet name '{options.output_sheet_name}' is used for both identities and "
            "the processed-source ledger. Choose a different log sheet name."
        )
    if options.skip_name_filter and not options.skip_name_token.strip():
        raise RollcallConfigError(
            "Name filter is enabled with an empty skip token, which would skip every "
            "source. Set a skip token or disable the name filter."
        )


def reconcile_forms(options: ReconcileOptions, config: RollcallConfig) -> ReconcileSummary:
    """Run reconciliation against the local forms tree and table store.

    Args:
        options: Reconcile request options.
        config: Runtime configuration.

    Returns:
        Run statistics.

    Raises:
        RollcallConfigError: If options are invalid.
        RollcallLookupError: If the parent folder or subfolder is missing.
        RollcallStoreError: If the destination is corrupt or locked.
    """
    folders = LocalFormFolders(config.forms_root)
    runner = ReconcileRunner(
        options,
        destination=LocalTableStore(config.data_root),
        folders=folders,
        sources=folders,
    )
    return runner.run()


def _build_summary(tally: WalkTally, total_identities: int, table_url: str) -> ReconcileSummary:
    """Aggregate per-source outcomes into run statistics."""
    reconciled = [outcome for outcome in tally.outcomes if not outcome.retry_eligible]
    return ReconcileSummary(
        sources_discovered=tally.sources_discovered,
        sources_reconciled=len(reconciled),
        sources_skipped_ledgered=tally.sources_skipped_ledgered,
        sources_skipped_by_name=tally.sources_skipped_by_name,
        sources_failed=len(tally.outcomes) - len(reconciled),
        responses_examined=sum(outcome.responses_examined for outcome in reconciled),
        responses_without_email=sum(outcome.responses_without_email for outcome in reconciled),
        new_identities=sum(outcome.new_identities for outcome in reconciled),
        total_identities=total_identities,
        table_url=table_url,
        outcomes=tuple(tally.outcomes),
    )


def _log_summary(summary: ReconcileSummary, verbose: bool) -> None:
    """Log run completion with aggregate statistics."""
    if not verbose:
        return
    _LOGGER.info(
        "reconcile_completed",
        total_identities=summary.total_identities,
        sources_discovered=summary.sources_discovered,
        sources_reconciled=summary.sources_reconciled,
        sources_skipped_ledgered=summary.sources_skipped_ledgered,
        sources_skipped_by_name=summary.sources_skipped_by_name,
        sources_failed=summary.sources_failed,
        responses_examined=summary.responses_examined,
        new_identities=summary.new_identities,
        table_url=summary.table_url,
    )
