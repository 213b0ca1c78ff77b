"""Python SDK for reconcile operations.

This module exposes high-level APIs for running reconciliation and
inspecting stored identities, backed by the local table store.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from core.config import RollcallConfig
from core.run_spec_execution import execute_run_spec_file
from core.types import IdentityRecord, ReconcileOptions, ReconcileSummary, SheetRef
from reconcile.identity_store import IdentityStore
from reconcile.ledger import Ledger
from reconcile.orchestrator import reconcile_forms
from store.table_store import LocalTableStore


class RollcallClient:
    """Primary SDK entry point for reconcile workflows."""

    def __init__(self, config: RollcallConfig | None = None) -> None:
        """Create SDK client.

        Args:
            config: Optional runtime configuration.
        """
        self._config = config or RollcallConfig.from_env()
        self._tables = LocalTableStore(self._config.data_root)

    @property
    def config(self) -> RollcallConfig:
        return self._config

    def with_roots(
        self,
        data_root: str | None = None,
        forms_root: str | None = None,
    ) -> "RollcallClient":
        """Return a client with overridden data and forms roots."""
        config = self._config
        if data_root:
            config = replace(config, data_root=Path(data_root).expanduser().resolve())
        if forms_root:
            config = replace(config, forms_root=Path(forms_root).expanduser().resolve())
        return RollcallClient(config)

    def reconcile(self, options: ReconcileOptions) -> ReconcileSummary:
        """Reconcile new form sources into the destination table.

        Args:
            options: Reconcile options.

        Returns:
            Run statistics.

        Raises:
            RollcallConfigError: If options are invalid.
            RollcallLookupError: If the parent folder or subfolder is missing.
            RollcallStoreError: If the destination is corrupt or locked.
        """
        return reconcile_forms(options, self._config)

    def run_spec(self, spec_file: str, job_number: int | None = None) -> tuple[str, ...]:
        """Execute a YAML run-spec through the shared execution engine.

        Args:
            spec_file: Path to YAML run-spec file.
            job_number: Optional 1-based job to run instead of all jobs.

        Returns:
            Ordered summary output lines.
        """
        return tuple(execute_run_spec_file(self, spec_file, job_number))

    def identities(self, output_name: str, sheet_name: str) -> list[IdentityRecord]:
        """Load stored identities from a destination sheet.

        Raises:
            RollcallStoreError: If the table or sheet does not exist.
        """
        rows = self._tables.read_rows(SheetRef(table_name=output_name, sheet_name=sheet_name))
        store = IdentityStore()
        store.load(rows[1:])
        return store.export()

    def processed_sources(self, output_name: str, log_sheet_name: str) -> list[str]:
        """Load ledgered source ids from a destination's log sheet.

        Raises:
            RollcallStoreError: If the table or sheet does not exist.
        """
        rows = self._tables.read_rows(SheetRef(table_name=output_name, sheet_name=log_sheet_name))
        ledger = Ledger()
        ledger.load(row[0] for row in rows[1:] if row)
        return list(ledger)
