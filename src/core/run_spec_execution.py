"""Run-spec execution engine.

This module executes validated run-spec jobs through a client contract,
so CLI and SDK entry points share one execution path.
"""

from __future__ import annotations

from typing import Protocol

from core.errors import RollcallRunSpecError
from core.run_spec import RunSpec, load_run_spec
from core.types import ReconcileOptions, ReconcileSummary


class RunSpecClient(Protocol):
    """Client API contract required by run-spec execution."""

    def with_roots(
        self,
        data_root: str | None = None,
        forms_root: str | None = None,
    ) -> "RunSpecClient": ...

    def reconcile(self, options: ReconcileOptions) -> ReconcileSummary: ...


def execute_run_spec_file(
    client: RunSpecClient,
    spec_file: str,
    job_number: int | None = None,
) -> list[str]:
    """Load and execute a run-spec file.

    Args:
        client: Client used to run each job.
        spec_file: YAML run-spec path.
        job_number: Optional 1-based job to run instead of all jobs.

    Returns:
        Output lines describing each job summary.
    """
    spec = load_run_spec(spec_file)
    return execute_run_spec(client, spec, job_number)


def execute_run_spec(
    client: RunSpecClient,
    spec: RunSpec,
    job_number: int | None = None,
) -> list[str]:
    """Execute jobs of a validated run-spec in order.

    Jobs run sequentially; the first failing job stops the run.

    Raises:
        RollcallRunSpecError: If ``job_number`` is outside the job list.
    """
    selected_jobs = select_jobs(spec, job_number)
    scoped_client = client.with_roots(
        data_root=spec.defaults.data_root,
        forms_root=spec.defaults.forms_root,
    )
    output_lines: list[str] = []
    for index, job in selected_jobs:
        summary = scoped_client.reconcile(job)
        output_lines.append(f"job={index} output={job.output_name} sheet={job.output_sheet_name}")
        output_lines.extend(format_summary_lines(summary))
    return output_lines


def select_jobs(
    spec: RunSpec,
    job_number: int | None = None,
) -> list[tuple[int, ReconcileOptions]]:
    """Return (1-based index, job) pairs, optionally narrowed to one job."""
    numbered_jobs = list(enumerate(spec.jobs, 1))
    if job_number is None:
        return numbered_jobs
    if not 1 <= job_number <= len(spec.jobs):
        raise RollcallRunSpecError(
            f"Run spec has {len(spec.jobs)} job(s); job {job_number} does not exist. "
            "Pass --job between 1 and the number of jobs."
        )
    return [numbered_jobs[job_number - 1]]


def describe_jobs(spec: RunSpec) -> list[str]:
    """Render one line per job without running anything."""
    lines = []
    for index, job in select_jobs(spec):
        scope = job.parent_folder_name
        if job.subfolder_name:
            scope = f"{scope}/{job.subfolder_name}"
        lines.append(
            f"job={index} output={job.output_name} sheet={job.output_sheet_name} "
            f"folder={scope} skip_rsvp={str(job.skip_name_filter).lower()}"
        )
    return lines


def format_summary_lines(summary: ReconcileSummary) -> list[str]:
    """Render run statistics as ``key=value`` lines."""
    return [
        f"total_identities={summary.total_identities}",
        f"sources_discovered={summary.sources_discovered}",
        f"sources_reconciled={summary.sources_reconciled}",
        f"sources_skipped_ledgered={summary.sources_skipped_ledgered}",
        f"sources_skipped_by_name={summary.sources_skipped_by_name}",
        f"sources_failed={summary.sources_failed}",
        f"responses_examined={summary.responses_examined}",
        f"responses_without_email={summary.responses_without_email}",
        f"new_identities={summary.new_identities}",
        f"table_url={summary.table_url}",
    ]
