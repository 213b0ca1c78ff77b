"""Run-spec CLI command wiring.

This module registers the run-spec subcommand. Execution goes through the
shared run-spec engine so scheduled jobs behave like ``reconcile`` calls.
"""

from __future__ import annotations

import argparse
from typing import Any

from core.run_spec import load_run_spec
from core.run_spec_execution import describe_jobs, execute_run_spec
from store.identity_sdk import RollcallClient


def add_run_spec_command(subparsers: Any) -> None:
    """Register run-spec subcommand."""
    parser = subparsers.add_parser(
        "run-spec",
        help="Run every reconcile job in a YAML run-spec file",
    )
    parser.add_argument("spec_file", help="Path to YAML run-spec file")
    parser.add_argument("--job", type=int, help="Run only this 1-based job")
    parser.add_argument(
        "--check",
        action="store_true",
        help="Validate the file and list its jobs without running them",
    )


def run_run_spec_command(client: RollcallClient, args: argparse.Namespace) -> int:
    """Handle run-spec command invocation."""
    spec = load_run_spec(args.spec_file)
    if args.check:
        output_lines = describe_jobs(spec)
    else:
        output_lines = execute_run_spec(client, spec, args.job)
    for line in output_lines:
        print(line)
    return 0
