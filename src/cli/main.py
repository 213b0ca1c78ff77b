"""Rollcall CLI entry points.
This module exposes reconcile, identity listing, and run-spec commands.
It maps argparse commands onto SDK calls.
"""

from __future__ import annotations

import argparse
from typing import Any, Sequence

from cli.run_spec_command import add_run_spec_command, run_run_spec_command
from core.constants import DEFAULT_LOG_SHEET_NAME, DEFAULT_SKIP_NAME_TOKEN
from core.errors import RollcallError
from core.run_spec_execution import format_summary_lines
from core.types import ReconcileOptions
from store.identity_sdk import RollcallClient


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="rollcall",
        description="Reconcile form responses into one identity table",
    )
    parser.add_argument("--data-root", help="Override ROLLCALL_DATA_ROOT for this command")
    parser.add_argument("--forms-root", help="Override ROLLCALL_FORMS_ROOT for this command")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_reconcile_command(subparsers)
    _add_identities_command(subparsers)
    add_run_spec_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the Rollcall CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        client = RollcallClient().with_roots(
            data_root=args.data_root, forms_root=args.forms_root
        )
        if args.command == "reconcile":
            return _run_reconcile_command(client, args)
        if args.command == "identities":
            return _run_identities_command(client, args)
        if args.command == "run-spec":
            return run_run_spec_command(client, args)
    except RollcallError as error:
        parser.exit(1, f"rollcall: error: {error}\n")
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _run_reconcile_command(client: RollcallClient, args: argparse.Namespace) -> int:
    """Handle reconcile command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    options = ReconcileOptions(
        parent_folder_name=args.parent_folder,
        output_name=args.output,
        output_sheet_name=args.sheet,
        subfolder_name=args.subfolder,
        log_sheet_name=args.log_sheet,
        skip_name_filter=not args.keep_rsvp,
        skip_name_token=args.skip_token,
        verbose=not args.quiet,
    )
    summary = client.reconcile(options)
    for line in format_summary_lines(summary):
        print(line)
    return 0


def _run_identities_command(client: RollcallClient, args: argparse.Namespace) -> int:
    """Handle identities command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    for record in client.identities(args.output, args.sheet):
        print(f"{record.display_name}\t{record.email}\t{record.count}")
    return 0


def _add_reconcile_command(subparsers: Any) -> None:
    """Register reconcile subcommand."""
    parser = subparsers.add_parser(
        "reconcile",
        help="Merge responses from new forms under a folder into the identity table",
    )
    parser.add_argument("--parent-folder", required=True, help="Folder holding the form tree")
    parser.add_argument("--output", required=True, help="Destination table name")
    parser.add_argument("--sheet", required=True, help="Sheet receiving identity rows")
    parser.add_argument("--subfolder", help="Restrict the walk to this child of the parent")
    parser.add_argument(
        "--log-sheet",
        default=DEFAULT_LOG_SHEET_NAME,
        help="Hidden sheet listing processed form ids",
    )
    parser.add_argument(
        "--keep-rsvp",
        action="store_true",
        help="Do not skip forms whose name contains the skip token",
    )
    parser.add_argument(
        "--skip-token",
        default=DEFAULT_SKIP_NAME_TOKEN,
        help="Case-insensitive form name token that marks forms to skip",
    )
    parser.add_argument("--quiet", action="store_true", help="Suppress progress log events")


def _add_identities_command(subparsers: Any) -> None:
    """Register identities subcommand."""
    parser = subparsers.add_parser("identities", help="List stored identities")
    parser.add_argument("--output", required=True, help="Destination table name")
    parser.add_argument("--sheet", required=True, help="Identity sheet name")
