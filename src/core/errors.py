"""Rollcall exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class RollcallError(Exception):
    """Base exception for all Rollcall failures."""


class RollcallConfigError(RollcallError):
    """Raised for missing options or invalid runtime configuration."""


class RollcallLookupError(RollcallError, LookupError):
    """Raised when a named parent folder or subfolder cannot be found."""


class RollcallSourceError(RollcallError):
    """Raised when a discovered source cannot be opened or read."""


class RollcallStoreError(RollcallError):
    """Raised for destination table read, write, and locking failures."""


class RollcallRunSpecError(RollcallError):
    """Raised for invalid or unsupported YAML job files."""
