"""Public SDK surface for Rollcall.

This module provides a stable import path for library users.
It re-exports the primary client, the engine parts, and typed models.
"""

from __future__ import annotations

from core.config import RollcallConfig
from core.errors import (
    RollcallConfigError,
    RollcallError,
    RollcallLookupError,
    RollcallRunSpecError,
    RollcallSourceError,
    RollcallStoreError,
)
from core.types import (
    ClassifiedResponse,
    FormResponse,
    IdentityRecord,
    ReconcileOptions,
    ReconcileSummary,
    SourceOutcome,
)
from reconcile.identity_store import IdentityStore
from reconcile.ledger import Ledger
from reconcile.orchestrator import ReconcileRunner, reconcile_forms
from reconcile.response_classifier import classify_response
from reconcile.source_walker import SourceWalker
from store.identity_sdk import RollcallClient

__all__ = [
    "ClassifiedResponse",
    "FormResponse",
    "IdentityRecord",
    "IdentityStore",
    "Ledger",
    "ReconcileOptions",
    "ReconcileRunner",
    "ReconcileSummary",
    "RollcallClient",
    "RollcallConfig",
    "RollcallConfigError",
    "RollcallError",
    "RollcallLookupError",
    "RollcallRunSpecError",
    "RollcallSourceError",
    "RollcallStoreError",
    "SourceOutcome",
    "SourceWalker",
    "classify_response",
    "reconcile_forms",
]
