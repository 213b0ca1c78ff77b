"""Identity reconciliation engine.

This package discovers form sources, classifies their responses, and
merges identities under an idempotency ledger.
"""
