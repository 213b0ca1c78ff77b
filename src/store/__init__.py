"""Local platform bindings.

This package persists destination tables as JSONL sheets and reads form
documents from a directory tree for the reconcile engine.
"""
