"""Unit tests for the email-keyed identity store."""

from __future__ import annotations

import pytest

from core.errors import RollcallStoreError
from core.types import IdentityRecord
from reconcile.identity_store import IdentityStore, normalize_email


def test_normalize_email_lowercases_and_trims() -> None:
    """Normalization should ignore case and surrounding whitespace."""
    assert normalize_email("  Al@X.Com ") == "al@x.com"


def test_merge_inserts_new_identity_with_count_one() -> None:
    """First merge for an email should create a record with count 1."""
    store = IdentityStore()

    is_new = store.merge("al@x.com", "Al")

    assert is_new and store.get("al@x.com") == IdentityRecord("Al", "al@x.com", 1)


def test_merge_same_email_different_case_is_one_identity() -> None:
    """Emails differing only in case should share one identity."""
    store = IdentityStore()
    store.merge("Al@X.com", "Al")

    is_new = store.merge("al@x.com", "Alice")

    assert not is_new and store.export() == [IdentityRecord("Alice", "al@x.com", 2)]


def test_merge_keeps_longer_existing_name() -> None:
    """A shorter candidate should not replace the stored name."""
    store = IdentityStore()
    store.merge("al@x.com", "Alice Smith")
    store.merge("al@x.com", "Al")

    assert store.get("al@x.com").display_name == "Alice Smith"


def test_merge_tie_keeps_earliest_name() -> None:
    """Equal-length candidates should keep the earliest observed name."""
    store = IdentityStore()
    store.merge("al@x.com", "Alice")
    store.merge("al@x.com", "Alyss")

    assert store.get("al@x.com").display_name == "Alice"


def test_display_name_length_is_monotonic() -> None:
    """Display name length should track the running maximum of candidates."""
    store = IdentityStore()
    lengths = []
    for candidate in ["Al", "", "Alice", "Bob", "Alice Smith", "A"]:
        store.merge("al@x.com", candidate)
        lengths.append(len(store.get("al@x.com").display_name))

    assert lengths == [2, 2, 5, 5, 11, 11]


def test_export_preserves_first_seen_order() -> None:
    """Export should list emails in first-seen order, not sorted."""
    store = IdentityStore()
    store.merge("zed@x.com", "Zed")
    store.merge("amy@x.com", "Amy")
    store.merge("zed@x.com", "Zed")

    assert [record.email for record in store.export()] == ["zed@x.com", "amy@x.com"]


def test_load_normalizes_emails_and_last_row_wins() -> None:
    """Loaded rows should be keyed by normalized email with later rows winning."""
    store = IdentityStore()
    store.load([["Al", " AL@x.com", 3], ["Alice", "al@x.com", 5]])

    assert store.export() == [IdentityRecord("Alice", "al@x.com", 5)]


def test_load_skips_rows_without_email() -> None:
    """Rows with blank email cells should be ignored."""
    store = IdentityStore()
    store.load([["Nobody", "", 4], ["Bo", "bo@x.com", "2"], []])

    assert store.export() == [IdentityRecord("Bo", "bo@x.com", 2)]


def test_load_then_merge_continues_counting() -> None:
    """Merges after load should increment the persisted count."""
    store = IdentityStore()
    store.load([["Bo", "bo@x.com", 2]])

    store.merge("BO@x.com", "Bo")

    assert store.get("bo@x.com").count == 3


def test_load_rejects_non_numeric_count() -> None:
    """A corrupt count cell should fail instead of silently resetting."""
    store = IdentityStore()

    with pytest.raises(RollcallStoreError):
        store.load([["Bo", "bo@x.com", "many"]])

    assert len(store) == 0


def test_load_rejects_fractional_count() -> None:
    """Fractional counts should fail instead of being truncated."""
    with pytest.raises(RollcallStoreError):
        IdentityStore().load([["Bo", "bo@x.com", "2.7"]])


def test_load_rejects_negative_count() -> None:
    """Negative counts should fail instead of being clamped to zero."""
    with pytest.raises(RollcallStoreError):
        IdentityStore().load([["Bo", "bo@x.com", -3]])


def test_load_rejects_infinite_count() -> None:
    """Infinite counts should raise a store error, not an overflow."""
    with pytest.raises(RollcallStoreError):
        IdentityStore().load([["Bo", "bo@x.com", float("inf")]])


def test_load_accepts_whole_float_count() -> None:
    """Whole-valued float cells should load as integers."""
    store = IdentityStore()
    store.load([["Bo", "bo@x.com", 2.0]])

    assert store.get("bo@x.com").count == 2
