"""Unit tests for heuristic response classification."""

from __future__ import annotations

from core.types import ClassifiedResponse, FormResponse
from reconcile.response_classifier import (
    classify_response,
    match_category,
    render_answer,
    resolve_name,
)


def _response(*items: tuple[str, object], respondent_email: str | None = None) -> FormResponse:
    return FormResponse(items=tuple(items), respondent_email=respondent_email)


def test_match_category_precedence_prefers_email() -> None:
    """A title mentioning both email and name should classify as email."""
    assert match_category("Name / Email") == "email"


def test_match_category_first_and_last_name() -> None:
    """First-name and last-name titles should map to their own categories."""
    assert (match_category("First Name"), match_category("LAST NAME")) == (
        "first_name",
        "last_name",
    )


def test_match_category_generic_name_and_ignored() -> None:
    """Generic name titles map to full name and other titles are ignored."""
    assert (match_category("Your name"), match_category("Dietary needs")) == ("full_name", None)


def test_classify_combines_first_and_last_name() -> None:
    """Both name parts should combine into one display name."""
    result = classify_response(
        _response(("First Name", "Al"), ("Last Name", "Smith"), ("Email", "al@x.com"))
    )

    assert result == ClassifiedResponse(email="al@x.com", name="Al Smith")


def test_classify_prefers_full_name_over_single_part() -> None:
    """Full name should win when only one name part is present."""
    result = classify_response(
        _response(("First Name", "Al"), ("Name", "Alice Smith"), ("Email", "al@x.com"))
    )

    assert result.name == "Alice Smith"


def test_classify_falls_back_to_single_name_part() -> None:
    """A lone last name should be used when nothing else is present."""
    result = classify_response(_response(("Last Name", "Smith"), ("Email", "s@x.com")))

    assert result.name == "Smith"


def test_classify_last_matching_field_wins() -> None:
    """Later fields in the same category should overwrite earlier ones."""
    result = classify_response(
        _response(
            ("Email", "first@x.com"),
            ("Name", "Early"),
            ("Confirm email", "second@x.com"),
            ("Preferred name", "Late"),
        )
    )

    assert result == ClassifiedResponse(email="second@x.com", name="Late")


def test_classify_empty_answer_never_overwrites() -> None:
    """Blank answers should be skipped before rule evaluation."""
    result = classify_response(
        _response(("Email", "al@x.com"), ("Name", "Al"), ("Email", ""), ("Name", "   "))
    )

    assert result == ClassifiedResponse(email="al@x.com", name="Al")


def test_classify_uses_respondent_email_when_no_email_field() -> None:
    """The platform-collected email should seed the email accumulator."""
    result = classify_response(_response(("Name", "Bo"), respondent_email="Bo@X.com"))

    assert result.email == "bo@x.com"


def test_classify_email_field_overrides_respondent_email() -> None:
    """An answered email field should replace the platform-collected email."""
    result = classify_response(
        _response(("Email", "typed@x.com"), respondent_email="collected@x.com")
    )

    assert result.email == "typed@x.com"


def test_classify_without_email_returns_empty_email() -> None:
    """Responses with no resolvable email should report an empty email."""
    result = classify_response(_response(("Name", "Nobody"), ("Comments", "hi")))

    assert result == ClassifiedResponse(email="", name="Nobody")


def test_resolve_name_empty_when_no_parts() -> None:
    """No name parts should resolve to an empty name."""
    assert resolve_name("", "", "") == ""


def test_render_answer_joins_multi_value_answers() -> None:
    """Checkbox-style answers should join with commas."""
    assert render_answer(["red", "blue"]) == "red,blue"


def test_render_answer_handles_none_and_numbers() -> None:
    """Missing answers render empty and scalars render as trimmed text."""
    assert (render_answer(None), render_answer(42), render_answer("  x  ")) == ("", "42", "x")
