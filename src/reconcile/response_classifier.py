"""Heuristic response field classification.

This module maps free-form field titles onto canonical identity fields.
Each field is tested against an ordered rule list and feeds at most one
category. When several fields match the same category, the last one in
document order wins.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Literal

from core.constants import MULTI_ANSWER_SEPARATOR
from core.types import ClassifiedResponse, FormResponse
from reconcile.identity_store import normalize_email

FieldCategory = Literal["email", "first_name", "last_name", "full_name"]


@dataclass(frozen=True)
class ClassificationRule:
    """One ordered title predicate and the category it populates."""

    category: FieldCategory
    matches: Callable[[str], bool]


DEFAULT_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule("email", lambda title: "email" in title),
    ClassificationRule("first_name", lambda title: "first" in title and "name" in title),
    ClassificationRule("last_name", lambda title: "last" in title and "name" in title),
    ClassificationRule("full_name", lambda title: "name" in title and "email" not in title),
)


def classify_response(
    response: FormResponse,
    rules: tuple[ClassificationRule, ...] = DEFAULT_RULES,
) -> ClassifiedResponse:
    """Extract a normalized email and display name from one response.

    Args:
        response: Submitted response with ordered title/answer items.
        rules: Ordered classification rules; first match per field wins.

    Returns:
        Classified response. ``email`` is empty when none could be resolved.
    """
    fields: dict[FieldCategory, str] = {
        "email": response.respondent_email or "",
        "first_name": "",
        "last_name": "",
        "full_name": "",
    }
    for title, answer in response.items:
        answer_text = render_answer(answer)
        if not answer_text:
            continue
        category = match_category(title, rules)
        if category is not None:
            fields[category] = answer_text
    return ClassifiedResponse(
        email=normalize_email(fields["email"]),
        name=resolve_name(fields["first_name"], fields["last_name"], fields["full_name"]),
    )


def match_category(
    title: str,
    rules: tuple[ClassificationRule, ...] = DEFAULT_RULES,
) -> FieldCategory | None:
    """Return the category of the first rule matching a field title."""
    lowered_title = title.lower()
    for rule in rules:
        if rule.matches(lowered_title):
            return rule.category
    return None


def resolve_name(first_name: str, last_name: str, full_name: str) -> str:
    """Combine classified name parts into one display name.

    Args:
        first_name: Last first-name answer seen.
        last_name: Last last-name answer seen.
        full_name: Last generic name answer seen.

    Returns:
        ``"first last"`` when both parts exist, else the full name, else
        whichever single part exists, else an empty string.
    """
    if first_name and last_name:
        return f"{first_name} {last_name}"
    return full_name or first_name or last_name


def render_answer(answer: object) -> str:
    """Render a raw answer as trimmed text.

    Multi-value answers such as checkbox selections are joined with commas.
    """
    if answer is None:
        return ""
    if isinstance(answer, (list, tuple)):
        return MULTI_ANSWER_SEPARATOR.join(str(value) for value in answer).strip()
    return str(answer).strip()
