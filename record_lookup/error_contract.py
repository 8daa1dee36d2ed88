from __future__ import annotations

import re

__all__ = [
    "ACTIONABLE_ERROR_PATTERN",
    "LOAD_SELECTED_LOCATION",
    "LOOKUP_ERROR_CONTEXT",
    "SEARCH_LOCATION",
    "coerce_actionable_message",
    "format_actionable_error",
    "is_actionable_message",
    "lookup_failure_message",
]

# "<context> / <location>: <issue>. Fix: <hint>."
ACTIONABLE_ERROR_PATTERN = re.compile(r"^[^:\n]+: .+\. Fix: .+\.$")

LOOKUP_ERROR_CONTEXT = "Record lookup"
SEARCH_LOCATION = "Search"
LOAD_SELECTED_LOCATION = "Load selected record"

_LOOKUP_FAILURE_HINTS = {
    SEARCH_LOCATION: "keep typing to retry the search",
    LOAD_SELECTED_LOCATION: "clear the field and search for the record again",
}


def _clean(value: object, default: str) -> str:
    text = str(value).strip().rstrip(".")
    return text if text else default


def format_actionable_error(context: str, location: str, issue: str, hint: str) -> str:
    prefix = _clean(location, "Unknown")
    clean_context = str(context).strip()
    if clean_context:
        prefix = f"{clean_context} / {prefix}"
    return f"{prefix}: {_clean(issue, 'unknown issue')}. Fix: {_clean(hint, 'review input and retry')}."


def is_actionable_message(message: object) -> bool:
    return bool(ACTIONABLE_ERROR_PATTERN.match(str(message).strip()))


def coerce_actionable_message(
    context: str,
    raw_message: object,
    *,
    location: str,
    hint: str,
) -> str:
    text = str(raw_message).strip()
    if is_actionable_message(text):
        return text
    return format_actionable_error(context, location, text or "unknown issue", hint)


def lookup_failure_message(location: str, exc: Exception | str) -> str:
    """Actionable message for a failed provider call at a lookup step."""

    hint = _LOOKUP_FAILURE_HINTS.get(location, "retry the lookup")
    return coerce_actionable_message(LOOKUP_ERROR_CONTEXT, exc, location=location, hint=hint)
