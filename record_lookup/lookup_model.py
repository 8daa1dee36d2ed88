"""Value types shared by the lookup selector, its providers and its views."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable

__all__ = [
    "Candidate",
    "PanelState",
    "ProviderError",
    "RecordProvider",
    "SearchQuery",
    "SelectionEvent",
    "SelectionState",
    "normalize_candidates",
]


class ProviderError(RuntimeError):
    """Raised by a record provider when the backend search fails."""


@dataclass(frozen=True)
class Candidate:
    id: str
    primary_label: str
    secondary_label: str = ""

    @property
    def display_text(self) -> str:
        if self.secondary_label:
            return f"{self.primary_label} | {self.secondary_label}"
        return self.primary_label


def _freeze_context(context: Mapping[str, object] | None) -> Mapping[str, object]:
    return MappingProxyType(dict(context or {}))


@dataclass(frozen=True)
class SearchQuery:
    """
    One provider request.

    `provider_context` is caller data (object name, field names, filters) that
    the selector passes through untouched.
    """

    query_text: str = ""
    selected_id: str = ""
    provider_context: Mapping[str, object] = field(default_factory=dict, hash=False)
    sequence: int = 0
    load_selected: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "provider_context", _freeze_context(self.provider_context))

    def as_params(self) -> dict[str, object]:
        params = dict(self.provider_context)
        params["search_string"] = self.query_text
        params["selected_record_id"] = self.selected_id
        params["load_selected"] = self.load_selected
        return params


RecordProvider = Callable[[SearchQuery], Sequence[Candidate]]


@dataclass
class SelectionState:
    selected_id: str = ""
    selected_label: str = ""

    @property
    def has_selection(self) -> bool:
        return bool(self.selected_id)


@dataclass
class PanelState:
    candidates: tuple[Candidate, ...] = ()
    suppress_close: bool = False

    @property
    def is_open(self) -> bool:
        return bool(self.candidates)


@dataclass(frozen=True)
class SelectionEvent:
    """Outbound notification; the cleared variant carries empty fields."""

    selected_id: str = ""
    primary_label: str = ""
    secondary_label: str = ""

    @classmethod
    def from_candidate(cls, candidate: Candidate) -> "SelectionEvent":
        return cls(
            selected_id=candidate.id,
            primary_label=candidate.primary_label,
            secondary_label=candidate.secondary_label,
        )

    @classmethod
    def cleared(cls) -> "SelectionEvent":
        return cls()

    @property
    def is_cleared(self) -> bool:
        return self.selected_id == ""


def normalize_candidates(payload: object) -> tuple[Candidate, ...] | None:
    """Return the payload as a candidate tuple, or None when it is malformed."""

    if payload is None:
        return ()
    if isinstance(payload, (str, bytes)) or not isinstance(payload, Sequence):
        return None
    if not all(isinstance(item, Candidate) for item in payload):
        return None
    return tuple(payload)
