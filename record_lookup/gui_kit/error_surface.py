from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from record_lookup.error_contract import format_actionable_error

__all__ = ["ErrorSurface"]


@dataclass
class ErrorSurface:
    """Shows actionable messages in a field's inline error label."""

    context: str
    set_inline: Callable[[str], None] | None = None

    def format(self, *, location: str, issue: str, hint: str) -> str:
        return format_actionable_error(self.context, location, issue, hint)

    def clear_inline(self) -> None:
        if self.set_inline is not None:
            self.set_inline("")

    def emit_formatted(self, message: str) -> str:
        if self.set_inline is not None:
            self.set_inline(message)
        return message

    def emit(self, *, location: str, issue: str, hint: str) -> str:
        return self.emit_formatted(self.format(location=location, issue=issue, hint=hint))
