"""Public gui_kit API and machine-readable component catalog."""

from __future__ import annotations

from typing import TypedDict

from record_lookup.gui_kit.error_surface import ErrorSurface
from record_lookup.gui_kit.lookup import LookupField
from record_lookup.gui_kit.ui_dispatch import UIDispatcher


class GUIKitComponent(TypedDict):
    """Machine-readable descriptor for one public gui_kit component."""

    export: str
    module: str
    kind: str
    summary: str

__all__ = [
    "ErrorSurface",
    "GUIKitComponent",
    "LookupField",
    "UIDispatcher",
    "get_component_catalog",
]

_COMPONENT_CATALOG: tuple[GUIKitComponent, ...] = (
    {
        "export": "ErrorSurface",
        "module": "record_lookup.gui_kit.error_surface",
        "kind": "error_adapter",
        "summary": "Delivers actionable error messages to status and inline targets.",
    },
    {
        "export": "LookupField",
        "module": "record_lookup.gui_kit.lookup",
        "kind": "lookup_widget",
        "summary": "Debounced record search with dropdown panel and single selection.",
    },
    {
        "export": "UIDispatcher",
        "module": "record_lookup.gui_kit.ui_dispatch",
        "kind": "dispatch_helper",
        "summary": "Tk-bound timers, cancellation and background job marshalling.",
    },
)


def get_component_catalog() -> tuple[GUIKitComponent, ...]:
    """Return stable gui_kit component metadata for tools and docs."""

    return _COMPONENT_CATALOG


def _validate_component_catalog() -> None:
    required_keys = ("export", "module", "kind", "summary")
    for index, component in enumerate(_COMPONENT_CATALOG, start=1):
        for key in required_keys:
            value = component.get(key)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(
                    f"Invalid gui_kit catalog entry #{index}: field '{key}' is missing or blank. "
                    "Fix: provide a non-empty string for each catalog field."
                )

        export = component["export"]
        if export not in __all__ or export not in globals():
            raise ValueError(
                f"Invalid gui_kit catalog entry #{index}: export '{export}' is not exported by record_lookup.gui_kit. "
                "Fix: import the symbol, list it in __all__, or correct the catalog entry."
            )
        if not component["module"].startswith("record_lookup.gui_kit."):
            raise ValueError(
                f"Invalid gui_kit catalog entry #{index}: module '{component['module']}' is outside record_lookup.gui_kit. "
                "Fix: point the entry to the canonical gui_kit module path."
            )


_validate_component_catalog()
