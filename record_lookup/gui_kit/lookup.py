"""Tk lookup field: entry, result panel and selected-record row over LookupController."""

from __future__ import annotations

from collections.abc import Callable
import tkinter as tk
from tkinter import ttk

from record_lookup.config import DEFAULT_DEBOUNCE_MS, LookupFieldConfig
from record_lookup.gui_kit.error_surface import ErrorSurface
from record_lookup.gui_kit.ui_dispatch import UIDispatcher
from record_lookup.lookup_controller import LookupController
from record_lookup.lookup_model import RecordProvider, SelectionEvent, SelectionState

__all__ = ["LookupField"]


class LookupField(ttk.Frame):
    """Incremental record search with a dropdown panel and single selection."""

    def __init__(
        self,
        parent: tk.Widget,
        *,
        provider: RecordProvider,
        config: LookupFieldConfig | None = None,
        on_selection_changed: Callable[[SelectionEvent], None] | None = None,
        selected_id: str = "",
        delay_ms: int = DEFAULT_DEBOUNCE_MS,
        panel_height: int = 6,
    ) -> None:
        super().__init__(parent)
        self.config_model = config or LookupFieldConfig()
        self._on_selection_changed = on_selection_changed
        self.dispatcher = UIDispatcher.from_widget(self)

        self.query_var = tk.StringVar(value="")
        self.hint_var = tk.StringVar(value=self.config_model.placeholder)
        self.selected_var = tk.StringVar(value="")
        self.error_var = tk.StringVar(value="")
        self.error_surface = ErrorSurface(
            context=self.config_model.label,
            set_inline=self.error_var.set,
        )

        self.columnconfigure(0, weight=1)

        label_text = self.config_model.label
        if self.config_model.required:
            label_text = f"{label_text} *"
        self.title_label = ttk.Label(self, text=label_text)
        self.title_label.grid(row=0, column=0, sticky="w")

        self.entry = ttk.Entry(self, textvariable=self.query_var)
        self.entry.grid(row=1, column=0, sticky="ew")

        self.selected_row = ttk.Frame(self)
        self.selected_row.columnconfigure(0, weight=1)
        ttk.Label(self.selected_row, textvariable=self.selected_var).grid(row=0, column=0, sticky="w")
        self.clear_btn = ttk.Button(self.selected_row, text="✕", width=3, command=self.clear)
        self.clear_btn.grid(row=0, column=1, padx=(6, 0))
        self.selected_row.grid(row=2, column=0, sticky="ew", pady=(4, 0))

        self.panel = tk.Listbox(self, height=panel_height, activestyle="dotbox", exportselection=False)
        self.panel.grid(row=3, column=0, sticky="ew")

        ttk.Label(self, textvariable=self.hint_var, foreground="#5f6b7a").grid(row=4, column=0, sticky="w")
        ttk.Label(self, textvariable=self.error_var, foreground="#b00020").grid(row=5, column=0, sticky="w")

        self.controller = LookupController(
            provider=provider,
            schedule=self.dispatcher.schedule,
            cancel=self.dispatcher.cancel,
            run_async=self.dispatcher.run_async,
            on_selection_changed=self._handle_selection,
            on_state_changed=self.render,
            on_error=self.error_surface.emit_formatted,
            provider_context=self.config_model.provider_context(),
            selected_id=selected_id,
            delay_ms=delay_ms,
        )

        self.query_var.trace_add("write", self._on_query_changed)
        self.entry.bind("<FocusIn>", self._on_focus_in)
        self.entry.bind("<FocusOut>", self._on_focus_out)
        self.panel.bind("<ButtonPress-1>", self._on_panel_pointer_down)
        self.panel.bind("<ButtonRelease-1>", self._on_panel_release)
        self.panel.bind("<Return>", self._on_panel_return)

        self.render()
        self.controller.start()

    @property
    def selection(self) -> SelectionState:
        return self.controller.selection

    def clear(self) -> None:
        self.controller.clear_selection()

    def focus(self) -> None:
        self.entry.focus_set()

    def validate(self) -> str | None:
        """Return an actionable message when a required field has no selection."""

        if self.config_model.required and not self.selection.has_selection:
            return self.error_surface.emit(
                location="Selection",
                issue="no record is selected",
                hint=f"search for and pick a {self.config_model.object_label.lower()}",
            )
        self.error_surface.clear_inline()
        return None

    def render(self) -> None:
        self.panel.delete(0, "end")
        for candidate in self.controller.candidates:
            self.panel.insert("end", candidate.display_text)
        if self.controller.is_open:
            self.panel.grid()
        else:
            self.panel.grid_remove()

        selection = self.selection
        if selection.has_selection:
            self.selected_var.set(selection.selected_label or selection.selected_id)
            self.selected_row.grid()
        else:
            self.selected_var.set("")
            self.selected_row.grid_remove()

    def destroy(self) -> None:
        self.controller.dispose()
        super().destroy()

    def _handle_selection(self, event: SelectionEvent) -> None:
        self.error_surface.clear_inline()
        if self._on_selection_changed is not None:
            self._on_selection_changed(event)

    def _on_query_changed(self, *_args) -> None:
        text = self.query_var.get()
        self.hint_var.set(self.config_model.help_text if text else self.config_model.placeholder)
        self.error_surface.clear_inline()
        self.controller.on_query_text_changed(text)

    def _on_focus_in(self, _event=None) -> None:
        self.controller.on_focus()

    def _on_focus_out(self, _event=None) -> None:
        self.controller.on_blur()

    def _on_panel_pointer_down(self, _event=None) -> None:
        self.controller.on_pointer_down_inside()

    def _on_panel_release(self, event) -> None:
        self.controller.select_index(self.panel.nearest(event.y))

    def _on_panel_return(self, _event=None) -> str:
        picked = self.panel.curselection()
        if picked:
            self.controller.select_index(int(picked[0]))
        return "break"
