"""Headless state machine behind the incremental-search lookup control.

The controller never touches widgets or threads directly. Timers go through an
injected `schedule`/`cancel` pair (Tk's `after`/`after_cancel` in the app,
a manual clock in tests) and provider calls go through an injected
`run_async(worker, on_done, on_failed)` runner. Every callback is expected to
arrive on the UI thread, so state is only ever mutated from one place.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Callable

from record_lookup.config import DEFAULT_DEBOUNCE_MS
from record_lookup.error_contract import (
    LOAD_SELECTED_LOCATION,
    LOOKUP_ERROR_CONTEXT,
    SEARCH_LOCATION,
    lookup_failure_message,
)
from record_lookup.lookup_model import (
    Candidate,
    PanelState,
    RecordProvider,
    SearchQuery,
    SelectionEvent,
    SelectionState,
    normalize_candidates,
)

__all__ = ["LookupController", "LookupTimers"]

logger = logging.getLogger("lookup_controller")

ERROR_CONTEXT = LOOKUP_ERROR_CONTEXT

ScheduleFn = Callable[[int, Callable[[], None]], object]
CancelFn = Callable[[object], None]
RunAsyncFn = Callable[
    [Callable[[], object], Callable[[object], None], Callable[[Exception], None]],
    None,
]


@dataclass
class LookupTimers:
    debounce: object | None = None
    blur_close: object | None = None


class LookupController:
    """Selector state machine: debounce, reconciliation, open/close, selection."""

    def __init__(
        self,
        *,
        provider: RecordProvider,
        schedule: ScheduleFn,
        cancel: CancelFn,
        run_async: RunAsyncFn,
        on_selection_changed: Callable[[SelectionEvent], None] | None = None,
        on_state_changed: Callable[[], None] | None = None,
        on_error: Callable[[str], None] | None = None,
        provider_context: Mapping[str, object] | None = None,
        selected_id: str = "",
        delay_ms: int = DEFAULT_DEBOUNCE_MS,
    ) -> None:
        for name, value in (
            ("provider", provider),
            ("schedule", schedule),
            ("cancel", cancel),
            ("run_async", run_async),
        ):
            if not callable(value):
                raise ValueError(
                    f"{ERROR_CONTEXT} / {name}: expected a callable, got {type(value).__name__}. "
                    f"Fix: pass a callable {name} collaborator."
                )
        if int(delay_ms) < 0:
            raise ValueError(
                f"{ERROR_CONTEXT} / Debounce delay: {delay_ms} ms is negative. "
                "Fix: use a delay of 0 ms or more."
            )

        self._provider = provider
        self._schedule = schedule
        self._cancel = cancel
        self._run_async = run_async
        self._on_selection_changed = on_selection_changed
        self._on_state_changed = on_state_changed
        self._on_error = on_error
        self._provider_context = dict(provider_context or {})
        self.delay_ms = int(delay_ms)

        self.selection = SelectionState(selected_id=str(selected_id or ""))
        self.panel = PanelState()
        self.query_text = ""
        self.timers = LookupTimers()
        self.latest_sequence = 0
        self._label_request_id = ""
        self._text_at_selection = ""

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def candidates(self) -> tuple[Candidate, ...]:
        return self.panel.candidates

    @property
    def is_open(self) -> bool:
        return self.panel.is_open

    def current_query(self, sequence: int | None = None) -> SearchQuery:
        return SearchQuery(
            query_text=self.query_text,
            selected_id=self.selection.selected_id,
            provider_context=self._provider_context,
            sequence=self.latest_sequence if sequence is None else sequence,
        )

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    def start(self) -> bool:
        """Resolve the label of a preselected record; True when a load was dispatched."""

        if not self.selection.selected_id:
            return False
        requested_id = self.selection.selected_id
        self._label_request_id = requested_id
        query = SearchQuery(
            query_text="",
            selected_id=requested_id,
            provider_context=self._provider_context,
            sequence=self.latest_sequence,
            load_selected=True,
        )
        logger.debug("Loading label for preselected record %s", requested_id)
        self._run_async(
            lambda: self._provider(query),
            lambda payload: self._apply_label_response(requested_id, payload),
            lambda exc: self._apply_label_failure(requested_id, exc),
        )
        return True

    def _apply_label_response(self, requested_id: str, payload: object) -> None:
        if requested_id != self._label_request_id or requested_id != self.selection.selected_id:
            logger.debug("Discarding label load for superseded record %s", requested_id)
            return
        self._label_request_id = ""
        candidates = normalize_candidates(payload)
        if not candidates:
            if candidates is None:
                logger.warning("Label load for %s returned a malformed response", requested_id)
            return
        self.selection.selected_label = candidates[0].primary_label
        self._notify_state()

    def _apply_label_failure(self, requested_id: str, exc: Exception) -> None:
        if requested_id != self._label_request_id:
            return
        self._label_request_id = ""
        logger.warning("Label load for %s failed: %s", requested_id, exc)
        self._report_error(exc, location=LOAD_SELECTED_LOCATION)

    # ------------------------------------------------------------------
    # Debounce
    # ------------------------------------------------------------------

    def on_query_text_changed(self, text: str) -> None:
        self.query_text = str(text)
        self._cancel_debounce()
        self.timers.debounce = self._schedule(self.delay_ms, self.on_timer_fire)

    def on_focus(self) -> None:
        """Re-arm a search when the panel is closed and the text is not already the selection."""

        if self.panel.is_open:
            return
        if self.selection.has_selection and self.query_text == self._text_at_selection:
            return
        self.on_query_text_changed(self.query_text)

    def _cancel_debounce(self) -> None:
        handle = self.timers.debounce
        self.timers.debounce = None
        if handle is not None:
            self._cancel(handle)

    def on_timer_fire(self) -> None:
        self.timers.debounce = None
        self.latest_sequence += 1
        query = self.current_query(self.latest_sequence)
        logger.debug("Dispatching search #%d for %r", query.sequence, query.query_text)
        self._run_async(
            lambda: self._provider(query),
            lambda payload: self._apply_search_response(query.sequence, payload),
            lambda exc: self._apply_search_failure(query.sequence, exc),
        )

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    def _apply_search_response(self, sequence: int, payload: object) -> None:
        if sequence != self.latest_sequence:
            logger.debug("Discarding stale search #%d (latest #%d)", sequence, self.latest_sequence)
            return
        candidates = normalize_candidates(payload)
        if candidates is None:
            logger.warning("Search #%d returned a malformed response; showing no candidates", sequence)
            candidates = ()
        self.panel.candidates = candidates
        self._notify_state()

    def _apply_search_failure(self, sequence: int, exc: Exception) -> None:
        if sequence != self.latest_sequence:
            logger.debug("Ignoring failure of stale search #%d: %s", sequence, exc)
            return
        logger.warning("Search #%d failed: %s", sequence, exc)
        self.panel.candidates = ()
        self._report_error(exc, location=SEARCH_LOCATION)
        self._notify_state()

    def _retire_in_flight(self) -> None:
        # Responses still in flight lose the race against an explicit choice.
        self._cancel_debounce()
        self.latest_sequence += 1

    # ------------------------------------------------------------------
    # Open/close
    # ------------------------------------------------------------------

    def on_pointer_down_inside(self) -> None:
        self.panel.suppress_close = True

    def on_blur(self) -> None:
        handle = self.timers.blur_close
        self.timers.blur_close = None
        if handle is not None:
            self._cancel(handle)
        self.timers.blur_close = self._schedule(self.delay_ms, self._evaluate_blur_close)

    def _evaluate_blur_close(self) -> None:
        self.timers.blur_close = None
        closed = False
        if not self.panel.suppress_close and self.panel.is_open:
            self.panel.candidates = ()
            closed = True
        self.panel.suppress_close = False
        if closed:
            self._notify_state()

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select_candidate(self, candidate: Candidate) -> None:
        self._retire_in_flight()
        self._label_request_id = ""
        self.selection.selected_id = candidate.id
        self.selection.selected_label = candidate.primary_label
        self._text_at_selection = self.query_text
        self.panel.candidates = ()
        logger.info("Selected record %s (%s)", candidate.id, candidate.primary_label)
        self._notify_state()
        self._emit(SelectionEvent.from_candidate(candidate))

    def select_index(self, index: int) -> bool:
        if index < 0 or index >= len(self.panel.candidates):
            return False
        self.select_candidate(self.panel.candidates[index])
        return True

    def clear_selection(self) -> None:
        self._retire_in_flight()
        self._label_request_id = ""
        self.selection.selected_id = ""
        self.selection.selected_label = ""
        self.panel.candidates = ()
        logger.info("Selection cleared")
        self._notify_state()
        self._emit(SelectionEvent.cleared())

    def dispose(self) -> None:
        """Cancel outstanding timers; pending provider calls become stale."""

        self._retire_in_flight()
        handle = self.timers.blur_close
        self.timers.blur_close = None
        if handle is not None:
            self._cancel(handle)

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------

    def _emit(self, event: SelectionEvent) -> None:
        if self._on_selection_changed is None:
            return
        try:
            self._on_selection_changed(event)
        except Exception:
            logger.exception("Selection listener failed for %s", event)

    def _notify_state(self) -> None:
        if self._on_state_changed is None:
            return
        try:
            self._on_state_changed()
        except Exception:
            logger.exception("State listener failed")

    def _report_error(self, exc: Exception, *, location: str) -> None:
        if self._on_error is None:
            return
        message = lookup_failure_message(location, exc)
        try:
            self._on_error(message)
        except Exception:
            logger.exception("Error reporter failed for %s", message)
