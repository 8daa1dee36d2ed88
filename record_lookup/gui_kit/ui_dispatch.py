from __future__ import annotations

from dataclasses import dataclass
from queue import Empty, Queue
from threading import Thread
from typing import Callable
import tkinter as tk

__all__ = ["UIDispatcher", "safe_dispatch"]

_POLL_MS = 25


def _widget_alive(widget: object) -> bool:
    winfo_exists = getattr(widget, "winfo_exists", None)
    if not callable(winfo_exists):
        return False
    try:
        return bool(winfo_exists())
    except tk.TclError:
        return False


def safe_dispatch(
    after: Callable[[int, Callable[[], None]], object],
    callback: Callable[[], None],
    *,
    delay_ms: int = 0,
    is_alive: Callable[[], bool] | None = None,
) -> object | None:
    """Schedule `callback`; returns the timer handle, or None when the widget is gone."""

    if is_alive is not None and not bool(is_alive()):
        return None
    try:
        return after(max(0, int(delay_ms)), callback)
    except tk.TclError:
        return None


@dataclass(frozen=True)
class UIDispatcher:
    """Timer, cancel and background-job plumbing bound to one Tk widget."""

    after: Callable[[int, Callable[[], None]], object]
    after_cancel: Callable[[object], None]
    is_alive: Callable[[], bool]

    @classmethod
    def from_widget(cls, widget: object) -> "UIDispatcher":
        after_cb = getattr(widget, "after", None)
        cancel_cb = getattr(widget, "after_cancel", None)
        if not callable(after_cb) or not callable(cancel_cb):
            raise ValueError(
                "UI dispatcher requires widget.after/after_cancel support. "
                "Fix: pass a Tk widget with after() and after_cancel() methods."
            )
        return cls(after=after_cb, after_cancel=cancel_cb, is_alive=lambda: _widget_alive(widget))

    def post(self, callback: Callable[[], None], *, delay_ms: int = 0) -> bool:
        return self.schedule(delay_ms, callback) is not None

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> object | None:
        return safe_dispatch(self.after, callback, delay_ms=delay_ms, is_alive=self.is_alive)

    def cancel(self, handle: object) -> None:
        if handle is None:
            return
        try:
            self.after_cancel(handle)
        except (tk.TclError, ValueError):
            # Widget already destroyed or handle already consumed.
            return

    def run_async(
        self,
        worker: Callable[[], object],
        on_done: Callable[[object], None],
        on_failed: Callable[[Exception], None],
    ) -> None:
        """Run `worker` on a daemon thread and deliver its outcome on the Tk thread."""

        queue: Queue[tuple[str, object]] = Queue(maxsize=1)
        Thread(target=self._run_job, args=(queue, worker), daemon=True).start()
        self.post(lambda: self._poll_job_queue(queue, on_done, on_failed), delay_ms=_POLL_MS)

    @staticmethod
    def _run_job(queue: Queue[tuple[str, object]], worker: Callable[[], object]) -> None:
        try:
            queue.put(("ok", worker()))
        except Exception as exc:  # pragma: no cover - exercised through callbacks
            queue.put(("err", exc))

    def _poll_job_queue(
        self,
        queue: Queue[tuple[str, object]],
        on_done: Callable[[object], None],
        on_failed: Callable[[Exception], None],
    ) -> None:
        try:
            state, payload = queue.get_nowait()
        except Empty:
            self.post(lambda: self._poll_job_queue(queue, on_done, on_failed), delay_ms=_POLL_MS)
            return

        if state == "ok":
            on_done(payload)
            return
        on_failed(payload)  # type: ignore[arg-type]
