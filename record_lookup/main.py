# To run:
# python -m record_lookup.main


import logging
import traceback
import tkinter as tk
from tkinter import ttk

from record_lookup.config import AppConfig, LookupFieldConfig
from record_lookup.gui_kit.lookup import LookupField
from record_lookup.logging_setup import setup_logging
from record_lookup.lookup_model import SelectionEvent
from record_lookup.storage_sqlite_records import SQLiteRecordProvider, init_db, seed_demo_records

logger = logging.getLogger("main")


def log_selection(event: SelectionEvent) -> None:
    if event.is_cleared:
        logger.info("Lookup cleared")
        return
    logger.info(
        "Lookup selected %s: %s (%s)",
        event.selected_id,
        event.primary_label,
        event.secondary_label,
    )


def build_demo(root: tk.Tk, cfg: AppConfig) -> LookupField:
    root.title("Record lookup")
    frame = ttk.Frame(root, padding=12)
    frame.pack(fill="both", expand=True)

    field = LookupField(
        frame,
        provider=SQLiteRecordProvider(cfg.sqlite_db_path, max_results=cfg.max_results),
        config=LookupFieldConfig(is_required=True),
        on_selection_changed=log_selection,
        delay_ms=cfg.debounce_ms,
    )
    field.pack(fill="x")
    ttk.Button(frame, text="Validate", command=field.validate).pack(anchor="e", pady=(10, 0))
    field.focus()
    return field


def main() -> int:
    cfg = AppConfig()

    setup_logging(cfg.log_level)
    logger.info("App booting (record lookup demo)...")

    try:
        if cfg.seed_demo_records:
            seed_demo_records(cfg.sqlite_db_path)
        else:
            init_db(cfg.sqlite_db_path)
        root = tk.Tk()
        ttk.Style().theme_use("clam")
        build_demo(root, cfg)
        root.mainloop()
        return 0
    except Exception as exc:
        logger.error("Unhandled error: %s", exc)
        if cfg.debug:
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
