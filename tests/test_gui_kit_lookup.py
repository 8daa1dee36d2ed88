import time
import tkinter as tk
import unittest

from record_lookup.config import LookupFieldConfig
from record_lookup.gui_kit import LookupField, get_component_catalog
from record_lookup.lookup_model import Candidate, ProviderError


class TestLookupField(unittest.TestCase):
    def setUp(self):
        try:
            self.root = tk.Tk()
        except tk.TclError as exc:
            self.skipTest(f"Tk GUI not available in this environment: {exc}")
            return
        self.root.withdraw()
        self.queries = []
        self.events = []

    def tearDown(self):
        if hasattr(self, "root") and self.root.winfo_exists():
            self.root.destroy()

    def _provider(self, query):
        self.queries.append(query)
        if query.load_selected:
            return [Candidate(query.selected_id, "Acme Corp", "Manufacturing")]
        if query.query_text == "fail":
            raise ProviderError("backend unavailable")
        return [
            Candidate("1", "Acme Corp", "Manufacturing"),
            Candidate("2", "Acme Logistics", "Transportation"),
        ]

    def _make_field(self, **kwargs):
        field = LookupField(
            self.root,
            provider=self._provider,
            on_selection_changed=self.events.append,
            delay_ms=20,
            **kwargs,
        )
        field.pack()
        return field

    def _pump(self, predicate, timeout=1.0):
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline and not predicate():
            self.root.update()
            time.sleep(0.005)

    def test_typing_opens_panel_and_selection_closes_it(self):
        field = self._make_field()
        field.query_var.set("Ac")
        field.query_var.set("Acme")
        self._pump(lambda: field.controller.is_open)

        self.assertEqual([q.query_text for q in self.queries], ["Acme"])
        self.assertEqual(field.panel.size(), 2)
        self.assertEqual(field.panel.get(0), "Acme Corp | Manufacturing")

        field.controller.select_index(0)
        self.root.update()

        self.assertFalse(field.controller.is_open)
        self.assertEqual(field.panel.size(), 0)
        self.assertEqual(field.selected_var.get(), "Acme Corp")
        self.assertEqual([e.selected_id for e in self.events], ["1"])

        field.clear()
        self.assertEqual(field.selected_var.get(), "")
        self.assertTrue(self.events[-1].is_cleared)

    def test_preselected_record_loads_label(self):
        field = self._make_field(selected_id="001A")
        self.assertEqual(field.selected_var.get(), "001A")
        self._pump(lambda: field.selected_var.get() == "Acme Corp")

        self.assertEqual(field.selected_var.get(), "Acme Corp")
        self.assertFalse(field.controller.is_open)
        self.assertTrue(self.queries[0].load_selected)

    def test_provider_failure_shows_inline_error(self):
        field = self._make_field()
        field.query_var.set("fail")
        self._pump(lambda: field.error_var.get() != "")

        self.assertIn("backend unavailable", field.error_var.get())
        self.assertIn("Fix:", field.error_var.get())
        self.assertFalse(field.controller.is_open)
        self.assertEqual(self.events, [])

    def test_required_field_validation(self):
        field = self._make_field(config=LookupFieldConfig(is_required="true"))
        self.assertEqual(field.title_label.cget("text"), "Parent Account *")
        self.assertEqual(field.hint_var.get(), "Search Accounts...")

        message = field.validate()
        self.assertIsNotNone(message)
        assert message is not None
        self.assertIn("Parent Account / Selection", message)
        self.assertIn("Fix:", message)
        self.assertEqual(field.error_var.get(), message)

        field.controller.select_candidate(Candidate("1", "Acme Corp"))
        self.assertIsNone(field.validate())
        self.assertEqual(field.error_var.get(), "")

    def test_destroy_cancels_pending_timers(self):
        field = self._make_field()
        field.query_var.set("Acme")
        field.destroy()
        self.assertIsNone(field.controller.timers.debounce)
        self.root.update()


class TestGUIKitCatalog(unittest.TestCase):
    def test_catalog_entries_point_at_gui_kit_modules(self):
        catalog = get_component_catalog()
        exports = {entry["export"] for entry in catalog}
        self.assertIn("LookupField", exports)
        for entry in catalog:
            self.assertTrue(entry["module"].startswith("record_lookup.gui_kit."))


if __name__ == "__main__":
    unittest.main()
