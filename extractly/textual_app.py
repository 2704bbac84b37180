"""Textual dashboard for one extraction result and the extraction history.

Shows the summary and a searchable, paged key points table, and below
it the stored extractions one page at a time. Both tables are backed by
a `ListViewModel`. Deletes play out over the grace delay on Textual's
own asyncio loop.
"""

from __future__ import annotations

from typing import Optional

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import DataTable, Footer, Header, Input, Static

from . import pagination
from .constants import DashboardConstants
from .errors import PersistenceError, ValidationError
from .export_output import ExportOutput
from .model import ListViewModel, Row
from .records import (
    ExtractionResult,
    HistoryStore,
    key_point_rows,
    key_points_from_rows,
    load_json_file,
)
from .scheduler import AsyncioScheduler
from .settings_persistence import get_persistence
from .textmatch import Segment, preview

HISTORY_WIDGETS = ("history", "history-search", "history-url", "history-content")


def render_segments(segments: list[Segment], pending_delete: bool = False) -> Text:
    """Build a rich Text with matches highlighted and pending deletes struck out."""
    text = Text()
    for segment in segments:
        text.append(segment.text, style="reverse" if segment.matched else "")
    if pending_delete:
        text.stylize("strike dim")
    return text


class ExtractlyApp(App):
    """Key points and history dashboard."""

    CSS = """
    #summary {
        padding: 1 2;
        max-height: 12;
    }
    #pager, #history-pager {
        padding: 0 2;
        color: $text-muted;
    }
    #history-title {
        padding: 1 2 0 2;
        text-style: bold;
    }
    """

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit"),
        Binding("left_square_bracket", "previous_page", "Prev page"),
        Binding("right_square_bracket", "next_page", "Next page"),
        Binding("e", "edit", "Edit"),
        Binding("d", "delete", "Delete"),
        Binding("x", "export", "Export PDF"),
        Binding("h", "export_history", "Export history"),
        Binding("escape", "cancel_edit", "Cancel edit", show=False),
    ]

    def __init__(self, filename: Optional[str] = None,
                 history_filename: Optional[str] = None):
        super().__init__()
        self.filename = filename
        self.history_filename = history_filename
        self.result = ExtractionResult()
        self.history_store = HistoryStore()
        settings = get_persistence()
        self.model = ListViewModel.for_key_points(
            [],
            page_size=settings.get_page_size(DashboardConstants.KEY_POINTS_LIST,
                                             DashboardConstants.KEY_POINTS_PAGE_SIZE),
            scheduler=AsyncioScheduler(),
            on_change=self._on_rows_changed,
        )
        self.history = ListViewModel.for_history(
            [],
            page_size=settings.get_page_size(DashboardConstants.HISTORY_LIST,
                                             DashboardConstants.HISTORY_PAGE_SIZE),
            scheduler=AsyncioScheduler(),
            on_change=self._on_history_changed,
            on_save_requested=self._save_history_entry,
            on_delete_confirmed=self._delete_history_entry,
            on_error=self._on_history_error,
        )
        self.export_directory: Optional[str] = settings.load_settings(
            DashboardConstants.KEY_POINTS_LIST).get("export_directory")

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static(id="summary")
        yield Input(placeholder="Search key points...", id="search")
        yield DataTable(id="points", cursor_type="row")
        yield Input(id="edit")
        yield Static(id="pager")
        yield Static("Extraction History", id="history-title")
        yield Input(placeholder="Search history...", id="history-search")
        yield DataTable(id="history", cursor_type="row")
        yield Input(placeholder="URL", id="history-url")
        yield Input(placeholder="Content", id="history-content")
        yield Static(id="history-pager")
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one("#points", DataTable)
        table.add_columns("#", "Point")
        self.query_one("#edit", Input).display = False
        self.query_one("#history", DataTable).add_columns("#", "URL", "Content")
        self.query_one("#history-url", Input).display = False
        self.query_one("#history-content", Input).display = False

        if self.filename:
            self.load_result(self.filename)
        if self.history_filename:
            self.load_history(self.history_filename)
        self._refresh_view()
        self.fetch_history()
        table.focus()

    def load_result(self, filename: str) -> bool:
        try:
            self.result = ExtractionResult.from_dict(load_json_file(filename))
        except (ValidationError, OSError) as e:
            self.notify(f"Error loading {filename}: {e}", severity="error")
            return False
        self.model.load_rows(key_point_rows(self.result.key_points))
        self.model.set_search("")
        self.sub_title = filename
        self.query_one("#summary", Static).update("\n\n".join(self.result.paragraphs()))
        return True

    def load_history(self, filename: str) -> bool:
        try:
            self.history_store = HistoryStore.from_file(filename)
        except (ValidationError, OSError) as e:
            self.notify(f"Error loading {filename}: {e}", severity="error")
            return False
        self.history.set_search("")
        return True

    def fetch_history(self) -> None:
        """Load the history page the view is on, as the service returns it."""
        page = self.history_store.fetch_page(
            pagination.to_zero_based(self.history.page, self.history.page_base),
            self.history.page_size, self.history.search_term)
        self.history.load_rows(
            page.rows(), page=pagination.from_zero_based(page.page, self.history.page_base),
            total_pages=page.total_pages)
        self._refresh_history()

    # --- Persistence hooks ---

    def _save_history_entry(self, entry_id: int, fields: dict[str, str]) -> bool:
        return self.history_store.update(entry_id, fields)

    def _delete_history_entry(self, entry_id: int) -> bool:
        return self.history_store.delete(entry_id)

    def _on_history_error(self, error: PersistenceError) -> None:
        self.notify(f"Failed to delete: {error}", severity="error")
        self._refresh_history()

    # --- View refresh ---

    def _on_rows_changed(self, rows: list[Row]) -> None:
        self._refresh_view()

    def _on_history_changed(self, rows: list[Row]) -> None:
        self.fetch_history()

    def _history_focused(self) -> bool:
        return self.focused is not None and self.focused.id in HISTORY_WIDGETS

    def _current_row(self) -> Optional[Row]:
        rows = self.model.paged_rows
        index = self.query_one("#points", DataTable).cursor_row
        if 0 <= index < len(rows):
            return rows[index]
        return None

    def _current_history_row(self) -> Optional[Row]:
        rows = self.history.paged_rows
        index = self.query_one("#history", DataTable).cursor_row
        if 0 <= index < len(rows):
            return rows[index]
        return None

    def _refresh_view(self) -> None:
        table = self.query_one("#points", DataTable)
        table.clear()
        for row in self.model.paged_rows:
            cell = render_segments(self.model.highlighted(row),
                                   self.model.is_pending_delete(row.id))
            table.add_row(str(row.id), cell, key=str(row.id))

        pager = self.query_one("#pager", Static)
        if not self.model.paged_rows:
            pager.update(DashboardConstants.NO_RESULTS_MESSAGE if self.model.search_term
                         else DashboardConstants.NO_ROWS_MESSAGE)
        elif self.model.show_pagination:
            pager.update(f"Page {self.model.page} of {self.model.page_count}")
        else:
            pager.update("")

    def _refresh_history(self) -> None:
        table = self.query_one("#history", DataTable)
        table.clear()
        term = self.history.search_term
        first = pagination.to_zero_based(self.history.page, self.history.page_base)
        first *= self.history.page_size
        for number, row in enumerate(self.history.paged_rows, first + 1):
            pending = self.history.is_pending_delete(row.id)
            summary = preview(row.fields.get("summary", ""), term,
                              DashboardConstants.SUMMARY_PREVIEW_CHARS)
            table.add_row(str(number),
                          render_segments(self.history.highlighted(row, "url"), pending),
                          render_segments(summary, pending),
                          key=str(row.id))

        pager = self.query_one("#history-pager", Static)
        if not self.history.paged_rows:
            pager.update(DashboardConstants.NO_RESULTS_MESSAGE if term
                         else DashboardConstants.NO_HISTORY_MESSAGE)
        elif self.history.show_pagination:
            page = pagination.to_zero_based(self.history.page, self.history.page_base)
            pager.update(f"Page {page + 1} of {self.history.page_count}")
        else:
            pager.update("")

    # --- Events ---

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "search":
            self.model.set_search(event.value)
            self._refresh_view()
        elif event.input.id == "history-search":
            self.history.set_search(event.value)
            self.fetch_history()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id in ("history-url", "history-content"):
            self._submit_history_edit()
            return
        if event.input.id != "edit" or self.model.editing_id is None:
            return
        self.model.update_edit("text", event.value)
        ok, error = self.model.save_edit(self.model.editing_id)
        if not ok and error:
            self.notify(error, severity="error")
        self._close_editor()
        self._refresh_view()

    def _submit_history_edit(self) -> None:
        entry_id = self.history.editing_id
        if entry_id is None:
            return
        self.history.update_edit("url", self.query_one("#history-url", Input).value)
        self.history.update_edit("content", self.query_one("#history-content", Input).value)
        ok, error = self.history.save_edit(entry_id)
        if not ok:
            # The edit stays open so it can be retried or cancelled
            self.notify(error or "Failed to update.", severity="error")
            return
        self.notify("Updated!")
        self._close_history_editor()

    # --- Actions ---

    def action_previous_page(self) -> None:
        if self._history_focused():
            if self.history.previous_page():
                self.fetch_history()
        elif self.model.previous_page():
            self._refresh_view()

    def action_next_page(self) -> None:
        if self._history_focused():
            if self.history.next_page():
                self.fetch_history()
        elif self.model.next_page():
            self._refresh_view()

    def action_edit(self) -> None:
        if self._history_focused():
            self._edit_history_row()
            return
        row = self._current_row()
        if row is None or not self.model.start_edit(row.id):
            return
        editor = self.query_one("#edit", Input)
        editor.value = row.text
        editor.display = True
        editor.focus()

    def _edit_history_row(self) -> None:
        row = self._current_history_row()
        if row is None or not self.history.start_edit(row.id):
            return
        url = self.query_one("#history-url", Input)
        content = self.query_one("#history-content", Input)
        url.value = row.fields.get("url", "")
        content.value = row.fields.get("content", "")
        url.display = True
        content.display = True
        url.focus()

    def action_cancel_edit(self) -> None:
        if self.history.cancel_edit():
            self._close_history_editor()
        elif self.model.cancel_edit():
            self._close_editor()

    def action_delete(self) -> None:
        if self._history_focused():
            row = self._current_history_row()
            if row is not None and self.history.delete_row(row.id):
                self._close_history_editor()
                self._refresh_history()
            return
        row = self._current_row()
        if row is not None and self.model.delete_row(row.id):
            self._close_editor()
            self._refresh_view()

    def action_export(self) -> None:
        output = ExportOutput()
        ok, error = output.export_summary(
            self.result, key_points_from_rows(self.model.rows), self.export_directory)
        self._report_export(output, ok, error)

    def action_export_history(self) -> None:
        output = ExportOutput()
        ok, error = output.export_history(self.history_store.entries, self.export_directory)
        self._report_export(output, ok, error)

    def _report_export(self, output: ExportOutput, ok: bool, error: str) -> None:
        if not ok:
            self.notify(error, severity="error")
            return
        warning = output.pdf_generator.get_unprintable_warning()
        if warning:
            self.notify(warning, severity="warning")
        self.notify(f"Saved {output.last_path}")

    def _close_editor(self) -> None:
        if self.model.editing_id is None:
            editor = self.query_one("#edit", Input)
            editor.display = False
            self.query_one("#points", DataTable).focus()

    def _close_history_editor(self) -> None:
        if self.history.editing_id is None:
            self.query_one("#history-url", Input).display = False
            self.query_one("#history-content", Input).display = False
            self.query_one("#history", DataTable).focus()
