"""List view-model for the key points table and the extraction history.

A `ListViewModel` owns a row collection together with the search term,
the page cursor, a single edit session and the deferred deletes, and
derives the filtered and paged views from them on demand.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Iterable, Optional

from . import pagination
from .constants import DashboardConstants
from .errors import NotFoundError, PersistenceError
from .scheduler import AsyncioScheduler, Scheduler
from .textmatch import highlight, row_matches, Segment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Row:
    """One addressable record: a key point or a history entry."""
    id: int
    fields: dict[str, str] = field(default_factory=dict)

    @property
    def text(self) -> str:
        return self.fields.get("text", "")

    def with_fields(self, updates: dict[str, str]) -> "Row":
        merged = dict(self.fields)
        merged.update(updates)
        return replace(self, fields=merged)


@dataclass
class ViewState:
    search_term: str = ""
    page: int = 1
    page_size: int = DashboardConstants.KEY_POINTS_PAGE_SIZE
    editing_id: Optional[int] = None
    pending_delete_id: Optional[int] = None


@dataclass
class EditSession:
    row_id: int
    buffer: dict[str, str]


class SaveMode(Enum):
    """When a saved edit is written into the local collection."""
    LOCAL_FIRST = "local_first"  # mutate now, persist afterwards
    CONFIRM_FIRST = "confirm_first"  # mutate only after the save hook succeeds


SaveHook = Callable[[int, dict[str, str]], bool]
DeleteHook = Callable[[int], bool]
ChangeCallback = Callable[[list[Row]], None]
ErrorCallback = Callable[[PersistenceError], None]


class ListViewModel:
    """Filtered, paged and editable view over a list of rows.

    Every operation runs to completion on the UI thread. The only
    deferred work is the removal that follows `delete_row`, which is
    queued on the scheduler after the grace delay and cannot be
    cancelled. Operations naming an id that is not in the collection do
    nothing and report False.

    A server-paged view holds a single page fetched from the service,
    already filtered and sliced there. Its rows are shown as loaded and
    the page count is whatever the service reported with them.
    """

    def __init__(self,
                 rows: Optional[Iterable[Row]] = None,
                 *,
                 page_size: int = DashboardConstants.KEY_POINTS_PAGE_SIZE,
                 page_base: int = 1,
                 search_fields: tuple[str, ...] = ("text",),
                 server_paged: bool = False,
                 save_mode: SaveMode = SaveMode.LOCAL_FIRST,
                 scheduler: Optional[Scheduler] = None,
                 grace_delay_ms: int = DashboardConstants.DELETE_GRACE_DELAY_MS,
                 on_change: Optional[ChangeCallback] = None,
                 on_save_requested: Optional[SaveHook] = None,
                 on_delete_confirmed: Optional[DeleteHook] = None,
                 on_error: Optional[ErrorCallback] = None):
        """Initialize the view-model.

        Args:
            rows: Initial rows, in display order.
            page_size: Rows per page, at least 1.
            page_base: 1 for pages numbered from one, 0 for zero-based pages.
            search_fields: Row fields searched by the filter.
            server_paged: Rows are one page already sliced by the service.
            save_mode: Whether edits are written locally before or after the save hook.
            scheduler: Timer queue for the deferred delete.
            grace_delay_ms: Delay between a delete request and the removal.
            on_change: Called with the full collection after every mutation.
            on_save_requested: Persistence hook for saved edits.
            on_delete_confirmed: Persistence hook run when a delete completes.
            on_error: Receives failures of the deferred delete.
        """
        if page_base not in (0, 1):
            raise ValueError(f"page_base must be 0 or 1, not {page_base}")
        self._rows: list[Row] = list(rows or [])
        self._base = page_base
        self._state = ViewState(page=page_base, page_size=max(page_size, 1))
        self._search_fields = search_fields
        self._server_paged = server_paged
        self._total_pages = 1 if self._rows else 0
        self._save_mode = save_mode
        self._scheduler = scheduler or AsyncioScheduler()
        self._grace_delay = grace_delay_ms / 1000.0
        self._session: Optional[EditSession] = None
        # Ordered so the most recent request is reported as pending_delete_id
        self._pending_deletes: dict[int, None] = {}

        self.on_change = on_change
        self.on_save_requested = on_save_requested
        self.on_delete_confirmed = on_delete_confirmed
        self.on_error = on_error

    @classmethod
    def for_key_points(cls, rows: Iterable[Row], **kwargs) -> "ListViewModel":
        """Key points table: 1-based pages, edits applied locally first."""
        kwargs.setdefault("page_size", DashboardConstants.KEY_POINTS_PAGE_SIZE)
        kwargs.setdefault("page_base", 1)
        kwargs.setdefault("search_fields", ("text",))
        kwargs.setdefault("save_mode", SaveMode.LOCAL_FIRST)
        return cls(rows, **kwargs)

    @classmethod
    def for_history(cls, rows: Iterable[Row], **kwargs) -> "ListViewModel":
        """Extraction history: one 0-based server page, edits applied after the save hook confirms."""
        kwargs.setdefault("page_size", DashboardConstants.HISTORY_PAGE_SIZE)
        kwargs.setdefault("page_base", 0)
        kwargs.setdefault("search_fields", ("url", "content", "summary"))
        kwargs.setdefault("server_paged", True)
        kwargs.setdefault("save_mode", SaveMode.CONFIRM_FIRST)
        return cls(rows, **kwargs)

    # --- Derived views ---

    @property
    def rows(self) -> list[Row]:
        return list(self._rows)

    @property
    def state(self) -> ViewState:
        return replace(self._state)

    @property
    def search_term(self) -> str:
        return self._state.search_term

    @property
    def page(self) -> int:
        return self._state.page

    @property
    def page_size(self) -> int:
        return self._state.page_size

    @property
    def page_base(self) -> int:
        return self._base

    @property
    def save_mode(self) -> SaveMode:
        return self._save_mode

    @property
    def server_paged(self) -> bool:
        return self._server_paged

    @property
    def editing_id(self) -> Optional[int]:
        return self._state.editing_id

    @property
    def pending_delete_id(self) -> Optional[int]:
        return self._state.pending_delete_id

    @property
    def edit_buffer(self) -> Optional[dict[str, str]]:
        if self._session is None:
            return None
        return dict(self._session.buffer)

    @property
    def filtered(self) -> list[Row]:
        if self._server_paged:
            return list(self._rows)
        term = self._state.search_term
        return [row for row in self._rows
                if row_matches(row.fields, self._search_fields, term)]

    @property
    def page_count(self) -> int:
        if self._server_paged:
            return self._total_pages
        return pagination.page_count(len(self.filtered), self._state.page_size)

    @property
    def paged_rows(self) -> list[Row]:
        if self._server_paged:
            return list(self._rows)
        return pagination.slice_for_base(
            self.filtered, self._state.page, self._state.page_size, self._base)

    @property
    def show_pagination(self) -> bool:
        return self.page_count > 1

    def is_pending_delete(self, row_id: int) -> bool:
        return row_id in self._pending_deletes

    def highlighted(self, row: Row, field_name: str = "text") -> list[Segment]:
        """Highlight the current search term in one field of a row."""
        return highlight(row.fields.get(field_name) or "", self._state.search_term)

    def get_row(self, row_id: int) -> Optional[Row]:
        index = self._index_of(row_id)
        return self._rows[index] if index is not None else None

    # --- Search and paging ---

    def set_search(self, term: str) -> None:
        self._state.search_term = term
        self._state.page = self._base

    def set_page(self, page: int) -> bool:
        """Move the cursor to page if it exists; otherwise leave it alone.

        A server-paged view only moves the cursor; the caller fetches the
        new page and hands it to `load_rows`.
        """
        if self._server_paged:
            valid = 0 <= pagination.to_zero_based(page, self._base) < self._total_pages
        else:
            valid = pagination.is_valid_page(page, len(self.filtered),
                                             self._state.page_size, self._base)
        if not valid:
            return False
        self._state.page = page
        return True

    def next_page(self) -> bool:
        return self.set_page(self._state.page + 1)

    def previous_page(self) -> bool:
        return self.set_page(self._state.page - 1)

    def set_page_size(self, page_size: int) -> bool:
        if page_size < DashboardConstants.MIN_PAGE_SIZE:
            return False
        self._state.page_size = page_size
        self._state.page = self._base
        return True

    def load_rows(self, rows: Iterable[Row], page: Optional[int] = None,
                  total_pages: Optional[int] = None) -> None:
        """Replace the whole collection with freshly fetched rows.

        For a server-paged view, page and total_pages are the values the
        service returned with the rows.

        Pending deletes stay queued; they find their row by id when they
        fire, so a reload cannot make them remove a different row.
        """
        self._rows = list(rows)
        if page is not None:
            self._state.page = page
        if total_pages is not None:
            self._total_pages = max(total_pages, 0)
        elif self._server_paged:
            self._total_pages = max(self._total_pages, 1 if self._rows else 0)
        if self._session is not None and self._index_of(self._session.row_id) is None:
            logger.debug(f"Dropping edit session for row {self._session.row_id} after reload")
            self._end_edit()

    # --- Edit session ---

    def start_edit(self, row_id: int) -> bool:
        """Open the edit session on a row, replacing any session already open."""
        try:
            row = self._require_row(row_id)
        except NotFoundError:
            return False
        if self.is_pending_delete(row_id):
            return False
        self._session = EditSession(row_id=row_id, buffer=dict(row.fields))
        self._state.editing_id = row_id
        return True

    def update_edit(self, field_name: str, value: str) -> bool:
        if self._session is None:
            return False
        self._session.buffer[field_name] = value
        return True

    def cancel_edit(self, row_id: Optional[int] = None) -> bool:
        if self._session is None:
            return False
        if row_id is not None and row_id != self._session.row_id:
            return False
        self._end_edit()
        return True

    def save_edit(self, row_id: int) -> tuple[bool, str]:
        """Commit the edit buffer into the row being edited.

        Args:
            row_id: Row the caller believes is being edited.

        Returns:
            Tuple of (success, error_message). On a failed confirm-first
            save the row is untouched and the session stays open.
        """
        if self._session is None or self._session.row_id != row_id:
            return False, ""
        try:
            self._require_row(row_id)
        except NotFoundError:
            self._end_edit()
            return False, ""

        updates = dict(self._session.buffer)

        if self._save_mode is SaveMode.CONFIRM_FIRST:
            ok, error = self._run_hook(self.on_save_requested, row_id, updates)
            if not ok:
                logger.warning(f"Save of row {row_id} failed: {error}")
                return False, error
            self._replace_row(row_id, updates)
            self._end_edit()
            self._notify_change()
            return True, ""

        self._replace_row(row_id, updates)
        self._end_edit()
        self._notify_change()
        ok, error = self._run_hook(self.on_save_requested, row_id, updates)
        if not ok:
            logger.warning(f"Row {row_id} was updated locally but saving failed: {error}")
        return ok, error

    # --- Deferred delete ---

    def delete_row(self, row_id: int) -> bool:
        """Mark a row as being removed and remove it after the grace delay.

        The row stays in the collection (and in the filtered and paged
        views) until the delay has passed. Repeated requests for a row
        that is already pending are ignored.
        """
        if self._index_of(row_id) is None:
            return False
        if self.is_pending_delete(row_id):
            return True
        if self._state.editing_id == row_id:
            self._end_edit()
        self._pending_deletes[row_id] = None
        self._state.pending_delete_id = row_id
        self._scheduler.call_later(self._grace_delay,
                                   lambda: self._complete_delete(row_id))
        return True

    def _complete_delete(self, row_id: int) -> None:
        self._pending_deletes.pop(row_id, None)
        self._state.pending_delete_id = next(reversed(self._pending_deletes), None)

        if self._index_of(row_id) is None:
            logger.debug(f"Row {row_id} vanished before its delete completed")
            return

        ok, error = self._run_hook(self.on_delete_confirmed, row_id)
        if not ok:
            logger.warning(f"Delete of row {row_id} failed: {error}")
            if self.on_error is not None:
                self.on_error(PersistenceError(error, row_id=row_id))
            return

        self._rows = [row for row in self._rows if row.id != row_id]
        logger.debug(f"Removed row {row_id}")

        # Evaluated with the filter and page as they are now, not as they
        # were when the delete was requested.
        if not self.paged_rows and self._state.page > self._base:
            self._state.page -= 1
        self._notify_change()

    # --- Internals ---

    def _index_of(self, row_id: int) -> Optional[int]:
        for index, row in enumerate(self._rows):
            if row.id == row_id:
                return index
        return None

    def _require_row(self, row_id: int) -> Row:
        index = self._index_of(row_id)
        if index is None:
            raise NotFoundError(f"No row with id {row_id}")
        return self._rows[index]

    def _replace_row(self, row_id: int, updates: dict[str, str]) -> None:
        index = self._index_of(row_id)
        if index is not None:
            self._rows[index] = self._rows[index].with_fields(updates)

    def _end_edit(self) -> None:
        self._session = None
        self._state.editing_id = None

    def _notify_change(self) -> None:
        if self.on_change is not None:
            self.on_change(self.rows)

    @staticmethod
    def _run_hook(hook, *args) -> tuple[bool, str]:
        if hook is None:
            return True, ""
        try:
            ok = hook(*args)
        except PersistenceError as e:
            return False, str(e)
        except Exception as e:
            # Network errors and whatever the service client raises
            logger.warning(f"Persistence hook failed: {type(e).__name__}: {e}")
            return False, f"Persistence error: {e}"
        if not ok:
            return False, "The change was rejected by the server"
        return True, ""
