from enum import Enum
import logging
import re

from ..access import GDataSession
from ..errors import GDataSheetsError, BatchInterruptedError, CellUpdateError
from .a1 import CellRange, to_position, position_to_label
from .cells import CellStore
from .requests import WorksheetRequest, CellUpdateRequest, CellBatchRequest
from .ops import get_cells, get_worksheet, update_worksheet, batch_update_cells, delete_entry

logger = logging.getLogger(__name__)

_MISSING = object()

_CELLS_FEED_RE = re.compile(r"^(?P<base>https?://[^/]+/feeds)/cells/(?P<key>[^/]+)/(?P<worksheet>[^/]+)/private/full$")

class LoadState(Enum):
    UNLOADED = "unloaded"
    LOADED = "loaded"

class Worksheet():
    """
    Class representation of a worksheet, one tab of a spreadsheet.
    The cells live in a local mirror which is loaded from the cells feed the
    first time anything is read or written.  Edits only touch the mirror
    until save() pushes them to the server as one batch, reload() throws
    the mirror away and pulls the server state again.

    Cells are addressed by (row, col), both 1-based, or by label:

        ws[2, 1] = "hoge"
        ws["C1"] = "=A1+B1"
        ws.save()
        ws.reload()
        ws[1, 3]                 # computed value, e.g. "3"
        ws.input_value("C1")     # "=RC[-2]+RC[-1]"
    """
    def __init__(self, session: GDataSession, cells_feed_url: str,
                 spreadsheet=None, title: str|None = None) -> None:
        self._session = session
        self._cells_feed_url = cells_feed_url
        self._spreadsheet = spreadsheet
        self._listed_title = title
        self._store = CellStore(title or "")
        self._state = LoadState.UNLOADED

    def __str__(self) -> str:
        if self.loaded:
            return f"{self._store.title}({self._store.max_rows}Rx{self._store.max_cols}C)"
        return f"{self._listed_title or self._cells_feed_url}(unloaded)"

    def __repr__(self) -> str:
        return f"{self.__class__}:{str(self)}"

    def __getitem__(self, key: str|tuple[int,int]) -> str:
        return self.get(key)

    def __setitem__(self, key: str|tuple[int,int], value: object) -> None:
        self.set(key, value)

    @property
    def cells_feed_url(self) -> str:
        """URL of the cells feed of the worksheet"""
        return self._cells_feed_url

    @property
    def worksheet_feed_url(self) -> str:
        """
        URL of the worksheet entry.  There is no link to it from the cells
        feed so it is derived from the cells feed URL.
        """
        m = _CELLS_FEED_RE.match(self._cells_feed_url)
        if not m:
            raise GDataSheetsError(f"cells feed URL is in unknown format: {self._cells_feed_url}")
        return f"{m.group('base')}/worksheets/{m.group('key')}/private/full/{m.group('worksheet')}"

    @property
    def spreadsheet(self):
        """The spreadsheet this worksheet belongs to."""
        if self._spreadsheet is None:
            m = _CELLS_FEED_RE.match(self._cells_feed_url)
            if not m:
                raise GDataSheetsError(f"cells feed URL is in unknown format: {self._cells_feed_url}")
            from .spreadsheet import Spreadsheet
            self._spreadsheet = Spreadsheet(self._session,
                                            f"{m.group('base')}/worksheets/{m.group('key')}/private/full")
        return self._spreadsheet

    @property
    def state(self) -> LoadState:
        return self._state

    @property
    def loaded(self) -> bool:
        return self._state is LoadState.LOADED

    def ensure_loaded(self) -> None:
        """Load the mirror if that hasn't happened yet"""
        if self._state is LoadState.UNLOADED:
            self.reload()

    def get(self, row_or_label: int|str|tuple[int,int], col: int|None = None) -> str:
        """
        Content of the cell as shown in the sheet, empty string for an
        empty cell.  Top-left cell is (1, 1) or 'A1'.
        """
        r, c = to_position(row_or_label, col)
        self.ensure_loaded()
        return self._store.get(r, c)

    def set(self, row_or_label: int|str|tuple[int,int], col_or_value: object = _MISSING,
            value: object = _MISSING) -> None:
        """
        Update content of the cell, either set(row, col, value) or
        set(label, value).  Nothing is sent to the server until save().
        The worksheet grows to include the cell if needed.
        Pass "" to empty a cell, the value is never implied.
        """
        if isinstance(row_or_label, (str, tuple)):
            if col_or_value is _MISSING or value is not _MISSING:
                raise TypeError("set(label, value) takes exactly one value")
            r, c = to_position(row_or_label)
            value = col_or_value
        else:
            if col_or_value is _MISSING or value is _MISSING:
                raise TypeError("set(row, col, value) needs a column and a value")
            r, c = to_position(row_or_label, col_or_value)
        self.ensure_loaded()
        self._store.set(r, c, value)

    def input_value(self, row_or_label: int|str|tuple[int,int], col: int|None = None) -> str:
        """
        The value or the formula of the cell as it was entered.
        If "=A1+B1" was entered in C1, ws["C1"] is "3" for example and
        ws.input_value("C1") is "=RC[-2]+RC[-1]".
        """
        r, c = to_position(row_or_label, col)
        self.ensure_loaded()
        return self._store.get_input(r, c)

    def numeric_value(self, row_or_label: int|str|tuple[int,int], col: int|None = None) -> float|None:
        """
        The numeric value of the cell, None if the server didn't report one.
        A cell entered as 1.23 but formatted as currency shows "R$ 1,23" yet
        its numeric value is 1.23.
        """
        r, c = to_position(row_or_label, col)
        self.ensure_loaded()
        return self._store.get_numeric(r, c)

    @property
    def num_rows(self) -> int:
        """Row number of the bottom-most non-empty row."""
        self.ensure_loaded()
        return self._store.num_rows

    @property
    def num_cols(self) -> int:
        """Column number of the right-most non-empty column."""
        self.ensure_loaded()
        return self._store.num_cols

    @property
    def max_rows(self) -> int:
        """Number of rows including empty rows."""
        self.ensure_loaded()
        return self._store.max_rows

    @max_rows.setter
    def max_rows(self, rows: int) -> None:
        self.ensure_loaded()
        self._store.max_rows = rows

    @property
    def max_cols(self) -> int:
        """Number of columns including empty columns."""
        self.ensure_loaded()
        return self._store.max_cols

    @max_cols.setter
    def max_cols(self, cols: int) -> None:
        self.ensure_loaded()
        self._store.max_cols = cols

    @property
    def title(self) -> str:
        """
        Title of the worksheet (the tab label).  A title known from the
        worksheet listing is returned without loading.
        """
        if not self.loaded and self._listed_title is not None:
            return self._listed_title
        self.ensure_loaded()
        return self._store.title

    @title.setter
    def title(self, title: str) -> None:
        self.ensure_loaded()
        self._store.title = title

    @property
    def dirty(self) -> bool:
        """True if there are edits that haven't been saved"""
        return self._store.dirty.is_dirty()

    def dirty_cells(self) -> frozenset[tuple[int,int]]:
        return self._store.dirty.dirty_cells()

    def rows(self, skip: int = 0) -> list[list[str]]:
        """
        The cells as a list of rows, each a list of column values.
        Note that the result is 0-origin so ws.rows()[0][0] == ws[1, 1].
        """
        self.ensure_loaded()
        nc = self._store.num_cols
        return [[self._store.get(r, c) for c in range(1, nc + 1)]
                for r in range(1 + skip, self._store.num_rows + 1)]

    def reload(self) -> bool:
        """
        Reload the content of the worksheet from the server.
        Note that changes made with set() are discarded if they haven't
        been saved.
        """
        feed = get_cells(self._session, self._cells_feed_url)
        self._store.replace(feed.title, feed.row_count, feed.col_count, feed.cells())
        self._listed_title = feed.title
        self._state = LoadState.LOADED
        logger.debug("loaded %s: %d cells, %dRx%dC", feed.title, len(feed),
                     feed.row_count, feed.col_count)
        return True

    def _save_meta(self) -> None:
        entry = get_worksheet(self._session, self.worksheet_feed_url)
        if not entry.edit_url:
            raise GDataSheetsError(f"no edit link for worksheet {self.worksheet_feed_url}")
        request = WorksheetRequest(self._store.title, self._store.max_rows, self._store.max_cols)
        update_worksheet(self._session, entry.edit_url, request)
        self._store.dirty.clear_meta()

    def _save_cells(self, positions: frozenset[tuple[int,int]]) -> None:
        # ids and edit links are needed even for cells that are still empty
        # server side, return-empty=true gets those for the whole box in one go
        box = CellRange.covering(positions)
        entries = get_cells(self._session, self._cells_feed_url, box, return_empty=True).by_position()

        batch = CellBatchRequest(self._cells_feed_url)
        for r, c in sorted(positions):
            entry = entries.get((r, c))
            if entry is None or not entry.edit_url:
                raise CellUpdateError(position_to_label(r, c), "no cell entry returned by the server")
            batch.requests.append(CellUpdateRequest(r, c, self._store.get(r, c),
                                                    entry.id, entry.edit_url))

        results = batch_update_cells(self._session, self._cells_feed_url, batch)
        for result in results:
            if result.interrupted:
                raise BatchInterruptedError(result.interrupted_reason)
            if not result.succeeded:
                raise CellUpdateError(result.id or result.batch_id, result.reason)
        # a cell only counts as saved once the server answered for it
        confirmed = {result.batch_id for result in results}
        for request in batch.requests:
            if request.batch_id not in confirmed:
                raise CellUpdateError(request.id, "no result in the batch response")
        self._store.dirty.clear_cells(positions)

    def save(self) -> bool:
        """
        Push the changes made with set(), title and size updates to the
        server.  Returns True if anything was sent.
        If the batch fails nothing is marked as saved, the whole batch can
        be retried by calling save() again.
        """
        sent = False
        if self._store.dirty.meta_dirty:
            self._save_meta()
            sent = True

        positions = self._store.dirty.dirty_cells()
        if positions:
            self._save_cells(positions)
            sent = True

        if sent:
            logger.info("saved %s: %d cells", self._store.title, len(positions))
        return sent

    def synchronize(self) -> None:
        """save() then reload(), to see what the server made of the changes"""
        self.save()
        self.reload()

    def delete(self) -> None:
        """
        Delete this worksheet.  This takes effect right away, without
        calling save(), and pending edits are irrelevant.
        """
        entry = get_worksheet(self._session, self.worksheet_feed_url)
        if not entry.edit_url:
            raise GDataSheetsError(f"no edit link for worksheet {self.worksheet_feed_url}")
        delete_entry(self._session, entry.edit_url)
        logger.info("deleted worksheet %s", entry.title)
