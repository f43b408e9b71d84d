"""
One function per protocol round trip against the spreadsheet feeds.
The worksheet and spreadsheet handles compose these, they take the
session explicitly and return the parsed resources.
"""
import logging

from ..access import GDataSession
from ..errors import GDataSheetsError
from ..resources import NAMESPACES
from .a1 import CellRange
from .resources import CellsFeed, WorksheetEntry, BatchResult
from .requests import WorksheetRequest, CellBatchRequest

logger = logging.getLogger(__name__)

def _require(doc, what: str, url: str):
    if doc is None:
        raise GDataSheetsError(f"empty {what} response from {url}")
    return doc

def get_cells(session: GDataSession, cells_feed_url: str,
              cell_range: CellRange|None = None,
              return_empty: bool = False) -> CellsFeed:
    """
    Fetch the cells feed, optionally restricted to a range.
    With return_empty the server includes entries for cells that have no
    value, which is the only way to get the id and edit link of such a cell.
    """
    params = {}
    if return_empty:
        params["return-empty"] = "true"
    if cell_range is not None:
        params.update(cell_range.query_params())
    doc = session.get(cells_feed_url, params=params or None)
    return CellsFeed.from_element(_require(doc, "cells feed", cells_feed_url))

def get_worksheet(session: GDataSession, worksheet_feed_url: str) -> WorksheetEntry:
    """Fetch a single worksheet entry"""
    doc = session.get(worksheet_feed_url)
    return WorksheetEntry.from_element(_require(doc, "worksheet entry", worksheet_feed_url))

def list_worksheets(session: GDataSession, worksheets_feed_url: str) -> list[WorksheetEntry]:
    """Fetch the worksheets feed of a spreadsheet"""
    doc = _require(session.get(worksheets_feed_url), "worksheets feed", worksheets_feed_url)
    return [WorksheetEntry.from_element(e) for e in doc.findall("atom:entry", NAMESPACES)]

def add_worksheet(session: GDataSession, worksheets_feed_url: str,
                  request: WorksheetRequest) -> WorksheetEntry:
    """POST a new worksheet entry to the worksheets feed"""
    doc = session.post(worksheets_feed_url, request.to_xml())
    return WorksheetEntry.from_element(_require(doc, "worksheet entry", worksheets_feed_url))

def update_worksheet(session: GDataSession, edit_url: str,
                     request: WorksheetRequest) -> WorksheetEntry|None:
    """PUT the worksheet title and size to the entry's edit link"""
    doc = session.put(edit_url, request.to_xml())
    return WorksheetEntry.from_element(doc) if doc is not None else None

def batch_update_cells(session: GDataSession, cells_feed_url: str,
                       request: CellBatchRequest) -> list[BatchResult]:
    """
    POST a batch of cell updates.  The response holds one entry per
    operation, checking them is up to the caller.
    """
    url = f"{cells_feed_url}/batch"
    logger.debug("batch update of %d cells to %s", len(request), url)
    doc = session.post(url, request.to_xml())
    return BatchResult.list_from_feed(_require(doc, "batch", url))

def delete_entry(session: GDataSession, edit_url: str) -> None:
    session.delete(edit_url)
