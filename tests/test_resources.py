from xml.etree import ElementTree

import pytest

from gdatasheets.sheets.resources import CellEntry, CellsFeed, WorksheetEntry, BatchResult
from gdatasheets.sheets.requests import WorksheetRequest, CellUpdateRequest, CellBatchRequest
from gdatasheets.resources import NAMESPACES
from conftest import CELLS_URL, WORKSHEET_EDIT_URL

def test_cells_feed(atom):
    doc = ElementTree.fromstring(atom.cells_feed("Data", 50, 10, [(1, 1, "a & b"), (3, 4, "5", "=2+3", "5.0")]))
    feed = CellsFeed.from_element(doc)
    assert(feed.title == "Data")
    assert((feed.row_count, feed.col_count) == (50, 10))
    assert(len(feed) == 2)
    entries = feed.by_position()
    assert(entries[(1, 1)].value == "a & b")
    assert(entries[(1, 1)].numeric_value is None)
    assert(entries[(3, 4)].numeric_value == 5.0)
    assert(entries[(3, 4)].input_value == "=2+3")
    assert(entries[(3, 4)].edit_url == f"{CELLS_URL}/R3C4/1")
    assert(str(entries[(3, 4)]) == "D3='5'")
    assert(feed.cells()[(3, 4)].numeric_value == 5.0)

def test_cell_entry_to_base():
    e = CellEntry(row="2", col="3", value="x", numeric_value="1.5")
    assert(e.to_base() == {"row": 2, "col": 3, "value": "x", "input_value": "",
                           "numeric_value": 1.5, "id": "", "edit_url": ""})
    assert(not CellEntry())

def test_worksheet_entry(atom):
    entry = WorksheetEntry.from_element(ElementTree.fromstring(atom.worksheet_entry("Sheet1", 40, 8)))
    assert(entry.title == "Sheet1")
    assert((entry.row_count, entry.col_count) == (40, 8))
    assert(entry.edit_url == WORKSHEET_EDIT_URL)
    assert(entry.cells_feed_url == CELLS_URL)
    assert(str(entry) == "Sheet1(40Rx8C)")

def test_batch_results(atom):
    doc = ElementTree.fromstring(atom.batch_response((1, 1, 200, "Success"), (1, 2, 404, "Not Found"),
                                                    (1, 3, "interrupted", "timeout")))
    results = BatchResult.list_from_feed(doc)
    assert([r.succeeded for r in results] == [True, False, False])
    assert(results[1].status_code == 404 and results[1].reason == "Not Found")
    assert(results[2].interrupted and results[2].interrupted_reason == "timeout")
    assert(results[0].batch_id == "1,1")

def test_worksheet_request_escapes():
    xml = WorksheetRequest("<b>&'\"", 10, 5).to_xml()
    doc = ElementTree.fromstring(xml)
    assert(doc.find("atom:title", NAMESPACES).text == "<b>&'\"")
    assert("<b>" not in xml)
    with pytest.raises(ValueError):
        WorksheetRequest("x", -1, 5)

def test_batch_request():
    batch = CellBatchRequest(CELLS_URL, [
        CellUpdateRequest(1, 1, 'multi\nline "quoted" <&>', f"{CELLS_URL}/R1C1", f"{CELLS_URL}/R1C1/abc"),
        CellUpdateRequest(2, 1, "=SUM(A1:A1)", f"{CELLS_URL}/R2C1", f"{CELLS_URL}/R2C1/def"),
    ])
    assert(len(batch) == 2)
    doc = ElementTree.fromstring(str(batch))
    assert(doc.find("atom:id", NAMESPACES).text == CELLS_URL)
    entries = doc.findall("atom:entry", NAMESPACES)
    assert([e.find("batch:id", NAMESPACES).text for e in entries] == ["1,1", "2,1"])
    cell = entries[0].find("gs:cell", NAMESPACES)
    assert(cell.get("inputValue") == 'multi\nline "quoted" <&>')
    assert(entries[1].find("atom:id", NAMESPACES).text == f"{CELLS_URL}/R2C1")
