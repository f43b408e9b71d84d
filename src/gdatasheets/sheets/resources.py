"""
Class implementations of the spreadsheet feed entries.
As these are just logical groupings of data fields we use dataclasses
to implement.  Each knows how to pull itself out of a parsed Atom element,
the raw attribute strings are coerced in fixup().
See https://developers.google.com/google-apps/spreadsheets/ (v3 protocol)
for the feed formats.  Not all elements are implemented, only what the
worksheet mirror needs.
"""
from dataclasses import dataclass, field
from typing import List
from xml.etree.ElementTree import Element

from ..resources import GDataResourceBase, NAMESPACES, find_text, find_link
from .a1 import position_to_label
from .cells import Cell

# link relations
REL_EDIT = "edit"
REL_CELLS_FEED = "http://schemas.google.com/spreadsheets/2006#cellsfeed"
REL_LIST_FEED = "http://schemas.google.com/spreadsheets/2006#listfeed"

@dataclass
class CellEntry(GDataResourceBase):
    """
    An entry of the cells feed, one gs:cell wrapped in its atom:entry.
    id and edit_url are what a batch update needs to address the cell.
    """
    row: int = field(default=0)
    col: int = field(default=0)
    value: str = field(default="")
    input_value: str = field(default="")
    numeric_value: float|str|None = field(default=None)
    id: str = field(default="")
    edit_url: str = field(default="")

    def __post_init__(self) -> None:
        self.fixup()

    def fixup(self) -> None:
        self.row = int(self.row)
        self.col = int(self.col)
        if self.numeric_value is not None and not isinstance(self.numeric_value, float):
            self.numeric_value = float(self.numeric_value) if self.numeric_value != "" else None

    def __bool__(self) -> bool:
        return self.row > 0 and self.col > 0

    def __str__(self) -> str:
        if self:
            return f"{position_to_label(self.row, self.col)}={self.value!r}"
        return "<invalid cell>"

    @property
    def position(self) -> tuple[int,int]:
        return (self.row, self.col)

    @classmethod
    def from_element(cls, elem: Element) -> "CellEntry":
        """elem is the atom:entry holding the gs:cell"""
        cell = elem.find("gs:cell", NAMESPACES)
        if cell is None:
            return cls(id=find_text(elem, "atom:id"), edit_url=find_link(elem, REL_EDIT))
        return cls.from_cell(cell, find_text(elem, "atom:id"), find_link(elem, REL_EDIT))

    @classmethod
    def from_cell(cls, cell: Element, id: str = "", edit_url: str = "") -> "CellEntry":
        """Build from a bare gs:cell element"""
        return cls(row=cell.get("row", 0),
                   col=cell.get("col", 0),
                   value="".join(cell.itertext()),
                   input_value=cell.get("inputValue", ""),
                   numeric_value=cell.get("numericValue"),
                   id=id,
                   edit_url=edit_url)

    def to_cell(self) -> Cell:
        return Cell(self.value, self.input_value, self.numeric_value)

@dataclass
class WorksheetEntry(GDataResourceBase):
    """
    An entry of the worksheets feed: the worksheet title, its declared
    size and the links to its cells feed and to edit the entry itself.
    """
    title: str = field(default="")
    row_count: int = field(default=0)
    col_count: int = field(default=0)
    id: str = field(default="")
    cells_feed_url: str = field(default="")
    list_feed_url: str = field(default="")
    edit_url: str = field(default="")

    def __post_init__(self) -> None:
        self.fixup()

    def fixup(self) -> None:
        self.row_count = int(self.row_count or 0)
        self.col_count = int(self.col_count or 0)

    def __bool__(self) -> bool:
        return bool(self.cells_feed_url) or bool(self.edit_url)

    def __str__(self) -> str:
        return f"{self.title}({self.row_count}Rx{self.col_count}C)"

    @classmethod
    def from_element(cls, elem: Element) -> "WorksheetEntry":
        """elem is an atom:entry, either standalone or inside a worksheets feed"""
        return cls(title=find_text(elem, "atom:title"),
                   row_count=find_text(elem, "gs:rowCount", "0"),
                   col_count=find_text(elem, "gs:colCount", "0"),
                   id=find_text(elem, "atom:id"),
                   cells_feed_url=find_link(elem, REL_CELLS_FEED),
                   list_feed_url=find_link(elem, REL_LIST_FEED),
                   edit_url=find_link(elem, REL_EDIT))

@dataclass
class CellsFeed(GDataResourceBase):
    """
    A whole cells feed: the worksheet title and size and every entry
    returned, which with return-empty=true includes cells with no value.
    """
    title: str = field(default="")
    row_count: int = field(default=0)
    col_count: int = field(default=0)
    entries: List[CellEntry] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.fixup()

    def fixup(self) -> None:
        self.row_count = int(self.row_count or 0)
        self.col_count = int(self.col_count or 0)

    def __len__(self) -> int:
        return len(self.entries)

    @classmethod
    def from_element(cls, elem: Element) -> "CellsFeed":
        entries = [CellEntry.from_element(e) for e in elem.findall("atom:entry", NAMESPACES)]
        return cls(title=find_text(elem, "atom:title"),
                   row_count=find_text(elem, "gs:rowCount", "0"),
                   col_count=find_text(elem, "gs:colCount", "0"),
                   entries=[e for e in entries if e])

    def by_position(self) -> dict[tuple[int,int],CellEntry]:
        return {e.position: e for e in self.entries}

    def cells(self) -> dict[tuple[int,int],Cell]:
        return {e.position: e.to_cell() for e in self.entries}

@dataclass
class BatchResult(GDataResourceBase):
    """
    One entry of a batch response.  Either it was interrupted, in which case
    interrupted_reason is set, or it carries a batch:status code.
    """
    batch_id: str = field(default="")
    id: str = field(default="")
    status_code: int = field(default=0)
    reason: str = field(default="")
    interrupted_reason: str|None = field(default=None)

    def __post_init__(self) -> None:
        self.fixup()

    def fixup(self) -> None:
        self.status_code = int(self.status_code or 0)

    @property
    def interrupted(self) -> bool:
        return self.interrupted_reason is not None

    @property
    def succeeded(self) -> bool:
        return not self.interrupted and 200 <= self.status_code < 300

    @classmethod
    def from_element(cls, elem: Element) -> "BatchResult":
        interrupted = elem.find("batch:interrupted", NAMESPACES)
        status = elem.find("batch:status", NAMESPACES)
        return cls(batch_id=find_text(elem, "batch:id"),
                   id=find_text(elem, "atom:id"),
                   status_code=status.get("code", 0) if status is not None else 0,
                   reason=status.get("reason", "") if status is not None else "",
                   interrupted_reason=interrupted.get("reason", "") if interrupted is not None else None)

    @classmethod
    def list_from_feed(cls, elem: Element) -> List["BatchResult"]:
        return [cls.from_element(e) for e in elem.findall("atom:entry", NAMESPACES)]
