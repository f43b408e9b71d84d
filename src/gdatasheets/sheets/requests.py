"""
Request bodies sent to the spreadsheet feeds.
Bodies are Atom markup built from templates, every caller supplied value
goes through _h() (text) or _attr() (attributes) before it lands in the
markup so titles and cell values can hold any character.
"""
from dataclasses import dataclass, field
from typing import List
from xml.sax.saxutils import escape, quoteattr

from ..resources import GDataResourceBase, NAMESPACES

def _h(value: object) -> str:
    """escape for element text"""
    return escape(str(value), {'"': "&quot;"})

def _attr(value: object) -> str:
    """escape and quote for an attribute value, newlines survive as char refs"""
    return quoteattr(str(value), {"\n": "&#10;", "\r": "&#13;", "\t": "&#9;"})

class GDataRequestBase(GDataResourceBase):
    """
    Base class for request bodies, subclasses render themselves as
    an Atom fragment with to_xml().
    """
    def to_xml(self) -> str:
        raise NotImplementedError(self.__class__.__name__)

    def __str__(self) -> str:
        return self.to_xml()

@dataclass
class WorksheetRequest(GDataRequestBase):
    """
    Worksheet entry with title and size.  Used both to add a worksheet
    (POST to the worksheets feed) and to update one (PUT to its edit link).
    """
    title: str
    row_count: int
    col_count: int

    def __post_init__(self) -> None:
        self.fixup()

    def fixup(self) -> None:
        self.title = str(self.title)
        self.row_count = int(self.row_count)
        self.col_count = int(self.col_count)
        if self.row_count < 0 or self.col_count < 0:
            raise ValueError(f"invalid worksheet size: {self.row_count}x{self.col_count}")

    def to_xml(self) -> str:
        return (f"<entry xmlns={_attr(NAMESPACES['atom'])} xmlns:gs={_attr(NAMESPACES['gs'])}>"
                f"<title>{_h(self.title)}</title>"
                f"<gs:rowCount>{_h(self.row_count)}</gs:rowCount>"
                f"<gs:colCount>{_h(self.col_count)}</gs:colCount>"
                "</entry>")

@dataclass
class CellUpdateRequest(GDataRequestBase):
    """
    One update operation in a cells batch.  The cell is addressed by the
    id and edit link the server handed out for it, the batch id is the
    'row,col' pair so responses can be matched back.
    """
    row: int
    col: int
    value: str
    id: str
    edit_url: str

    @property
    def batch_id(self) -> str:
        return f"{self.row},{self.col}"

    def to_xml(self) -> str:
        return ("<entry>"
                f"<batch:id>{_h(self.batch_id)}</batch:id>"
                "<batch:operation type=\"update\"/>"
                f"<id>{_h(self.id)}</id>"
                f"<link rel=\"edit\" type=\"application/atom+xml\" href={_attr(self.edit_url)}/>"
                f"<gs:cell row={_attr(self.row)} col={_attr(self.col)} inputValue={_attr(self.value)}/>"
                "</entry>")

@dataclass
class CellBatchRequest(GDataRequestBase):
    """
    The batch feed wrapping the update operations, its id is the
    cells feed being updated.
    """
    feed_url: str
    requests: List[CellUpdateRequest] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.requests)

    def to_xml(self) -> str:
        body = "".join(r.to_xml() for r in self.requests)
        return (f"<feed xmlns={_attr(NAMESPACES['atom'])}"
                f" xmlns:batch={_attr(NAMESPACES['batch'])}"
                f" xmlns:gs={_attr(NAMESPACES['gs'])}>"
                f"<id>{_h(self.feed_url)}</id>"
                f"{body}"
                "</feed>")
