from collections import deque
from xml.sax.saxutils import escape, quoteattr

import pytest

from gdatasheets import GDataSession

KEY = "pz7XtlQC-PYx-jrVMJErTcg"
FEEDS = "https://spreadsheets.google.com/feeds"
CELLS_URL = f"{FEEDS}/cells/{KEY}/od6/private/full"
WORKSHEETS_URL = f"{FEEDS}/worksheets/{KEY}/private/full"
WORKSHEET_URL = f"{WORKSHEETS_URL}/od6"
WORKSHEET_EDIT_URL = f"{WORKSHEET_URL}/7"

_NS = ('xmlns="http://www.w3.org/2005/Atom" '
       'xmlns:gs="http://schemas.google.com/spreadsheets/2006" '
       'xmlns:batch="http://schemas.google.com/gdata/batch"')


class FakeResponse():
    def __init__(self, status_code: int, text: str = "") -> None:
        self.status_code = status_code
        self.text = text
        self.content = text.encode('utf-8')


class FakeHttp():
    """
    Stands in for requests.Session.  Responses are queued per (method, url)
    and handed out in order, every request is recorded.
    """
    def __init__(self) -> None:
        self.responses = {}
        self.calls = []

    def queue(self, method: str, url: str, status: int = 200, text: str = "") -> None:
        self.responses.setdefault((method, url), deque()).append(FakeResponse(status, text))

    def request(self, method, url, params=None, data=None, headers=None, timeout=None):
        self.calls.append({"method": method, "url": url, "params": params,
                           "data": data, "headers": dict(headers or {}), "timeout": timeout})
        pending = self.responses.get((method, url))
        if not pending:
            raise AssertionError(f"unexpected request {method} {url}")
        return pending.popleft()

    def requests_for(self, method: str, url: str|None = None) -> list[dict]:
        return [c for c in self.calls if c["method"] == method and (url is None or c["url"] == url)]


class Atom():
    """Builders for the feed documents the server sends back"""

    @staticmethod
    def cell_entry(row, col, value="", input_value=None, numeric=None) -> str:
        url = f"{CELLS_URL}/R{row}C{col}"
        attrs = f'row="{row}" col="{col}" inputValue={quoteattr(value if input_value is None else input_value)}'
        if numeric is not None:
            attrs += f' numericValue="{numeric}"'
        return (f"<entry><id>{url}</id><title>R{row}C{col}</title>"
                f'<link rel="self" type="application/atom+xml" href="{url}"/>'
                f'<link rel="edit" type="application/atom+xml" href="{url}/1"/>'
                f"<gs:cell {attrs}>{escape(value)}</gs:cell></entry>")

    @classmethod
    def cells_feed(cls, title="Sheet1", rows=100, cols=20, cells=()) -> str:
        entries = "".join(cls.cell_entry(*c) for c in cells)
        return (f"<?xml version='1.0' encoding='UTF-8'?><feed {_NS}>"
                f"<id>{CELLS_URL}</id><title type=\"text\">{escape(title)}</title>"
                f"<gs:rowCount>{rows}</gs:rowCount><gs:colCount>{cols}</gs:colCount>"
                f"{entries}</feed>")

    @classmethod
    def empty_box(cls, min_row, max_row, min_col, max_col) -> str:
        """cells feed as returned with return-empty=true for a range of blank cells"""
        cells = [(r, c) for r in range(min_row, max_row + 1) for c in range(min_col, max_col + 1)]
        return cls.cells_feed(cells=cells)

    @staticmethod
    def worksheet_entry(title="Sheet1", rows=100, cols=20, sheet="od6", root=True) -> str:
        ns = f" {_NS}" if root else ""
        return (f"<entry{ns}><id>{WORKSHEETS_URL}/{sheet}</id><title type=\"text\">{escape(title)}</title>"
                f'<link rel="http://schemas.google.com/spreadsheets/2006#cellsfeed" type="application/atom+xml" '
                f'href="{FEEDS}/cells/{KEY}/{sheet}/private/full"/>'
                f'<link rel="edit" type="application/atom+xml" href="{WORKSHEETS_URL}/{sheet}/7"/>'
                f"<gs:rowCount>{rows}</gs:rowCount><gs:colCount>{cols}</gs:colCount></entry>")

    @classmethod
    def worksheets_feed(cls, *sheets) -> str:
        entries = "".join(cls.worksheet_entry(t, sheet=s, root=False) for t, s in sheets)
        return f"<feed {_NS}><id>{WORKSHEETS_URL}</id><title>Book</title>{entries}</feed>"

    @staticmethod
    def batch_response(*results) -> str:
        """results are (row, col, code, reason) or (row, col, 'interrupted', reason)"""
        entries = ""
        for row, col, code, reason in results:
            if code == "interrupted":
                status = f'<batch:interrupted reason={quoteattr(reason)} success="0" failures="1" parsed="1"/>'
            else:
                status = f'<batch:status code="{code}" reason={quoteattr(reason)}/>'
            entries += (f"<entry><id>{CELLS_URL}/R{row}C{col}</id>"
                        f"<batch:id>{row},{col}</batch:id>"
                        f'<batch:operation type="update"/>{status}</entry>')
        return f"<feed {_NS}><id>{CELLS_URL}/batch</id>{entries}</feed>"


@pytest.fixture
def atom():
    return Atom


@pytest.fixture
def http():
    return FakeHttp()


@pytest.fixture
def session(http):
    return GDataSession("secret-token", http=http)
