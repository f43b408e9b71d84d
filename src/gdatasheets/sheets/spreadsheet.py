import logging
import re

from ..access import GDataSession
from ..errors import GDataSheetsError
from .requests import WorksheetRequest
from .ops import list_worksheets, add_worksheet
from .worksheet import Worksheet

logger = logging.getLogger(__name__)

_WORKSHEETS_FEED_RE = re.compile(r"^https?://[^/]+/feeds/worksheets/(?P<key>[^/]+)/private/full")

class Spreadsheet():
    """
    A spreadsheet, the container of worksheets.
    Only the worksheets feed URL is needed to address it, the title is
    known only when the spreadsheet came out of a listing.
    """
    def __init__(self, session: GDataSession, worksheets_feed_url: str,
                 title: str|None = None) -> None:
        self._session = session
        self._worksheets_feed_url = worksheets_feed_url
        self._title = title

    def __str__(self) -> str:
        return self._title if self._title else self._worksheets_feed_url

    def __repr__(self) -> str:
        return f"{self.__class__}:{str(self)}"

    def __len__(self) -> int:
        """
        In this context length is the number of worksheets in this spreadsheet.
        Note this asks the server each time.
        """
        return len(self.worksheets())

    def __contains__(self, title: str) -> bool:
        """Is there a worksheet with this title?"""
        return self.worksheet_by_title(title) is not None

    def __getitem__(self, title: str) -> Worksheet:
        ws = self.worksheet_by_title(title)
        if ws is None:
            raise KeyError(f"{title} not in worksheets[]")
        return ws

    @property
    def worksheets_feed_url(self) -> str:
        """URL of the worksheets feed of the spreadsheet"""
        return self._worksheets_feed_url

    @property
    def title(self) -> str|None:
        return self._title

    @property
    def key(self) -> str:
        """Key of the spreadsheet, the id in its browser URL"""
        m = _WORKSHEETS_FEED_RE.match(self._worksheets_feed_url)
        if not m:
            raise GDataSheetsError(f"worksheets feed URL is in unknown format: {self._worksheets_feed_url}")
        return m.group('key')

    def worksheets(self) -> list[Worksheet]:
        """The worksheets of the spreadsheet, in tab order"""
        return [Worksheet(self._session, e.cells_feed_url, self, e.title)
                for e in list_worksheets(self._session, self._worksheets_feed_url)
                if e.cells_feed_url]

    def worksheet_by_title(self, title: str) -> Worksheet|None:
        for ws in self.worksheets():
            if ws.title == title:
                return ws
        return None

    def add_worksheet(self, title: str, max_rows: int = 100, max_cols: int = 20) -> Worksheet:
        """Add a new worksheet to the spreadsheet and return it."""
        entry = add_worksheet(self._session, self._worksheets_feed_url,
                              WorksheetRequest(title, max_rows, max_cols))
        if not entry.cells_feed_url:
            raise GDataSheetsError(f"no cells feed link for new worksheet {title}")
        logger.info("added worksheet %s (%dRx%dC)", title, max_rows, max_cols)
        return Worksheet(self._session, entry.cells_feed_url, self, entry.title or title)
