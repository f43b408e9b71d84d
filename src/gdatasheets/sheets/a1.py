import re

from dataclasses import dataclass
from typing import Self
from collections.abc import Iterable

from ..errors import InvalidAddress

# a single cell label, like A1 or zz32
_A1_CELL_RE = re.compile(r"^(?P<col>[A-Za-z]+)(?P<row>[0-9]+)$")
_A1_COL_RE = re.compile(r"^[A-Za-z]+$")

def col_to_int(column: str) -> int:
    """
    Convert a column label to its integer equivalent.
    Note that this is 1-based, so 'A' goes to 1, 'Z' to 26 and 'AA' to 27.
    Case is ignored.

    column: String of letters to translate.

    return: Integer index translation.
    """
    c = str(column)
    if not _A1_COL_RE.match(c):
        raise InvalidAddress(column, f"invalid column label: {column!r}")
    num = 0
    for v in c.upper():
        num = num * 26 + (ord(v) - 64)
    return num

def int_to_col(index: int) -> str:
    """
    Translate an int column index to its label.
    Columns are bijective base 26, there is no zero digit so 26 is 'Z'
    and 27 rolls over to 'AA'.

    index:  1-based column index

    return: String of letters for the index.
    """
    i = int(index)
    if i < 1:
        raise InvalidAddress(index, f"invalid column index: {index!r}")
    col = ""
    while i:
        i, r = divmod(i - 1, 26)
        col = chr(r + 65) + col
    return col

def label_to_position(label: str) -> tuple[int,int]:
    """
    Parse a cell label into its (row, col) position.
    Ex: A1 => (1,1); B1 => (1,2); z32 => (32,26)
    The row is taken literally so 'A0' decodes to row 0, callers that
    address cells check the bounds.
    """
    m = _A1_CELL_RE.fullmatch(str(label))
    if not m:
        raise InvalidAddress(label)
    return (int(m.group('row')), col_to_int(m.group('col')))

def position_to_label(row: int, col: int) -> str:
    """Inverse of label_to_position(), (32,26) => Z32"""
    r = int(row)
    if r < 1:
        raise InvalidAddress((row, col), f"invalid row index: {row!r}")
    return f"{int_to_col(col)}{r}"

def check_position(row: int, col: int) -> tuple[int,int]:
    """Validate a numeric position, rows and cols are 1-based."""
    if isinstance(row, bool) or isinstance(col, bool):
        raise InvalidAddress((row, col))
    try:
        r, c = int(row), int(col)
    except (TypeError, ValueError):
        raise InvalidAddress((row, col)) from None
    if r < 1 or c < 1:
        raise InvalidAddress((row, col))
    return (r, c)

def to_position(row_or_label: int|str|tuple[int,int], col: int|None = None) -> tuple[int,int]:
    """
    Normalise the different ways of addressing a cell into (row, col).
    Accepts a label ('B3'), a (row, col) tuple or separate row and col.
    """
    if isinstance(row_or_label, str):
        if col is not None:
            raise InvalidAddress((row_or_label, col), "a cell label does not take a column")
        return check_position(*label_to_position(row_or_label))
    if isinstance(row_or_label, tuple):
        if col is not None or len(row_or_label) != 2:
            raise InvalidAddress(row_or_label)
        return check_position(*row_or_label)
    if col is None:
        raise InvalidAddress(row_or_label, "a row needs a column")
    return check_position(row_or_label, col)

@dataclass(frozen=True)
class CellRange():
    """
    A bounded rectangle of cells, 1-based and inclusive at both ends.
    So rows 1-2 and cols 1-3 is 'A1:C2' and holds 6 cells.
    Unlike a general A1 range there are no unbounded or sheet qualified
    forms here, the cells feed only takes row/col limits.
    """
    min_row: int
    max_row: int
    min_col: int
    max_col: int

    def __post_init__(self) -> None:
        check_position(self.min_row, self.min_col)
        check_position(self.max_row, self.max_col)
        if self.max_row < self.min_row or self.max_col < self.min_col:
            raise InvalidAddress(self, "range end is before its start")

    @classmethod
    def covering(cls, positions: Iterable[tuple[int,int]]) -> Self:
        """
        Smallest range holding every (row, col) in positions.
        """
        plist = list(positions)
        if not plist:
            raise ValueError("cannot cover an empty set of cells")
        rows = [r for r, _ in plist]
        cols = [c for _, c in plist]
        return cls(min(rows), max(rows), min(cols), max(cols))

    @classmethod
    def from_a1(cls, a1: str) -> Self:
        """Parse 'B2:D5', a single label is a one cell range"""
        start, _, end = str(a1).partition(':')
        sr, sc = label_to_position(start)
        er, ec = label_to_position(end) if end else (sr, sc)
        return cls(sr, er, sc, ec)

    def __str__(self) -> str:
        return f"{position_to_label(self.min_row, self.min_col)}:{position_to_label(self.max_row, self.max_col)}"

    def __len__(self) -> int:
        """Number of cells in the range"""
        return self.num_rows * self.num_cols

    def __contains__(self, position: tuple[int,int]|str) -> bool:
        r, c = label_to_position(position) if isinstance(position, str) else position
        return self.min_row <= r <= self.max_row and self.min_col <= c <= self.max_col

    def __iter__(self):
        """Positions in row major order"""
        for r in range(self.min_row, self.max_row + 1):
            for c in range(self.min_col, self.max_col + 1):
                yield (r, c)

    @property
    def num_rows(self) -> int:
        return self.max_row - self.min_row + 1

    @property
    def num_cols(self) -> int:
        return self.max_col - self.min_col + 1

    def query_params(self) -> dict[str,str]:
        """Cells feed query parameters restricting a fetch to this range"""
        return {
            "min-row": str(self.min_row),
            "max-row": str(self.max_row),
            "min-col": str(self.min_col),
            "max-col": str(self.max_col),
        }
