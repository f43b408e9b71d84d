"""
The local mirror of a worksheet.
A CellStore holds the cells that have a value keyed by (row, col), along
with the worksheet extent and title, and a DirtyTracker recording what has
been changed locally since the last load or save.
"""
from dataclasses import dataclass, field
from collections.abc import Iterable, Iterator

from .a1 import check_position

@dataclass
class Cell():
    """
    The three faces of a cell.
    value is what you'd see in the sheet, input_value is what was typed
    (a formula for computed cells) and numeric_value is only present when
    the server reports the cell as a number.
    """
    value: str = field(default="")
    input_value: str = field(default="")
    numeric_value: float|None = field(default=None)

class DirtyTracker():
    """
    Coordinates edited since the last load/save plus a flag for
    title or dimension edits.
    """
    def __init__(self) -> None:
        self._cells: set[tuple[int,int]] = set()
        self._meta = False

    def __bool__(self) -> bool:
        return self.is_dirty()

    def __repr__(self) -> str:
        return f"{self.__class__}:cells={len(self._cells)},meta={self._meta}"

    def mark_cell_dirty(self, row: int, col: int) -> None:
        self._cells.add((row, col))

    def mark_meta_dirty(self) -> None:
        self._meta = True

    @property
    def meta_dirty(self) -> bool:
        return self._meta

    def is_dirty(self) -> bool:
        return bool(self._cells) or self._meta

    def dirty_cells(self) -> frozenset[tuple[int,int]]:
        """Snapshot of the dirty coordinates, no ordering implied"""
        return frozenset(self._cells)

    def clear_cells(self, positions: Iterable[tuple[int,int]]|None = None) -> None:
        """
        Forget dirty cells.  With no positions everything goes, otherwise
        only the ones given, so edits made after a snapshot survive.
        """
        if positions is None:
            self._cells.clear()
        else:
            self._cells.difference_update(positions)

    def clear_meta(self) -> None:
        self._meta = False

    def clear(self) -> None:
        self.clear_cells()
        self.clear_meta()

class CellStore():
    """
    Sparse mapping of (row, col) to Cell plus the declared worksheet extent.
    max_rows/max_cols are the size of the worksheet which is usually larger
    than num_rows/num_cols, the extent of the cells that actually hold a value.
    """
    def __init__(self, title: str = "", max_rows: int = 0, max_cols: int = 0) -> None:
        self._cells: dict[tuple[int,int],Cell] = {}
        self._title = title
        self._max_rows = max_rows
        self._max_cols = max_cols
        self.dirty = DirtyTracker()

    def __len__(self) -> int:
        """Number of cells holding an entry, empty or not"""
        return len(self._cells)

    def __contains__(self, position: tuple[int,int]) -> bool:
        return position in self._cells

    def __repr__(self) -> str:
        return f"{self.__class__}:{self._title}({self._max_rows}Rx{self._max_cols}C)[{len(self)}]"

    def positions(self) -> Iterator[tuple[int,int]]:
        return iter(self._cells)

    def cell(self, row: int, col: int) -> Cell|None:
        return self._cells.get((row, col))

    def get(self, row: int, col: int) -> str:
        c = self._cells.get((row, col))
        return c.value if c else ""

    def get_input(self, row: int, col: int) -> str:
        c = self._cells.get((row, col))
        return c.input_value if c else ""

    def get_numeric(self, row: int, col: int) -> float|None:
        c = self._cells.get((row, col))
        return c.numeric_value if c else None

    def set(self, row: int, col: int, value: object) -> None:
        """
        Local edit of a cell.  Both display and input faces take the value,
        whether it is a literal or a formula is only known once the server
        has evaluated it.  Any numeric face is stale so it is dropped.
        """
        r, c = check_position(row, col)
        v = "" if value is None else str(value)
        self._cells[(r, c)] = Cell(v, v)
        self.dirty.mark_cell_dirty(r, c)
        if r > self._max_rows:
            self.max_rows = r
        if c > self._max_cols:
            self.max_cols = c

    @property
    def title(self) -> str:
        return self._title

    @title.setter
    def title(self, value: str) -> None:
        self._title = str(value)
        self.dirty.mark_meta_dirty()

    @property
    def max_rows(self) -> int:
        return self._max_rows

    @max_rows.setter
    def max_rows(self, value: int) -> None:
        rows = int(value)
        if rows < self.num_rows:
            raise ValueError(f"max_rows {rows} would cut off non-empty row {self.num_rows}")
        self._max_rows = rows
        self.dirty.mark_meta_dirty()

    @property
    def max_cols(self) -> int:
        return self._max_cols

    @max_cols.setter
    def max_cols(self, value: int) -> None:
        cols = int(value)
        if cols < self.num_cols:
            raise ValueError(f"max_cols {cols} would cut off non-empty column {self.num_cols}")
        self._max_cols = cols
        self.dirty.mark_meta_dirty()

    @property
    def num_rows(self) -> int:
        """Row number of the bottom-most non-empty row, 0 if all empty"""
        return max((r for (r, _), c in self._cells.items() if c.value), default=0)

    @property
    def num_cols(self) -> int:
        """Column number of the right-most non-empty column, 0 if all empty"""
        return max((col for (_, col), c in self._cells.items() if c.value), default=0)

    def replace(self, title: str, max_rows: int, max_cols: int,
                cells: dict[tuple[int,int],Cell]) -> None:
        """
        Swap in a freshly loaded worksheet.  Nothing of the previous
        state survives, unsaved local edits included.
        """
        self._cells = dict(cells)
        self._title = title
        self._max_rows = int(max_rows)
        self._max_cols = int(max_cols)
        self.dirty.clear()
