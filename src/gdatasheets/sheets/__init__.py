"""
Classes to work with spreadsheets through the cells and worksheets feeds
"""
from .a1 import CellRange, label_to_position, position_to_label, col_to_int, int_to_col
from .cells import Cell, CellStore, DirtyTracker
from .worksheet import Worksheet, LoadState
from .spreadsheet import Spreadsheet
