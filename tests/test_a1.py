import pytest

from gdatasheets import InvalidAddress
from gdatasheets.sheets.a1 import (CellRange, col_to_int, int_to_col, label_to_position,
                                   position_to_label, to_position)

def test_decode_labels():
    assert(label_to_position("A1") == (1, 1))
    assert(label_to_position("B1") == (1, 2))
    assert(label_to_position("Z32") == (32, 26))
    assert(label_to_position("z32") == (32, 26))
    assert(label_to_position("AA1") == (1, 27))
    assert(label_to_position("BX2") == (2, 76))

def test_invalid_labels():
    for bad in ["", "A", "12", "1A", "A1B", "A-1", "Ä1", "A1:B2", " A1", "B2 "]:
        with pytest.raises(InvalidAddress):
            label_to_position(bad)

def test_columns():
    assert(col_to_int('A') == 1)
    assert(col_to_int('Z') == 26)
    assert(col_to_int('AA') == 27)
    assert(col_to_int('ZZ') == 702)
    assert(col_to_int('AAA') == 703)
    assert(int_to_col(26) == 'Z')
    assert(int_to_col(27) == 'AA')
    assert(int_to_col(702) == 'ZZ')
    assert(int_to_col(18278) == 'ZZZ')
    with pytest.raises(InvalidAddress):
        int_to_col(0)
    with pytest.raises(InvalidAddress):
        col_to_int('A1')

def test_round_trip():
    for row in [1, 2, 99, 1000]:
        for col in range(1, 26 * 27 + 1):
            assert(label_to_position(position_to_label(row, col)) == (row, col))
    assert(position_to_label(32, 26) == "Z32")

def test_to_position():
    assert(to_position("C2") == (2, 3))
    assert(to_position((2, 3)) == (2, 3))
    assert(to_position(2, 3) == (2, 3))
    with pytest.raises(InvalidAddress):
        to_position("A0")
    with pytest.raises(InvalidAddress):
        to_position(0, 1)
    with pytest.raises(InvalidAddress):
        to_position(1)
    with pytest.raises(InvalidAddress):
        to_position("A1", 2)

def test_cell_range():
    box = CellRange.covering([(2, 1), (1, 3)])
    assert(box == CellRange(1, 2, 1, 3))
    assert(str(box) == "A1:C2")
    assert(len(box) == 6)
    assert(box.num_rows == 2)
    assert(box.num_cols == 3)
    assert((2, 2) in box)
    assert("C2" in box)
    assert((3, 1) not in box)
    assert(list(box)[:4] == [(1, 1), (1, 2), (1, 3), (2, 1)])
    assert(box.query_params() == {"min-row": "1", "max-row": "2", "min-col": "1", "max-col": "3"})

    assert(CellRange.from_a1("B2:D5") == CellRange(2, 5, 2, 4))
    assert(len(CellRange.from_a1("C7")) == 1)

    with pytest.raises(ValueError):
        CellRange.covering([])
    with pytest.raises(InvalidAddress):
        CellRange(3, 2, 1, 1)
