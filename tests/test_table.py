import pytest

from contab.table import CategoricalTable

HEADER = ["ID", "ColA", "ColB"]
ROWS = [
    ["1", "X", "P"],
    ["2", "X", "Q"],
    ["3", "Y", ""],
    ["4", "Y", "Q"],
]


@pytest.fixture
def table():
    return CategoricalTable.from_rows(HEADER, ROWS)


def test_row_count_includes_header(table):
    assert table.row_count() == len(ROWS) + 1
    assert table.column_count() == len(HEADER)


def test_headers_round_trip(table):
    for index, name in enumerate(HEADER):
        assert table.column_header(index) == name
        assert table.column_index(name) == index


def test_values_round_trip_through_codes(table):
    for row_no, row in enumerate(ROWS, start=1):
        for column, cell in enumerate(row):
            assert table.value(column, table.code(row_no, column)) == cell


def test_empty_cell_has_code_zero(table):
    assert table.code(3, 2) == 0
    assert table.value(2, 0) == ""


def test_codes_follow_first_appearance(table):
    assert table.code(1, 1) == 1
    assert table.code(2, 1) == table.code(1, 1)
    assert table.code(3, 1) > table.code(1, 1)
    assert table.code(4, 2) == table.code(2, 2)


def test_short_rows_are_padded_with_empty():
    t = CategoricalTable.from_rows(["a", "b"], [["x"]])
    assert t.code(1, 1) == 0


def test_long_row_is_rejected():
    with pytest.raises(ValueError):
        CategoricalTable.from_rows(["a"], [["x", "y"]])


def test_from_csv_matches_from_rows(tmp_path):
    path = tmp_path / "data.csv"
    path.write_text("ID,ColA,ColB\n1,X,P\n2,X,Q\n3,Y,\n4,Y,Q\n", encoding="utf-8")
    parsed = CategoricalTable.from_csv(path)
    reference = CategoricalTable.from_rows(HEADER, ROWS)
    assert parsed.row_count() == reference.row_count()
    for row in range(1, reference.row_count()):
        for column in range(reference.column_count()):
            assert parsed.code(row, column) == reference.code(row, column)


def test_from_csv_empty_file_raises(tmp_path):
    path = tmp_path / "empty.csv"
    path.write_text("", encoding="utf-8")
    with pytest.raises(ValueError):
        CategoricalTable.from_csv(path)


def test_unknown_header_raises(table):
    with pytest.raises(KeyError):
        table.column_index("missing")


def test_column_out_of_range_raises(table):
    with pytest.raises(IndexError):
        table.column_header(len(HEADER))
    with pytest.raises(IndexError):
        table.code(1, len(HEADER))


def test_header_row_has_no_codes(table):
    with pytest.raises(IndexError):
        table.code(0, 0)
    with pytest.raises(IndexError):
        table.code(table.row_count(), 0)


def test_unknown_code_raises(table):
    with pytest.raises(KeyError):
        table.value(1, len(ROWS) + 10)