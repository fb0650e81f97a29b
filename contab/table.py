"""A table of categorical values read from CSV, with per-column integer codes."""

from __future__ import annotations

import csv
import os
from collections.abc import Iterable, Sequence


class CategoricalTable:
    """Categorical data where row 0 is the header and rows 1.. hold values.

    Every column maps its distinct values to codes 1, 2, ... in order of first
    appearance; an empty cell has code 0.
    """

    def __init__(self, header: Sequence[str], rows: Iterable[Sequence[str]]) -> None:
        self._headers: tuple[str, ...] = tuple(header)
        width = len(self._headers)
        self._values: list[list[str]] = [[""] for _ in range(width)]
        self._lookup: list[dict[str, int]] = [{"": 0} for _ in range(width)]
        self._codes: list[tuple[int, ...]] = []
        for line_no, row in enumerate(rows, start=1):
            cells = list(row)
            if len(cells) > width:
                raise ValueError(
                    f"row {line_no} has {len(cells)} cells but the header has {width}"
                )
            cells.extend([""] * (width - len(cells)))
            self._codes.append(
                tuple(self._encode(column, cell) for column, cell in enumerate(cells))
            )

    def _encode(self, column: int, cell: str) -> int:
        lookup = self._lookup[column]
        code = lookup.get(cell)
        if code is None:
            code = len(self._values[column])
            lookup[cell] = code
            self._values[column].append(cell)
        return code

    @classmethod
    def from_rows(cls, header: Sequence[str], rows: Iterable[Sequence[str]]) -> CategoricalTable:
        """Build a table from a header and an iterable of rows of strings."""
        return cls(header, rows)

    @classmethod
    def from_csv(cls, path: str | os.PathLike[str]) -> CategoricalTable:
        """Read a CSV file whose first line is the header."""
        with open(path, newline="", encoding="utf-8") as handle:
            reader = csv.reader(handle)
            try:
                header = next(reader)
            except StopIteration:
                raise ValueError(f"{os.fspath(path)!s} is empty") from None
            rows = [row for row in reader if row]
        return cls(header, rows)

    def row_count(self) -> int:
        """Number of rows, the header row included."""
        return len(self._codes) + 1

    def column_count(self) -> int:
        return len(self._headers)

    def _check_column(self, column: int) -> None:
        if not 0 <= column < len(self._headers):
            raise IndexError(f"column {column} is out of range")

    def column_header(self, column: int) -> str:
        self._check_column(column)
        return self._headers[column]

    def column_index(self, header: str) -> int:
        """Index of the first column named ``header``."""
        try:
            return self._headers.index(header)
        except ValueError:
            raise KeyError(f"no column named {header!r}") from None

    def code(self, row: int, column: int) -> int:
        """Code of the cell at ``row`` (1-based data row) and ``column``."""
        self._check_column(column)
        if not 1 <= row < self.row_count():
            raise IndexError(f"row {row} is not a data row")
        return self._codes[row - 1][column]

    def value(self, column: int, code: int) -> str:
        """The string that ``code`` stands for in ``column``."""
        self._check_column(column)
        values = self._values[column]
        if not 0 <= code < len(values):
            raise KeyError(f"column {column} has no code {code}")
        return values[code]