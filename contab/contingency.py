"""Pearson chi-square contingency tables and a two-way partition search."""

from __future__ import annotations

import math
import random
from collections import Counter
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from contab.bitmask import is_bit_set
from contab.table import CategoricalTable

_Counts = Mapping[tuple[int, int], int]


@dataclass
class PartitionResult:
    """A split of the second column's codes into two groups, with its test result."""

    partition0: list[int] = field(default_factory=list)
    partition1: list[int] = field(default_factory=list)
    chi_square: float = 0.0
    p_value: float = 1.0
    degrees_of_freedom: int = 0


def chi_square_p_value(chi_sq: float, df: int) -> float:
    """Upper-tail p-value by the Wilson-Hilferty normal approximation."""
    if df == 0 or chi_sq < 0.0:
        return 1.0
    dfs = float(df)
    z = (chi_sq / dfs) ** (1.0 / 3.0) - (1.0 - 2.0 / (9.0 * dfs))
    z_norm = z / math.sqrt(2.0 / (9.0 * dfs))
    p_value = 0.5 * math.erfc(z_norm / math.sqrt(2.0))
    return max(0.0, min(1.0, p_value))


def determine_restarts(num_features: int, adjusted_alpha: float) -> int:
    """Number of random restarts for the partition search."""
    if adjusted_alpha < 0.0001:
        restarts = 15
    elif adjusted_alpha < 0.001:
        restarts = 10
    elif adjusted_alpha < 0.01:
        restarts = 7
    else:
        restarts = 4
    if num_features > 30:
        restarts = min(restarts, 5)
    return restarts


def _chi_square(counts: _Counts) -> tuple[float, int] | None:
    """Chi-square and degrees of freedom, or None if the table is degenerate."""
    row_keys = sorted({a for a, _ in counts})
    col_keys = sorted({b for _, b in counts})
    if len(row_keys) < 2 or len(col_keys) < 2:
        return None
    row_totals = Counter()
    col_totals = Counter()
    for (a, b), n in counts.items():
        row_totals[a] += n
        col_totals[b] += n
    grand_total = float(sum(row_totals.values()))
    if grand_total == 0.0:
        return None
    chi = 0.0
    for a in row_keys:
        for b in col_keys:
            expected = float(row_totals[a]) * float(col_totals[b]) / grand_total
            if expected > 0.0:
                diff = float(counts.get((a, b), 0)) - expected
                chi += diff * diff / expected
    return chi, (len(row_keys) - 1) * (len(col_keys) - 1)


class ContingencyTable:
    """Cross-tabulation of two columns of a :class:`CategoricalTable`."""

    def __init__(self, table: CategoricalTable, rng: random.Random | None = None) -> None:
        self.table = table
        self._rng = rng if rng is not None else random.Random()
        self._col_a = 0
        self._col_b = 0
        self._row_mask: tuple[int, ...] | None = None
        self._mask_size = 0
        self._skip_empty = True
        self._dirty = True
        self._chi_square = 0.0
        self._df = 0
        self._joint: dict[tuple[int, int], int] = {}
        self._partition_chi_square = 0.0
        self._partition_p_value = 1.0
        self._partition_df = 0

    def _resolve(self, column: int | str, which: str) -> int:
        if isinstance(column, str):
            return self.table.column_index(column)
        if not 0 <= column < self.table.column_count():
            raise IndexError(f"{which} column ID is out of range.")
        return column

    def _invalidate(self) -> None:
        self._dirty = True
        self._chi_square = 0.0
        self._df = 0

    def set_first_column(self, column: int | str) -> None:
        """Select the first column by index or header."""
        self._col_a = self._resolve(column, "First")
        self._invalidate()

    def set_second_column(self, column: int | str) -> None:
        """Select the second column by index or header."""
        self._col_b = self._resolve(column, "Second")
        self._invalidate()

    def set_row_filter(self, bitmask: Sequence[int] | None, size_in_bits: int) -> None:
        """Only count rows whose bit is set; ``None`` includes every row."""
        self._row_mask = None if bitmask is None else tuple(bitmask)
        self._mask_size = size_in_bits
        self._invalidate()

    def set_skip_empty_values(self, skip: bool) -> None:
        """Whether rows with an empty value in either column are left out."""
        self._skip_empty = skip
        self._invalidate()

    def _row_included(self, row: int) -> bool:
        if self._row_mask is None:
            return True
        if row >= self._mask_size:
            return False
        return is_bit_set(self._row_mask, row)

    def build(self) -> None:
        """Count the joint values and compute the chi-square statistic."""
        self._chi_square = 0.0
        self._df = 0
        self._joint = {}
        counts: Counter[tuple[int, int]] = Counter()
        for row in range(1, self.table.row_count()):
            if not self._row_included(row):
                continue
            a = self.table.code(row, self._col_a)
            b = self.table.code(row, self._col_b)
            if self._skip_empty and (a == 0 or b == 0):
                continue
            counts[(a, b)] += 1
        self._joint = dict(sorted(counts.items()))
        result = _chi_square(self._joint)
        if result is not None:
            self._chi_square, self._df = result
        self._dirty = False

    def _require_built(self, what: str) -> None:
        if self._dirty:
            raise RuntimeError(f"Must call build() before {what}.")

    def test_statistic(self) -> float:
        self._require_built("reading test statistic")
        return self._chi_square

    def degrees_of_freedom(self) -> int:
        self._require_built("reading degrees of freedom")
        return self._df

    def p_value(self) -> float:
        self._require_built("reading p-value")
        return chi_square_p_value(self._chi_square, self._df)

    def partition_chi_square(self) -> float:
        return self._partition_chi_square

    def partition_p_value(self) -> float:
        return self._partition_p_value

    def partition_degrees_of_freedom(self) -> int:
        return self._partition_df

    def _evaluate(self, side0: set[int]) -> tuple[float, int] | None:
        merged: Counter[tuple[int, int]] = Counter()
        for (a, b), n in self._joint.items():
            merged[(a, 0 if b in side0 else 1)] += n
        return _chi_square(merged)

    def _greedy_search(self, features: list[int]) -> PartitionResult:
        order = list(features)
        self._rng.shuffle(order)
        midpoint = len(order) // 2
        p0, p1 = order[:midpoint], order[midpoint:]

        best = PartitionResult(list(p0), list(p1))
        initial = self._evaluate(set(p0))
        if initial is not None:
            chi, df = initial
            best.chi_square = chi
            best.p_value = chi_square_p_value(chi, df)
            best.degrees_of_freedom = df

        improved = True
        while improved:
            improved = False
            for source, target, into_zero in ((p0, p1, False), (p1, p0, True)):
                for i, feature in enumerate(source):
                    side0 = set(p0)
                    if into_zero:
                        side0.add(feature)
                    else:
                        side0.discard(feature)
                    result = self._evaluate(side0)
                    if result is None or result[0] <= best.chi_square:
                        continue
                    chi, df = result
                    del source[i]
                    target.append(feature)
                    best = PartitionResult(
                        list(p0), list(p1), chi, chi_square_p_value(chi, df), df
                    )
                    improved = True
                    break
                if improved:
                    break
        return best

    def find_optimal_partition(self, alpha: float) -> PartitionResult | None:
        """Search for a two-group split of the second column's values.

        Returns the best split found if its p-value beats ``alpha / 2**k``,
        where k is the number of distinct second-column values; otherwise None.
        """
        self._require_built("findOptimalPartition()")
        if not self._joint:
            return None
        features = sorted({b for _, b in self._joint})
        if len(features) < 2:
            return None

        adjusted_alpha = alpha / math.pow(2.0, len(features))
        restarts = determine_restarts(len(features), adjusted_alpha)

        best = PartitionResult(chi_square=-1.0, p_value=1.0)
        for _ in range(restarts):
            result = self._greedy_search(features)
            if result.chi_square > best.chi_square:
                best = result

        if best.p_value < adjusted_alpha:
            self._partition_chi_square = best.chi_square
            self._partition_p_value = best.p_value
            self._partition_df = best.degrees_of_freedom
            return best
        return None