"""Pick the candidate column most associated with a target column."""

from __future__ import annotations

import os
import random
from collections.abc import Sequence

from contab.bitmask import count_set_bits, is_bit_set
from contab.contingency import ContingencyTable
from contab.table import CategoricalTable


class NoResultError(RuntimeError):
    """Raised when a result is read that the last search did not produce."""


def compute_effective_alpha(alpha: float, apply_bonferroni: bool, num_tests: int) -> float:
    """Divide ``alpha`` by the number of tests when the correction applies."""
    if apply_bonferroni and num_tests > 1:
        return alpha / float(num_tests)
    return alpha


class FeatureSelector:
    """Test enabled columns against a target and split the best one in two."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng
        self._table: CategoricalTable | None = None
        self._target_column = 0

        self._column_alpha = 0.05
        self._column_bonferroni = True
        self._partition_alpha = 0.05
        self._partition_bonferroni = False

        self._row_mask: tuple[int, ...] | None = None
        self._row_mask_size = 0
        self._col_mask: tuple[int, ...] | None = None
        self._col_mask_size = 0

        self._skip_empty = True

        self._column_found = False
        self._best_column = 0
        self._best_p_value = 1.0
        self._best_chi_square = 0.0
        self._best_df = 0

        self._partition_found = False
        self._partition_p_value = 1.0
        self._partition_chi_square = 0.0
        self._partition_df = 0
        self._partition0: list[int] = []
        self._partition1: list[int] = []

    def _reset(self, *, column: bool = True) -> None:
        if column:
            self._column_found = False
        self._partition_found = False

    def load(self, table: CategoricalTable | str | os.PathLike[str]) -> None:
        """Use ``table``, or read it from a CSV file when given a path."""
        if not isinstance(table, CategoricalTable):
            table = CategoricalTable.from_csv(table)
        self._table = table
        self._reset()

    def set_target_column(self, column: int) -> None:
        self._target_column = column
        self._reset()

    def set_column_alpha(self, alpha: float, apply_bonferroni: bool) -> None:
        self._column_alpha = alpha
        self._column_bonferroni = apply_bonferroni
        self._reset()

    def set_partition_alpha(self, alpha: float, apply_bonferroni: bool) -> None:
        self._partition_alpha = alpha
        self._partition_bonferroni = apply_bonferroni
        self._reset(column=False)

    def set_skip_empty_values(self, skip: bool) -> None:
        self._skip_empty = skip
        self._reset()

    def enabled_rows(self, bitmask: Sequence[int] | None, size_in_bits: int) -> None:
        """Only rows whose bit is set take part; ``None`` enables every row."""
        self._row_mask = None if bitmask is None else tuple(bitmask)
        self._row_mask_size = size_in_bits
        self._reset()

    def enabled_columns(self, bitmask: Sequence[int] | None, size_in_bits: int) -> None:
        """Columns whose bit is set are the candidates tested against the target."""
        self._col_mask = None if bitmask is None else tuple(bitmask)
        self._col_mask_size = size_in_bits
        self._reset()

    def _require_table(self) -> CategoricalTable:
        if self._table is None:
            raise RuntimeError("No data loaded. Call load() first.")
        return self._table

    def _contingency(self, table: CategoricalTable, column: int) -> ContingencyTable:
        ct = ContingencyTable(table, rng=self._rng)
        ct.set_first_column(self._target_column)
        ct.set_second_column(column)
        ct.set_skip_empty_values(self._skip_empty)
        if self._row_mask is not None:
            ct.set_row_filter(self._row_mask, self._row_mask_size)
        ct.build()
        return ct

    def find_significant_column(self) -> None:
        """Find the enabled column with the lowest p-value and test it."""
        table = self._require_table()
        if self._col_mask is None:
            raise RuntimeError("Column mask not set. Call enabled_columns() first.")

        num_tests = count_set_bits(self._col_mask, self._col_mask_size)
        if num_tests == 0:
            self._reset()
            return

        effective_alpha = compute_effective_alpha(
            self._column_alpha, self._column_bonferroni, num_tests
        )

        self._reset()
        self._best_p_value = 1.0
        self._best_chi_square = 0.0
        self._best_df = 0
        self._best_column = 0

        enabled = (
            col for col in range(self._col_mask_size) if is_bit_set(self._col_mask, col)
        )
        for col in enabled:
            ct = self._contingency(table, col)
            p_value = ct.p_value()
            if p_value < self._best_p_value:
                self._best_p_value = p_value
                self._best_chi_square = ct.test_statistic()
                self._best_df = ct.degrees_of_freedom()
                self._best_column = col

        if self._best_p_value >= effective_alpha:
            return
        self._column_found = True

        best_table = self._contingency(table, self._best_column)
        partition_alpha = compute_effective_alpha(
            self._partition_alpha, self._partition_bonferroni, 1
        )
        partition = best_table.find_optimal_partition(partition_alpha)
        if partition is not None:
            self._partition_found = True
            self._partition0 = list(partition.partition0)
            self._partition1 = list(partition.partition1)
            self._partition_chi_square = partition.chi_square
            self._partition_p_value = partition.p_value
            self._partition_df = partition.degrees_of_freedom

    def row_count(self) -> int:
        """Rows in the loaded table, the header row included."""
        return self._require_table().row_count()

    def column_count(self) -> int:
        return self._require_table().column_count()

    def column_header(self, column: int) -> str:
        return self._require_table().column_header(column)

    def _ensure_column_found(self) -> None:
        if not self._column_found:
            raise NoResultError(
                "No significant column found. Check significant_column_found() first."
            )

    def _ensure_partition_found(self) -> None:
        if not self._partition_found:
            raise NoResultError(
                "No significant partition found. Check significant_partition_found() first."
            )

    def significant_column_found(self) -> bool:
        return self._column_found

    def significant_column_index(self) -> int:
        self._ensure_column_found()
        return self._best_column

    def column_p_value(self) -> float:
        self._ensure_column_found()
        return self._best_p_value

    def column_degrees_of_freedom(self) -> int:
        self._ensure_column_found()
        return self._best_df

    def column_test_statistic(self) -> float:
        self._ensure_column_found()
        return self._best_chi_square

    def significant_partition_found(self) -> bool:
        return self._partition_found

    def partition_p_value(self) -> float:
        self._ensure_partition_found()
        return self._partition_p_value

    def partition_degrees_of_freedom(self) -> int:
        self._ensure_partition_found()
        return self._partition_df

    def partition_test_statistic(self) -> float:
        self._ensure_partition_found()
        return self._partition_chi_square

    def first_partition(self) -> list[int]:
        self._ensure_partition_found()
        return list(self._partition0)

    def second_partition(self) -> list[int]:
        self._ensure_partition_found()
        return list(self._partition1)