"""Command-line front end: contingency tests, partition search and feature selection."""

from __future__ import annotations

import argparse
import random
import sys
from collections.abc import Sequence
from typing import TextIO

from contab.bitmask import full_mask
from contab.contingency import ContingencyTable
from contab.feature_selector import FeatureSelector
from contab.table import CategoricalTable

_RULE = "=" * 79


class _UsageError(Exception):
    """Raised instead of exiting when the command line cannot be parsed."""


class _Parser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        raise _UsageError(f"{self.format_usage()}{self.prog}: error: {message}")


def _column_arg(text: str) -> int | str:
    """A column given by index or by header."""
    return int(text) if text.isdigit() else text


def _resolve(table: CategoricalTable, column: int | str) -> int:
    if isinstance(column, str):
        return table.column_index(column)
    table.column_header(column)
    return column


def _build(
    table: CategoricalTable,
    first: int,
    second: int,
    rng: random.Random,
    row_mask: list[int] | None = None,
) -> ContingencyTable:
    ct = ContingencyTable(table, rng=rng)
    ct.set_first_column(first)
    ct.set_second_column(second)
    ct.set_skip_empty_values(True)
    if row_mask is not None:
        ct.set_row_filter(row_mask, table.row_count())
    ct.build()
    return ct


def _loaded_line(table: CategoricalTable) -> str:
    return f"Loaded DataTable: {table.row_count()} rows, {table.column_count()} columns"


def _run_contingency(args: argparse.Namespace, out: TextIO) -> None:
    table = CategoricalTable.from_csv(args.csv)
    print(_loaded_line(table) + "\n", file=out)
    first = _resolve(table, args.col1)
    second = _resolve(table, args.col2)
    ct = _build(table, first, second, random.Random(args.seed))
    print(f"Chi-square statistic: {ct.test_statistic():g}", file=out)
    print(f"Degrees of freedom:   {ct.degrees_of_freedom()}", file=out)
    print(f"P-value:              {ct.p_value():g}", file=out)


def _run_partition(args: argparse.Namespace, out: TextIO) -> None:
    table = CategoricalTable.from_csv(args.csv)
    print(_loaded_line(table), file=out)
    first = _resolve(table, args.col1)
    second = _resolve(table, args.col2)
    ct = _build(table, first, second, random.Random(args.seed))

    print("\n=== ORIGINAL CONTINGENCY TABLE ===", file=out)
    print(f"Chi-square: {ct.test_statistic():.6f}", file=out)
    print(f"P-value:    {ct.p_value():.6f}", file=out)
    print(f"DF:         {ct.degrees_of_freedom()}", file=out)

    print("\n=== SEARCHING FOR OPTIMAL PARTITION ===", file=out)
    partition = ct.find_optimal_partition(args.alpha)
    if partition is None:
        print(f"No significant partition found at alpha = {args.alpha:.6f}", file=out)
        return

    def codes(group: list[int]) -> str:
        return "".join(f"{code} " for code in group)

    def values(group: list[int]) -> str:
        return "".join(f"'{table.value(second, code)}' " for code in group)

    print("Partition FOUND and is significant!", file=out)
    print(f"\nPartition 0 features: {codes(partition.partition0)}", file=out)
    print(f"Partition 1 features: {codes(partition.partition1)}", file=out)
    print("=== PARTITION CONTINGENCY TABLE ===", file=out)
    print(f"Chi-square: {ct.partition_chi_square():.6f}", file=out)
    print(f"P-value:    {ct.partition_p_value():.6f}", file=out)
    print(f"DF:         {ct.partition_degrees_of_freedom()}", file=out)

    print("\nDebug - Partition contents:", file=out)
    print(f"  Partition 0 (feature values): {values(partition.partition0)}", file=out)
    print(f"  Partition 1 (feature values): {values(partition.partition1)}", file=out)

    print("\nManual verification of chi-square:", file=out)
    print(f"  Partition 0 features: {codes(partition.partition0)}", file=out)
    print(f"  Partition 1 features: {codes(partition.partition1)}", file=out)

    print("\n=== JSON OUTPUT ===", file=out)
    print("{", file=out)
    print(f'  "partition0": [{", ".join(map(str, partition.partition0))}],', file=out)
    print(f'  "partition1": [{", ".join(map(str, partition.partition1))}],', file=out)
    print(f'  "chi_square": {ct.partition_chi_square():.6f},', file=out)
    print(f'  "p_value": {ct.partition_p_value():.9f},', file=out)
    print(f'  "df": {ct.partition_degrees_of_freedom()}', file=out)
    print("}", file=out)


def _run_verify_rowfilter(args: argparse.Namespace, out: TextIO) -> None:
    table = CategoricalTable.from_csv(args.csv)
    first = _resolve(table, args.col1)
    second = _resolve(table, args.col2)
    print(_loaded_line(table), file=out)
    print(f"Column 1: {table.column_header(first)}", file=out)
    print(f"Column 2: {table.column_header(second)}\n", file=out)
    rng = random.Random(args.seed)

    print(_RULE, file=out)
    print("TEST 1: WITHOUT Row Filter (All Rows Active)", file=out)
    print(_RULE, file=out)
    unfiltered = _build(table, first, second, rng)
    print(f"Chi-Square: {unfiltered.test_statistic():.6f}", file=out)
    print(f"P-Value:    {unfiltered.p_value():.6f}", file=out)
    print(f"DF:         {unfiltered.degrees_of_freedom()}\n", file=out)

    print(_RULE, file=out)
    print("TEST 2: WITH Row Filter (Exclude row 1)", file=out)
    print(_RULE, file=out)
    mask = full_mask(table.row_count())
    mask[0] &= ~(1 << 1)
    print("Bitmask: Bit 0 (header) and Bit 1 (row 1) will be skipped\n", file=out)
    filtered = _build(table, first, second, rng, row_mask=mask)
    print(f"Chi-Square: {filtered.test_statistic():.6f}", file=out)
    print(f"P-Value:    {filtered.p_value():.6f}", file=out)
    print(f"DF:         {filtered.degrees_of_freedom()}\n", file=out)

    print(_RULE, file=out)
    print("VERIFICATION SUMMARY", file=out)
    print(_RULE, file=out)
    print("✓ WITHOUT row filter:", file=out)
    print("  - All data rows are active (header row 0 is automatically skipped)", file=out)
    print(f"  - Chi-Square: {unfiltered.test_statistic():.6f}\n", file=out)
    print("✓ WITH row filter (excluding row 1):", file=out)
    print("  - Only rows with bitmask bit set to 1 are included", file=out)
    print("  - Row 0 (header) is never included (iteration starts at row 1)", file=out)
    print(f"  - Chi-Square: {filtered.test_statistic():.6f}\n", file=out)
    difference = unfiltered.test_statistic() - filtered.test_statistic()
    print(f"Difference in Chi-Square: {difference:.6f}", file=out)
    print("(Should be non-zero since excluding a row changes the contingency table)", file=out)


def _report_best(fs: FeatureSelector, out: TextIO, missing: str) -> None:
    if fs.significant_column_found():
        index = fs.significant_column_index()
        print(f"✓ Best feature: Column {index} ({fs.column_header(index)})", file=out)
        print(f"  Chi-square: {fs.column_test_statistic():g}", file=out)
        print(f"  P-value: {fs.column_p_value():g}", file=out)
    else:
        print(missing, file=out)


def _run_select(args: argparse.Namespace, out: TextIO) -> None:
    table = CategoricalTable.from_csv(args.csv)
    rng = random.Random(args.seed)

    def selector() -> FeatureSelector:
        fs = FeatureSelector(rng=rng)
        fs.load(table)
        return fs

    print(f"Loaded DataTable from: {args.csv}", file=out)
    print(f"Total rows: {table.row_count()}", file=out)
    print(f"Total columns: {table.column_count()}\n", file=out)

    row_count = table.row_count()
    col_count = table.column_count()
    all_rows = full_mask(row_count)
    candidates = full_mask(col_count)
    candidates[0] &= ~1

    print("========== Example 1: Feature Selection ==========", file=out)
    print("Target: Column 0 (first column)", file=out)
    print("Candidates: All other columns\n", file=out)
    fs1 = selector()
    fs1.set_target_column(0)
    fs1.enabled_rows(all_rows, row_count)
    fs1.enabled_columns(candidates, col_count)
    fs1.set_column_alpha(0.05, True)
    fs1.set_partition_alpha(0.05, False)
    fs1.set_skip_empty_values(True)
    print("Searching for most significant feature...", file=out)
    fs1.find_significant_column()
    if fs1.significant_column_found():
        index = fs1.significant_column_index()
        print("✓ Significant feature FOUND!", file=out)
        print(f"  Column index: {index}", file=out)
        print(f"  Column header: {fs1.column_header(index)}", file=out)
        print(f"  Chi-square: {fs1.column_test_statistic():g}", file=out)
        print(f"  Degrees of freedom: {fs1.column_degrees_of_freedom()}", file=out)
        print(f"  P-value: {fs1.column_p_value():g}", file=out)
        if fs1.significant_partition_found():
            print("\n✓ Optimal partition FOUND!", file=out)
            print(f"  Partition 0 size: {len(fs1.first_partition())} features", file=out)
            print(f"  Partition 1 size: {len(fs1.second_partition())} features", file=out)
            print(f"  Partition chi-square: {fs1.partition_test_statistic():g}", file=out)
            print(f"  Partition p-value: {fs1.partition_p_value():g}", file=out)
            print(f"  Partition DF: {fs1.partition_degrees_of_freedom()}", file=out)
        else:
            print("\n✗ No significant partition found", file=out)
    else:
        print("✗ No significant feature found at alpha=0.05", file=out)

    print("\n========== Example 2: Select Specific Columns ==========", file=out)
    if col_count >= 4:
        fs2 = selector()
        fs2.set_target_column(1)
        fs2.enabled_rows(all_rows, row_count)
        limited = [0] * len(candidates)
        limited[0] |= (1 << 2) | (1 << 3)
        fs2.enabled_columns(limited, col_count)
        print(f"Target: Column 1 ({fs2.column_header(1)})", file=out)
        print(
            f"Candidates: Column 2 ({fs2.column_header(2)}), "
            f"Column 3 ({fs2.column_header(3)})\n",
            file=out,
        )
        fs2.set_column_alpha(0.05, True)
        fs2.set_partition_alpha(0.05, False)
        fs2.set_skip_empty_values(True)
        fs2.find_significant_column()
        _report_best(fs2, out, "✗ No significant feature found")
    else:
        print("(Dataset has fewer than 4 columns; skipping example 2)", file=out)

    print("\n========== Example 3: Row Filtering ==========", file=out)
    fs3 = selector()
    fs3.set_target_column(0)
    filtered_rows = full_mask(row_count)
    for row in range(1, min(11, row_count)):
        word, bit = divmod(row, 32)
        filtered_rows[word] &= ~(1 << bit)
    fs3.enabled_rows(filtered_rows, row_count)
    fs3.enabled_columns(candidates, col_count)
    print(f"Testing on rows 11-{row_count}", file=out)
    print("Target: Column 0", file=out)
    print("Candidates: All except column 0\n", file=out)
    fs3.set_column_alpha(0.05, True)
    fs3.set_partition_alpha(0.05, False)
    fs3.set_skip_empty_values(True)
    fs3.find_significant_column()
    _report_best(fs3, out, "✗ No significant feature found")

    print("\n========== Example 4: Strict Alpha (High Correction) ==========", file=out)
    fs4 = selector()
    fs4.set_target_column(0)
    fs4.enabled_rows(all_rows, row_count)
    fs4.enabled_columns(candidates, col_count)
    fs4.set_column_alpha(0.001, True)
    fs4.set_partition_alpha(0.05, False)
    fs4.set_skip_empty_values(True)
    print("Using strict alpha = 0.001 with Bonferroni correction", file=out)
    print("This makes it harder to find significant features\n", file=out)
    fs4.find_significant_column()
    _report_best(fs4, out, "✗ No significant feature found at alpha=0.001")

    print("\n========== Summary ==========", file=out)
    print("FeatureSelector successfully loaded and analyzed data.", file=out)
    print("Key features:", file=out)
    print("  • Bonferroni correction for multiple testing", file=out)
    print("  • Row filtering via bitmask", file=out)
    print("  • Column filtering via bitmask", file=out)
    print("  • Configurable alpha levels", file=out)
    print("  • Automatic partition search for significant features", file=out)


def _parser() -> _Parser:
    parser = _Parser(prog="contab", description="Chi-square tests on categorical CSV data.")
    commands = parser.add_subparsers(dest="command", required=True)

    def add(name: str, handler, help_text: str) -> argparse.ArgumentParser:
        sub = commands.add_parser(name, help=help_text)
        sub.add_argument("csv", help="CSV file whose first line is the header")
        sub.add_argument("--seed", type=int, default=None, help="seed for the partition search")
        sub.set_defaults(handler=handler)
        return sub

    def add_columns(sub: argparse.ArgumentParser) -> None:
        sub.add_argument("col1", type=_column_arg, help="first column, index or header")
        sub.add_argument("col2", type=_column_arg, help="second column, index or header")

    add_columns(add("contingency", _run_contingency, "test two columns for independence"))
    partition = add("partition", _run_partition, "split the second column's values in two")
    add_columns(partition)
    partition.add_argument("alpha", type=float, nargs="?", default=0.05)
    add_columns(add("verify-rowfilter", _run_verify_rowfilter, "compare with and without a row filter"))
    add("select", _run_select, "run feature selection examples on a table")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line; returns 0 on success, 1 on bad usage, 2 on error."""
    try:
        args = _parser().parse_args(argv)
    except _UsageError as exc:
        print(exc, file=sys.stderr)
        return 1
    try:
        args.handler(args, sys.stdout)
    except (OSError, ValueError, IndexError, KeyError, RuntimeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())