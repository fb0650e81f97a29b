# contab

`contab` analyses categorical data stored in CSV files. It can:

- build a two-way contingency table for any two columns and compute Pearson's
  chi-square statistic, its degrees of freedom and an approximate p-value
  (Wilson–Hilferty transform with a normal upper tail);
- search for a two-way grouping of the second column's categories that gives
  the strongest association with the first column. The search is greedy with
  random restarts, and the significance threshold is Bonferroni-corrected by
  `2 ** number_of_categories`;
- choose, from a set of candidate columns, the one most strongly associated
  with a target column. The column threshold can take a Bonferroni correction,
  and the partition search then runs on the column that was chosen.

The package needs only the standard library.

## Installation

```
pip install .
```

To install with the test dependencies:

```
pip install ".[test]"
```

## Loading data

`CategoricalTable` (in `contab.table`) reads a CSV file whose first line is the
header. Blank lines are skipped. Each column gives its distinct values the
codes 1, 2, ... in the order they first appear, and an empty cell always gets
code `0`. A row shorter than the header is padded with empty cells; a row
longer than the header raises `ValueError`. Row 0 is the header, so data rows
are numbered from 1 and `row_count()` includes the header row.

```python
from contab.table import CategoricalTable

table = CategoricalTable.from_csv("titanic.csv")
print(table.row_count(), table.column_count())
print(table.column_header(1), table.column_index("Pclass"))

code = table.code(1, 2)          # code of row 1, column 2
print(table.value(2, code))      # back to the original text
```

A table can also be built in memory:

```python
table = CategoricalTable.from_rows(
    ["ID", "ColA", "ColB"],
    [["1", "X", "P"], ["2", "Y", "Q"]],
)
```

An out-of-range column or row raises `IndexError`. An unknown header name or
code raises `KeyError`.

## Contingency tables

```python
from contab.contingency import ContingencyTable

ct = ContingencyTable(table)
ct.set_first_column(1)           # an index or a header name
ct.set_second_column("Pclass")
ct.set_skip_empty_values(True)   # leave out rows with an empty cell (default)
ct.build()

print(ct.test_statistic(), ct.degrees_of_freedom(), ct.p_value())
```

Any setter marks the table as out of date, so call `build()` again after one is
used. Reading a result, or calling `find_optimal_partition`, before `build()`
raises `RuntimeError`. If either column has fewer than two observed
categories, the statistic and the degrees of freedom are 0 and the p-value
is 1.

### Row filters

A row filter is a sequence of 32-bit words. Bit `i` (the low bit of word 0 is
bit 0) switches row `i` on. Rows at or beyond `size_in_bits` are left out. Row 0
is the header and is never counted. Passing `None` includes every row. The
helpers in `contab.bitmask` build and read these masks:

```python
from contab.bitmask import full_mask, is_bit_set, count_set_bits

mask = full_mask(table.row_count())
mask[0] &= ~(1 << 1)             # leave out row 1
ct.set_row_filter(mask, table.row_count())
ct.build()
```

### Partition search

```python
import random

ct = ContingencyTable(table, rng=random.Random(7))   # seeded for repeatable runs
ct.set_first_column(1)
ct.set_second_column(2)
ct.build()

result = ct.find_optimal_partition(0.05)
if result is not None:
    print(result.partition0, result.partition1)
    print(result.chi_square, result.p_value, result.degrees_of_freedom)
    print(ct.partition_chi_square(), ct.partition_p_value(),
          ct.partition_degrees_of_freedom())
```

`find_optimal_partition` returns a `PartitionResult`, or `None` when no
grouping passes the corrected threshold. The partitions hold category codes of
the second column. Pass a code to `table.value(column, code)` to get its text.
Each restart starts from a random split, so the groups found can change from
run to run unless a seeded `random.Random` is passed as `rng`.

The standalone functions `chi_square_p_value(chi_sq, df)` and
`determine_restarts(num_features, adjusted_alpha)` are also available in
`contab.contingency`.

## Feature selection

```python
from contab.bitmask import full_mask
from contab.feature_selector import FeatureSelector, NoResultError

fs = FeatureSelector()
fs.load(table)                   # a CategoricalTable, or a path to a CSV file
fs.set_target_column(0)

fs.enabled_rows(full_mask(fs.row_count()), fs.row_count())
columns = full_mask(fs.column_count())
columns[0] &= ~1                 # the target is not a candidate
fs.enabled_columns(columns, fs.column_count())

fs.set_column_alpha(0.05, True)      # Bonferroni over the candidate columns
fs.set_partition_alpha(0.05, False)
fs.set_skip_empty_values(True)
fs.find_significant_column()

if fs.significant_column_found():
    col = fs.significant_column_index()
    print(col, fs.column_header(col), fs.column_test_statistic(),
          fs.column_degrees_of_freedom(), fs.column_p_value())
    if fs.significant_partition_found():
        print(fs.first_partition(), fs.second_partition(),
              fs.partition_test_statistic(), fs.partition_p_value(),
              fs.partition_degrees_of_freedom())
```

`find_significant_column` raises `RuntimeError` if no table is loaded or no
column mask is set. Reading a result when nothing significant was found raises
`NoResultError`, a subclass of `RuntimeError`.
`compute_effective_alpha(alpha, apply_bonferroni, num_tests)` returns the
threshold that will be used. `FeatureSelector(rng=...)` passes a
`random.Random` on to the partition search.

## Command line

The `contab` command runs the same analyses on a CSV file. Columns may be given
by index or by header name. Every subcommand takes `--seed N` to seed the
partition search.

```
contab contingency data.csv 1 2          # chi-square, df and p-value
contab partition data.csv 1 Pclass 0.05  # partition search; alpha defaults to 0.05
contab verify-rowfilter data.csv 1 2     # compare results with and without row 1
contab select data.csv                   # four fixed feature-selection runs
```

`select` runs four fixed analyses: column 0 against all other columns; column 1
against columns 2 and 3 (only when there are at least four columns); column 0
with rows 1–10 left out; and column 0 with a strict alpha of 0.001. Use

```
contab --help
```

to see every option. The exit status is 0 on success, 1 for a bad command line
and 2 when the analysis fails, for example on a missing file or an unknown
column.

## What it does not do

`contab` reads the whole CSV file into memory every time it is loaded. It does
not save parsed tables to disk, and it has no command that only converts or
caches a CSV file.