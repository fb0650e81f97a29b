import json

import pytest

from contab.cli import main


def _titanic_csv() -> str:
    lines = ["ID,Survived,Pclass"]
    groups = [("No", "3", 26), ("No", "2", 4), ("No", "1", 4),
              ("Yes", "3", 10), ("Yes", "2", 7), ("Yes", "1", 9)]
    n = 1
    for survived, pclass, count in groups:
        for _ in range(count):
            lines.append(f"{n},{survived},{pclass}")
            n += 1
    return "\n".join(lines) + "\n"


def _features_csv() -> str:
    lines = ["target,feature1,feature2,feature3"]
    for i in range(100):
        lines.append(
            ",".join([
                "A" if i < 50 else "B",
                "X" if i % 2 == 0 else "Y",
                "P" if i < 50 else "Q",
                "M" if i % 3 == 0 else "N",
            ])
        )
    return "\n".join(lines) + "\n"


@pytest.fixture
def titanic(tmp_path):
    path = tmp_path / "titanic.csv"
    path.write_text(_titanic_csv())
    return str(path)


@pytest.fixture
def features(tmp_path):
    path = tmp_path / "features.csv"
    path.write_text(_features_csv())
    return str(path)


def _value_after(text: str, label: str) -> str:
    for line in text.splitlines():
        if line.startswith(label):
            return line[len(label):].strip()
    raise AssertionError(f"no line starting with {label!r}")


def test_contingency_known_table(titanic, capsys):
    assert main(["contingency", titanic, "1", "2"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("Loaded DataTable: 61 rows, 3 columns\n\n")
    assert float(_value_after(out, "Chi-square statistic:")) == pytest.approx(8.944720, abs=1e-3)
    assert _value_after(out, "Degrees of freedom:") == "2"
    assert float(_value_after(out, "P-value:")) == pytest.approx(0.0114, abs=0.01)


def test_contingency_by_header_names(titanic, capsys):
    assert main(["contingency", titanic, "Survived", "Pclass"]) == 0
    out = capsys.readouterr().out
    assert float(_value_after(out, "Chi-square statistic:")) == pytest.approx(8.944720, abs=1e-3)


def test_contingency_perfect_independence(tmp_path, capsys):
    path = tmp_path / "perfect.csv"
    rows = ["ID,ColA,ColB"] + [f"{i},X,P" for i in range(1, 5)] + [f"{i},Y,Q" for i in range(5, 9)]
    path.write_text("\n".join(rows) + "\n")
    assert main(["contingency", str(path), "1", "2"]) == 0
    out = capsys.readouterr().out
    assert float(_value_after(out, "Chi-square statistic:")) == pytest.approx(8.0)
    assert _value_after(out, "Degrees of freedom:") == "1"


def test_partition_json_output(titanic, capsys):
    assert main(["partition", titanic, "1", "2", "0.05", "--seed", "3"]) == 0
    out = capsys.readouterr().out
    assert "Partition FOUND and is significant!" in out
    data = json.loads(out.split("=== JSON OUTPUT ===\n", 1)[1])
    assert data["df"] == 1
    assert data["p_value"] < 0.05
    assert data["chi_square"] > 0.0
    assert data["partition0"] and data["partition1"]
    assert sorted(data["partition0"] + data["partition1"]) == [1, 2, 3]


def test_partition_original_table_fixed_format(titanic, capsys):
    assert main(["partition", titanic, "1", "2", "--seed", "1"]) == 0
    out = capsys.readouterr().out
    chi = _value_after(out, "Chi-square:")
    assert len(chi.split(".")[1]) == 6
    assert float(chi) == pytest.approx(8.944720, abs=1e-3)


def test_verify_rowfilter_excluding_row_lowers_chi_square(titanic, capsys):
    assert main(["verify-rowfilter", titanic, "1", "2"]) == 0
    out = capsys.readouterr().out
    assert "Column 1: Survived" in out
    assert "Column 2: Pclass" in out
    chis = [float(line.split(":", 1)[1]) for line in out.splitlines() if line.startswith("Chi-Square:")]
    assert len(chis) == 2
    assert chis[1] < chis[0]
    diff = float(_value_after(out, "Difference in Chi-Square:"))
    assert diff == pytest.approx(chis[0] - chis[1], abs=1e-5)


def test_select_finds_strong_feature(features, capsys):
    assert main(["select", features, "--seed", "7"]) == 0
    out = capsys.readouterr().out
    assert "Total rows: 101" in out
    assert "Total columns: 4" in out
    assert _value_after(out, "  Column index:") == "2"
    assert _value_after(out, "  Column header:") == "feature2"
    example4 = out.split("Example 4", 1)[1]
    assert "✓ Best feature: Column 2 (feature2)" in example4


def test_select_skips_example_two_for_narrow_table(titanic, capsys):
    assert main(["select", titanic, "--seed", "2"]) == 0
    out = capsys.readouterr().out
    assert "(Dataset has fewer than 4 columns; skipping example 2)" in out
    assert "Testing on rows 11-61" in out


def test_missing_arguments_is_usage_error(titanic, capsys):
    assert main(["contingency", titanic]) == 1
    assert "usage" in capsys.readouterr().err


def test_no_command_is_usage_error(capsys):
    assert main([]) == 1
    assert "usage" in capsys.readouterr().err


def test_missing_file_reports_error(tmp_path, capsys):
    assert main(["contingency", str(tmp_path / "absent.csv"), "1", "2"]) == 2
    assert capsys.readouterr().err.startswith("Error:")


def test_column_out_of_range_reports_error(titanic, capsys):
    assert main(["contingency", titanic, "1", "9"]) == 2
    assert capsys.readouterr().err.startswith("Error:")


def test_unknown_header_reports_error(titanic, capsys):
    assert main(["verify-rowfilter", titanic, "Survived", "Nope"]) == 2
    assert "Nope" in capsys.readouterr().err