import csv
from datetime import date
from types import SimpleNamespace

import pytest

from adminlib import dialogs, grid
from adminlib.grid import SortableGrid, compare_values, prompt_export_csv, show_grid
from adminlib.logging_utils import error_records


def test_compare_numbers_numerically():
    assert compare_values("9", "10") == -1
    assert compare_values(10, "9.5") == 1
    assert compare_values("2", 2.0) == 0


def test_compare_text_case_insensitive():
    assert compare_values("apple", "Banana") == -1
    assert compare_values("ADM", "adm") == 0


def test_numbers_before_text_and_empty_last():
    assert compare_values("5", "abc") == -1
    assert compare_values("abc", "5") == 1
    assert compare_values("", "abc") == 1
    assert compare_values(None, "5") == 1
    assert compare_values("5", "  ") == -1
    assert compare_values(None, "") == 0


def test_compare_dates():
    assert compare_values(date(2024, 1, 2), date(2023, 12, 31)) == 1


def test_non_finite_and_underscore_numbers_are_text():
    assert compare_values("NaN", "1") == 1
    assert compare_values(float("nan"), 1) == 1
    assert compare_values("inf", "5") == 1
    assert compare_values("1_000", "5") == 1
    assert compare_values(" 1e3 ", "999") == 1


def test_nan_cell_does_not_break_numeric_sort():
    g = SortableGrid([{"c": "3"}, {"c": "NaN"}, {"c": "1"}, {"c": "2"}, {"c": "1_000"}, {"c": "inf"}])
    assert [r["c"] for r in g.sort_by("c")] == ["1", "2", "3", "1_000", "inf", "NaN"]


def _rows():
    return [
        {"Building": "104", "Department": "IT"},
        {"Building": "20", "Department": "bio"},
        {"Building": "010", "Department": "ADM"},
        {"Building": "", "Department": "HR"},
    ]


def test_sort_toggles_direction_on_same_column():
    g = SortableGrid(_rows())

    ascending = g.sort_by("Building")
    assert [r["Building"] for r in ascending] == ["010", "20", "104", ""]
    assert g.sort_column == "Building" and g.ascending

    descending = g.sort_by("Building")
    assert [r["Building"] for r in descending] == ["104", "20", "010", ""]
    assert not g.ascending


def test_new_column_resets_to_ascending():
    g = SortableGrid(_rows())
    g.sort_by("Building")
    g.sort_by("Building")

    rows = g.sort_by("Department")
    assert g.ascending
    assert [r["Department"] for r in rows] == ["ADM", "bio", "HR", "IT"]


def test_sort_is_stable_for_equal_values():
    rows = [{"k": "a", "n": 1}, {"k": "A", "n": 2}, {"k": "a", "n": 3}]
    g = SortableGrid(rows)
    assert [r["n"] for r in g.sort_by("k")] == [1, 2, 3]
    assert [r["n"] for r in g.sort_by("k")] == [1, 2, 3]


def test_sort_unknown_column():
    with pytest.raises(KeyError):
        SortableGrid(_rows()).sort_by("Owner")


def test_columns_and_cells():
    g = SortableGrid([{"a": 1}, {"b": None}])
    assert g.columns == ["a", "b"]
    assert g.cell({"a": 1}, "a") == "1"
    assert g.cell({"b": None}, "b") == ""
    assert g.cell({}, "a") == ""


def test_sorting_does_not_touch_caller_list():
    rows = _rows()
    SortableGrid(rows).sort_by("Department")
    assert rows[0]["Building"] == "104"


def test_show_grid_empty_rows_returns_nothing(monkeypatch):
    monkeypatch.setattr(dialogs, "run_window", lambda *a, **k: pytest.fail("no window for empty rows"))
    assert show_grid([], interactive=True) == []


def test_show_grid_non_interactive_skips_window(monkeypatch):
    monkeypatch.setattr(dialogs, "run_window", lambda *a, **k: pytest.fail("no window"))
    assert show_grid(_rows(), pass_thru=True, interactive=False) == []


def test_show_grid_returns_window_result(monkeypatch):
    picked = _rows()[:1]
    monkeypatch.setattr(dialogs, "run_window", lambda build, **kwargs: picked)
    assert show_grid(_rows(), pass_thru=True, interactive=True) == picked


def test_prompt_export_csv_writes_file(tmp_path, monkeypatch):
    target = tmp_path / "codes.csv"
    monkeypatch.setattr(dialogs, "save_file_dialog", lambda *a, **k: target)

    assert prompt_export_csv(_rows(), interactive=True) == target
    with open(target, newline="", encoding="utf-8") as fh:
        assert next(csv.reader(fh)) == ["Building", "Department"]


def test_prompt_export_csv_cancelled(monkeypatch):
    monkeypatch.setattr(dialogs, "save_file_dialog", lambda *a, **k: None)
    assert prompt_export_csv(_rows(), interactive=True) is None
    assert error_records() == []


def test_prompt_export_csv_failure_reported(tmp_path, monkeypatch):
    shown = []
    monkeypatch.setattr(dialogs, "save_file_dialog", lambda *a, **k: tmp_path)
    monkeypatch.setattr(dialogs, "show_message", lambda message, *a, **k: shown.append(message) or "OK")

    assert prompt_export_csv(_rows(), interactive=True) is None
    assert [r.tag for r in error_records()] == ["ExportFailed"]
    assert len(shown) == 1


def test_show_grid_selection_follows_row_position(monkeypatch):
    shared = {"Building": "010", "Department": "ADM"}
    rows = [shared, {"Building": "020", "Department": "BIO"}, shared]

    def fake_run_window(build, **kwargs):
        added, result = [], []
        page = SimpleNamespace(overlay=[], add=lambda *controls: added.extend(controls), update=lambda: None)
        build(page, result.append)

        layout = added[0]
        table = layout.controls[0].controls[0].controls[0]
        buttons = layout.controls[1].controls[1].controls
        table.rows[0].on_select_changed(SimpleNamespace(data="true"))
        assert [row.selected for row in table.rows] == [True, False, False]

        next(button for button in buttons if button.text == "OK").on_click(None)
        return result[0]

    monkeypatch.setattr(dialogs, "run_window", fake_run_window)

    chosen = show_grid(rows, pass_thru=True, interactive=True)
    assert len(chosen) == 1
    assert chosen[0] is shared
