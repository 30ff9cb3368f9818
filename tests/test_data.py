from __future__ import annotations

import sys
from datetime import date, datetime, timedelta, timezone
from pathlib import Path

import pytest

# Ensure src-layout imports work when running tests from repo checkout.
SRC_DIR = Path(__file__).resolve().parents[1] / "src"
sys.path.insert(0, str(SRC_DIR))

from tablekit.table.data import lookup_value, sort_rows_by_time  # noqa: E402
from tablekit.table.errors import TableDataError  # noqa: E402
from tablekit.table.spec import SpecColumn, SpecTable  # noqa: E402


def test_lookup_value_found_and_missing() -> None:
    dict_row = {"a": 1, "nested": {"b": None}}

    assert lookup_value(dict_row, "a") == (1, True)
    assert lookup_value(dict_row, " a ") == (1, True)
    assert lookup_value(dict_row, "nested", "b") == (None, True)
    assert lookup_value(dict_row, "missing") == (None, False)
    assert lookup_value(dict_row, "nested", "missing") == (None, False)


def test_lookup_value_rejects_bad_input() -> None:
    with pytest.raises(ValueError):
        lookup_value({"a": 1})
    with pytest.raises(TableDataError, match="at key 'a': expected a mapping"):
        lookup_value({"a": 1}, "a", "b")


def test_lookup_value_names_the_row_when_it_is_not_a_mapping() -> None:
    with pytest.raises(TableDataError, match="at row: expected a mapping, got list"):
        lookup_value(["x"], "a", "b")  # type: ignore[arg-type]


def test_sort_rows_by_time_orders_and_keeps_untimed_rows_last() -> None:
    l_rows = [
        {"id": 1, "t": datetime(2024, 3, 1)},
        {"id": 2, "t": None},
        {"id": 3, "t": date(2024, 1, 1)},
        {"id": 4, "t": datetime(2024, 3, 1)},
        {"id": 5},
        {"id": 6, "t": datetime(2024, 2, 1, 12)},
    ]
    l_sorted = sort_rows_by_time(l_rows, "t")

    assert [_r["id"] for _r in l_sorted] == [3, 6, 1, 4, 2, 5]
    # input untouched
    assert [_r["id"] for _r in l_rows] == [1, 2, 3, 4, 5, 6]


def test_sort_rows_by_time_mixes_aware_and_naive_values() -> None:
    cfg_tz = timezone(timedelta(hours=2))
    l_rows = [
        {"id": "naive", "t": datetime(2024, 1, 1, 11, 0)},
        # 12:00 at UTC+2 is 10:00 UTC
        {"id": "aware", "t": datetime(2024, 1, 1, 12, 0, tzinfo=cfg_tz)},
    ]
    assert [_r["id"] for _r in sort_rows_by_time(l_rows, "t")] == ["aware", "naive"]


def test_table_from_frame() -> None:
    pl = pytest.importorskip("polars")

    df = pl.DataFrame({"a": [1, 2], "b": ["x", None]})
    table = SpecTable.from_frame(df, limit=1)

    assert [_c.name for _c in table.columns] == ["a", "b"]
    assert [_c.label for _c in table.columns] == ["a", "b"]
    assert list(table.data) == [{"a": 1, "b": "x"}, {"a": 2, "b": None}]
    assert table.count_rows() == 1

    table_custom = SpecTable.from_frame(df, columns=[SpecColumn("b", "B")])
    assert [_c.label for _c in table_custom.columns] == ["B"]


def test_frame_duplicate_column_names_are_rejected() -> None:
    pytest.importorskip("polars")
    from tablekit.table.frame import validate_unique_columns

    class _FakeFrame:
        columns = ["a", "b", "a"]

    with pytest.raises(TableDataError, match=r"'a' x2 at indices \[0, 2\]"):
        validate_unique_columns(_FakeFrame())  # type: ignore[arg-type]
