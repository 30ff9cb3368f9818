from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure src-layout imports work when running tests from repo checkout.
SRC_DIR = Path(__file__).resolve().parents[1] / "src"
sys.path.insert(0, str(SRC_DIR))

from tablekit.table.columns import (  # noqa: E402
    build_header_grid,
    convert_data_index_to_sheet_row,
    convert_sheet_row_to_data_index,
    count_header_rows,
    count_max_depth,
    count_total_leaves,
    derive_data_start_row,
    flatten_columns,
)
from tablekit.table.errors import TableStructureError  # noqa: E402
from tablekit.table.spec import SpecColumn  # noqa: E402


def _leaf(name: str) -> SpecColumn:
    return SpecColumn(name=name, label=name.upper())


def _two_level() -> list[SpecColumn]:
    return [
        SpecColumn(label="Group", children=(_leaf("a"), _leaf("b"))),
        _leaf("c"),
    ]


def _three_level() -> list[SpecColumn]:
    return [
        SpecColumn(
            label="G1",
            children=(
                SpecColumn(label="G2", children=(_leaf("a"), _leaf("b"))),
                _leaf("c"),
            ),
        ),
        _leaf("d"),
    ]


def test_max_depth_of_flat_list_is_one() -> None:
    assert count_max_depth([_leaf("a"), _leaf("b")]) == 1
    assert count_max_depth([]) == 1


def test_each_nesting_level_adds_one_to_depth() -> None:
    assert count_max_depth(_two_level()) == 2
    assert count_max_depth(_three_level()) == 3

    cfg_deeper = SpecColumn(label="Top", children=tuple(_three_level()))
    assert count_max_depth([cfg_deeper]) == 4


def test_flatten_keeps_leaf_order_and_is_idempotent() -> None:
    tup_leaves = flatten_columns(_three_level())
    assert [_c.name for _c in tup_leaves] == ["a", "b", "c", "d"]
    assert flatten_columns(tup_leaves) == tup_leaves


def test_leaf_counts() -> None:
    assert count_total_leaves(_two_level()) == 3
    assert count_total_leaves(_three_level()) == 4
    assert _two_level()[0].count_leaves() == 2
    assert _leaf("x").count_leaves() == 1


def test_header_rows_and_data_start_row() -> None:
    assert count_header_rows(_two_level(), write_header=True) == 2
    assert count_header_rows(_two_level(), write_header=False) == 0
    assert derive_data_start_row([_leaf("a")], write_header=True) == 2
    assert derive_data_start_row(_three_level(), write_header=True) == 4
    assert derive_data_start_row(_three_level(), write_header=False) == 1


def test_row_conversions_round_trip_through_header_offset() -> None:
    l_columns = _two_level()
    assert convert_data_index_to_sheet_row(0, l_columns, write_header=True) == 3
    assert convert_sheet_row_to_data_index(3, l_columns, write_header=True) == 0
    assert convert_sheet_row_to_data_index(1, l_columns, write_header=False) == 0
    assert convert_sheet_row_to_data_index(5, l_columns, write_header=False) == 4


def test_header_row_is_not_a_data_row() -> None:
    with pytest.raises(TableStructureError):
        convert_sheet_row_to_data_index(2, _two_level(), write_header=True)
    with pytest.raises(TableStructureError):
        convert_sheet_row_to_data_index(0, _two_level(), write_header=False)


def test_header_grid_two_levels() -> None:
    assert build_header_grid(_two_level()) == [
        ["Group", "", "C"],
        ["A", "B", ""],
    ]


def test_header_grid_three_levels() -> None:
    assert build_header_grid(_three_level()) == [
        ["G1", "", "", "D"],
        ["G2", "", "C", ""],
        ["A", "B", "", ""],
    ]


def test_column_children_helpers() -> None:
    cfg_group = SpecColumn(label="Group").add_child(_leaf("a")).add_child(_leaf("b"))
    assert cfg_group.has_children()
    assert cfg_group.count_leaves() == 2

    cfg_group = cfg_group.remove_child("a")
    assert [_c.name for _c in cfg_group.children] == ["b"]
    assert not cfg_group.with_children([]).has_children()
