from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import pytest

# Ensure src-layout imports work when running tests from repo checkout.
SRC_DIR = Path(__file__).resolve().parents[1] / "src"
sys.path.insert(0, str(SRC_DIR))

from tablekit.io.sheet import SheetBuffer  # noqa: E402
from tablekit.table.errors import (  # noqa: E402
    TableDataError,
    TableOperationError,
    TableStructureError,
)
from tablekit.table.render import TableRenderer, render_table  # noqa: E402
from tablekit.table.spec import (  # noqa: E402
    EnumBorderStyle,
    EnumMergeCondition,
    SpecBorders,
    SpecCellOptions,
    SpecColumn,
    SpecMergeRange,
    SpecMergeRules,
    SpecStyle,
    SpecTable,
)

_TUP_RECORDED = (
    "set_cell_value",
    "merge_cells",
    "apply_border_to_cell",
    "apply_borders_to_range",
    "apply_style_to_cell",
    "apply_style_to_range",
)


class RecordingOps:
    """Fake backend: records mutating calls and fails on chosen coordinates."""

    def __init__(self, *, fail_cells: set[tuple[int, int]] = frozenset(), **kwargs):
        self.inner = SheetBuffer(**kwargs)
        self.fail_cells = set(fail_cells)
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    def __getattr__(self, name: str) -> Any:
        target = getattr(self.inner, name)
        if name not in _TUP_RECORDED:
            return target

        def _record(*args: Any) -> Any:
            self.calls.append((name, args))
            if tuple(args[:2]) in self.fail_cells:
                raise TableOperationError(f"{name} refused at {args[:2]}")
            return target(*args)

        return _record

    def names(self) -> list[str]:
        # consecutive duplicates collapsed
        l_names: list[str] = []
        for _name, _ in self.calls:
            if not l_names or l_names[-1] != _name:
                l_names.append(_name)
        return l_names


class CollectingLogger:
    def __init__(self) -> None:
        self.debugs: list[str] = []
        self.warnings: list[str] = []

    def debug(self, msg: str) -> None:
        self.debugs.append(msg)

    def warning(self, msg: str) -> None:
        self.warnings.append(msg)


def _grouped_table(**kwargs: Any) -> SpecTable:
    return SpecTable(
        data=[
            {"a": "x", "b": 1, "c": "k"},
            {"a": "x", "b": 2, "c": "k"},
            {"a": "y", "b": 3},
        ],
        columns=(
            SpecColumn(
                label="Group",
                children=(
                    SpecColumn(
                        "a",
                        "A",
                        merge=SpecMergeRules(vertical=(EnumMergeCondition.IDENTICAL,)),
                        style=SpecStyle(bold=True),
                    ),
                    SpecColumn("b", "B"),
                ),
            ),
            SpecColumn(
                "c",
                "C",
                borders=SpecBorders.create_boundaries(EnumBorderStyle.THIN),
            ),
        ),
        **kwargs,
    )


def test_render_writes_header_and_body() -> None:
    buffer = SheetBuffer()
    report = render_table(_grouped_table(), buffer)

    assert buffer.get_cell_value(1, 1) == "Group"
    assert (2, 1) not in buffer.cells
    assert buffer.get_cell_value(3, 1) == "C"
    assert buffer.get_cell_value(1, 2) == "A"
    assert buffer.get_cell_value(2, 2) == "B"
    # first data row lands below the two header rows
    assert buffer.get_raw_value(1, 3) == "x"
    assert buffer.get_raw_value(2, 5) == 3
    # missing field is not written
    assert (3, 5) not in buffer.cells

    assert report.merges == [
        SpecMergeRange(1, 1, 2, 1),
        SpecMergeRange(3, 1, 3, 2),
        SpecMergeRange(1, 3, 1, 4),
    ]
    assert report.warnings == []


def test_backend_is_called_in_fixed_order() -> None:
    ops = RecordingOps()
    render_table(_grouped_table(), ops)

    assert ops.names() == [
        "set_cell_value",
        "merge_cells",
        "apply_style_to_range",
        "apply_style_to_cell",
        "apply_border_to_cell",
    ]


def test_failures_are_logged_and_rendering_continues() -> None:
    ops = RecordingOps(fail_cells={(1, 3), (3, 4)})
    logger = CollectingLogger()
    report = TableRenderer(ops, logger=logger).render(_grouped_table())

    # the failing merge at A3 and the failing writes do not stop the rest
    assert ops.inner.get_raw_value(1, 4) == "x"
    assert ops.inner.get_raw_value(2, 3) == 1
    assert SpecMergeRange(3, 1, 3, 2) in report.merges
    assert SpecMergeRange(1, 3, 1, 4) not in report.merges
    assert report.warnings
    assert logger.warnings == report.warnings
    assert logger.debugs


def test_write_header_false_starts_data_on_first_row() -> None:
    buffer = SheetBuffer()
    render_table(_grouped_table(write_header=False), buffer)

    assert buffer.get_raw_value(1, 1) == "x"
    assert buffer.merges == (SpecMergeRange(1, 1, 1, 2),)


def test_limit_caps_rendered_rows() -> None:
    buffer = SheetBuffer()
    render_table(_grouped_table(limit=1), buffer)

    assert buffer.get_raw_value(1, 3) == "x"
    assert (1, 4) not in buffer.cells
    assert buffer.count_extent() == (3, 3)


def test_values_go_through_process_value() -> None:
    buffer = SheetBuffer(list_separator=" / ")
    table = SpecTable(
        data=[{"tags": ["a", "b"], "n": None}],
        columns=(SpecColumn("tags", "Tags"), SpecColumn("n", "N")),
    )
    render_table(table, buffer)

    assert buffer.get_raw_value(1, 2) == "a / b"
    assert (2, 2) in buffer.cells
    assert buffer.get_cell_value(2, 2) == ""


@pytest.mark.parametrize(
    "table",
    [
        None,
        SpecTable(data=[{"a": 1}], columns=()),
        SpecTable(data=[{"a": 1}], columns=(SpecColumn("a"),), limit=-1),
    ],
)
def test_invalid_tables_raise(table: SpecTable | None) -> None:
    with pytest.raises(TableStructureError):
        render_table(table, SheetBuffer())


def test_validate_returns_the_checked_table() -> None:
    table = SpecTable(data=[{"a": 1}], columns=(SpecColumn("a"),))
    assert TableRenderer._validate(table) is table


def test_unprocessable_value_raises_data_error() -> None:
    class _StrictBuffer(SheetBuffer):
        def process_value(self, value: Any, format: str) -> Any:
            raise ValueError("bad format")

    table = SpecTable(data=[{"a": 1}], columns=(SpecColumn("a", "A"),))
    with pytest.raises(TableDataError, match="column 'a'"):
        render_table(table, _StrictBuffer())


def test_cell_options_do_not_leak_to_other_cells() -> None:
    buffer = SheetBuffer()
    table = _grouped_table(
        cell_options={(1, 0): SpecCellOptions(style=SpecStyle(italic=True))}
    )
    render_table(table, buffer)

    assert buffer.styles[(2, 3)] == SpecStyle(italic=True)
    assert (2, 4) not in buffer.styles
    assert buffer.styles[(1, 3)] == SpecStyle(bold=True)
