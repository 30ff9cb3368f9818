from __future__ import annotations

import sys
from pathlib import Path

# Ensure src-layout imports work when running tests from repo checkout.
SRC_DIR = Path(__file__).resolve().parents[1] / "src"
sys.path.insert(0, str(SRC_DIR))

from tablekit.io.sheet import SheetBuffer  # noqa: E402
from tablekit.table.conf import DEFAULT_HEADER_STYLE  # noqa: E402
from tablekit.table.errors import TableOperationError  # noqa: E402
from tablekit.table.spec import (  # noqa: E402
    EnumBorderSide,
    EnumBorderStyle,
    SpecBorder,
    SpecBorders,
    SpecCellOptions,
    SpecColumn,
    SpecRenderReport,
    SpecRowOptions,
    SpecStyle,
    SpecTable,
)
from tablekit.table.style import (  # noqa: E402
    derive_span_cell_borders,
    render_styles,
    resolve_cell_style,
)

STYLE_COLUMN = SpecStyle(text_color="#0000FF")
STYLE_ROW = SpecStyle(italic=True)
STYLE_CELL = SpecStyle(bold=True)


def _table(**kwargs) -> SpecTable:
    return SpecTable(
        data=[{"a": 1, "b": 2}, {"a": 3, "b": 4}, {"a": 5, "b": 6}],
        columns=(
            SpecColumn("a", "A", style=STYLE_COLUMN),
            SpecColumn("b", "B"),
        ),
        **kwargs,
    )


class _NoRangeStyleBuffer(SheetBuffer):
    def apply_style_to_range(self, *args, **kwargs) -> None:
        raise TableOperationError("ranges unsupported")


################################################################################
# #region Cascade


def test_row_style_beats_column_style() -> None:
    table = _table(row_options={1: SpecRowOptions(style=STYLE_ROW)})
    assert resolve_cell_style(table, 0, 1, table.columns[0]) == STYLE_ROW
    assert resolve_cell_style(table, 0, 0, table.columns[0]) == STYLE_COLUMN


def test_cell_style_beats_row_style() -> None:
    table = _table(
        row_options={1: SpecRowOptions(style=STYLE_ROW)},
        cell_options={(0, 1): SpecCellOptions(style=STYLE_CELL)},
    )
    assert resolve_cell_style(table, 0, 1, table.columns[0]) == STYLE_CELL
    assert resolve_cell_style(table, 1, 1, table.columns[1]) == STYLE_ROW


def test_no_style_anywhere() -> None:
    table = _table()
    assert resolve_cell_style(table, 1, 0, table.columns[1]) is None


def test_body_styles_written_per_cell() -> None:
    buffer = SheetBuffer()
    table = _table(row_options={2: SpecRowOptions(style=STYLE_ROW)})
    render_styles(table, buffer)

    assert buffer.styles[(1, 2)] == STYLE_COLUMN
    # row 2 of data sits on sheet row 4
    assert buffer.styles[(1, 4)] == STYLE_ROW
    assert buffer.styles[(2, 4)] == STYLE_ROW
    assert (2, 2) not in buffer.styles


# #endregion
################################################################################
# #region Header


def test_header_gets_default_style_and_bottom_border() -> None:
    buffer = SheetBuffer()
    render_styles(_table(), buffer)

    assert buffer.styles[(1, 1)] == DEFAULT_HEADER_STYLE
    assert buffer.styles[(2, 1)] == DEFAULT_HEADER_STYLE
    assert buffer.has_existing_border(1, 1, EnumBorderSide.BOTTOM)
    assert buffer.has_existing_border(2, 1, EnumBorderSide.BOTTOM)


def test_header_style_falls_back_to_cells() -> None:
    buffer = _NoRangeStyleBuffer()
    report = SpecRenderReport()
    render_styles(_table(), buffer, report=report)

    assert buffer.styles[(1, 1)] == DEFAULT_HEADER_STYLE
    assert buffer.styles[(2, 1)] == DEFAULT_HEADER_STYLE
    assert len(report.warnings) == 1


def test_no_header_styles_without_header() -> None:
    buffer = SheetBuffer()
    render_styles(_table(write_header=False), buffer)

    assert buffer.styles[(1, 1)] == STYLE_COLUMN
    assert not buffer.has_existing_border(1, 1, EnumBorderSide.BOTTOM)


# #endregion
################################################################################
# #region Borders


def test_span_borders_without_inner() -> None:
    cfg_borders = SpecBorders.create_boundaries(EnumBorderStyle.THIN)

    cfg_first = derive_span_cell_borders(
        cfg_borders, axis=EnumBorderSide.TOP, is_first=True, is_last=False
    )
    assert cfg_first.top == SpecBorder(EnumBorderStyle.THIN)
    assert cfg_first.bottom is None
    assert cfg_first.left == cfg_first.right == SpecBorder(EnumBorderStyle.THIN)

    cfg_middle = derive_span_cell_borders(
        cfg_borders, axis=EnumBorderSide.TOP, is_first=False, is_last=False
    )
    assert cfg_middle.top is None and cfg_middle.bottom is None

    cfg_single = derive_span_cell_borders(
        cfg_borders, axis=EnumBorderSide.LEFT, is_first=True, is_last=True
    )
    assert cfg_single == cfg_borders


def test_span_borders_with_inner() -> None:
    cfg_borders = SpecBorders.create_boundaries(EnumBorderStyle.MEDIUM).with_inner(
        EnumBorderStyle.DOTTED
    )
    cfg_middle = derive_span_cell_borders(
        cfg_borders, axis=EnumBorderSide.LEFT, is_first=False, is_last=False
    )
    cfg_medium = SpecBorder(EnumBorderStyle.MEDIUM)
    assert cfg_middle.left == cfg_middle.right == cfg_medium
    assert cfg_middle.top == cfg_middle.bottom == cfg_medium
    assert cfg_middle.inner is None


def test_column_with_inner_borders_boxes_every_cell() -> None:
    buffer = SheetBuffer()
    table = SpecTable(
        data=[{"a": 1}, {"a": 2}, {"a": 3}],
        columns=(
            SpecColumn(
                "a",
                "A",
                borders=SpecBorders.create_boundaries(EnumBorderStyle.THIN).with_inner(
                    EnumBorderStyle.DOUBLE
                ),
            ),
        ),
    )
    render_styles(table, buffer)

    cfg_thin = SpecBorder(EnumBorderStyle.THIN)
    for _row in (2, 3, 4):
        cfg_cell_ = buffer.get_cell_borders(1, _row)
        assert cfg_cell_.left == cfg_cell_.right == cfg_thin
        assert cfg_cell_.top == cfg_thin
    assert buffer.get_cell_borders(1, 3).bottom == cfg_thin
    assert buffer.get_cell_borders(1, 4).bottom == cfg_thin


def test_column_borders_outline_the_body() -> None:
    buffer = SheetBuffer()
    table = SpecTable(
        data=[{"a": 1}, {"a": 2}, {"a": 3}],
        columns=(
            SpecColumn(
                "a", "A", borders=SpecBorders.create_boundaries(EnumBorderStyle.MEDIUM)
            ),
        ),
    )
    render_styles(table, buffer)

    cfg_medium = SpecBorder(EnumBorderStyle.MEDIUM)
    assert buffer.get_cell_borders(1, 2).top == cfg_medium
    assert buffer.get_cell_borders(1, 3).top is None
    assert buffer.get_cell_borders(1, 3).bottom is None
    assert buffer.get_cell_borders(1, 4).bottom == cfg_medium
    assert all(buffer.get_cell_borders(1, _r).left == cfg_medium for _r in (2, 3, 4))


def test_later_border_layers_override_earlier_ones() -> None:
    table = SpecTable(
        data=[{"a": 1, "b": 2}, {"a": 3, "b": 4}],
        columns=(
            SpecColumn(
                "a", "A", borders=SpecBorders(left=SpecBorder(EnumBorderStyle.MEDIUM))
            ),
            SpecColumn("b", "B"),
        ),
        row_options={
            0: SpecRowOptions(border=SpecBorders(left=SpecBorder(EnumBorderStyle.THICK))),
            1: SpecRowOptions(border=SpecBorders(left=SpecBorder(EnumBorderStyle.THICK))),
        },
        cell_options={
            (0, 1): SpecCellOptions(
                border=SpecBorders(left=SpecBorder(EnumBorderStyle.DOUBLE))
            )
        },
    )
    buffer = SheetBuffer()
    render_styles(table, buffer)

    assert buffer.get_cell_borders(1, 2).left == SpecBorder(EnumBorderStyle.THICK)
    assert buffer.get_cell_borders(1, 3).left == SpecBorder(EnumBorderStyle.DOUBLE)
    # row borders only draw their left side on the first column
    assert buffer.get_cell_borders(2, 2).left is None


def test_cell_borders_outside_rendered_rows_are_skipped() -> None:
    table = SpecTable(
        data=[{"a": 1}, {"a": 2}],
        columns=(SpecColumn("a", "A"),),
        limit=1,
        cell_options={
            (0, 1): SpecCellOptions(
                border=SpecBorders.create_boundaries(EnumBorderStyle.THIN)
            )
        },
    )
    buffer = SheetBuffer()
    render_styles(table, buffer)
    assert buffer.get_cell_borders(1, 3) == SpecBorders()


# #endregion
################################################################################
