"""Style and border cascade.

Body styles resolve per cell with cell > row > column precedence. Borders are
applied in layers so later layers override earlier ones: column borders, row
borders, the header bottom border, then cell-specific borders.
"""

from typing import TYPE_CHECKING

from .columns import (
    count_max_depth,
    count_total_leaves,
    derive_data_start_row,
    flatten_columns,
)
from .conf import DEFAULT_HEADER_BOTTOM_BORDER, DEFAULT_HEADER_STYLE
from .errors import TableOperationError
from .logs import create_default_logger, record_failure
from .operations import TableOperations
from .spec import (
    EnumBorderSide,
    SpecBorders,
    SpecColumn,
    SpecRenderReport,
    SpecStyle,
    SpecTable,
)

if TYPE_CHECKING:
    from loguru import Logger

################################################################################
# #region StyleResolution


def resolve_cell_style(
    table: SpecTable, col_idx: int, row_idx: int, column: SpecColumn
) -> SpecStyle | None:
    """First style found among the cell, its row and its column."""
    cfg_cell_opts = table.get_cell_options(col_idx, row_idx)
    if cfg_cell_opts is not None and cfg_cell_opts.style is not None:
        return cfg_cell_opts.style
    cfg_row_opts = table.get_row_options(row_idx)
    if cfg_row_opts is not None and cfg_row_opts.style is not None:
        return cfg_row_opts.style
    return column.style


def derive_span_cell_borders(
    borders: SpecBorders,
    *,
    axis: EnumBorderSide,
    is_first: bool,
    is_last: bool,
) -> SpecBorders:
    """
    Borders one cell receives when ``borders`` decorate a whole column or row.

    ``axis`` names the side where the span starts: ``TOP`` for a column
    (cells stacked top to bottom), ``LEFT`` for a row. Sides across the span
    are drawn on every cell; sides along it only at the span ends. With
    ``inner`` configured, every cell receives all four outer sides.
    """
    if borders.inner is not None:
        return SpecBorders(
            left=borders.left,
            right=borders.right,
            top=borders.top,
            bottom=borders.bottom,
        )

    if axis == EnumBorderSide.TOP:
        side_start, side_end = EnumBorderSide.TOP, EnumBorderSide.BOTTOM
    else:
        side_start, side_end = EnumBorderSide.LEFT, EnumBorderSide.RIGHT

    dict_sides = {
        _side.value: borders.get_side(_side)
        for _side in EnumBorderSide
        if _side not in (side_start, side_end)
    }
    if is_first:
        dict_sides[side_start.value] = borders.get_side(side_start)
    if is_last:
        dict_sides[side_end.value] = borders.get_side(side_end)
    return SpecBorders(**dict_sides)


# #endregion
################################################################################
# #region Styles


def apply_header_styles(
    table: SpecTable,
    ops: TableOperations,
    *,
    report: SpecRenderReport | None = None,
    logger: "Logger | None" = None,
) -> None:
    cfg_logger = logger or create_default_logger()
    n_depth = count_max_depth(table.columns)
    n_cols = count_total_leaves(table.columns)
    if n_cols == 0:
        return
    try:
        ops.apply_style_to_range(1, 1, n_cols, n_depth, DEFAULT_HEADER_STYLE)
        return
    except TableOperationError as exc:
        record_failure(report, cfg_logger, "Failed to apply header range style", exc)

    # fallback: one call per header cell
    for _row in range(1, n_depth + 1):
        for _col in range(1, n_cols + 1):
            try:
                ops.apply_style_to_cell(_col, _row, DEFAULT_HEADER_STYLE)
            except TableOperationError as exc:
                record_failure(
                    report,
                    cfg_logger,
                    f"Failed to apply header cell style ({ops.get_column_letter(_col)}{_row})",
                    exc,
                )


def apply_body_styles(
    table: SpecTable,
    ops: TableOperations,
    *,
    report: SpecRenderReport | None = None,
    logger: "Logger | None" = None,
) -> None:
    cfg_logger = logger or create_default_logger()
    n_row_start = derive_data_start_row(table.columns, write_header=table.write_header)
    tup_leaves = flatten_columns(table.columns)
    for _row_idx, _ in table.iter_rows():
        n_row_ = _row_idx + n_row_start
        for _col_idx, _column in enumerate(tup_leaves):
            cfg_style_ = resolve_cell_style(table, _col_idx, _row_idx, _column)
            if cfg_style_ is None:
                continue
            try:
                ops.apply_style_to_cell(_col_idx + 1, n_row_, cfg_style_)
            except TableOperationError as exc:
                record_failure(
                    report,
                    cfg_logger,
                    f"Failed to apply cell style ({ops.get_column_letter(_col_idx + 1)}{n_row_})",
                    exc,
                )


# #endregion
################################################################################
# #region Borders


def apply_borders_to_cell(
    ops: TableOperations,
    col: int,
    row: int,
    borders: SpecBorders,
    *,
    kind: str,
    report: SpecRenderReport | None = None,
    logger: "Logger | None" = None,
) -> None:
    """Apply every declared side of ``borders``; each failing side is logged."""
    cfg_logger = logger or create_default_logger()
    for _side, _border in borders.iter_sides():
        try:
            ops.apply_border_to_cell(col, row, _side, _border)
        except TableOperationError as exc:
            record_failure(
                report,
                cfg_logger,
                f"Failed to apply {kind} {_side} border ({ops.get_column_letter(col)}{row})",
                exc,
            )


def apply_column_borders(
    table: SpecTable,
    ops: TableOperations,
    *,
    report: SpecRenderReport | None = None,
    logger: "Logger | None" = None,
) -> None:
    n_rows = table.count_rows()
    if n_rows == 0:
        return
    n_row_start = derive_data_start_row(table.columns, write_header=table.write_header)
    n_row_end = n_row_start + n_rows - 1
    for _col_idx, _column in enumerate(flatten_columns(table.columns)):
        if _column.borders is None or not _column.borders.has_borders():
            continue
        for _row in range(n_row_start, n_row_end + 1):
            apply_borders_to_cell(
                ops,
                _col_idx + 1,
                _row,
                derive_span_cell_borders(
                    _column.borders,
                    axis=EnumBorderSide.TOP,
                    is_first=_row == n_row_start,
                    is_last=_row == n_row_end,
                ),
                kind="column",
                report=report,
                logger=logger,
            )


def apply_row_borders(
    table: SpecTable,
    ops: TableOperations,
    *,
    report: SpecRenderReport | None = None,
    logger: "Logger | None" = None,
) -> None:
    n_cols = count_total_leaves(table.columns)
    n_row_start = derive_data_start_row(table.columns, write_header=table.write_header)
    for _row_idx, _ in table.iter_rows():
        cfg_row_opts_ = table.get_row_options(_row_idx)
        if cfg_row_opts_ is None or cfg_row_opts_.border is None:
            continue
        if not cfg_row_opts_.border.has_borders():
            continue
        for _col in range(1, n_cols + 1):
            apply_borders_to_cell(
                ops,
                _col,
                _row_idx + n_row_start,
                derive_span_cell_borders(
                    cfg_row_opts_.border,
                    axis=EnumBorderSide.LEFT,
                    is_first=_col == 1,
                    is_last=_col == n_cols,
                ),
                kind="row",
                report=report,
                logger=logger,
            )


def apply_header_bottom_border(
    table: SpecTable,
    ops: TableOperations,
    *,
    report: SpecRenderReport | None = None,
    logger: "Logger | None" = None,
) -> None:
    n_row_last_header = count_max_depth(table.columns)
    cfg_borders = SpecBorders(bottom=DEFAULT_HEADER_BOTTOM_BORDER)
    for _col in range(1, count_total_leaves(table.columns) + 1):
        apply_borders_to_cell(
            ops,
            _col,
            n_row_last_header,
            cfg_borders,
            kind="header",
            report=report,
            logger=logger,
        )


def apply_cell_borders(
    table: SpecTable,
    ops: TableOperations,
    *,
    report: SpecRenderReport | None = None,
    logger: "Logger | None" = None,
) -> None:
    n_row_start = derive_data_start_row(table.columns, write_header=table.write_header)
    n_rows = table.count_rows()
    n_cols = count_total_leaves(table.columns)
    for (_col_idx, _row_idx), _cell_opts in sorted(table.cell_options.items()):
        if _cell_opts.border is None:
            continue
        if not (0 <= _row_idx < n_rows and 0 <= _col_idx < n_cols):
            continue
        apply_borders_to_cell(
            ops,
            _col_idx + 1,
            _row_idx + n_row_start,
            _cell_opts.border,
            kind="cell",
            report=report,
            logger=logger,
        )


# #endregion
################################################################################
# #region Driver


def render_styles(
    table: SpecTable,
    ops: TableOperations,
    *,
    report: SpecRenderReport | None = None,
    logger: "Logger | None" = None,
) -> None:
    """Header style, body styles, then border layers in their fixed order."""
    cfg_logger = logger or create_default_logger()
    b_has_header = table.write_header and len(table.columns) > 0
    if b_has_header:
        apply_header_styles(table, ops, report=report, logger=cfg_logger)
    apply_body_styles(table, ops, report=report, logger=cfg_logger)

    apply_column_borders(table, ops, report=report, logger=cfg_logger)
    apply_row_borders(table, ops, report=report, logger=cfg_logger)
    if b_has_header:
        apply_header_bottom_border(table, ops, report=report, logger=cfg_logger)
    apply_cell_borders(table, ops, report=report, logger=cfg_logger)


# #endregion
################################################################################
