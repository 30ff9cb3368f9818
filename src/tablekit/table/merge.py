"""Merge-range detection for headers and body cells.

Detection is pure: the ``find_*`` / ``plan_*`` functions only read the table
and ask the backend to format values. The ``process_*`` functions issue the
resulting merge calls; a failing call is logged and the remaining ranges are
still attempted.
"""

from collections.abc import Iterable, Iterator, Sequence
from typing import TYPE_CHECKING, Any, Final

from .columns import count_max_depth, derive_data_start_row, flatten_columns
from .data import lookup_value
from .errors import TableOperationError
from .logs import create_default_logger, record_failure
from .operations import TableOperations
from .spec import (
    EnumMergeCondition,
    SpecColumn,
    SpecMergeRange,
    SpecRenderReport,
    SpecTable,
)

if TYPE_CHECKING:
    from loguru import Logger

# marks a position that cannot take part in a merge (breaks any open range)
_SKIP: Final = object()

################################################################################
# #region Conditions


def render_merge_text(value: Any) -> str:
    """Text used to compare two formatted values; ``None`` renders empty."""
    if value is None:
        return ""
    return str(value).strip()


def check_should_merge(
    conditions: Sequence[EnumMergeCondition], value_a: Any, value_b: Any
) -> bool:
    """
    Decide whether two adjacent values merge under any of ``conditions``.

    Examples:
        >>> check_should_merge([EnumMergeCondition.IDENTICAL], "x ", "x")
        True
        >>> check_should_merge([EnumMergeCondition.EMPTY], None, "")
        True
        >>> check_should_merge([], "x", "x")
        False
    """
    if not conditions:
        return False
    c_text_a = render_merge_text(value_a)
    c_text_b = render_merge_text(value_b)
    b_empty_a = c_text_a == ""
    b_empty_b = c_text_b == ""
    for _condition in conditions:
        if _condition == EnumMergeCondition.IDENTICAL:
            if c_text_a == c_text_b and not b_empty_a and not b_empty_b:
                return True
        elif _condition == EnumMergeCondition.EMPTY:
            if b_empty_a and b_empty_b:
                return True
    return False


def scan_merge_ranges(
    candidates: Iterable[tuple[int, Any]],
    conditions: Sequence[EnumMergeCondition],
) -> list[list[int]]:
    """
    Group consecutive candidates into merge ranges.

    ``candidates`` yields ``(index, formatted_value)`` in order; a value of
    ``_SKIP`` closes the open range and is never merged. Ranges shorter than
    two indices are dropped.

    Returns:
        list[list[int]]: Each range lists its indices in ascending order.
    """
    l_ranges: list[list[int]] = []
    l_range_current: list[int] = []
    v_last: Any = _SKIP
    for _idx, _value in candidates:
        if _value is _SKIP:
            if len(l_range_current) > 1:
                l_ranges.append(l_range_current)
            l_range_current = []
            v_last = _SKIP
            continue

        if v_last is not _SKIP and check_should_merge(conditions, v_last, _value):
            l_range_current.append(_idx)
        else:
            if len(l_range_current) > 1:
                l_ranges.append(l_range_current)
            l_range_current = [_idx]
        v_last = _value

    if len(l_range_current) > 1:
        l_ranges.append(l_range_current)
    return l_ranges


def _derive_candidate_value(
    row: Any,
    column: SpecColumn,
    ops: TableOperations,
    *,
    logger: "Logger",
) -> Any:
    v_raw, b_found = lookup_value(row, column.name)
    if not b_found:
        return _SKIP
    try:
        return ops.process_value(v_raw, column.format)
    except ValueError as exc:
        logger.warning(
            f"Value of column {column.name!r} cannot be formatted for merging: {exc}"
        )
        return _SKIP


# #endregion
################################################################################
# #region HeaderMerge


def plan_header_merges(columns: Sequence[SpecColumn]) -> list[SpecMergeRange]:
    """
    Merge ranges for a multi-level header.

    A group spanning several leaves merges horizontally on its own header
    row; a leaf that ends above the last header row merges vertically down
    to it. Single-level headers need no merges.
    """
    n_depth = count_max_depth(columns)
    if n_depth <= 1:
        return []
    l_merges: list[SpecMergeRange] = []
    _plan_header_merges_level(
        columns, row=1, depth=n_depth, col_start=1, merges=l_merges
    )
    return l_merges


def _plan_header_merges_level(
    columns: Sequence[SpecColumn],
    *,
    row: int,
    depth: int,
    col_start: int,
    merges: list[SpecMergeRange],
) -> None:
    n_col_cursor = col_start
    for _column in columns:
        if _column.has_children():
            n_span = _column.count_leaves()
            if n_span > 1:
                merges.append(
                    SpecMergeRange(n_col_cursor, row, n_col_cursor + n_span - 1, row)
                )
            if row < depth:
                _plan_header_merges_level(
                    _column.children,
                    row=row + 1,
                    depth=depth,
                    col_start=n_col_cursor,
                    merges=merges,
                )
            n_col_cursor += n_span
        else:
            if row < depth:
                merges.append(SpecMergeRange(n_col_cursor, row, n_col_cursor, depth))
            n_col_cursor += 1


# #endregion
################################################################################
# #region VerticalMerge


def find_vertical_merge_ranges(
    table: SpecTable,
    col_idx: int,
    column: SpecColumn,
    ops: TableOperations,
    *,
    logger: "Logger | None" = None,
) -> list[list[int]]:
    """
    Runs of data rows to merge within one leaf column.

    A row breaks any open run when its row options disable merging or carry
    their own merge rules, when the cell is marked non-mergeable, or when the
    field is missing or cannot be formatted.

    Args:
        table: The table being rendered.
        col_idx: 0-based leaf column index of ``column``.
        column: The leaf column.
        ops: Backend used to format values for comparison.
        logger: Receives formatting warnings.

    Returns:
        list[list[int]]: 0-based data-row indices per range.

    Examples:
        Rows ``A, A, B, B, B, C`` under ``identical`` give
        ``[[0, 1], [2, 3, 4]]``.
    """
    if column.merge is None or not column.merge.vertical:
        return []
    cfg_logger = logger or create_default_logger()
    return scan_merge_ranges(
        _generate_vertical_candidates(table, col_idx, column, ops, logger=cfg_logger),
        column.merge.vertical,
    )


def _generate_vertical_candidates(
    table: SpecTable,
    col_idx: int,
    column: SpecColumn,
    ops: TableOperations,
    *,
    logger: "Logger",
) -> Iterator[tuple[int, Any]]:
    for _row_idx, _row in table.iter_rows():
        cfg_row_opts_ = table.get_row_options(_row_idx)
        if cfg_row_opts_ is not None and (
            not cfg_row_opts_.mergeable or cfg_row_opts_.merge is not None
        ):
            yield _row_idx, _SKIP
            continue

        cfg_cell_opts_ = table.get_cell_options(col_idx, _row_idx)
        if cfg_cell_opts_ is not None and not cfg_cell_opts_.mergeable:
            yield _row_idx, _SKIP
            continue

        yield _row_idx, _derive_candidate_value(_row, column, ops, logger=logger)


def process_vertical_merging(
    table: SpecTable,
    col_idx: int,
    column: SpecColumn,
    ops: TableOperations,
    *,
    report: SpecRenderReport | None = None,
    logger: "Logger | None" = None,
) -> None:
    cfg_logger = logger or create_default_logger()
    n_row_start = derive_data_start_row(table.columns, write_header=table.write_header)
    n_col = col_idx + 1
    for _range in find_vertical_merge_ranges(
        table, col_idx, column, ops, logger=cfg_logger
    ):
        _apply_merge(
            ops,
            SpecMergeRange(
                n_col, _range[0] + n_row_start, n_col, _range[-1] + n_row_start
            ),
            kind="vertically",
            report=report,
            logger=cfg_logger,
        )


# #endregion
################################################################################
# #region HorizontalMerge


def plan_horizontal_column_groups(
    columns: Sequence[SpecColumn],
) -> list[tuple[int, int, tuple[EnumMergeCondition, ...]]]:
    """
    Group consecutive leaf columns sharing the same horizontal merge conditions.

    Columns without horizontal conditions, or with a different condition set
    than their left neighbour, start a new group. Only groups of two or more
    columns with conditions are returned.

    Returns:
        list[tuple[int, int, tuple[EnumMergeCondition, ...]]]:
            ``(col_idx_start, col_idx_end_exclusive, conditions)`` per group,
            with 0-based leaf indices.
    """
    l_groups: list[tuple[int, int, tuple[EnumMergeCondition, ...]]] = []
    n_col_idx = 0
    n_cols = len(columns)
    while n_col_idx < n_cols:
        tup_conditions_ = _select_horizontal_conditions(columns[n_col_idx])
        if not tup_conditions_:
            n_col_idx += 1
            continue

        set_conditions_ = frozenset(tup_conditions_)
        n_col_idx_end_ = n_col_idx + 1
        while (
            n_col_idx_end_ < n_cols
            and frozenset(_select_horizontal_conditions(columns[n_col_idx_end_]))
            == set_conditions_
        ):
            n_col_idx_end_ += 1

        if n_col_idx_end_ - n_col_idx > 1:
            l_groups.append((n_col_idx, n_col_idx_end_, tup_conditions_))
        n_col_idx = n_col_idx_end_
    return l_groups


def _select_horizontal_conditions(
    column: SpecColumn,
) -> tuple[EnumMergeCondition, ...]:
    if column.merge is None:
        return ()
    return tuple(column.merge.horizontal)


def find_horizontal_merge_ranges(
    table: SpecTable,
    row_idx: int,
    columns: Sequence[SpecColumn],
    conditions: Sequence[EnumMergeCondition],
    ops: TableOperations,
    *,
    col_offset: int = 0,
    logger: "Logger | None" = None,
) -> list[list[int]]:
    """
    Runs of adjacent leaf columns to merge within one data row.

    Args:
        table: The table being rendered.
        row_idx: 0-based data-row index.
        columns: Consecutive leaf columns to scan.
        conditions: Horizontal merge conditions to evaluate.
        ops: Backend used to format values for comparison.
        col_offset: 0-based leaf index of ``columns[0]``, used to find cell
            options.
        logger: Receives formatting warnings.

    Returns:
        list[list[int]]: Column indices relative to ``columns[0]``.
    """
    if not conditions or len(columns) < 2:
        return []
    cfg_logger = logger or create_default_logger()
    row = table.data[row_idx]

    def _generate_candidates() -> Iterator[tuple[int, Any]]:
        for _idx, _column in enumerate(columns):
            cfg_cell_opts_ = table.get_cell_options(col_offset + _idx, row_idx)
            if cfg_cell_opts_ is not None and not cfg_cell_opts_.mergeable:
                yield _idx, _SKIP
                continue
            yield _idx, _derive_candidate_value(row, _column, ops, logger=cfg_logger)

    return scan_merge_ranges(_generate_candidates(), conditions)


def process_horizontal_merging(
    table: SpecTable,
    row_idx: int,
    ops: TableOperations,
    *,
    report: SpecRenderReport | None = None,
    logger: "Logger | None" = None,
) -> None:
    """
    Issue horizontal merges for one data row.

    Row-level horizontal conditions replace the column-level ones for the
    whole row. Otherwise a row whose options disable merging is left alone.
    """
    cfg_logger = logger or create_default_logger()
    n_row = row_idx + derive_data_start_row(
        table.columns, write_header=table.write_header
    )
    tup_leaves = flatten_columns(table.columns)

    cfg_row_opts = table.get_row_options(row_idx)
    if (
        cfg_row_opts is not None
        and cfg_row_opts.merge is not None
        and cfg_row_opts.merge.horizontal
    ):
        l_ranges = find_horizontal_merge_ranges(
            table,
            row_idx,
            tup_leaves,
            cfg_row_opts.merge.horizontal,
            ops,
            logger=cfg_logger,
        )
        _apply_horizontal_merges(
            ops, l_ranges, row=n_row, col_base=1, report=report, logger=cfg_logger
        )
        return

    if cfg_row_opts is not None and not cfg_row_opts.mergeable:
        return

    for _start, _end, _conditions in plan_horizontal_column_groups(tup_leaves):
        l_ranges_ = find_horizontal_merge_ranges(
            table,
            row_idx,
            tup_leaves[_start:_end],
            _conditions,
            ops,
            col_offset=_start,
            logger=cfg_logger,
        )
        _apply_horizontal_merges(
            ops,
            l_ranges_,
            row=n_row,
            col_base=_start + 1,
            report=report,
            logger=cfg_logger,
        )


def _apply_horizontal_merges(
    ops: TableOperations,
    ranges: Sequence[Sequence[int]],
    *,
    row: int,
    col_base: int,
    report: SpecRenderReport | None,
    logger: "Logger",
) -> None:
    for _range in ranges:
        _apply_merge(
            ops,
            SpecMergeRange(_range[0] + col_base, row, _range[-1] + col_base, row),
            kind="horizontally",
            report=report,
            logger=logger,
        )


# #endregion
################################################################################
# #region Driver


def process_header_merging(
    table: SpecTable,
    ops: TableOperations,
    *,
    report: SpecRenderReport | None = None,
    logger: "Logger | None" = None,
) -> None:
    cfg_logger = logger or create_default_logger()
    for _merge in plan_header_merges(table.columns):
        _apply_merge(
            ops, _merge, kind="header", report=report, logger=cfg_logger
        )


def process_merging(
    table: SpecTable,
    ops: TableOperations,
    *,
    report: SpecRenderReport | None = None,
    logger: "Logger | None" = None,
) -> None:
    """Header merges, then vertical merges per column, then horizontal per row."""
    cfg_logger = logger or create_default_logger()
    if table.write_header and table.columns:
        process_header_merging(table, ops, report=report, logger=cfg_logger)

    for _col_idx, _column in enumerate(flatten_columns(table.columns)):
        process_vertical_merging(
            table, _col_idx, _column, ops, report=report, logger=cfg_logger
        )

    for _row_idx, _ in table.iter_rows():
        process_horizontal_merging(
            table, _row_idx, ops, report=report, logger=cfg_logger
        )


def _apply_merge(
    ops: TableOperations,
    merge: SpecMergeRange,
    *,
    kind: str,
    report: SpecRenderReport | None,
    logger: "Logger",
) -> None:
    try:
        ops.merge_cells(merge.col_start, merge.row_start, merge.col_end, merge.row_end)
    except TableOperationError as exc:
        c_ref = (
            f"{ops.get_column_letter(merge.col_start)}{merge.row_start}:"
            f"{ops.get_column_letter(merge.col_end)}{merge.row_end}"
        )
        record_failure(report, logger, f"Failed to merge cells {kind} ({c_ref})", exc)
        return
    if report is not None:
        report.merges.append(merge)


# #endregion
################################################################################
