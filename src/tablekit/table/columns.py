from collections.abc import Sequence

from .errors import TableStructureError
from .spec import SpecColumn

################################################################################
# #region ColumnTree


def count_max_depth(columns: Sequence[SpecColumn]) -> int:
    """
    Depth of the column hierarchy, i.e. the number of header rows it needs.

    A flat (or empty) list has depth 1; every level of nesting adds one.

    Examples:
        >>> count_max_depth([SpecColumn("a"), SpecColumn("b")])
        1
        >>> count_max_depth([SpecColumn(children=(SpecColumn("a"),))])
        2
    """
    n_depth_max = 1
    for _column in columns:
        if _column.has_children():
            n_depth_max = max(n_depth_max, 1 + count_max_depth(_column.children))
    return n_depth_max


def flatten_columns(columns: Sequence[SpecColumn]) -> tuple[SpecColumn, ...]:
    """Leaf columns in left-to-right (pre-order) order."""
    l_leaves: list[SpecColumn] = []
    for _column in columns:
        if _column.has_children():
            l_leaves.extend(flatten_columns(_column.children))
        else:
            l_leaves.append(_column)
    return tuple(l_leaves)


def count_total_leaves(columns: Sequence[SpecColumn]) -> int:
    return sum(_column.count_leaves() for _column in columns)


# #endregion
################################################################################
# #region RowOffsets


def count_header_rows(columns: Sequence[SpecColumn], *, write_header: bool) -> int:
    return count_max_depth(columns) if write_header else 0


def derive_data_start_row(columns: Sequence[SpecColumn], *, write_header: bool) -> int:
    """1-based sheet row holding the first data row."""
    return 1 + count_header_rows(columns, write_header=write_header)


def convert_sheet_row_to_data_index(
    row: int, columns: Sequence[SpecColumn], *, write_header: bool
) -> int:
    """
    Convert a 1-based sheet row into a 0-based data-row index.

    Raises:
        TableStructureError: If ``row`` lies inside the header block or
            before the first sheet row.
    """
    n_row_start = derive_data_start_row(columns, write_header=write_header)
    if row < n_row_start:
        raise TableStructureError(
            f"Sheet row {row} is not a data row (data starts at row {n_row_start})."
        )
    return row - n_row_start


def convert_data_index_to_sheet_row(
    row_idx: int, columns: Sequence[SpecColumn], *, write_header: bool
) -> int:
    return row_idx + derive_data_start_row(columns, write_header=write_header)


# #endregion
################################################################################
# #region HeaderGrid


def build_header_grid(columns: Sequence[SpecColumn]) -> list[list[str]]:
    """
    Lay out the header labels, one list per header level.

    A group label sits in the first cell of its span and the rest of the
    span stays blank. A leaf shorter than the tree leaves blank cells below
    its label.

    Examples:
        >>> group = SpecColumn(label="Group", children=(SpecColumn("a", "a"), SpecColumn("b", "b")))
        >>> build_header_grid([group, SpecColumn("c", "c")])
        [['Group', '', 'c'], ['a', 'b', '']]
    """
    n_depth = count_max_depth(columns)
    n_width = count_total_leaves(columns)
    l_grid: list[list[str]] = []
    for _level in range(n_depth):
        l_row = [""] * n_width
        _fill_header_level(l_row, columns, level_target=_level)
        l_grid.append(l_row)
    return l_grid


def _fill_header_level(
    header_row: list[str],
    columns: Sequence[SpecColumn],
    *,
    level_target: int,
    level_current: int = 0,
    col_idx: int = 0,
) -> int:
    n_col_cursor = col_idx
    for _column in columns:
        if level_current == level_target:
            header_row[n_col_cursor] = _column.label
            n_col_cursor += _column.count_leaves()
        elif _column.has_children():
            n_col_cursor = _fill_header_level(
                header_row,
                _column.children,
                level_target=level_target,
                level_current=level_current + 1,
                col_idx=n_col_cursor,
            )
        else:
            # leaf column has nothing to show at a deeper level
            n_col_cursor += 1
    return n_col_cursor


# #endregion
################################################################################
