from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any, TypeAlias

from xlsxwriter.utility import xl_col_to_name

from tablekit.table.errors import TableOperationError
from tablekit.table.spec import (
    EnumBorderSide,
    EnumBorderStyle,
    SpecBorder,
    SpecBorders,
    SpecMergeRange,
    SpecStyle,
)

from .value_conversion import convert_value_for_output

CellKey: TypeAlias = tuple[int, int]


class SheetBuffer:
    """
    In-memory worksheet implementing the table operation interface.

    The renderer writes into the buffer; writers then flush its cells, merge
    ranges, styles and borders to a concrete file format. Coordinates are
    1-based ``(col, row)`` pairs.

    Parameters
    ----------
    list_separator:
        Separator used by :meth:`process_value` to join list values.

    Examples
    --------
    ::

        from tablekit.table import render_table

        buffer = SheetBuffer()
        render_table(table, buffer)
        buffer.get_cell_value(1, 1)
    """

    def __init__(self, *, list_separator: str = ""):
        self.list_separator = list_separator
        self._cells: dict[CellKey, Any] = {}
        self._merges: list[SpecMergeRange] = []
        self._styles: dict[CellKey, SpecStyle] = {}
        self._borders: dict[CellKey, dict[EnumBorderSide, SpecBorder]] = {}

    ############################################################################
    # #region Inspection
    @property
    def cells(self) -> Mapping[CellKey, Any]:
        return MappingProxyType(self._cells)

    @property
    def merges(self) -> tuple[SpecMergeRange, ...]:
        return tuple(self._merges)

    @property
    def styles(self) -> Mapping[CellKey, SpecStyle]:
        return MappingProxyType(self._styles)

    def get_raw_value(self, col: int, row: int) -> Any:
        return self._cells.get((col, row))

    def get_cell_borders(self, col: int, row: int) -> SpecBorders:
        dict_sides = self._borders.get((col, row), {})
        return SpecBorders(
            **{_side.value: _border for _side, _border in dict_sides.items()}
        )

    def find_merge(self, col: int, row: int) -> SpecMergeRange | None:
        for _merge in self._merges:
            if _merge.check_contains(col, row):
                return _merge
        return None

    def count_extent(self) -> tuple[int, int]:
        """``(n_cols, n_rows)`` covered by anything written to the buffer."""
        n_cols = n_rows = 0
        for _col, _row in self.iter_cell_keys():
            n_cols = max(n_cols, _col)
            n_rows = max(n_rows, _row)
        for _merge in self._merges:
            n_cols = max(n_cols, _merge.col_end)
            n_rows = max(n_rows, _merge.row_end)
        return n_cols, n_rows

    def iter_cell_keys(self) -> Iterator[CellKey]:
        """Every touched cell (value, style or border), row by row."""
        set_keys = set(self._cells) | set(self._styles) | set(self._borders)
        yield from sorted(set_keys, key=lambda _k: (_k[1], _k[0]))

    # #endregion
    ############################################################################
    # #region Values
    def get_cell_value(self, col: int, row: int) -> str:
        self._validate_coords(col, row)
        v_value = self._cells.get((col, row))
        return "" if v_value is None else str(v_value)

    def set_cell_value(self, col: int, row: int, value: Any) -> None:
        self._validate_coords(col, row)
        self._cells[(col, row)] = value

    def process_value(self, value: Any, format: str) -> Any:
        return convert_value_for_output(
            value, format, list_separator=self.list_separator
        )

    def get_column_letter(self, col: int) -> str:
        if col < 1:
            return f"<col {col}>"
        return xl_col_to_name(col - 1)

    # #endregion
    ############################################################################
    # #region Merges
    def merge_cells(
        self, col_start: int, row_start: int, col_end: int, row_end: int
    ) -> None:
        self._validate_coords(col_start, row_start)
        self._validate_coords(col_end, row_end)
        if col_start > col_end or row_start > row_end:
            raise TableOperationError(
                f"Merge range is reversed: ({col_start}, {row_start}) -> ({col_end}, {row_end})."
            )
        if col_start == col_end and row_start == row_end:
            raise TableOperationError("A single cell cannot be merged.")

        cfg_merge = SpecMergeRange(col_start, row_start, col_end, row_end)
        for _merge in self._merges:
            if _merge.check_overlaps(cfg_merge):
                raise TableOperationError(
                    f"Merge range {self._format_range(cfg_merge)} overlaps "
                    f"{self._format_range(_merge)}."
                )
        self._merges.append(cfg_merge)

    def is_cell_merged(self, col: int, row: int) -> bool:
        return self.find_merge(col, row) is not None

    def is_cell_merged_horizontally(self, col: int, row: int) -> bool:
        cfg_merge = self.find_merge(col, row)
        return cfg_merge is not None and cfg_merge.check_is_horizontal()

    def _format_range(self, merge: SpecMergeRange) -> str:
        return (
            f"{self.get_column_letter(merge.col_start)}{merge.row_start}:"
            f"{self.get_column_letter(merge.col_end)}{merge.row_end}"
        )

    # #endregion
    ############################################################################
    # #region Borders
    def apply_border_to_cell(
        self, col: int, row: int, side: EnumBorderSide, border: SpecBorder
    ) -> None:
        self._validate_coords(col, row)
        self._borders.setdefault((col, row), {})[EnumBorderSide(side)] = border

    def apply_borders_to_range(
        self,
        col_start: int,
        row_start: int,
        col_end: int,
        row_end: int,
        borders: SpecBorders,
    ) -> None:
        for _row in range(row_start, row_end + 1):
            for _col in range(col_start, col_end + 1):
                for _side, _border in borders.iter_sides():
                    b_on_edge_ = (
                        (_side == EnumBorderSide.LEFT and _col == col_start)
                        or (_side == EnumBorderSide.RIGHT and _col == col_end)
                        or (_side == EnumBorderSide.TOP and _row == row_start)
                        or (_side == EnumBorderSide.BOTTOM and _row == row_end)
                    )
                    if b_on_edge_:
                        self.apply_border_to_cell(_col, _row, _side, _border)

    def has_existing_border(self, col: int, row: int, side: EnumBorderSide) -> bool:
        cfg_border = self._borders.get((col, row), {}).get(EnumBorderSide(side))
        return cfg_border is not None and cfg_border.style != EnumBorderStyle.NONE

    # #endregion
    ############################################################################
    # #region Styles
    def apply_style_to_cell(self, col: int, row: int, style: SpecStyle) -> None:
        self._validate_coords(col, row)
        cfg_style_current = self._styles.get((col, row))
        self._styles[(col, row)] = (
            style if cfg_style_current is None else cfg_style_current.merge(style)
        )

    def apply_style_to_range(
        self,
        col_start: int,
        row_start: int,
        col_end: int,
        row_end: int,
        style: SpecStyle,
    ) -> None:
        self._validate_coords(col_start, row_start)
        self._validate_coords(col_end, row_end)
        for _row in range(row_start, row_end + 1):
            for _col in range(col_start, col_end + 1):
                self.apply_style_to_cell(_col, _row, style)

    # #endregion
    ############################################################################

    @staticmethod
    def _validate_coords(col: int, row: int) -> None:
        if col < 1 or row < 1:
            raise TableOperationError(
                f"Invalid cell coordinates (col={col}, row={row}); both are 1-based."
            )
