from typing import Any, Protocol

from .spec import EnumBorderSide, SpecBorder, SpecBorders, SpecStyle


class TableOperations(Protocol):
    """
    Cell operations the rendering engine needs from a backend.

    Coordinate semantics
    --------------------
    All coordinates are 1-based sheet coordinates (column 1 / row 1 is the
    top-left cell), regardless of header rows.

    Failure contract
    ----------------
    Best-effort operations (merges, borders, styles, cell writes) raise
    :class:`tablekit.table.errors.TableOperationError` when they cannot be
    carried out. The engine logs those and moves on; any other exception
    propagates to the caller.
    """

    def get_cell_value(self, col: int, row: int) -> str: ...

    def set_cell_value(self, col: int, row: int, value: Any) -> None: ...

    def merge_cells(
        self, col_start: int, row_start: int, col_end: int, row_end: int
    ) -> None: ...

    def is_cell_merged(self, col: int, row: int) -> bool: ...

    def is_cell_merged_horizontally(self, col: int, row: int) -> bool: ...

    def apply_border_to_cell(
        self, col: int, row: int, side: EnumBorderSide, border: SpecBorder
    ) -> None: ...

    def apply_borders_to_range(
        self,
        col_start: int,
        row_start: int,
        col_end: int,
        row_end: int,
        borders: SpecBorders,
    ) -> None:
        """Draw ``borders`` around the outline of the range."""
        ...

    def has_existing_border(self, col: int, row: int, side: EnumBorderSide) -> bool: ...

    def apply_style_to_cell(self, col: int, row: int, style: SpecStyle) -> None: ...

    def apply_style_to_range(
        self,
        col_start: int,
        row_start: int,
        col_end: int,
        row_end: int,
        style: SpecStyle,
    ) -> None: ...

    def get_column_letter(self, col: int) -> str:
        """Spreadsheet-style column name (``1 -> "A"``), for diagnostics."""
        ...

    def process_value(self, value: Any, format: str) -> Any:
        """
        Render a raw row value for output.

        The engine compares the trimmed ``str`` of the result when deciding
        merges; it never interprets raw value types itself.

        Raises:
            ValueError: If ``value`` cannot be rendered with ``format``.
        """
        ...
