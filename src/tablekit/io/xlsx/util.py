import math
from datetime import date, datetime, time
from typing import Any

from tablekit.io.sheet import SheetBuffer
from tablekit.table.errors import TableStructureError
from tablekit.table.spec import (
    EnumAlignment,
    EnumBorderSide,
    SpecBorders,
    SpecMergeRange,
    SpecStyle,
)

from .conf import (
    DEFAULT_XLSX_FORMATS,
    DICT_UNDERLINE_CODES,
    DICT_VALIGN_VALUES,
    N_LEN_EXCEL_SHEET_NAME_MAX,
    N_NCOLS_EXCEL_MAX,
    N_NROWS_EXCEL_MAX,
    TUP_EXCEL_ILLEGAL,
)
from .spec import SpecCellFormat

################################################################################
# #region CellValueConversion


def convert_nan_inf_to_str(x: float) -> str:
    if math.isnan(x):
        return "NaN"
    if math.isinf(x):
        return "Inf" if x > 0 else "-Inf"
    raise ValueError("Input is neither NaN nor Inf.")


def convert_cell_value(value: Any) -> Any:
    """Value as XlsxWriter can store it; non-finite floats become text."""
    if isinstance(value, float) and not math.isfinite(value):
        return convert_nan_inf_to_str(value)
    return value


def select_temporal_format(value: Any) -> SpecCellFormat | None:
    # datetime is a date subclass, check it first
    if isinstance(value, datetime):
        return DEFAULT_XLSX_FORMATS["datetime"]
    if isinstance(value, date):
        return DEFAULT_XLSX_FORMATS["date"]
    if isinstance(value, time):
        return DEFAULT_XLSX_FORMATS["time"]
    return None


# #endregion
################################################################################
# #region FormatConversion


def convert_style_to_cell_format(style: SpecStyle | None) -> SpecCellFormat:
    """
    Translate a cell style into XlsxWriter format properties.

    Unset style fields stay ``None`` so the base format shows through. Any
    underline name outside the known ones is drawn as a single underline.

    Examples:
        >>> convert_style_to_cell_format(SpecStyle(bold=True)).bold
        True
        >>> convert_style_to_cell_format(None) == SpecCellFormat()
        True
    """
    if style is None:
        return SpecCellFormat()

    c_align: str | None = None
    c_valign: str | None = None
    if style.alignment != EnumAlignment.NONE:
        c_align, c_vertical = style.alignment.derive_values()
        c_valign = DICT_VALIGN_VALUES.get(c_vertical, c_vertical)

    return SpecCellFormat(
        font_name=style.font_family or None,
        font_size=style.font_size or None,
        bold=True if style.bold else None,
        italic=True if style.italic else None,
        underline=(
            DICT_UNDERLINE_CODES.get(style.underline.strip().lower(), 1)
            if style.underline
            else None
        ),
        align=c_align,
        valign=c_valign,
        bg_color=style.background_color or None,
        font_color=style.text_color or None,
    )


def convert_borders_to_cell_format(borders: SpecBorders) -> SpecCellFormat:
    return SpecCellFormat(
        **{_side.value: int(_border.style) for _side, _border in borders.iter_sides()}
    )


def derive_merge_outline_borders(
    buffer: SheetBuffer, merge: SpecMergeRange
) -> SpecBorders:
    """
    Borders of a merged block, taken from the cells on its outline.

    XlsxWriter applies one format to every cell of a merged range, so the
    block gets the left/top borders of its first cell, the right border of
    its top-right cell and the bottom border of its bottom-left cell.
    """
    cfg_first = buffer.get_cell_borders(merge.col_start, merge.row_start)
    cfg_right = buffer.get_cell_borders(merge.col_end, merge.row_start)
    cfg_bottom = buffer.get_cell_borders(merge.col_start, merge.row_end)
    return SpecBorders(
        left=cfg_first.get_side(EnumBorderSide.LEFT),
        top=cfg_first.get_side(EnumBorderSide.TOP),
        right=cfg_right.get_side(EnumBorderSide.RIGHT),
        bottom=cfg_bottom.get_side(EnumBorderSide.BOTTOM),
    )


# #endregion
################################################################################
# #region SheetNormalization


def sanitize_sheet_name(name: str, *, replace_to: str = "_") -> str:
    for ch in TUP_EXCEL_ILLEGAL:
        name = name.replace(ch, replace_to)
    name = name.strip() or "Sheet"
    return name[:N_LEN_EXCEL_SHEET_NAME_MAX]


def validate_sheet_extent(n_cols: int, n_rows: int) -> None:
    if n_rows > N_NROWS_EXCEL_MAX:
        raise TableStructureError(
            f"Table needs {n_rows} rows, Excel allows {N_NROWS_EXCEL_MAX}."
        )
    if n_cols > N_NCOLS_EXCEL_MAX:
        raise TableStructureError(
            f"Table needs {n_cols} columns, Excel allows {N_NCOLS_EXCEL_MAX}."
        )


# #endregion
################################################################################
