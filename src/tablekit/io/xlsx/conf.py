from collections.abc import Mapping
from types import MappingProxyType
from typing import Literal

from .spec import SpecAutofitCellsPolicy, SpecCellFormat

N_NROWS_EXCEL_MAX = 1_048_576
N_NCOLS_EXCEL_MAX = 16_384
N_LEN_EXCEL_SHEET_NAME_MAX = 31
TUP_EXCEL_ILLEGAL = ("*", ":", "?", "/", "\\", "[", "]")

# Strategy/Preference/Adjustable Parameters for XLSX output.

LIT_FMT_KEYS = Literal["base", "datetime", "date", "time"]
_cls_base_fmt_spec = SpecCellFormat(
    font_name="Times New Roman", font_size=11, align="left", valign="top"
)

DEFAULT_XLSX_FORMATS: Mapping[LIT_FMT_KEYS, SpecCellFormat] = MappingProxyType(
    {
        "base": _cls_base_fmt_spec,
        # applied to temporal values that were not formatted to text upstream
        "datetime": SpecCellFormat(num_format="yyyy-mm-dd hh:mm:ss"),
        "date": SpecCellFormat(num_format="yyyy-mm-dd"),
        "time": SpecCellFormat(num_format="hh:mm:ss"),
    }
)

DEFAULT_AUTOFIT_POLICY = SpecAutofitCellsPolicy()

# SpecStyle.underline names -> XlsxWriter underline codes
DICT_UNDERLINE_CODES: Mapping[str, int] = MappingProxyType(
    {
        "single": 1,
        "double": 2,
        "single_accounting": 33,
        "double_accounting": 34,
    }
)
# EnumAlignment vertical values -> XlsxWriter ``valign``
DICT_VALIGN_VALUES: Mapping[str, str] = MappingProxyType(
    {"top": "top", "center": "vcenter", "bottom": "bottom"}
)
