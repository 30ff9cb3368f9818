# Formats, policies and results of flushing rendered tables to XLSX files.

from dataclasses import dataclass, replace
from typing import Any, Literal


################################################################################
# #region CellFormatSpecification
@dataclass(frozen=True, slots=True)
class SpecCellFormat:
    # field names follow the XlsxWriter format property keys
    font_name: str | None = None
    font_size: float | None = None
    bold: bool | None = None
    italic: bool | None = None
    underline: int | None = None

    align: str | None = None
    valign: str | None = None
    text_wrap: bool | None = None

    top: int | None = None
    bottom: int | None = None
    left: int | None = None
    right: int | None = None

    num_format: str | None = None
    bg_color: str | None = None
    font_color: str | None = None

    def with_(self, **kwargs: Any) -> "SpecCellFormat":
        return replace(self, **kwargs)

    def merge(self, other: "SpecCellFormat") -> "SpecCellFormat":
        # non-None fields on the right win
        data = {
            k: (
                getattr(other, k) if getattr(other, k) is not None else getattr(self, k)
            )
            for k in self.__dataclass_fields__
        }
        return SpecCellFormat(**data)

    def to_xlsxwriter(self) -> dict[str, Any]:
        return {
            k: getattr(self, k)
            for k in self.__dataclass_fields__
            if getattr(self, k) is not None
        }


# #endregion
################################################################################
# #region WriteOptions


@dataclass(frozen=True, slots=True)
class SpecAutofitCellsPolicy:
    rule_columns: Literal["none", "header", "body", "all"] = "all"
    height_body_inferred_max: int | None = 20_000
    width_cell_min: int = 8
    width_cell_max: int = 60
    width_cell_padding: int = 2


# #endregion
################################################################################
# #region ReportSpecification
@dataclass(frozen=True, slots=True)
class SpecXlsxSheet:
    sheet_name: str
    n_rows: int
    n_cols: int
    n_merges: int


@dataclass(slots=True)
class SpecXlsxReport:
    sheets: list[SpecXlsxSheet]
    warnings: list[str]

    def warn(self, msg: str) -> None:
        self.warnings.append(str(msg))


# #endregion
################################################################################
