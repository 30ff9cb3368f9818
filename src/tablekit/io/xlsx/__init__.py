from .spec import SpecAutofitCellsPolicy, SpecCellFormat, SpecXlsxReport, SpecXlsxSheet
from .writer import XlsxWriter

__all__ = [
    "XlsxWriter",
    "SpecCellFormat",
    "SpecAutofitCellsPolicy",
    "SpecXlsxReport",
    "SpecXlsxSheet",
]
