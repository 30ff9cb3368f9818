import csv
import os
from pathlib import Path
from types import TracebackType
from typing import IO, TYPE_CHECKING, Any, Self

from tablekit.io.value_conversion import convert_value_for_output
from tablekit.table.columns import build_header_grid, flatten_columns
from tablekit.table.data import lookup_value
from tablekit.table.errors import TableDataError, TableStructureError
from tablekit.table.logs import create_default_logger
from tablekit.table.spec import SpecColumn, SpecTable

if TYPE_CHECKING:
    from loguru import Logger


def _render_csv_field(
    row: Any, column: SpecColumn, *, list_separator: str, row_idx: int
) -> str:
    v_raw, b_found = lookup_value(row, column.name)
    if not b_found:
        return ""
    try:
        v_out = convert_value_for_output(
            v_raw, column.format, list_separator=list_separator
        )
    except ValueError as exc:
        raise TableDataError(
            f"Error processing value for column {column.name!r} "
            f"(data row {row_idx}): {exc}"
        ) from exc
    return "" if v_out is None else str(v_out)


def write_table_csv(
    table: SpecTable | None,
    stream: IO[str],
    *,
    separator: str = ",",
    logger: "Logger | None" = None,
) -> int:
    """
    Write a table as CSV text: one line per header level, then the body.

    Group labels occupy the first column of their span; merges, styles and
    borders have no CSV counterpart and are ignored. Missing fields are
    written as empty strings.

    Args:
        table: The table to write.
        stream: Text stream, opened with ``newline=""`` for files.
        separator: Single-character field delimiter.
        logger: Diagnostics sink.

    Returns:
        int: Number of body rows written.

    Raises:
        TableStructureError: If there is no table, it has no columns or its
            limit is negative.
        TableDataError: If a value cannot be rendered.
    """
    if table is None:
        raise TableStructureError("No table data provided.")
    if not table.columns:
        raise TableStructureError("Table has no columns.")
    if table.limit < 0:
        raise TableStructureError(f"limit must be >= 0, got {table.limit}.")

    cfg_logger = logger or create_default_logger()
    writer = csv.writer(stream, delimiter=separator)
    if table.write_header:
        writer.writerows(build_header_grid(table.columns))

    tup_leaves = flatten_columns(table.columns)
    n_rows = 0
    for _row_idx, _row in table.iter_rows():
        writer.writerow(
            [
                _render_csv_field(
                    _row,
                    _column,
                    list_separator=table.list_separator,
                    row_idx=_row_idx,
                )
                for _column in tup_leaves
            ]
        )
        n_rows += 1
    cfg_logger.debug(f"Wrote {n_rows} CSV rows x {len(tup_leaves)} columns")
    return n_rows


class CsvWriter:
    """
    Write tables to a CSV file.

    Parameters
    ----------
    file_out:
        Output path; the file is opened (and truncated) on initialization.
    separator:
        Field delimiter, ``","`` by default.
    logger:
        Diagnostics sink.

    Examples
    --------
    ::

        with CsvWriter("report.csv", separator=";") as cw:
            cw.write_table(table)
    """

    def __init__(
        self,
        file_out: os.PathLike[str] | str,
        *,
        separator: str = ",",
        logger: "Logger | None" = None,
    ):
        if len(separator) != 1:
            raise ValueError(f"separator must be a single character, got {separator!r}.")
        self.file_out = Path(file_out)
        self.separator = separator
        self.logger = logger or create_default_logger()
        self._stream = self.file_out.open("w", encoding="utf-8", newline="")
        self.n_rows_written = 0

    def __enter__(self) -> "CsvWriter":
        return self

    def __exit__(
        self, exc_type: type | None, exc: BaseException | None, tb: TracebackType | None
    ) -> None:
        self.close()

    def close(self) -> None:
        self._stream.close()

    def write_table(self, table: SpecTable) -> Self:
        self.n_rows_written += write_table_csv(
            table, self._stream, separator=self.separator, logger=self.logger
        )
        return self
