from typing import TYPE_CHECKING

from .columns import build_header_grid, derive_data_start_row, flatten_columns
from .data import lookup_value
from .errors import TableDataError, TableOperationError, TableStructureError
from .logs import create_default_logger, record_failure
from .merge import process_merging
from .operations import TableOperations
from .spec import SpecRenderReport, SpecTable
from .style import render_styles

if TYPE_CHECKING:
    from loguru import Logger


class TableRenderer:
    """
    Drive a backend through the full rendering of one table.

    The backend is called strictly in this order: header text, body values,
    header merges, vertical merges (per column), horizontal merges (per row),
    header and body styles, then the border layers (column, row, header,
    cell). Best-effort backend failures are logged and collected on the
    returned report; structural problems raise.

    Parameters
    ----------
    ops:
        Backend implementing :class:`TableOperations`.
    logger:
        Diagnostics sink (a loguru logger or anything with ``debug`` and
        ``warning``). Defaults to the package logger.

    Examples
    --------
    ::

        from tablekit.io.sheet import SheetBuffer

        buffer = SheetBuffer(list_separator=", ")
        report = TableRenderer(buffer).render(table)
    """

    def __init__(self, ops: TableOperations, *, logger: "Logger | None" = None):
        self.ops = ops
        self.logger = logger or create_default_logger()

    def render(self, table: SpecTable | None) -> SpecRenderReport:
        table = self._validate(table)
        report = SpecRenderReport()

        if table.write_header:
            self._write_header(table, report)
        self._write_body(table, report)
        self.logger.debug(
            f"Wrote {table.count_rows()} rows x {len(flatten_columns(table.columns))} columns"
        )

        process_merging(table, self.ops, report=report, logger=self.logger)
        render_styles(table, self.ops, report=report, logger=self.logger)
        self.logger.debug(
            f"Rendered table: {len(report.merges)} merges, {len(report.warnings)} warnings"
        )
        return report

    @staticmethod
    def _validate(table: SpecTable | None) -> SpecTable:
        if table is None:
            raise TableStructureError("No table data provided.")
        if not table.columns:
            raise TableStructureError("Table has no columns.")
        if table.limit < 0:
            raise TableStructureError(f"limit must be >= 0, got {table.limit}.")
        return table

    def _write_header(self, table: SpecTable, report: SpecRenderReport) -> None:
        for _row_idx, _labels in enumerate(build_header_grid(table.columns)):
            for _col_idx, _label in enumerate(_labels):
                if not _label:
                    continue
                try:
                    self.ops.set_cell_value(_col_idx + 1, _row_idx + 1, _label)
                except TableOperationError as exc:
                    record_failure(
                        report, self.logger, "Failed to set header cell value", exc
                    )

    def _write_body(self, table: SpecTable, report: SpecRenderReport) -> None:
        n_row_start = derive_data_start_row(
            table.columns, write_header=table.write_header
        )
        tup_leaves = flatten_columns(table.columns)
        for _row_idx, _row in table.iter_rows():
            for _col_idx, _column in enumerate(tup_leaves):
                v_raw_, b_found_ = lookup_value(_row, _column.name)
                if not b_found_:
                    continue
                try:
                    v_cell_ = self.ops.process_value(v_raw_, _column.format)
                except ValueError as exc:
                    raise TableDataError(
                        f"Error processing value for column {_column.name!r} "
                        f"(data row {_row_idx}): {exc}"
                    ) from exc
                try:
                    self.ops.set_cell_value(
                        _col_idx + 1, _row_idx + n_row_start, v_cell_
                    )
                except TableOperationError as exc:
                    record_failure(report, self.logger, "Failed to set cell value", exc)


def render_table(
    table: SpecTable | None,
    ops: TableOperations,
    *,
    logger: "Logger | None" = None,
) -> SpecRenderReport:
    return TableRenderer(ops, logger=logger).render(table)
