import os
from datetime import date, datetime, time
from pathlib import Path
from types import TracebackType
from typing import TYPE_CHECKING, Any, Self

import xlsxwriter
import xlsxwriter.format
import xlsxwriter.worksheet

from tablekit.io.sheet import SheetBuffer
from tablekit.table.columns import count_header_rows
from tablekit.table.logs import create_default_logger
from tablekit.table.render import TableRenderer
from tablekit.table.spec import SpecMergeRange, SpecTable

from .conf import DEFAULT_AUTOFIT_POLICY, DEFAULT_XLSX_FORMATS, N_LEN_EXCEL_SHEET_NAME_MAX
from .spec import SpecAutofitCellsPolicy, SpecCellFormat, SpecXlsxReport, SpecXlsxSheet
from .util import (
    convert_borders_to_cell_format,
    convert_cell_value,
    convert_style_to_cell_format,
    derive_merge_outline_borders,
    sanitize_sheet_name,
    select_temporal_format,
    validate_sheet_extent,
)

if TYPE_CHECKING:
    from loguru import Logger


class XlsxWriter:
    """
    Render tables into an XLSX workbook using ``xlsxwriter``.

    Each table is rendered into a :class:`SheetBuffer` first (values, merges,
    styles, borders), then flushed to a new worksheet with cached formats.
    The workbook is created on initialization and closed via :meth:`close`
    or automatically when used in a ``with`` block::

        from tablekit.io.xlsx import XlsxWriter

        with XlsxWriter("report.xlsx") as xf:
            xf.write_table(table, "Summary")

    Parameters
    ----------
    file_out:
        Path to the output ``.xlsx`` file. Can be a string or
        :class:`pathlib.Path`. The underlying workbook is created
        immediately for this path.
    fmt_base:
        Format every cell starts from (font, size, alignment). Table styles
        and borders are layered on top of it.
    logger:
        Diagnostics sink passed to the renderer.
    """

    def __init__(
        self,
        file_out: os.PathLike[str] | str,
        *,
        fmt_base: SpecCellFormat | None = None,
        logger: "Logger | None" = None,
    ):
        self.file_out = Path(file_out)
        self.wb = xlsxwriter.Workbook(
            self.file_out.as_posix(),
            {
                # merges are issued after the cells of every row are written,
                # which constant_memory mode does not allow
                "constant_memory": False,
                # NaN/Inf are written as text, never as Excel errors
                "nan_inf_to_errors": False,
                "remove_timezone": True,
            },
        )
        self.fmt_base = DEFAULT_XLSX_FORMATS["base"] if fmt_base is None else fmt_base
        self.logger = logger or create_default_logger()
        self._format_cache: dict[SpecCellFormat, xlsxwriter.format.Format] = {}
        self._existing_sheet_names: set[str] = set()
        self._reports: list[SpecXlsxReport] = []

    def __enter__(self) -> "XlsxWriter":
        return self

    def __exit__(
        self, exc_type: type | None, exc: BaseException | None, tb: TracebackType | None
    ) -> None:
        self.close()

    def close(self) -> None:
        self.wb.close()

    def report(self) -> tuple[SpecXlsxReport, ...]:
        return tuple(self._reports)

    def _create_format_cached(self, spec: SpecCellFormat) -> xlsxwriter.format.Format:
        fmt = self._format_cache.get(spec)
        if fmt is None:
            fmt = self.wb.add_format(spec.to_xlsxwriter())
            self._format_cache[spec] = fmt
        return fmt

    @staticmethod
    def _estimate_width_len(value: Any) -> int:
        """Estimate display string length for column width calculation.

        Notes
        -----
        - Excel column width is not strictly character count; this is a pragmatic
          heuristic good enough for most reports.
        - Non-ASCII characters (e.g. CJK) are counted as roughly 1.6 columns.
        """
        if value is None:
            return 0
        if isinstance(value, datetime):
            return len("yyyy-mm-dd hh:mm:ss")
        if isinstance(value, (date, time)):
            return len("yyyy-mm-dd")

        s = str(value)
        n_ascii = sum(1 for _chr in s if ord(_chr) < 128)
        n_non_ascii = len(s) - n_ascii
        return n_ascii + int(1.6 * n_non_ascii)

    def _create_unique_sheet_name(self, name: str) -> str:
        if name not in self._existing_sheet_names:
            self._existing_sheet_names.add(name)
            return name

        # deterministic bump: name__2, name__3 ...
        c_base_name = name[: max(1, N_LEN_EXCEL_SHEET_NAME_MAX - 3)]
        i = 2
        c_candidate_name = f"{c_base_name}__{i}"[:N_LEN_EXCEL_SHEET_NAME_MAX]
        while c_candidate_name in self._existing_sheet_names:
            i += 1
            c_candidate_name = f"{c_base_name}__{i}"[:N_LEN_EXCEL_SHEET_NAME_MAX]
        self._existing_sheet_names.add(c_candidate_name)
        return c_candidate_name

    def _derive_cell_format(
        self, buffer: SheetBuffer, col: int, row: int, value: Any
    ) -> xlsxwriter.format.Format:
        cfg_spec = self.fmt_base
        if (cfg_temporal_ := select_temporal_format(value)) is not None:
            cfg_spec = cfg_spec.merge(cfg_temporal_)
        cfg_spec = cfg_spec.merge(
            convert_style_to_cell_format(buffer.styles.get((col, row)))
        ).merge(convert_borders_to_cell_format(buffer.get_cell_borders(col, row)))
        return self._create_format_cached(cfg_spec)

    def _derive_merge_format(
        self, buffer: SheetBuffer, merge: SpecMergeRange, value: Any
    ) -> xlsxwriter.format.Format:
        cfg_spec = self.fmt_base
        if (cfg_temporal_ := select_temporal_format(value)) is not None:
            cfg_spec = cfg_spec.merge(cfg_temporal_)
        cfg_spec = cfg_spec.merge(
            convert_style_to_cell_format(
                buffer.styles.get((merge.col_start, merge.row_start))
            )
        ).merge(convert_borders_to_cell_format(derive_merge_outline_borders(buffer, merge)))
        return self._create_format_cached(cfg_spec)

    @staticmethod
    def _write_cell(
        ws: xlsxwriter.worksheet.Worksheet,
        *,
        row_idx: int,
        col_idx: int,
        value: Any,
        cell_format: xlsxwriter.format.Format,
    ) -> None:
        # Use the typed write_* calls explicitly (0-based coordinates)
        if value is None or value == "":
            ws.write_blank(row=row_idx, col=col_idx, blank=None, cell_format=cell_format)
        elif isinstance(value, bool):
            ws.write_boolean(row=row_idx, col=col_idx, boolean=value, cell_format=cell_format)
        elif isinstance(value, (int, float)):
            ws.write_number(row=row_idx, col=col_idx, number=value, cell_format=cell_format)
        elif isinstance(value, (datetime, date, time)):
            ws.write_datetime(
                row=row_idx, col=col_idx, date=value, cell_format=cell_format
            )
        else:
            ws.write_string(
                row=row_idx, col=col_idx, string=str(value), cell_format=cell_format
            )

    def _flush_buffer(
        self, ws: xlsxwriter.worksheet.Worksheet, buffer: SheetBuffer
    ) -> None:
        # cells first (merged blocks are written by merge_range below)
        for _col, _row in buffer.iter_cell_keys():
            if buffer.is_cell_merged(_col, _row):
                continue
            v_value_ = convert_cell_value(buffer.get_raw_value(_col, _row))
            self._write_cell(
                ws,
                row_idx=_row - 1,
                col_idx=_col - 1,
                value=v_value_,
                cell_format=self._derive_cell_format(buffer, _col, _row, v_value_),
            )

        for _merge in buffer.merges:
            v_value_ = convert_cell_value(
                buffer.get_raw_value(_merge.col_start, _merge.row_start)
            )
            ws.merge_range(
                first_row=_merge.row_start - 1,
                first_col=_merge.col_start - 1,
                last_row=_merge.row_end - 1,
                last_col=_merge.col_end - 1,
                data=v_value_,
                cell_format=self._derive_merge_format(buffer, _merge, v_value_),
            )

    def _calculate_column_widths(
        self,
        buffer: SheetBuffer,
        *,
        n_cols: int,
        n_rows_header: int,
        policy: SpecAutofitCellsPolicy,
    ) -> list[int]:
        dict_col_widths: dict[str, list[int]] = {
            "header": [0] * n_cols,
            "body": [0] * n_cols,
        }
        for (_col, _row), _value in buffer.cells.items():
            # a value spread over several columns does not size any one of them
            if buffer.is_cell_merged_horizontally(_col, _row):
                continue
            c_part_ = "header" if _row <= n_rows_header else "body"
            if (
                c_part_ == "body"
                and policy.height_body_inferred_max is not None
                and _row - n_rows_header > policy.height_body_inferred_max
            ):
                continue
            dict_col_widths[c_part_][_col - 1] = max(
                dict_col_widths[c_part_][_col - 1], self._estimate_width_len(_value)
            )

        n_min = max(1, int(policy.width_cell_min))
        n_max = min(255, max(n_min, int(policy.width_cell_max)))
        n_pad = max(0, int(policy.width_cell_padding))
        l_col_widths_final: list[int] = []
        for _col_idx in range(n_cols):
            n_col_width_recorded_ = (
                dict_col_widths[policy.rule_columns][_col_idx]
                if policy.rule_columns != "all"
                else max(
                    dict_col_widths["header"][_col_idx],
                    dict_col_widths["body"][_col_idx],
                )
            )
            l_col_widths_final.append(
                min(n_max, max(n_min, n_col_width_recorded_ + n_pad))
            )
        return l_col_widths_final

    def write_table(
        self,
        table: SpecTable,
        sheet_name: str,
        *,
        row_freeze: int | None = None,
        col_freeze: int = 0,
        policy_autofit: SpecAutofitCellsPolicy | None = None,
    ) -> Self:
        """
        Render ``table`` into a new worksheet.

        Args:
            table: The table to render.
            sheet_name: Requested sheet name; illegal characters are replaced
                and duplicates get a ``__N`` suffix.
            row_freeze: Rows to freeze at the top. Defaults to the header
                height.
            col_freeze: Columns to freeze on the left.
            policy_autofit: Column width policy; ``rule_columns="none"``
                leaves widths untouched.

        Returns:
            Self: The writer, for chaining.

        Raises:
            TableStructureError: If the table is invalid or exceeds Excel's
                sheet size.
            TableDataError: If a body value cannot be rendered.
        """
        cfg_policy = DEFAULT_AUTOFIT_POLICY if policy_autofit is None else policy_autofit
        report = SpecXlsxReport(sheets=[], warnings=[])

        buffer = SheetBuffer(list_separator=table.list_separator)
        report_render = TableRenderer(buffer, logger=self.logger).render(table)
        for _warning in report_render.warnings:
            report.warn(_warning)

        n_cols, n_rows = buffer.count_extent()
        validate_sheet_extent(n_cols, n_rows)

        c_sheet_name = self._create_unique_sheet_name(sanitize_sheet_name(sheet_name))
        cfg_worksheet = self.wb.add_worksheet(c_sheet_name)
        self._flush_buffer(cfg_worksheet, buffer)

        n_rows_header = count_header_rows(table.columns, write_header=table.write_header)
        row_freeze = n_rows_header if row_freeze is None else row_freeze
        if row_freeze > 0 or col_freeze > 0:
            cfg_worksheet.freeze_panes(row_freeze, col_freeze)

        if cfg_policy.rule_columns != "none" and n_cols > 0:
            for _col_idx, _width in enumerate(
                self._calculate_column_widths(
                    buffer,
                    n_cols=n_cols,
                    n_rows_header=n_rows_header,
                    policy=cfg_policy,
                )
            ):
                cfg_worksheet.set_column(
                    first_col=_col_idx, last_col=_col_idx, width=_width
                )

        report.sheets.append(
            SpecXlsxSheet(
                sheet_name=c_sheet_name,
                n_rows=n_rows,
                n_cols=n_cols,
                n_merges=len(buffer.merges),
            )
        )
        self.logger.debug(
            f"Wrote sheet {c_sheet_name!r}: {n_rows} rows, {n_cols} columns, "
            f"{len(buffer.merges)} merges"
        )
        self._reports.append(report)
        return self
