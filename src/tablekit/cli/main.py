"""``tablekit`` console entry point.

Usage::

    tablekit render table.json report.xlsx --sheet_name Summary
    tablekit render table.json report.csv --separator ";"
"""

import argparse
import json
import sys
from collections.abc import Sequence
from pathlib import Path

from loguru import logger
from rich_argparse import ArgumentDefaultsRichHelpFormatter, RawTextRichHelpFormatter

from tablekit import __version__
from tablekit.io.csv import CsvWriter
from tablekit.io.xlsx import XlsxWriter
from tablekit.table.errors import TableDataError, TableStructureError
from tablekit.table.loader import load_table
from tablekit.table.spec import SpecTable

from .actions import FileAction
from .console import CliHeadings


class SmartFormatter(ArgumentDefaultsRichHelpFormatter, RawTextRichHelpFormatter):
    """
    Keep manual newlines/indentation AND show (default: ...) in help.
    """

    pass


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tablekit",
        description="Render tabular data with merged cells, borders and styles.",
        formatter_class=SmartFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    parser_render = subparsers.add_parser(
        "render",
        help="Render a JSON table description to XLSX or CSV.",
        description=(
            "Render a JSON table description.\n"
            "The output format follows the extension of FILE_OUT (.xlsx or .csv)."
        ),
        formatter_class=SmartFormatter,
    )
    parser_render.add_argument(
        "file_in",
        metavar="FILE_IN",
        action=FileAction.input(exts=("json",)),
        help="JSON table description (columns, data, options).",
    )
    parser_render.add_argument(
        "file_out",
        metavar="FILE_OUT",
        action=FileAction.output(exts=("xlsx", "csv")),
        help="Output file; existing files are overwritten.",
    )
    parser_render.add_argument(
        "--sheet_name", default="Sheet1", help="Worksheet name (XLSX only)."
    )
    parser_render.add_argument(
        "--separator", default=",", help="Field delimiter (CSV only)."
    )
    parser_render.add_argument(
        "--no_header",
        action="store_true",
        help="Do not write header rows, whatever the JSON says.",
    )
    parser_render.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Render at most this many data rows (0 = all).",
    )
    parser_render.add_argument(
        "--verbose", action="store_true", help="Log debug messages."
    )
    return parser


def read_table(file_in: Path, *, if_no_header: bool, limit: int | None) -> SpecTable:
    cfg_table = load_table(json.loads(file_in.read_text(encoding="utf-8")))
    if if_no_header:
        cfg_table = cfg_table.with_(write_header=False)
    if limit is not None:
        cfg_table = cfg_table.with_(limit=limit)
    return cfg_table


def run_render(args: argparse.Namespace, headings: CliHeadings) -> list[str]:
    """Render the table described by ``args``; returns the collected warnings."""
    table = read_table(args.file_in, if_no_header=args.no_header, limit=args.limit)
    file_out: Path = args.file_out

    if file_out.suffix.lower() == ".csv":
        with CsvWriter(file_out, separator=args.separator) as cw:
            cw.write_table(table)
        headings.summary(
            [("Output", str(file_out)), ("Rows", str(cw.n_rows_written))]
        )
        return []

    with XlsxWriter(file_out) as xf:
        xf.write_table(table, args.sheet_name)
    l_warnings: list[str] = []
    for _report in xf.report():
        l_warnings.extend(_report.warnings)
        for _sheet in _report.sheets:
            headings.summary(
                [
                    ("Output", str(file_out)),
                    ("Sheet", _sheet.sheet_name),
                    ("Size", f"{_sheet.n_rows} rows x {_sheet.n_cols} columns"),
                    ("Merges", str(_sheet.n_merges)),
                ]
            )
    return l_warnings


def main(argv: Sequence[str] | None = None) -> int:
    args = create_parser().parse_args(argv)

    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if args.verbose else "INFO")

    headings = CliHeadings()
    headings.h1(f"tablekit {args.command}")
    try:
        l_warnings = run_render(args, headings)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Cannot read or write table files: {e}")
        return 1
    except (TableStructureError, TableDataError, KeyError, ValueError) as e:
        logger.error(f"Invalid table: {e}")
        return 1

    headings.warnings(l_warnings)
    logger.success(f"Done: {args.file_out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
