from __future__ import annotations

import argparse
from datetime import datetime, timedelta
from pathlib import Path

from sheetcache.application.workbook import Workbook
from sheetcache.application.worksheet import Worksheet
from sheetcache.cli.context import CLIContext
from sheetcache.core.errors import NoSuchWorksheetError
from sheetcache.domain.models.cell import DecodedValue


def add_workbook_args(parser: argparse.ArgumentParser, *, with_sheet: bool = True) -> None:
    parser.add_argument("file", type=Path, help="Path to the .xlsx workbook")
    if with_sheet:
        parser.add_argument(
            "--sheet",
            default=None,
            help="Worksheet name or sheetId (default: first worksheet in the workbook).",
        )


def open_from_args(args: argparse.Namespace, ctx: CLIContext) -> Workbook:
    return Workbook(args.file, ctx.settings)


def select_worksheet(workbook: Workbook, sheet: str | None) -> Worksheet:
    if sheet is None:
        names = workbook.list_worksheets()
        if not names:
            raise NoSuchWorksheetError(f"Workbook {workbook.path} has no worksheets")
        return workbook.get_worksheet_by_index(next(iter(names)))
    if workbook.has_worksheet_by_name(sheet):
        return workbook.get_worksheet_by_name(sheet)
    if sheet.isdigit():
        return workbook.get_worksheet_by_index(int(sheet))
    return workbook.get_worksheet_by_name(sheet)


def format_value(value: DecodedValue) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, datetime):
        return value.isoformat(sep=" ")
    if isinstance(value, timedelta):
        total = int(value.total_seconds())
        hours, remainder = divmod(total, 3600)
        minutes, seconds = divmod(remainder, 60)
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
    return str(value)
