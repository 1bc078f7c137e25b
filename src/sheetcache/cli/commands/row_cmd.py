from __future__ import annotations

import argparse

from rich.table import Table

from sheetcache.cli.context import CLIContext
from sheetcache.cli.sheet_options import add_workbook_args, format_value, open_from_args, select_worksheet


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("row", help="Show the decoded cells of one row")
    add_workbook_args(parser)
    parser.add_argument("row", type=int, help="1-based row number")
    parser.set_defaults(handler=run)


def run(args: argparse.Namespace, ctx: CLIContext) -> int:
    with open_from_args(args, ctx) as workbook:
        worksheet = select_worksheet(workbook, args.sheet)
        values = worksheet.get_row(args.row)

    table = Table(title=f"{worksheet.name}: row {args.row}")
    table.add_column("Column")
    table.add_column("Type")
    table.add_column("Value", overflow="fold")
    for column, value in values.items():
        table.add_row(column, type(value).__name__, format_value(value))

    ctx.console.print(table)
    return 0
