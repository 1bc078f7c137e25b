from __future__ import annotations

import argparse

from rich.table import Table

from sheetcache.cli.context import CLIContext
from sheetcache.cli.sheet_options import add_workbook_args, format_value, open_from_args, select_worksheet


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("column", help="Show the decoded cells of one column")
    add_workbook_args(parser)
    parser.add_argument("column", help="Column name such as C")
    parser.set_defaults(handler=run)


def run(args: argparse.Namespace, ctx: CLIContext) -> int:
    column = args.column.upper()
    with open_from_args(args, ctx) as workbook:
        worksheet = select_worksheet(workbook, args.sheet)
        values = worksheet.get_column(column)

    table = Table(title=f"{worksheet.name}: column {column}")
    table.add_column("Row", justify="right")
    table.add_column("Type")
    table.add_column("Value", overflow="fold")
    for row, value in values.items():
        table.add_row(str(row), type(value).__name__, format_value(value))

    ctx.console.print(table)
    return 0
