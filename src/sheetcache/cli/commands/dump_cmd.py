from __future__ import annotations

import argparse

from rich.table import Table

from sheetcache.cli.context import CLIContext
from sheetcache.cli.sheet_options import add_workbook_args, format_value, open_from_args, select_worksheet
from sheetcache.core.columns import index_to_name


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("dump", help="Print a worksheet as a table")
    add_workbook_args(parser)
    parser.add_argument("--limit", type=int, default=50, help="Maximum number of rows to print (0 for all)")
    parser.set_defaults(handler=run)


def run(args: argparse.Namespace, ctx: CLIContext) -> int:
    with open_from_args(args, ctx) as workbook:
        worksheet = select_worksheet(workbook, args.sheet)
        columns = [index_to_name(index) for index in range(1, worksheet.count_columns() + 1)]

        table = Table(title=f"{worksheet.name} ({worksheet.count_rows()} rows)")
        table.add_column("#", justify="right")
        for column in columns:
            table.add_column(column, overflow="fold")

        printed = 0
        rows = worksheet.iterate_rows()
        try:
            for row, values in rows:
                if args.limit and printed >= args.limit:
                    break
                table.add_row(str(row), *(format_value(values.get(column)) for column in columns))
                printed += 1
        finally:
            rows.close()

    ctx.console.print(table)
    return 0
