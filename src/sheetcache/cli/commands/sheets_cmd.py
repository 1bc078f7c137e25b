from __future__ import annotations

import argparse

from rich.table import Table

from sheetcache.cli.context import CLIContext
from sheetcache.cli.sheet_options import add_workbook_args, open_from_args


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("sheets", help="List the worksheets of a workbook")
    add_workbook_args(parser, with_sheet=False)
    parser.set_defaults(handler=run)


def run(args: argparse.Namespace, ctx: CLIContext) -> int:
    with open_from_args(args, ctx) as workbook:
        records = workbook.worksheet_records()

    table = Table(title=f"Worksheets ({len(records)})")
    table.add_column("Index", justify="right")
    table.add_column("Name")
    table.add_column("State")
    table.add_column("Part", overflow="fold")

    for record in records:
        table.add_row(str(record.index), record.name, record.state, record.part_path or "")

    ctx.console.print(table)
    return 0
