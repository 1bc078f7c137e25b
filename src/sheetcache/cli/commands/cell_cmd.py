from __future__ import annotations

import argparse

from rich.panel import Panel

from sheetcache.cli.context import CLIContext
from sheetcache.cli.sheet_options import add_workbook_args, format_value, open_from_args, select_worksheet


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("cell", help="Show one decoded cell value")
    add_workbook_args(parser)
    parser.add_argument("reference", help="Cell reference such as C2")
    parser.set_defaults(handler=run)


def run(args: argparse.Namespace, ctx: CLIContext) -> int:
    with open_from_args(args, ctx) as workbook:
        worksheet = select_worksheet(workbook, args.sheet)
        value = worksheet.get_cell_by_reference(args.reference)

    lines = [
        f"Worksheet: {worksheet.name} (index {worksheet.index})",
        f"Cell: {args.reference.upper()}",
        f"Type: {type(value).__name__}",
        f"Value: {format_value(value)}",
    ]
    ctx.console.print(Panel.fit("\n".join(lines), title="Cell"))
    return 0
