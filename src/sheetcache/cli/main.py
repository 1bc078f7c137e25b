from __future__ import annotations

import argparse
import logging

from rich.console import Console

from sheetcache.cli.commands import cell_cmd, column_cmd, dump_cmd, row_cmd, sheets_cmd
from sheetcache.cli.context import CLIContext
from sheetcache.core.config import load_settings
from sheetcache.core.errors import SheetCacheError
from sheetcache.core.logging import configure_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sheetcache",
        description="Read cells from .xlsx workbooks",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0)

    subparsers = parser.add_subparsers(dest="command")
    sheets_cmd.register(subparsers)
    cell_cmd.register(subparsers)
    row_cmd.register(subparsers)
    column_cmd.register(subparsers)
    dump_cmd.register(subparsers)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)
    console = Console()

    ctx = CLIContext(settings=load_settings(), console=console)

    handler = getattr(args, "handler", None)
    if handler is None:
        parser.print_help()
        return 2

    try:
        return handler(args, ctx)
    except SheetCacheError as exc:
        logger.error(str(exc))
        return 1
