from __future__ import annotations

from dataclasses import dataclass

from rich.console import Console

from sheetcache.core.config import StagingSettings


@dataclass(slots=True)
class CLIContext:
    settings: StagingSettings
    console: Console
