from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_SQLITE_JOURNAL_MODE = "MEMORY"
DEFAULT_SQLITE_SYNCHRONOUS = "OFF"
DEFAULT_SQLITE_CACHE_KIB = 8192
DEFAULT_XML_CHUNK_BYTES = 65_536

_JOURNAL_MODES = {"DELETE", "TRUNCATE", "PERSIST", "MEMORY", "WAL", "OFF"}
_SYNCHRONOUS_LEVELS = {"OFF", "NORMAL", "FULL", "EXTRA"}


@dataclass(frozen=True)
class StagingSettings:
    staging_dir: Path | None = None
    journal_mode: str = DEFAULT_SQLITE_JOURNAL_MODE
    synchronous: str = DEFAULT_SQLITE_SYNCHRONOUS
    cache_kib: int = DEFAULT_SQLITE_CACHE_KIB
    xml_chunk_bytes: int = DEFAULT_XML_CHUNK_BYTES


def _read_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _read_choice_env(name: str, default: str, choices: set[str]) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().upper()
    return value if value in choices else default


def _read_dir_env(name: str) -> Path | None:
    raw = os.getenv(name)
    if not raw or not raw.strip():
        return None
    return Path(raw).expanduser().resolve()


def load_settings() -> StagingSettings:
    return StagingSettings(
        staging_dir=_read_dir_env("SHEETCACHE_STAGING_DIR"),
        journal_mode=_read_choice_env(
            "SHEETCACHE_SQLITE_JOURNAL_MODE", DEFAULT_SQLITE_JOURNAL_MODE, _JOURNAL_MODES
        ),
        synchronous=_read_choice_env(
            "SHEETCACHE_SQLITE_SYNCHRONOUS", DEFAULT_SQLITE_SYNCHRONOUS, _SYNCHRONOUS_LEVELS
        ),
        cache_kib=_read_int_env("SHEETCACHE_SQLITE_CACHE_KIB", DEFAULT_SQLITE_CACHE_KIB),
        xml_chunk_bytes=_read_int_env("SHEETCACHE_XML_CHUNK_BYTES", DEFAULT_XML_CHUNK_BYTES),
    )
