"""Option handling shared by libmem-build and libmem-build-ci."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from libmem_build.errors import UsageError

Converter = Callable[[str], Any]


def split_options(
    argv: list[str],
    options: Mapping[str, Converter | None],
) -> tuple[dict[str, Any], list[str]]:
    """Pull `--name VALUE` / `--name=VALUE` out of argv. Returns (values, positionals).

    Absent options map to None. A known option without a value, or any other `--` argument,
    raises UsageError.
    """
    values: dict[str, Any] = dict.fromkeys(options)
    positionals: list[str] = []
    it = iter(argv)
    for arg in it:
        if not arg.startswith("--"):
            positionals.append(arg)
            continue
        name, eq, value = arg[2:].partition("=")
        if name not in options:
            msg = f"Unknown option: --{name}"
            raise UsageError(msg)
        if not eq:
            value = next(it, None)
            if value is None:
                msg = f"Option --{name} requires a value"
                raise UsageError(msg)
        convert = options[name]
        values[name] = convert(value) if convert else value
    return values, positionals


def config_path(value: str) -> Path:
    """--config FILE, absolute against the invocation directory."""
    return Path(value).expanduser().resolve()


def log_level(name: str | None, default: int = logging.WARNING) -> int:
    """Map a level name (debug, INFO, ...) to its number; unknown names give default."""
    if not name:
        return default
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else default


def configure_logging(name: str | None) -> None:
    """Configure the root logger once; later calls only adjust the level."""
    level = log_level(name)
    root = logging.getLogger()
    if root.handlers:
        root.setLevel(level)
        return
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
