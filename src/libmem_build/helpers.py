"""Shared helpers for libmem_build (text, env flags, YAML config files, files, CI outputs).

Used by config, source, build, ci and other modules. Nothing here may import a third-party
library at module level: the build procedure imports this module inside bare build images.
"""

from __future__ import annotations

import os
import shlex
import shutil
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Any

# --- Text ---

_PATH_SEPARATORS = ("/", "\\")


def sanitize_path_component(value: str, replacement: str = "--") -> str:
    """Replace slashes and backslashes so value can be used as a single path segment."""
    for sep in _PATH_SEPARATORS:
        value = value.replace(sep, replacement)
    return value


def strip_extension(file_name: str) -> str:
    """Drop the last .suffix of a file name (LICENSE.LLVM.txt -> LICENSE.LLVM). Names without a dot are kept."""
    head, dot, _ = file_name.rpartition(".")
    return head if dot and head else file_name


def first_line_field(text: str, index: int) -> str:
    """Whitespace-split field of the first non-empty line (index -1 for the last). Empty string if none."""
    for line in text.splitlines():
        fields = line.split()
        if fields:
            try:
                return fields[index]
            except IndexError:
                return ""
    return ""


def format_command(cmd: list[str]) -> str:
    """Shell-quoted rendering of a command, for echoing before it runs."""
    return shlex.join(str(c) for c in cmd)


def echo_command(cmd: list[str]) -> None:
    """Print '+ <cmd>' to stderr, like shell tracing."""
    print(f"+ {format_command(cmd)}", file=sys.stderr, flush=True)


# --- Env ---

_TRUE_VALUES = frozenset({"true", "1", "yes", "on"})


def env_flag(value: str | None) -> bool:
    """Interpret an environment-style boolean. Unset, empty and anything not truthy is False."""
    if value is None:
        return False
    return value.strip().lower() in _TRUE_VALUES


# --- Config file ---


def load_yaml_mapping(path: Path) -> dict[str, Any]:
    """Load a YAML file that must contain a mapping (empty file -> {}). Raises ValueError otherwise."""
    import yaml

    try:
        with path.open() as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        msg = f"Invalid YAML in {path}: {e}"
        raise ValueError(msg) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        msg = f"Expected a mapping at top level of {path}, got {type(data).__name__}"
        raise ValueError(msg)
    return data


# --- Files ---


def install_file(src: Path, dst: Path, mode: int = 0o644) -> Path:
    """Copy src to dst (creating parents) and set mode, like `install -D -m644`."""
    dst.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(src, dst)
    dst.chmod(mode)
    return dst


def write_text_file(dst: Path, text: str, mode: int = 0o644) -> Path:
    """Write text to dst (creating parents) and set mode."""
    dst.parent.mkdir(parents=True, exist_ok=True)
    dst.write_text(text)
    dst.chmod(mode)
    return dst


# --- CI ---


def write_github_output(values: dict[str, str], environ: Mapping[str, str] | None = None) -> bool:
    """Append key=value lines to $GITHUB_OUTPUT. Returns False (no-op) when it is not set."""
    env = os.environ if environ is None else environ
    target = env.get("GITHUB_OUTPUT")
    if not target:
        return False
    with open(target, "a") as f:
        for key, value in values.items():
            f.write(f"{key}={value}\n")
    return True
