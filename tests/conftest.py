"""Pytest fixtures for libmem_build tests."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from libmem_build.build.recipe import LIBRARIES
from libmem_build.config import BuildConfig, load_config
from libmem_build.platforms import OSFamily


@pytest.fixture
def source_tree(tmp_path: Path) -> Path:
    """Minimal libmem-like source tree: public headers plus license files for every dependency."""
    src = tmp_path / "libmem-src"
    (src / "libmem" / "include" / "libmem").mkdir(parents=True)
    (src / "libmem" / "include" / "libmem" / "libmem.h").write_text("#pragma once\n")
    (src / "LICENSE").write_text("libmem license\n")
    (src / "README.md").write_text("readme\n")
    for dep, names in {
        "capstone": ["LICENSE.TXT", "LICENSE_LLVM.TXT"],
        "keystone": ["COPYING", "EXCEPTIONS-CLIENT"],
        "LIEF": ["LICENSE"],
        "llvm": ["LICENSE.TXT"],
    }.items():
        (src / dep).mkdir()
        for name in names:
            (src / dep / name).write_text(f"{dep} {name}\n")
    (src / "llvm" / "lib").mkdir()
    (src / "llvm" / "lib" / "LICENSE.TXT").write_text("nested, not harvested\n")
    return src


def populate_build_dir(build_dir: Path, os_family: OSFamily) -> None:
    """Create every library file the recipe expects for os_family."""
    for step in LIBRARIES[os_family]:
        p = build_dir / step.src
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_bytes(b"\x7fELF" + step.dest.encode())


@pytest.fixture
def build_dir(tmp_path: Path) -> Path:
    d = tmp_path / "build"
    d.mkdir()
    return d


@pytest.fixture
def config(tmp_path: Path) -> BuildConfig:
    """Config rooted at tmp_path with no config file and no environment overrides."""
    return load_config(environ={}, cwd=tmp_path)


@pytest.fixture
def env_dir(tmp_path: Path) -> Path:
    """Environment assets directory with Dockerfiles and a local setup script."""
    d = tmp_path / "envs"
    (d / "docker").mkdir(parents=True)
    (d / "local").mkdir()
    for name in ("linux-gnu", "linux-musl"):
        (d / "docker" / f"{name}.Dockerfile").write_text("FROM scratch\n")
    (d / "local" / "windows-msvc.sh").write_text('#!/usr/bin/env sh\nshift\nexec "$@"\n')
    return d


def ok(stdout: str = "") -> MagicMock:
    return MagicMock(returncode=0, stdout=stdout, stderr="")


def failed(code: int = 1, stderr: str = "") -> MagicMock:
    return MagicMock(returncode=code, stdout="", stderr=stderr)
