"""Local strategy: a per-toolchain setup script prepares the host toolchain, then runs the procedure.

Script contract: local/<os>-<toolchain>.sh <arch> <command...>. It must put the right
compiler and linker on PATH and exec the trailing command.
"""

from __future__ import annotations

import os
import subprocess
import sys
from collections.abc import Callable, Mapping
from pathlib import Path

from libmem_build.build.bindings import BuildBindings
from libmem_build.errors import BuildToolError, EnvironmentPreparationError
from libmem_build.helpers import echo_command
from libmem_build.platforms.registry import Platform

PROCEDURE_MODULE = "libmem_build.procedure"


def setup_script(platform: Platform, env_dir: Path) -> Path:
    return env_dir / "local" / f"{platform.env_name}.sh"


def local_bindings(platform: Platform, source_dir: Path, build_dir: Path, out_dir: Path) -> BuildBindings:
    return BuildBindings(
        platform=platform.identifier,
        source_dir=str(source_dir),
        build_dir=str(build_dir),
        out_dir=str(out_dir),
    )


def run_locally(
    platform: Platform,
    source_dir: Path,
    build_dir: Path,
    out_dir: Path,
    env_dir: Path,
    runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    environ: Mapping[str, str] | None = None,
) -> BuildBindings:
    """Invoke the setup script with the procedure as its trailing command. Returns the bindings used."""
    script = setup_script(platform, env_dir)
    if not script.is_file():
        msg = f"No local environment for {platform.env_name}: {script} not found"
        raise EnvironmentPreparationError(msg)

    bindings = local_bindings(platform, source_dir, build_dir, out_dir)
    env = dict(os.environ if environ is None else environ)
    env.update(bindings.to_environ())
    cmd = ["bash", str(script), platform.arch.value, sys.executable, "-m", PROCEDURE_MODULE]
    echo_command(cmd)
    try:
        r = runner(cmd, env=env)
    except FileNotFoundError as e:
        msg = "bash not found in PATH"
        raise EnvironmentPreparationError(msg) from e
    if r.returncode != 0:
        print(f"❌ Local build failed for {platform}", file=sys.stderr)
        msg = f"{script.name} {platform.arch.value} failed (exit {r.returncode})"
        raise BuildToolError(msg, r.returncode)
    return bindings
