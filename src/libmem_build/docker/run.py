"""Run the build procedure inside a build-environment image."""

from __future__ import annotations

import os
import subprocess
import sys
from collections.abc import Callable
from pathlib import Path

from libmem_build.build.bindings import BuildBindings
from libmem_build.errors import BuildToolError, EnvironmentPreparationError
from libmem_build.helpers import echo_command
from libmem_build.platforms.registry import Platform

CONTAINER_SOURCE_DIR = "/source"
CONTAINER_BUILD_DIR = "/build"
CONTAINER_OUT_DIR = "/out"
CONTAINER_PACKAGE_ROOT = "/opt/libmem-build"

# The libmem_build package directory, mounted read-only so the container runs this exact procedure.
PACKAGE_DIR = Path(__file__).resolve().parent.parent


def container_bindings(platform: Platform) -> BuildBindings:
    return BuildBindings(
        platform=platform.identifier,
        source_dir=CONTAINER_SOURCE_DIR,
        build_dir=CONTAINER_BUILD_DIR,
        out_dir=CONTAINER_OUT_DIR,
    )


def current_identity() -> tuple[int, int]:
    """(uid, gid) of the invoking user, forwarded so outputs are not root-owned."""
    return os.getuid(), os.getgid()


def run_command(
    platform: Platform,
    tag: str,
    bindings: BuildBindings,
    source_dir: Path,
    out_dir: Path,
    identity: tuple[int, int] | None = None,
) -> list[str]:
    uid, gid = identity if identity is not None else current_identity()
    env_args = [
        f"PUID={uid}",
        f"PGID={gid}",
        f"PYTHONPATH={CONTAINER_PACKAGE_ROOT}",
        *(f"{k}={v}" for k, v in bindings.to_environ().items()),
    ]
    return [
        "docker",
        "run",
        "--platform",
        platform.docker_platform,
        "--rm",
        *[x for e in env_args for x in ("-e", e)],
        "-v",
        f"{source_dir}:{bindings.source_dir}:ro",
        "-v",
        f"{out_dir}:{bindings.out_dir}:rw",
        "-v",
        f"{PACKAGE_DIR}:{CONTAINER_PACKAGE_ROOT}/{PACKAGE_DIR.name}:ro",
        tag,
        "python3",
        "-m",
        "libmem_build.procedure",
    ]


def run_in_container(
    platform: Platform,
    tag: str,
    source_dir: Path,
    out_dir: Path,
    runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    identity: tuple[int, int] | None = None,
) -> BuildBindings:
    """docker run the procedure; source is mounted read-only, output read-write. Returns the bindings used."""
    bindings = container_bindings(platform)
    cmd = run_command(platform, tag, bindings, source_dir, out_dir, identity=identity)
    echo_command(cmd)
    try:
        r = runner(cmd)
    except FileNotFoundError as e:
        msg = "docker not found in PATH"
        raise EnvironmentPreparationError(msg) from e
    if r.returncode != 0:
        print(f"❌ Containerized build failed for {platform}", file=sys.stderr)
        msg = f"docker run failed for {tag} (exit {r.returncode})"
        raise BuildToolError(msg, r.returncode)
    return bindings
