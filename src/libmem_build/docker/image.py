"""Build-environment images: one Dockerfile per OS/toolchain family, one tag per (family, arch)."""

from __future__ import annotations

import subprocess
import sys
from collections.abc import Callable
from pathlib import Path

from libmem_build.errors import EnvironmentPreparationError
from libmem_build.helpers import echo_command
from libmem_build.platforms.registry import Platform


def image_tag(platform: Platform, prefix: str = "libmem-build") -> str:
    """e.g. libmem-build-linux-gnu-amd64"""
    arch = platform.docker_platform.rsplit("/", 1)[-1]
    return f"{prefix}-{platform.env_name}-{arch}"


def dockerfile_path(platform: Platform, env_dir: Path) -> Path:
    return env_dir / "docker" / f"{platform.env_name}.Dockerfile"


def build_image(
    platform: Platform,
    env_dir: Path,
    prefix: str = "libmem-build",
    runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
) -> str:
    """docker build the platform's image (layer cache makes rebuilds cheap). Returns the tag."""
    dockerfile = dockerfile_path(platform, env_dir)
    if not dockerfile.is_file():
        msg = f"Dockerfile not found: {dockerfile}"
        raise EnvironmentPreparationError(msg)
    tag = image_tag(platform, prefix)
    cmd = [
        "docker",
        "build",
        "--platform",
        platform.docker_platform,
        "-t",
        tag,
        "-f",
        str(dockerfile),
        str(dockerfile.parent),
    ]
    print(f"🔨 Building image {tag}...", file=sys.stderr)
    echo_command(cmd)
    try:
        r = runner(cmd)
    except FileNotFoundError as e:
        msg = "docker not found in PATH"
        raise EnvironmentPreparationError(msg) from e
    if r.returncode != 0:
        msg = f"docker build failed for {tag} (exit {r.returncode})"
        raise EnvironmentPreparationError(msg)
    return tag
