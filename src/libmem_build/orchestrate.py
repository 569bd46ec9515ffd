"""One build run: validate -> resolve source -> prepare environment and build -> archive."""

from __future__ import annotations

import logging
import subprocess
import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from libmem_build.archive import create_archive
from libmem_build.config import BuildConfig
from libmem_build.environment import ExecutionEnvironment, prepare
from libmem_build.errors import ResolutionError, ValidationError
from libmem_build.platforms.registry import Platform, validate
from libmem_build.source import parse_source, resolve
from libmem_build.workspace import CacheRoot, TempScope

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildResult:
    platform: Platform
    source_dir: Path
    version: str
    out_dir: Path
    archive: Path | None
    environment: ExecutionEnvironment


def output_dir(config: BuildConfig, version: str, platform: Platform) -> Path:
    """Explicit out_dir or out_root/<name>-<version>-<platform>. Either must not exist yet."""
    out = config.out_dir or config.default_out_dir(version, platform.identifier)
    if out.exists():
        msg = f"Output directory already exists: {out}"
        raise ValidationError(msg)
    return out


def build(
    platform_id: str,
    source: str,
    *,
    config: BuildConfig,
    confirm: Callable[[Platform], bool] | None = None,
    cache: CacheRoot | None = None,
    runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
) -> BuildResult:
    """Run the whole pipeline. Everything up to the output-directory check is side-effect free."""
    platform = validate(platform_id, confirm)
    spec = parse_source(source)
    out_dir = output_dir(config, spec.version, platform)
    cache = cache or CacheRoot(config.cache_dir)

    with TempScope() as temp:
        resolved = resolve(
            spec, cache=cache, temp=temp, repo_url=config.repo_url, name=config.name, runner=runner
        )
        if not resolved.path.is_dir():
            msg = f"Source directory not found: {resolved.path}"
            raise ResolutionError(msg)
        try:
            out_dir.mkdir(parents=True)
        except FileExistsError as e:
            msg = f"Output directory already exists: {out_dir}"
            raise ValidationError(msg) from e

        print(f"Platform: {platform}")
        print(f"Source directory: {resolved.path}")
        print(f"Output directory: {out_dir}")
        print(flush=True)

        env = prepare(platform, resolved.path, out_dir, config=config, temp=temp, runner=runner)

    archive = None
    if config.skip_archive:
        log.debug("Skipping archive for %s", out_dir)
    else:
        print("[+] Create archive", flush=True)
        archive = create_archive(out_dir)

    print("✅ Done")
    sys.stdout.flush()
    return BuildResult(platform, resolved.path, resolved.version, out_dir, archive, env)
