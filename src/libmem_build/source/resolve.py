"""Resolve a source spec to a directory, fetching version tags into a keyed cache.

A cache entry exists only once fully materialized: clones land in the temp scope and are
moved under the cache root on success. Existing entries are reused without network access.
"""

from __future__ import annotations

import errno
import logging
import os
import shutil
import subprocess
import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from libmem_build.errors import ResolutionError
from libmem_build.helpers import echo_command, sanitize_path_component
from libmem_build.source.spec import LocalPath, SourceSpec, VersionTag
from libmem_build.workspace import CacheRoot, TempScope

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedSource:
    path: Path
    version: str


def cache_key(name: str, tag: str) -> str:
    """Cache entry name for a tag, e.g. libmem-4.2.1. Never contains a path separator."""
    return sanitize_path_component(f"{name}-{tag}")


def resolve(
    spec: SourceSpec,
    *,
    cache: CacheRoot,
    temp: TempScope,
    repo_url: str,
    name: str = "libmem",
    runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
) -> ResolvedSource:
    """Return (source_dir, version_label). Local paths are canonicalized, never cached."""
    if isinstance(spec, LocalPath):
        return ResolvedSource(spec.path.expanduser().resolve(), spec.version)
    if isinstance(spec, VersionTag):
        path = fetch_tag(repo_url, spec.tag, cache_key(name, spec.tag), cache=cache, temp=temp, runner=runner)
        return ResolvedSource(path, spec.version)
    msg = f"Unsupported source spec: {spec!r}"
    raise TypeError(msg)


def fetch_tag(
    url: str,
    tag: str,
    key: str,
    *,
    cache: CacheRoot,
    temp: TempScope,
    runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
) -> Path:
    """Shallow-clone url at tag (with submodules) into cache/key unless already cached."""
    dst = cache.entry(key)
    if dst.is_dir():
        print(f"📦 Using cached source: {key} (from {url}:{tag})", file=sys.stderr)
        return dst

    print(f"🔨 Downloading source: {key} (from {url}:{tag})", file=sys.stderr)
    staging = temp.path / f"{key}.git"
    cmd = [
        "git",
        "clone",
        "--depth",
        "1",
        "--branch",
        tag,
        "--recurse-submodules",
        "--shallow-submodules",
        "--",
        url,
        str(staging),
    ]
    echo_command(cmd)
    try:
        r = runner(cmd)
    except FileNotFoundError as e:
        msg = "git not found in PATH"
        raise ResolutionError(msg) from e
    if r.returncode != 0:
        msg = f"git clone of {url} at {tag} failed (exit {r.returncode})"
        raise ResolutionError(msg)
    if not staging.is_dir():
        msg = f"git clone did not produce {staging}"
        raise ResolutionError(msg)

    _publish(staging, dst)
    log.debug("Cached %s at %s", key, dst)
    return dst


def _publish(staging: Path, dst: Path) -> None:
    """Rename staging to dst. Across filesystems, copy next to dst first so the final step is still a rename."""
    try:
        os.rename(staging, dst)
        return
    except OSError as e:
        if dst.is_dir():
            log.warning("Cache entry %s appeared while fetching; keeping the existing one", dst)
            return
        if e.errno != errno.EXDEV:
            msg = f"Could not move {staging} into cache as {dst}: {e}"
            raise ResolutionError(msg) from e

    sibling = dst.with_name(f".{dst.name}.partial-{os.getpid()}")
    try:
        shutil.copytree(staging, sibling, symlinks=True)
        os.rename(sibling, dst)
    except OSError as e:
        if dst.is_dir():
            log.warning("Cache entry %s appeared while fetching; keeping the existing one", dst)
            return
        msg = f"Could not move {staging} into cache as {dst}: {e}"
        raise ResolutionError(msg) from e
    finally:
        if sibling.exists():
            shutil.rmtree(sibling, ignore_errors=True)
        shutil.rmtree(staging, ignore_errors=True)
