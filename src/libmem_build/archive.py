"""Compress an output tree into <out_dir>.tar.gz reproducibly.

Owner and group are zeroed (numeric, no names) and member mtimes and modes are fixed. The gzip
header carries no name or timestamp, so identical trees give identical bytes whoever builds them.
"""

from __future__ import annotations

import gzip
import sys
import tarfile
from pathlib import Path

from libmem_build.errors import ArchiveError

ARCHIVE_SUFFIX = ".tar.gz"
DIR_MODE = 0o755
FILE_MODE = 0o644


def archive_path(out_dir: Path) -> Path:
    return out_dir.with_name(out_dir.name + ARCHIVE_SUFFIX)


def normalize_member(tarinfo: tarfile.TarInfo) -> tarfile.TarInfo:
    """Drop ownership, timestamps and umask-dependent modes from a member."""
    tarinfo.uid = 0
    tarinfo.gid = 0
    tarinfo.uname = ""
    tarinfo.gname = ""
    tarinfo.mtime = 0
    if tarinfo.isdir():
        tarinfo.mode = DIR_MODE
    elif tarinfo.isfile():
        tarinfo.mode = FILE_MODE
    return tarinfo


def create_archive(out_dir: Path) -> Path:
    """Archive out_dir with its basename as the single top-level entry. Returns the archive path."""
    if not out_dir.is_dir():
        msg = f"Output directory not found: {out_dir}"
        raise ArchiveError(msg)
    dst = archive_path(out_dir)
    try:
        with dst.open("wb") as raw, gzip.GzipFile(
            filename="", mode="wb", fileobj=raw, mtime=0
        ) as gz, tarfile.open(fileobj=gz, mode="w", format=tarfile.GNU_FORMAT) as tar:
            tar.add(out_dir, arcname=out_dir.name, filter=normalize_member)
    except (OSError, tarfile.TarError) as e:
        dst.unlink(missing_ok=True)
        msg = f"Could not create {dst}: {e}"
        raise ArchiveError(msg) from e
    print(f"📦 Archive: {dst} ({dst.stat().st_size / (1024 * 1024):.2f} MB)", file=sys.stderr)
    return dst
