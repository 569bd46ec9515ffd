"""Tests for libmem_build.archive."""

from __future__ import annotations

import os
import shutil
import tarfile
from pathlib import Path

import pytest

from libmem_build.archive import archive_path, create_archive, normalize_member
from libmem_build.errors import ArchiveError


@pytest.fixture
def out_tree(tmp_path: Path) -> Path:
    out = tmp_path / "libmem-4.2.1-linux-gnu-x86_64"
    (out / "lib").mkdir(parents=True)
    (out / "lib" / "liblibmem.a").write_bytes(b"archive")
    (out / "GLIBC_VERSION.txt").write_text("2.31\n")
    return out


class TestCreateArchive:
    def test_archive_next_to_tree(self, out_tree: Path) -> None:
        dst = create_archive(out_tree)
        assert dst == archive_path(out_tree)
        assert dst.name == "libmem-4.2.1-linux-gnu-x86_64.tar.gz"

    def test_single_top_level_entry_owned_by_root(self, out_tree: Path) -> None:
        with tarfile.open(create_archive(out_tree), "r:gz") as tar:
            members = tar.getmembers()
        names = [m.name for m in members]
        assert {n.split("/")[0] for n in names} == {out_tree.name}
        assert f"{out_tree.name}/lib/liblibmem.a" in names
        for m in members:
            assert (m.uid, m.gid, m.uname, m.gname) == (0, 0, "", "")

    def test_identical_trees_identical_bytes(self, out_tree: Path) -> None:
        first = create_archive(out_tree).read_bytes()
        archive_path(out_tree).unlink()
        second = create_archive(out_tree).read_bytes()
        assert first == second

    def test_copies_with_other_mtimes_and_modes_match(self, out_tree: Path, tmp_path: Path) -> None:
        other = tmp_path / "elsewhere" / out_tree.name
        shutil.copytree(out_tree, other)
        for p in [other, *other.rglob("*")]:
            os.utime(p, (1_000_000, 1_000_000))
        (other / "lib").chmod(0o700)
        (other / "GLIBC_VERSION.txt").chmod(0o600)
        assert create_archive(out_tree).read_bytes() == create_archive(other).read_bytes()

    def test_missing_tree(self, tmp_path: Path) -> None:
        with pytest.raises(ArchiveError, match="not found"):
            create_archive(tmp_path / "absent")
        assert not (tmp_path / "absent.tar.gz").exists()


class TestNormalizeMember:
    def test_zeroes_owner_and_mtime(self) -> None:
        info = tarfile.TarInfo("x")
        info.uid, info.gid, info.uname, info.gname = 1234, 5678, "dev", "staff"
        info.mtime = 1_700_000_000
        out = normalize_member(info)
        assert (out.uid, out.gid, out.uname, out.gname, out.mtime) == (0, 0, "", "", 0)

    def test_fixed_modes(self) -> None:
        d = tarfile.TarInfo("d")
        d.type, d.mode = tarfile.DIRTYPE, 0o700
        f = tarfile.TarInfo("f")
        f.mode = 0o600
        assert normalize_member(d).mode == 0o755
        assert normalize_member(f).mode == 0o644
