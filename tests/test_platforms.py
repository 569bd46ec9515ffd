"""Tests for libmem_build.platforms (registry and confirmation policies)."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from libmem_build.errors import UnsupportedPlatformError, ValidationError
from libmem_build.platforms import (
    PLATFORMS,
    Architecture,
    OSFamily,
    Toolchain,
    parse_platform,
    platform_identifiers,
    tty_confirm,
    validate,
)
from libmem_build.platforms.confirm import is_affirmative


class TestRegistry:
    def test_identifiers_are_the_fixed_set(self) -> None:
        assert platform_identifiers() == [
            "linux-gnu-x86_64",
            "linux-gnu-aarch64",
            "linux-musl-x86_64",
            "linux-musl-aarch64",
            "windows-msvc-i686",
            "windows-msvc-x86_64",
            "windows-msvc-aarch64",
        ]

    def test_parse_decodes_components(self) -> None:
        p = parse_platform("linux-musl-x86_64")
        assert p.os_family is OSFamily.LINUX
        assert p.toolchain is Toolchain.MUSL
        assert p.arch is Architecture.X86_64
        assert p.env_name == "linux-musl"
        assert p.docker_platform == "linux/amd64"
        assert str(p) == "linux-musl-x86_64"

    def test_only_linux_is_containerized(self) -> None:
        assert {p.identifier for p in PLATFORMS if p.containerized} == {
            "linux-gnu-x86_64",
            "linux-gnu-aarch64",
            "linux-musl-x86_64",
            "linux-musl-aarch64",
        }

    def test_unsupported_combinations_are_linux_aarch64(self) -> None:
        assert {p.identifier for p in PLATFORMS if p.unsupported} == {
            "linux-gnu-aarch64",
            "linux-musl-aarch64",
        }


class TestValidate:
    def test_returns_known_platform(self) -> None:
        assert validate("windows-msvc-i686").identifier == "windows-msvc-i686"

    @pytest.mark.parametrize(
        "identifier", ["solaris-sparc", "", "linux-gnu", "LINUX-GNU-X86_64", "linux-gnu-x86_64 "]
    )
    def test_unknown_platform_raises_without_side_effects(
        self, identifier: str, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        confirm = MagicMock(return_value=True)
        with pytest.raises(ValidationError, match="Unknown platform"):
            validate(identifier, confirm)
        confirm.assert_not_called()
        assert os.listdir(tmp_path) == []

    def test_unsupported_defaults_to_abort(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(UnsupportedPlatformError):
            validate("linux-musl-aarch64")
        assert "not supported by libmem" in capsys.readouterr().err

    def test_unsupported_proceeds_when_confirmed(self) -> None:
        confirm = MagicMock(return_value=True)
        p = validate("linux-gnu-aarch64", confirm)
        assert p.identifier == "linux-gnu-aarch64"
        confirm.assert_called_once_with(p)

    def test_supported_platform_never_asks(self) -> None:
        confirm = MagicMock(return_value=False)
        validate("linux-gnu-x86_64", confirm)
        confirm.assert_not_called()


class TestConfirm:
    @pytest.mark.parametrize("reply", ["y", "Y", "yes\n", "  y"])
    def test_affirmative(self, reply: str) -> None:
        assert is_affirmative(reply)

    @pytest.mark.parametrize("reply", ["", "\n", "n", "N", "no", "sure"])
    def test_not_affirmative(self, reply: str) -> None:
        assert not is_affirmative(reply)

    def test_no_terminal_means_no(self, tmp_path: Path) -> None:
        with patch("sys.stdin") as stdin:
            stdin.isatty.return_value = False
            assert tty_confirm(parse_platform("linux-gnu-aarch64"), str(tmp_path / "no-tty")) is False

    def test_falls_back_to_interactive_stdin(self, tmp_path: Path) -> None:
        with patch("sys.stdin") as stdin, patch("builtins.input", return_value="y") as m_input:
            stdin.isatty.return_value = True
            assert tty_confirm(parse_platform("linux-gnu-aarch64"), str(tmp_path / "no-tty"))
        m_input.assert_called_once()

    def test_eof_on_stdin_means_no(self, tmp_path: Path) -> None:
        with patch("sys.stdin") as stdin, patch("builtins.input", side_effect=EOFError):
            stdin.isatty.return_value = True
            assert not tty_confirm(parse_platform("linux-gnu-aarch64"), str(tmp_path / "no-tty"))
