"""Tests for the libmem-build and libmem-build-ci command lines."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from libmem_build.cli.ci_cmd import run_ci_argv
from libmem_build.cli.main import run_build_argv
from libmem_build.cli.parse_common import config_path, log_level, split_options
from libmem_build.errors import ResolutionError, UsageError


@pytest.fixture(autouse=True)
def isolated(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    for var in ("LIBMEM_BUILD_CONFIG", "LIBMEM_BUILD_OUT_DIR", "LIBMEM_BUILD_CACHE_DIR", "GITHUB_OUTPUT"):
        monkeypatch.delenv(var, raising=False)
    return tmp_path


class TestBuildCli:
    @pytest.mark.parametrize("argv", [[], ["linux-gnu-x86_64"], ["a", "b", "c"]])
    def test_wrong_argument_count(self, argv: list[str], capsys: pytest.CaptureFixture[str]) -> None:
        assert run_build_argv(argv) == 2
        err = capsys.readouterr().err
        assert "Usage:" in err
        assert "linux-musl-x86_64" in err

    def test_bad_option_is_usage_error(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert run_build_argv(["--jobs", "4", "linux-gnu-x86_64", "./libmem"]) == 2
        err = capsys.readouterr().err
        assert "❌ Unknown option: --jobs" in err
        assert "Usage:" in err

    def test_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert run_build_argv(["--help"]) == 0
        assert "Source formats:" in capsys.readouterr().out

    def test_platforms(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert run_build_argv(["platforms"]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert len(lines) == 7
        assert "linux-gnu-aarch64  (not supported by libmem currently)" in lines
        assert "windows-msvc-x86_64" in lines

    def test_unknown_platform(self, isolated: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert run_build_argv(["linux-gnu-riscv64", "4.2.1"]) == 1
        assert "❌ Unknown platform: linux-gnu-riscv64" in capsys.readouterr().err
        assert list(isolated.iterdir()) == []

    def test_error_exit_code(self, capsys: pytest.CaptureFixture[str]) -> None:
        with patch("libmem_build.cli.main.build", side_effect=ResolutionError("git clone failed")):
            assert run_build_argv(["linux-gnu-x86_64", "4.2.1"]) == 1
        assert "❌ git clone failed" in capsys.readouterr().err

    def test_interrupt(self) -> None:
        with patch("libmem_build.cli.main.build", side_effect=KeyboardInterrupt):
            assert run_build_argv(["linux-gnu-x86_64", "4.2.1"]) == 130

    def test_config_flag(self, isolated: Path) -> None:
        (isolated / "alt.yaml").write_text("name: libmem-fork\n")
        with patch("libmem_build.cli.main.build") as mock_build:
            assert run_build_argv(["--config", "alt.yaml", "linux-gnu-x86_64", "./libmem"]) == 0
        args, kwargs = mock_build.call_args
        assert args == ("linux-gnu-x86_64", "./libmem")
        assert kwargs["config"].name == "libmem-fork"


class TestCiCli:
    def test_no_arguments(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert run_ci_argv([]) == 2
        assert "Subcommands:" in capsys.readouterr().err

    def test_unknown_subcommand(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert run_ci_argv(["release"]) == 2
        assert "Unknown ci subcommand: release" in capsys.readouterr().err

    def test_matrix_filter(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert run_ci_argv(["matrix", "--filter", "linux-musl-.*"]) == 0
        assert json.loads(capsys.readouterr().out) == {
            "include": [{"platform": "linux-musl-x86_64", "os": "ubuntu-latest"}]
        }

    def test_matrix_filter_without_value(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert run_ci_argv(["matrix", "--filter"]) == 2
        assert "requires a value" in capsys.readouterr().err

    def test_matrix_invalid_filter(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert run_ci_argv(["matrix", "--filter", "("]) == 1
        assert "❌" in capsys.readouterr().err

    def test_version(self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
        monkeypatch.setenv("GITHUB_EVENT_NAME", "workflow_dispatch")
        monkeypatch.delenv("INPUT_VERSION", raising=False)
        assert run_ci_argv(["version", "--version", "4.2.1"]) == 0
        out = capsys.readouterr().out
        assert "Source version: 4.2.1" in out
        assert "Artifact version: test" in out


class TestParseCommon:
    def test_split_options(self) -> None:
        opts, rest = split_options(["a", "--filter", "x", "b"], {"filter": None, "other": None})
        assert opts == {"filter": "x", "other": None}
        assert rest == ["a", "b"]

    def test_equals_form_and_converter(self) -> None:
        opts, rest = split_options(["--config=cfg.yaml", "p", "s"], {"config": config_path})
        assert opts["config"] == Path("cfg.yaml").resolve()
        assert rest == ["p", "s"]

    def test_missing_value(self) -> None:
        with pytest.raises(UsageError, match="--config requires a value"):
            split_options(["p", "s", "--config"], {"config": config_path})

    def test_unknown_option(self) -> None:
        with pytest.raises(UsageError, match="Unknown option: --verbose"):
            split_options(["--verbose", "p"], {"config": config_path})

    def test_log_level(self) -> None:
        assert log_level("debug") == 10
        assert log_level("nonsense") == 30
        assert log_level(None) == 30
