"""Interpret a build plan against concrete directories.

Any failing step raises; a failed run's output directory is left as-is and must be treated as
invalid by the caller.
"""

from __future__ import annotations

import fnmatch
import logging
import os
import shutil
import subprocess
import sys
from collections.abc import Callable, Mapping
from pathlib import Path

from libmem_build.build.bindings import BuildBindings
from libmem_build.build.recipe import (
    LICENSE_PATTERNS,
    Announce,
    Compile,
    Configure,
    CopyHeaders,
    CopyLibrary,
    CopyLicenses,
    Probe,
    Step,
    WriteToolchainInfo,
)
from libmem_build.errors import BuildToolError, HarvestError
from libmem_build.helpers import (
    echo_command,
    first_line_field,
    install_file,
    strip_extension,
    write_text_file,
)

log = logging.getLogger(__name__)

Runner = Callable[..., subprocess.CompletedProcess]


class StepExecutor:
    """Runs plan steps for one set of bindings. runner and environ are injectable for tests."""

    def __init__(
        self,
        bindings: BuildBindings,
        runner: Runner = subprocess.run,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.source_dir = Path(bindings.source_dir)
        self.build_dir = Path(bindings.build_dir)
        self.out_dir = Path(bindings.out_dir)
        self.runner = runner
        self.environ = os.environ if environ is None else environ

    def run(self, steps: list[Step]) -> None:
        for step in steps:
            self.execute(step)

    def execute(self, step: Step) -> None:
        if isinstance(step, Announce):
            print(f"[+] {step.message}", flush=True)
        elif isinstance(step, Configure):
            self._tool(
                [
                    "cmake",
                    "-S",
                    str(self.source_dir),
                    "-B",
                    str(self.variant_dir(step.variant.value)),
                    *step.args,
                ]
            )
        elif isinstance(step, Compile):
            self._tool(
                [
                    "cmake",
                    "--build",
                    str(self.variant_dir(step.variant.value)),
                    "--config",
                    "Release",
                    "--parallel",
                    str(step.jobs),
                ]
            )
        elif isinstance(step, CopyLibrary):
            self._copy_library(step)
        elif isinstance(step, CopyHeaders):
            self._copy_headers(step)
        elif isinstance(step, CopyLicenses):
            self._copy_licenses(step)
        elif isinstance(step, WriteToolchainInfo):
            dst = write_text_file(self.out_dir / step.file_name, f"{self.probe(step.probe)}\n")
            print(f"📦 {dst.name}: {dst.read_text().strip()}")
        else:
            msg = f"Unknown build step: {step!r}"
            raise TypeError(msg)

    def variant_dir(self, variant: str) -> Path:
        return self.build_dir / variant

    # --- Tools ---

    def _tool(self, cmd: list[str]) -> None:
        echo_command(cmd)
        try:
            r = self.runner(cmd)
        except FileNotFoundError as e:
            msg = f"{cmd[0]} not found in PATH"
            raise BuildToolError(msg, 127) from e
        if r.returncode != 0:
            msg = f"{cmd[0]} {cmd[1]} failed (exit {r.returncode})"
            raise BuildToolError(msg, r.returncode)

    def _capture(self, cmd: list[str]) -> str:
        try:
            r = self.runner(cmd, capture_output=True, text=True)
        except FileNotFoundError as e:
            msg = f"{cmd[0]} not found in PATH"
            raise BuildToolError(msg, 127) from e
        if r.returncode != 0:
            msg = f"{' '.join(cmd)} failed (exit {r.returncode}): {(r.stderr or '').strip()}"
            raise BuildToolError(msg, r.returncode)
        return r.stdout or ""

    def probe(self, probe: Probe) -> str:
        """Query the active toolchain for the version recorded in the output tree."""
        if probe is Probe.GLIBC:
            return first_line_field(self._capture(["ldd", "--version"]), -1)
        if probe is Probe.MUSL:
            version = first_line_field(self._capture(["apk", "info", "musl"]), 0)
            return version.removeprefix("musl-")
        if probe is Probe.MSVC:
            return self.environ.get("VCTOOLSVERSION") or self.environ.get("VSCMD_ARG_VCVARS_VER", "")
        if probe is Probe.WINSDK:
            return self.environ.get("WINDOWSSDKVERSION", "")
        msg = f"Unknown toolchain probe: {probe!r}"
        raise TypeError(msg)

    # --- Harvest ---

    def _copy_library(self, step: CopyLibrary) -> None:
        src = self.build_dir / step.src
        if not src.is_file():
            msg = f"Library not found: {src}"
            raise HarvestError(msg)
        dst = install_file(src, self.out_dir / "lib" / step.dest)
        print(f"📦 {step.src} -> lib/{dst.name}")

    def _copy_headers(self, step: CopyHeaders) -> None:
        src = self.source_dir / step.src
        if not src.is_dir():
            msg = f"Header directory not found: {src}"
            raise HarvestError(msg)
        shutil.copytree(src, self.out_dir / step.dest, symlinks=True, dirs_exist_ok=True)
        print(f"📦 {step.src}/ -> {step.dest}/")

    def _copy_licenses(self, step: CopyLicenses) -> None:
        src = (self.source_dir / step.src) if step.src != "." else self.source_dir
        if not src.is_dir():
            msg = f"License directory not found for {step.name}: {src}"
            raise HarvestError(msg)
        found = license_files(src)
        if not found:
            log.warning("No license files found for %s in %s", step.name, src)
        for f in found:
            dst = install_file(f, self.out_dir / "licenses" / license_name(step.name, f.name))
            print(f"📦 {f.name} -> licenses/{dst.name}")


def license_files(directory: Path) -> list[Path]:
    """Regular files (not symlinks) directly in directory matching a license pattern, case-insensitively."""
    out: list[Path] = []
    for p in sorted(directory.iterdir()):
        if p.is_symlink() or not p.is_file():
            continue
        lower = p.name.lower()
        if any(fnmatch.fnmatchcase(lower, pat) for pat in LICENSE_PATTERNS):
            out.append(p)
    return out


def license_name(dependency: str, file_name: str) -> str:
    """{dependency}-{file name without extension, lowercased}.txt"""
    return f"{dependency}-{strip_extension(file_name).lower()}.txt"


def execute(steps: list[Step], bindings: BuildBindings, runner: Runner = subprocess.run) -> None:
    StepExecutor(bindings, runner=runner).run(steps)
    sys.stdout.flush()
