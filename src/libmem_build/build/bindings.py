"""The four environment bindings every execution strategy hands to the build procedure."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path, PureWindowsPath

from libmem_build.errors import ValidationError

PLATFORM_VAR = "_PLATFORM"
SOURCE_DIR_VAR = "_SOURCE_DIR"
BUILD_DIR_VAR = "_BUILD_DIR"
OUT_DIR_VAR = "_OUT_DIR"

REQUIRED_VARS: tuple[str, ...] = (PLATFORM_VAR, SOURCE_DIR_VAR, BUILD_DIR_VAR, OUT_DIR_VAR)


@dataclass(frozen=True)
class BuildBindings:
    platform: str
    source_dir: str
    build_dir: str
    out_dir: str

    def to_environ(self) -> dict[str, str]:
        return {
            PLATFORM_VAR: self.platform,
            SOURCE_DIR_VAR: self.source_dir,
            BUILD_DIR_VAR: self.build_dir,
            OUT_DIR_VAR: self.out_dir,
        }

    @classmethod
    def from_environ(cls, environ: Mapping[str, str]) -> BuildBindings:
        """Read the bindings back. Raises ValidationError naming every missing variable."""
        missing = [v for v in REQUIRED_VARS if not environ.get(v)]
        if missing:
            msg = f"Missing required environment: {', '.join(missing)}"
            raise ValidationError(msg)
        for var in (SOURCE_DIR_VAR, BUILD_DIR_VAR, OUT_DIR_VAR):
            if not _is_absolute(environ[var]):
                msg = f"{var} must be an absolute path: {environ[var]}"
                raise ValidationError(msg)
        return cls(
            platform=environ[PLATFORM_VAR],
            source_dir=environ[SOURCE_DIR_VAR],
            build_dir=environ[BUILD_DIR_VAR],
            out_dir=environ[OUT_DIR_VAR],
        )


def _is_absolute(value: str) -> bool:
    return Path(value).is_absolute() or PureWindowsPath(value).is_absolute()
