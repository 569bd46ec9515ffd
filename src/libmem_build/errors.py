"""Error taxonomy for libmem-build. Every failure aborts the run; exit codes are chosen here."""

from __future__ import annotations


class LibmemBuildError(Exception):
    """Base class. exit_code is what the CLI exits with when this error reaches it."""

    exit_code = 1


class UsageError(LibmemBuildError):
    """Wrong argument count or shape. Raised before any side effect."""

    exit_code = 2


class ValidationError(LibmemBuildError, ValueError):
    """Unknown platform, unknown source format, bad config, or pre-existing output directory."""


class UnsupportedPlatformError(LibmemBuildError):
    """A known platform that the library cannot build yet, and the operator did not confirm."""


class ResolutionError(LibmemBuildError, RuntimeError):
    """Source could not be fetched or materialized into the cache."""


class EnvironmentPreparationError(LibmemBuildError, RuntimeError):
    """Image build or toolchain setup failed."""


class BuildToolError(LibmemBuildError, RuntimeError):
    """An external tool (cmake, docker run, setup script) exited non-zero."""

    def __init__(self, message: str, returncode: int = 1) -> None:
        super().__init__(message)
        self.returncode = returncode
        self.exit_code = returncode if returncode > 0 else 1


class HarvestError(LibmemBuildError, RuntimeError):
    """An expected build output, header tree or license directory is missing."""


class ArchiveError(LibmemBuildError, RuntimeError):
    """The output tree could not be compressed."""
