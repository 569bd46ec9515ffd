"""Supported platform identifiers (<os>-<toolchain>-<arch>) decoded once into typed values."""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from libmem_build.errors import UnsupportedPlatformError, ValidationError

log = logging.getLogger(__name__)


class OSFamily(str, Enum):
    LINUX = "linux"
    WINDOWS = "windows"


class Toolchain(str, Enum):
    GNU = "gnu"
    MUSL = "musl"
    MSVC = "msvc"


class Architecture(str, Enum):
    X86_64 = "x86_64"
    AARCH64 = "aarch64"
    I686 = "i686"


# arch -> container engine platform (only Linux targets are containerized)
ARCH_DOCKER_PLATFORMS: dict[Architecture, str] = {
    Architecture.X86_64: "linux/amd64",
    Architecture.AARCH64: "linux/arm64",
    Architecture.I686: "linux/386",
}

# Known platforms the library itself cannot build yet: (os, arch).
UNSUPPORTED_COMBINATIONS: frozenset[tuple[OSFamily, Architecture]] = frozenset(
    {(OSFamily.LINUX, Architecture.AARCH64)}
)


@dataclass(frozen=True)
class Platform:
    os_family: OSFamily
    toolchain: Toolchain
    arch: Architecture

    @property
    def identifier(self) -> str:
        return f"{self.os_family.value}-{self.toolchain.value}-{self.arch.value}"

    @property
    def env_name(self) -> str:
        """Platform minus its architecture suffix (linux-gnu, windows-msvc)."""
        return f"{self.os_family.value}-{self.toolchain.value}"

    @property
    def containerized(self) -> bool:
        return self.os_family is OSFamily.LINUX

    @property
    def docker_platform(self) -> str:
        return ARCH_DOCKER_PLATFORMS[self.arch]

    @property
    def unsupported(self) -> bool:
        return (self.os_family, self.arch) in UNSUPPORTED_COMBINATIONS

    def __str__(self) -> str:
        return self.identifier


PLATFORMS: tuple[Platform, ...] = (
    # Linux (glibc)
    Platform(OSFamily.LINUX, Toolchain.GNU, Architecture.X86_64),
    Platform(OSFamily.LINUX, Toolchain.GNU, Architecture.AARCH64),
    # Linux (musl)
    Platform(OSFamily.LINUX, Toolchain.MUSL, Architecture.X86_64),
    Platform(OSFamily.LINUX, Toolchain.MUSL, Architecture.AARCH64),
    # Windows (MSVC)
    Platform(OSFamily.WINDOWS, Toolchain.MSVC, Architecture.I686),
    Platform(OSFamily.WINDOWS, Toolchain.MSVC, Architecture.X86_64),
    Platform(OSFamily.WINDOWS, Toolchain.MSVC, Architecture.AARCH64),
)

_BY_IDENTIFIER: dict[str, Platform] = {p.identifier: p for p in PLATFORMS}


def platform_identifiers() -> list[str]:
    return [p.identifier for p in PLATFORMS]


def parse_platform(identifier: str) -> Platform:
    """Look up identifier in the fixed platform set. Raises ValidationError if unknown."""
    try:
        return _BY_IDENTIFIER[identifier]
    except KeyError:
        msg = f"Unknown platform: {identifier}"
        raise ValidationError(msg) from None


def validate(identifier: str, confirm: Callable[[Platform], bool] | None = None) -> Platform:
    """Parse identifier, then gate unsupported combinations on confirm(platform).

    confirm defaults to a non-interactive refusal. Pure apart from the confirm callback:
    nothing is written to disk on any path.
    """
    platform = parse_platform(identifier)
    if platform.unsupported:
        print(
            f"⚠️  Building for {platform.arch.value} on {platform.os_family.value} is not supported by libmem currently, the build will fail.",
            file=sys.stderr,
        )
        allowed = (confirm or deny_unsupported)(platform)
        log.debug("Unsupported platform %s confirmed=%s", platform, allowed)
        if not allowed:
            msg = f"Refusing to build unsupported platform: {platform}"
            raise UnsupportedPlatformError(msg)
    return platform


def deny_unsupported(platform: Platform) -> bool:
    """Default confirmation policy: never build an unsupported combination."""
    return False
