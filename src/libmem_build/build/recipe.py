"""Declarative build recipe: the ordered steps that turn a source tree into an output tree.

plan_build() is pure. The same plan is interpreted by build.execute inside a container or on
the host, so the packaging policy cannot diverge between execution strategies.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from libmem_build.platforms.registry import Architecture, OSFamily, Platform, Toolchain


class BuildVariant(str, Enum):
    SHARED = "shared"
    STATIC = "static"


class Probe(str, Enum):
    """Toolchain facts recorded next to the artifacts."""

    GLIBC = "glibc"
    MUSL = "musl"
    MSVC = "msvc"
    WINSDK = "winsdk"


@dataclass(frozen=True)
class Announce:
    message: str


@dataclass(frozen=True)
class Configure:
    variant: BuildVariant
    args: tuple[str, ...]


@dataclass(frozen=True)
class Compile:
    variant: BuildVariant
    jobs: int


@dataclass(frozen=True)
class CopyLibrary:
    src: str  # relative to the build directory
    dest: str  # file name under lib/


@dataclass(frozen=True)
class CopyHeaders:
    src: str  # relative to the source directory
    dest: str = "include"


@dataclass(frozen=True)
class CopyLicenses:
    name: str
    src: str  # relative to the source directory


@dataclass(frozen=True)
class WriteToolchainInfo:
    file_name: str
    probe: Probe


# typing.Union: the procedure also runs on the Python 3.9 of the glibc build image.
Step = Union[Announce, Configure, Compile, CopyLibrary, CopyHeaders, CopyLicenses, WriteToolchainInfo]

VARIANTS: tuple[BuildVariant, ...] = (BuildVariant.SHARED, BuildVariant.STATIC)

ARCH_FLAGS: dict[Architecture, str] = {
    Architecture.X86_64: "-march=westmere",
    Architecture.AARCH64: "-march=armv8-a",
}

LICENSE_PATTERNS: tuple[str, ...] = ("license*", "copying*", "exception*")

# (name in output, directory relative to the source root)
LICENSE_SOURCES: tuple[tuple[str, str], ...] = (
    ("libmem", "."),
    ("capstone", "capstone"),
    ("keystone", "keystone"),
    ("LIEF", "LIEF"),
    ("llvm", "llvm"),
)

_CAPSTONE = "static/capstone-engine-prefix/src/capstone-engine-build"
_KEYSTONE = "static/keystone-engine-prefix/src/keystone-engine-build/llvm/lib"
_LIEF = "static/lief-project-prefix/src/lief-project-build"

LIBRARIES: dict[OSFamily, tuple[CopyLibrary, ...]] = {
    OSFamily.WINDOWS: (
        CopyLibrary("shared/libmem.dll", "libmem.dll"),
        CopyLibrary("static/libmem.lib", "libmem.lib"),
        CopyLibrary(f"{_CAPSTONE}/capstone.lib", "capstone.lib"),
        CopyLibrary(f"{_KEYSTONE}/keystone.lib", "keystone.lib"),
        CopyLibrary(f"{_LIEF}/LIEF.lib", "LIEF.lib"),
        CopyLibrary("static/llvm.lib", "llvm.lib"),
    ),
    OSFamily.LINUX: (
        CopyLibrary("shared/liblibmem.so", "liblibmem.so"),
        CopyLibrary("static/liblibmem_partial.a", "liblibmem.a"),
        CopyLibrary(f"{_CAPSTONE}/libcapstone.a", "libcapstone.a"),
        CopyLibrary(f"{_KEYSTONE}/libkeystone.a", "libkeystone.a"),
        CopyLibrary(f"{_LIEF}/libLIEF.a", "libLIEF.a"),
        CopyLibrary("static/libllvm.a", "libllvm.a"),
    ),
}

TOOLCHAIN_INFO: dict[Toolchain, tuple[WriteToolchainInfo, ...]] = {
    Toolchain.GNU: (WriteToolchainInfo("GLIBC_VERSION.txt", Probe.GLIBC),),
    Toolchain.MUSL: (WriteToolchainInfo("MUSL_VERSION.txt", Probe.MUSL),),
    Toolchain.MSVC: (
        WriteToolchainInfo("MSVC_VERSION.txt", Probe.MSVC),
        WriteToolchainInfo("WINSDK_VERSION.txt", Probe.WINSDK),
    ),
}


def configure_args(platform: Platform) -> list[str]:
    """Generator, compiler flags and fixed options shared by both variants."""
    if platform.toolchain is Toolchain.MSVC:
        args = ["-G", "NMake Makefiles"]
    else:
        flags = ARCH_FLAGS.get(platform.arch, "")
        args = [
            "-G",
            "Unix Makefiles",
            f"-DCMAKE_C_FLAGS={flags}",
            f"-DCMAKE_CXX_FLAGS={flags}",
        ]
    args += ["-DCMAKE_BUILD_TYPE=Release", "-DLIBMEM_BUILD_TESTS=OFF"]
    return args


def variant_args(variant: BuildVariant) -> list[str]:
    return [f"-DLIBMEM_BUILD_STATIC={'ON' if variant is BuildVariant.STATIC else 'OFF'}"]


def plan_build(platform: Platform, jobs: int) -> list[Step]:
    """Ordered steps for platform. Both variants are built before anything is harvested."""
    base = configure_args(platform)
    steps: list[Step] = []
    for variant in VARIANTS:
        steps += [
            Announce(f"Build {variant.value}"),
            Configure(variant, tuple(base + variant_args(variant))),
            Compile(variant, max(1, jobs)),
        ]
    steps.append(Announce("Copy libraries"))
    steps += LIBRARIES[platform.os_family]
    steps += [Announce("Copy headers"), CopyHeaders("libmem/include")]
    steps.append(Announce("Copy licenses"))
    steps += [CopyLicenses(name, src) for name, src in LICENSE_SOURCES]
    steps.append(Announce("Add stdlib information"))
    steps += TOOLCHAIN_INFO[platform.toolchain]
    return steps
