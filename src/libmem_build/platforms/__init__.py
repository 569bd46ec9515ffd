"""Platform registry: supported <os>-<toolchain>-<arch> identifiers and the unsupported-combination gate."""

from .confirm import tty_confirm
from .registry import (
    PLATFORMS,
    Architecture,
    OSFamily,
    Platform,
    Toolchain,
    deny_unsupported,
    parse_platform,
    platform_identifiers,
    validate,
)

__all__ = [
    "PLATFORMS",
    "Architecture",
    "OSFamily",
    "Platform",
    "Toolchain",
    "deny_unsupported",
    "parse_platform",
    "platform_identifiers",
    "tty_confirm",
    "validate",
]
