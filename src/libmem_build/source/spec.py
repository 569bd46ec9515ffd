"""Source specifications: a local directory or a remote version tag."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path, PureWindowsPath

from libmem_build.errors import ValidationError
from libmem_build.helpers import sanitize_path_component

LOCAL_VERSION = "local"

_LOCAL_PREFIXES = ("/", "./", "../")
_TAG_PATTERN = re.compile(r"^(?:[0-9].*|master)$")


@dataclass(frozen=True)
class LocalPath:
    path: Path

    @property
    def version(self) -> str:
        return LOCAL_VERSION


@dataclass(frozen=True)
class VersionTag:
    tag: str

    @property
    def version(self) -> str:
        """Tag with path separators replaced, safe to embed in directory names."""
        return sanitize_path_component(self.tag)


SourceSpec = LocalPath | VersionTag


def parse_source(source: str) -> SourceSpec:
    """Classify a source argument. Raises ValidationError for unknown formats."""
    if source.startswith(_LOCAL_PREFIXES) or PureWindowsPath(source).is_absolute():
        return LocalPath(Path(source))
    if _TAG_PATTERN.match(source):
        return VersionTag(source)
    msg = f"Unknown source format: {source}"
    raise ValidationError(msg)
