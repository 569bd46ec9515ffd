"""Source resolution: local directories and cached shallow clones of version tags."""

from .resolve import ResolvedSource, cache_key, fetch_tag, resolve
from .spec import LOCAL_VERSION, LocalPath, SourceSpec, VersionTag, parse_source

__all__ = [
    "LOCAL_VERSION",
    "LocalPath",
    "ResolvedSource",
    "SourceSpec",
    "VersionTag",
    "cache_key",
    "fetch_tag",
    "parse_source",
    "resolve",
]
