"""CI build matrix: which platforms CI builds, and on which runner."""

from __future__ import annotations

import json
import re
from collections.abc import Mapping

from libmem_build.errors import ValidationError
from libmem_build.helpers import write_github_output
from libmem_build.platforms.registry import PLATFORMS, OSFamily, Platform

CI_RUNNERS: dict[OSFamily, str] = {
    OSFamily.LINUX: "ubuntu-latest",
    OSFamily.WINDOWS: "windows-2019",
}


def ci_platforms() -> list[Platform]:
    """Supported platforms minus the known-unsupported combinations."""
    return [p for p in PLATFORMS if not p.unsupported]


def build_matrix(platform_filter: str | None = None) -> dict[str, list[dict[str, str]]]:
    """{"include": [{"platform", "os"}]} for CI platforms fully matching platform_filter (default: all)."""
    try:
        pattern = re.compile(f"^(?:{platform_filter or '.*'})$")
    except re.error as e:
        msg = f"Invalid platform filter {platform_filter!r}: {e}"
        raise ValidationError(msg) from e
    return {
        "include": [
            {"platform": p.identifier, "os": CI_RUNNERS[p.os_family]}
            for p in ci_platforms()
            if pattern.search(p.identifier)
        ]
    }


def run(platform_filter: str | None = None, environ: Mapping[str, str] | None = None) -> int:
    """Print the matrix as compact JSON; also write matrix=<json> to $GITHUB_OUTPUT when set."""
    matrix = json.dumps(build_matrix(platform_filter), separators=(",", ":"))
    print(matrix)
    write_github_output({"matrix": matrix}, environ)
    return 0
