"""CI automation: build matrix for the supported platforms; source/artifact version from the trigger."""

from .matrix import CI_RUNNERS, build_matrix, ci_platforms
from .matrix import run as run_matrix
from .version import Versions, resolve_versions
from .version import run as run_version

__all__ = [
    "CI_RUNNERS",
    "Versions",
    "build_matrix",
    "ci_platforms",
    "resolve_versions",
    "run_matrix",
    "run_version",
]
