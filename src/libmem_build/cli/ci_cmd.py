"""CLI for ci: libmem-build-ci matrix | version."""

from __future__ import annotations

import sys

from libmem_build.ci import run_matrix, run_version
from libmem_build.cli.parse_common import split_options
from libmem_build.errors import LibmemBuildError, UsageError


def run_ci_argv(argv: list[str] | None = None) -> int:
    """Dispatch libmem-build-ci <subcommand>. Returns the process exit code."""
    if argv is None:
        argv = sys.argv[1:]
    if not argv:
        print("Usage: libmem-build-ci <subcommand> [options]", file=sys.stderr)
        print("Subcommands:", file=sys.stderr)
        print("  matrix [--filter REGEX]  - CI build matrix as JSON", file=sys.stderr)
        print("  version [--version V]    - Source/artifact version from the CI trigger", file=sys.stderr)
        return UsageError.exit_code

    sub = argv[0].lower()
    args = argv[1:]
    try:
        if sub == "matrix":
            opts, _ = split_options(args, {"filter": None})
            return run_matrix(opts["filter"])
        if sub == "version":
            opts, _ = split_options(args, {"version": None})
            return run_version(opts["version"])
    except LibmemBuildError as e:
        print(f"❌ {e}", file=sys.stderr)
        return e.exit_code

    print(f"Error: Unknown ci subcommand: {sub}", file=sys.stderr)
    return UsageError.exit_code


def main() -> None:
    sys.exit(run_ci_argv())


if __name__ == "__main__":
    main()
