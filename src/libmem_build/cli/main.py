"""`libmem-build <platform> <source>`: build one platform's binary distribution."""

from __future__ import annotations

import os
import sys
from pathlib import Path

from libmem_build.cli.parse_common import config_path, configure_logging, split_options
from libmem_build.config import load_config
from libmem_build.errors import LibmemBuildError, UsageError
from libmem_build.orchestrate import build
from libmem_build.platforms import PLATFORMS, tty_confirm


def usage() -> str:
    prog = Path(sys.argv[0]).name if sys.argv and sys.argv[0] else "libmem-build"
    platforms = "\n".join(f"  - {p}" for p in PLATFORMS)
    return f"""Usage: {prog} [--config FILE] <platform> <source>
       {prog} platforms

Environment variables:
  LIBMEM_BUILD_OUT_DIR: The output directory (default: "out/libmem-${{version}}-${{platform}}").
  LIBMEM_BUILD_CACHE_DIR: The cache directory (default: "cache").
  LIBMEM_BUILD_SKIP_ARCHIVE: Skip the final archive creation (default: false).
  LIBMEM_BUILD_CONFIG: YAML config file (default: "libmem-build.yaml" if present).
  LIBMEM_BUILD_LOG_LEVEL: Logging level (default: WARNING).

Supported platforms:
{platforms}

Source formats:
  path: A local path to a source directory (e.g. "./libmem").
  version: A version number (e.g. "4.2.1")."""


def print_platforms() -> None:
    for p in PLATFORMS:
        note = "  (not supported by libmem currently)" if p.unsupported else ""
        print(f"{p}{note}")


def run_build_argv(argv: list[str] | None = None) -> int:
    """Parse argv and run one build. Returns the process exit code."""
    if argv is None:
        argv = sys.argv[1:]
    if argv and argv[0] in ("-h", "--help"):
        print(usage())
        return 0
    if argv == ["platforms"]:
        print_platforms()
        return 0

    try:
        opts, rest = split_options(argv, {"config": config_path})
        if len(rest) != 2:
            msg = f"Expected <platform> <source>, got {len(rest)} argument(s)"
            raise UsageError(msg)
    except UsageError as e:
        print(f"❌ {e}", file=sys.stderr)
        print(usage(), file=sys.stderr)
        return e.exit_code

    configure_logging(os.environ.get("LIBMEM_BUILD_LOG_LEVEL"))
    platform_id, source = rest
    try:
        config = load_config(opts["config"])
        configure_logging(config.log_level)
        build(platform_id, source, config=config, confirm=tty_confirm)
    except LibmemBuildError as e:
        print(f"❌ {e}", file=sys.stderr)
        return e.exit_code
    except KeyboardInterrupt:
        print("❌ Interrupted", file=sys.stderr)
        return 130
    return 0


def main() -> None:
    """Main CLI entry point."""
    sys.exit(run_build_argv())


if __name__ == "__main__":
    main()
