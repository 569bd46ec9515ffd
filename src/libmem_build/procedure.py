"""Build procedure entry point: `python -m libmem_build.procedure`.

Reads _PLATFORM, _SOURCE_DIR, _BUILD_DIR and _OUT_DIR from the environment, builds both
variants and harvests the output tree. Executed unchanged by the container and local
strategies. Standard library only.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping

from libmem_build.build import BuildBindings, execute, plan_build
from libmem_build.errors import LibmemBuildError
from libmem_build.platforms.registry import parse_platform


def run_procedure(environ: Mapping[str, str] | None = None) -> int:
    """Run the full procedure for the bindings in environ. Returns 0 or the failing exit code."""
    env = os.environ if environ is None else environ
    try:
        bindings = BuildBindings.from_environ(env)
        platform = parse_platform(bindings.platform)
        execute(plan_build(platform, os.cpu_count() or 1), bindings)
    except LibmemBuildError as e:
        print(f"❌ {e}", file=sys.stderr)
        return e.exit_code
    return 0


def main() -> None:
    sys.exit(run_procedure())


if __name__ == "__main__":
    main()
