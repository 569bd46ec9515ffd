"""Local strategy: host toolchain set up by a per-family script (e.g. windows-msvc.sh)."""

from .run import local_bindings, run_locally, setup_script

__all__ = ["local_bindings", "run_locally", "setup_script"]
