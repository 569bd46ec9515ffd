"""Choose the execution strategy for a platform and run the build procedure through it."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from libmem_build.build.bindings import BuildBindings
from libmem_build.config import BuildConfig
from libmem_build.docker import build_image, run_in_container
from libmem_build.local import run_locally
from libmem_build.platforms.registry import Platform
from libmem_build.workspace import TempScope

log = logging.getLogger(__name__)


class Strategy(str, Enum):
    CONTAINER = "container"
    LOCAL = "local"


@dataclass(frozen=True)
class ExecutionEnvironment:
    strategy: Strategy
    bindings: BuildBindings


def select_strategy(platform: Platform) -> Strategy:
    return Strategy.CONTAINER if platform.containerized else Strategy.LOCAL


def prepare(
    platform: Platform,
    source_dir: Path,
    out_dir: Path,
    *,
    config: BuildConfig,
    temp: TempScope,
    runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
) -> ExecutionEnvironment:
    """Run the build procedure for platform to completion in the selected environment.

    Raises EnvironmentPreparationError or BuildToolError on the first failure.
    """
    strategy = select_strategy(platform)
    log.debug("Strategy for %s: %s", platform, strategy.value)
    if strategy is Strategy.CONTAINER:
        tag = build_image(platform, config.env_dir, prefix=config.image_prefix, runner=runner)
        bindings = run_in_container(platform, tag, source_dir, out_dir, runner=runner)
    else:
        bindings = run_locally(
            platform,
            source_dir,
            temp.path / "build",
            out_dir,
            config.env_dir,
            runner=runner,
        )
    return ExecutionEnvironment(strategy, bindings)
