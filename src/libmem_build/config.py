"""Run configuration: built-in defaults < libmem-build.yaml < environment variables.

YAML format (every key optional):
- name: artifact/cache name prefix (default: libmem)
- repo_url: git repository version tags are fetched from
- out_root: parent of the default output directory (default: out)
- out_dir: explicit output directory (must not exist)
- cache_dir: source cache directory (default: cache)
- skip_archive: do not create <out_dir>.tar.gz
- env_dir: directory holding docker/ and local/ environment assets (default: bundled envs/)
- image_prefix: container image tag prefix (default: libmem-build)
- log_level: root logging level (default: WARNING)
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from libmem_build.errors import ValidationError
from libmem_build.helpers import env_flag, load_yaml_mapping

log = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "libmem-build.yaml"
BUNDLED_ENV_DIR = Path(__file__).resolve().parent / "envs"

DEFAULT_SETTINGS: dict[str, Any] = {
    "name": "libmem",
    "repo_url": "https://github.com/rdbo/libmem.git",
    "out_root": "out",
    "out_dir": None,
    "cache_dir": "cache",
    "skip_archive": False,
    "env_dir": None,
    "image_prefix": "libmem-build",
    "log_level": "WARNING",
}

# environment variable -> settings key
ENV_OVERRIDES: dict[str, str] = {
    "LIBMEM_BUILD_OUT_DIR": "out_dir",
    "LIBMEM_BUILD_CACHE_DIR": "cache_dir",
    "LIBMEM_BUILD_SKIP_ARCHIVE": "skip_archive",
    "LIBMEM_BUILD_ENV_DIR": "env_dir",
    "LIBMEM_BUILD_REPO_URL": "repo_url",
    "LIBMEM_BUILD_LOG_LEVEL": "log_level",
}


@dataclass(frozen=True)
class BuildConfig:
    name: str
    repo_url: str
    out_root: Path
    out_dir: Path | None
    cache_dir: Path
    skip_archive: bool
    env_dir: Path
    image_prefix: str
    log_level: str

    def default_out_dir(self, version: str, platform: str) -> Path:
        return self.out_root / f"{self.name}-{version}-{platform}"


def resolve_settings(
    file_settings: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Merge defaults, file settings and environment overrides into a plain settings dict."""
    out = dict(DEFAULT_SETTINGS)
    for key, value in (file_settings or {}).items():
        if key not in out:
            log.warning("Ignoring unknown config key: %s", key)
            continue
        out[key] = value
    env = os.environ if environ is None else environ
    for var, key in ENV_OVERRIDES.items():
        value = env.get(var)
        if value:
            out[key] = value
    return out


def load_config(
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
    cwd: Path | None = None,
) -> BuildConfig:
    """Build the frozen BuildConfig for one run. Relative paths resolve against cwd.

    config_path defaults to $LIBMEM_BUILD_CONFIG, then ./libmem-build.yaml when present.
    Raises ValidationError when the config file is missing (explicit path) or malformed.
    """
    env = os.environ if environ is None else environ
    base = (cwd or Path.cwd()).resolve()
    explicit = config_path
    if explicit is None and env.get("LIBMEM_BUILD_CONFIG"):
        explicit = Path(env["LIBMEM_BUILD_CONFIG"])
    if explicit is not None and not explicit.is_absolute():
        explicit = base / explicit
    path = explicit or base / DEFAULT_CONFIG_FILE

    file_settings: dict[str, Any] = {}
    if explicit is not None and not path.is_file():
        msg = f"Config file not found: {path}"
        raise ValidationError(msg)
    if path.is_file():
        try:
            file_settings = load_yaml_mapping(path)
        except (OSError, ValueError) as e:
            raise ValidationError(str(e)) from e
        log.debug("Loaded config file %s", path)

    s = resolve_settings(file_settings, env)

    def _path(value: Any) -> Path:
        p = Path(str(value)).expanduser()
        return (p if p.is_absolute() else base / p).resolve()

    skip = s["skip_archive"]
    return BuildConfig(
        name=str(s["name"]),
        repo_url=str(s["repo_url"]),
        out_root=_path(s["out_root"]),
        out_dir=_path(s["out_dir"]) if s["out_dir"] else None,
        cache_dir=_path(s["cache_dir"]),
        skip_archive=skip if isinstance(skip, bool) else env_flag(str(skip)),
        env_dir=_path(s["env_dir"]) if s["env_dir"] else BUNDLED_ENV_DIR,
        image_prefix=str(s["image_prefix"]),
        log_level=str(s["log_level"]).upper(),
    )
