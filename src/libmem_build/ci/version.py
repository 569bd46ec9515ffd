"""Derive source and artifact versions from the CI trigger.

A tag push v4.2.1-2 builds source 4.2.1 as artifact 4.2.1-2 and releases it. Any other
trigger builds the requested source version (default master) as artifact "test".
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from libmem_build.helpers import write_github_output

DEFAULT_SOURCE_VERSION = "master"
TEST_ARTIFACT_VERSION = "test"


@dataclass(frozen=True)
class Versions:
    source: str
    artifact: str
    release: bool

    def as_outputs(self) -> dict[str, str]:
        return {
            "source-version": self.source,
            "artifact-version": self.artifact,
            "release": "true" if self.release else "false",
        }


def resolve_versions(
    event_name: str,
    ref_type: str,
    ref_name: str,
    input_version: str | None = None,
) -> Versions:
    if event_name == "push" and ref_type == "tag":
        artifact = ref_name.removeprefix("v")
        source = artifact.rpartition("-")[0] if "-" in artifact else artifact
        return Versions(source=source, artifact=artifact, release=True)
    return Versions(
        source=input_version or DEFAULT_SOURCE_VERSION,
        artifact=TEST_ARTIFACT_VERSION,
        release=False,
    )


def run(input_version: str | None = None, environ: Mapping[str, str] | None = None) -> int:
    """Resolve from GITHUB_EVENT_NAME / GITHUB_REF_TYPE / GITHUB_REF_NAME, print, write $GITHUB_OUTPUT."""
    env = os.environ if environ is None else environ
    versions = resolve_versions(
        env.get("GITHUB_EVENT_NAME", ""),
        env.get("GITHUB_REF_TYPE", ""),
        env.get("GITHUB_REF_NAME", ""),
        input_version or env.get("INPUT_VERSION"),
    )
    print(f"Source version: {versions.source}")
    print(f"Artifact version: {versions.artifact}")
    print(f"Release: {'true' if versions.release else 'false'}")
    write_github_output(versions.as_outputs(), env)
    return 0
