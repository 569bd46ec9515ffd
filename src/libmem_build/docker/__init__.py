"""Containerized strategy: build the platform image, then run the build procedure inside it."""

from .image import build_image, dockerfile_path, image_tag
from .run import container_bindings, run_command, run_in_container

__all__ = [
    "build_image",
    "container_bindings",
    "dockerfile_path",
    "image_tag",
    "run_command",
    "run_in_container",
]
