"""Confirmation policies for building known-unsupported platforms."""

from __future__ import annotations

import logging
import sys

from libmem_build.platforms.registry import Platform

log = logging.getLogger(__name__)

PROMPT = "Continue anyway? [y/N] "


def is_affirmative(reply: str) -> bool:
    return reply.strip()[:1] in ("y", "Y")


def tty_confirm(platform: Platform, tty_path: str = "/dev/tty") -> bool:
    """Ask on the controlling terminal. No terminal, EOF, or anything but y/Y means no."""
    try:
        with open(tty_path, "r+") as tty:
            tty.write(PROMPT)
            tty.flush()
            reply = tty.readline()
    except OSError as e:
        log.debug("No controlling terminal for %s (%s)", platform, e)
        if not sys.stdin or not sys.stdin.isatty():
            return False
        try:
            reply = input(PROMPT)
        except EOFError:
            return False
    return is_affirmative(reply)
