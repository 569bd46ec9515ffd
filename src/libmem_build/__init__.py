"""Reproducible pre-built libmem distributions for Linux (glibc, musl) and Windows (MSVC)."""

__version__ = "0.1.0"
