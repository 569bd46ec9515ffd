"""Command-line entry points: libmem-build and libmem-build-ci."""
