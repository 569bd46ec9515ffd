"""Process-scoped directories: the persistent cache root and the per-process temporary root.

Both are created lazily on first access and are idempotent afterwards. They are owned by the
top-level run and passed explicitly to the components that need them.
"""

from __future__ import annotations

import atexit
import logging
import shutil
import signal
import tempfile
import threading
from pathlib import Path
from types import FrameType, TracebackType

log = logging.getLogger(__name__)

# Signals that would otherwise terminate the process without running cleanup.
_TERMINATING_SIGNALS = tuple(
    getattr(signal, name) for name in ("SIGTERM", "SIGHUP") if hasattr(signal, name)
)


class CacheRoot:
    """Cache directory, resolved to an absolute path and created on first use."""

    def __init__(self, path: str | Path = "cache") -> None:
        self._requested = Path(path)
        self._path: Path | None = None

    @property
    def path(self) -> Path:
        if self._path is None:
            resolved = self._requested.expanduser().resolve()
            resolved.mkdir(parents=True, exist_ok=True)
            log.debug("Cache root: %s", resolved)
            self._path = resolved
        return self._path

    @property
    def initialized(self) -> bool:
        return self._path is not None

    def entry(self, key: str) -> Path:
        return self.path / key


class TempScope:
    """Unique temporary directory, removed on every exit path once it has been created.

    Cleanup is registered at first use: atexit for normal exit, signal handlers for
    termination signals, and __exit__ when used as a context manager (which also covers
    KeyboardInterrupt).
    """

    def __init__(self, prefix: str = "libmem-build-") -> None:
        self._prefix = prefix
        self._path: Path | None = None
        self._previous_handlers: dict[int, object] = {}
        self._registered = False

    def __enter__(self) -> TempScope:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.cleanup()

    @property
    def path(self) -> Path:
        if self._path is None:
            self._path = Path(tempfile.mkdtemp(prefix=self._prefix)).resolve()
            log.debug("Temp root: %s", self._path)
            self._register_cleanup()
        return self._path

    @property
    def initialized(self) -> bool:
        return self._path is not None

    def cleanup(self) -> None:
        """Remove the temp root and undo the atexit and signal registrations. Safe to call repeatedly."""
        if self._path is not None and self._path.exists():
            log.debug("Removing temp root %s", self._path)
            shutil.rmtree(self._path, ignore_errors=True)
        if self._registered:
            atexit.unregister(self.cleanup)
            self._registered = False
        self._restore_handlers()

    def _register_cleanup(self) -> None:
        atexit.register(self.cleanup)
        self._registered = True
        if threading.current_thread() is not threading.main_thread():
            return
        for signum in _TERMINATING_SIGNALS:
            self._previous_handlers[signum] = signal.signal(signum, self._on_signal)

    def _restore_handlers(self) -> None:
        while self._previous_handlers:
            signum, handler = self._previous_handlers.popitem()
            signal.signal(signum, handler if handler is not None else signal.SIG_DFL)

    def _on_signal(self, signum: int, frame: FrameType | None) -> None:
        self.cleanup()
        raise SystemExit(128 + signum)
