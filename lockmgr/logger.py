"""Thread-safe operation log shared by the lock managers."""

from __future__ import annotations

import threading
import time
from pathlib import Path
from typing import Optional, Protocol, Union

DEFAULT_LOG_PATH = Path("logs") / "operations.log"


class SupportsLog(Protocol):
    """Anything with a ``log(message)`` method can serve as a logger."""

    def log(self, message: str) -> None: ...


class Logger:
    """Append timestamped messages to a file and optionally echo them."""

    # One lock for every instance, so lines from different loggers never interleave.
    _lock = threading.Lock()

    def __init__(
        self,
        path: Union[str, Path, None] = DEFAULT_LOG_PATH,
        echo: bool = True,
    ) -> None:
        self.path: Optional[Path] = Path(path) if path is not None else None
        self.echo = echo

    def log(self, message: str) -> None:
        """Write ``[ctime] message`` to the log file and print ``message``."""
        with Logger._lock:
            if self.path is not None:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with self.path.open("a", encoding="utf-8") as handle:
                    handle.write(f"[{time.ctime()}] {message}\n")
            if self.echo:
                print(message, flush=True)


_shared_lock = threading.Lock()
_shared: Optional[SupportsLog] = None


def get_logger() -> SupportsLog:
    """Return the shared logger, creating the default one on first use."""
    global _shared
    with _shared_lock:
        if _shared is None:
            _shared = Logger()
        return _shared


def set_logger(logger: SupportsLog) -> None:
    """Replace the shared logger."""
    global _shared
    with _shared_lock:
        _shared = logger