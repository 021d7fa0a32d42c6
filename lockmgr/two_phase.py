"""Two-phase locking on top of the shared/exclusive lock manager."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Optional, Set

from .lock_manager import LockError, LockManager, LockType
from .logger import SupportsLog, get_logger


class TwoPhaseViolationError(LockError):
    """A thread asked for a lock after it had released one."""


@dataclass
class _Transaction:
    shrinking: bool = False
    held: Set[str] = field(default_factory=set)


class TwoPhaseLockManager:
    """Enforces two-phase locking per thread.

    Each thread is a transaction. It may take locks while growing; its
    first release moves it into the shrinking phase, after which any
    further acquire raises TwoPhaseViolationError.
    """

    def __init__(self, logger: Optional[SupportsLog] = None) -> None:
        self._logger = logger
        self._locks = LockManager(logger)
        self._transactions: Dict[int, _Transaction] = {}
        self._mutex = threading.Lock()

    def _log(self, message: str) -> None:
        (self._logger or get_logger()).log(message)

    def _transaction(self, tid: int) -> _Transaction:
        return self._transactions.setdefault(tid, _Transaction())

    def acquire(self, resource: str, lock_type: LockType) -> None:
        """Take ``lock_type`` on ``resource`` for the calling thread.

        Blocks until granted. Raises TwoPhaseViolationError if the thread
        is already shrinking, and DeadlockError if the request would deadlock.
        """
        tid = threading.get_ident()
        with self._mutex:
            state = self._transaction(tid)
            if state.shrinking:
                self._log(f"Thread {tid} violated 2PL by acquiring {resource}")
                raise TwoPhaseViolationError(
                    f"thread {tid} cannot acquire {resource} in its shrinking phase"
                )

        self._locks.lock_resource(resource, lock_type)

        with self._mutex:
            state.held.add(resource)

    def release(self, resource: str) -> None:
        """Release ``resource`` and put the calling thread in its shrinking phase."""
        tid = threading.get_ident()
        try:
            self._locks.unlock_resource(resource)
        finally:
            with self._mutex:
                state = self._transaction(tid)
                state.held.discard(resource)
                state.shrinking = True

    def held_resources(self) -> FrozenSet[str]:
        """Return the resources the calling thread currently holds."""
        tid = threading.get_ident()
        with self._mutex:
            state = self._transactions.get(tid)
            return frozenset(state.held) if state else frozenset()