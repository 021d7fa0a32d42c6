"""Shared/exclusive lock manager with FIFO waiting and deadlock detection."""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Deque, Dict, Optional, Tuple

from .logger import SupportsLog, get_logger
from .rag import ResourceAllocationGraph


class LockType(Enum):
    SHARED = "SHARED"
    EXCLUSIVE = "EXCLUSIVE"


class LockError(Exception):
    """Base class for lock manager errors."""


class DeadlockError(LockError):
    """Granting the request would close a cycle in the allocation graph."""


class UnknownResourceError(LockError):
    """The resource has never been locked."""


class NotLockedError(LockError):
    """The resource is not locked."""


@dataclass(frozen=True)
class ResourceState:
    """Snapshot of one resource's lock state."""

    shared_count: int
    exclusive_held: bool
    waiting: Tuple[LockType, ...]


@dataclass(eq=False)
class _Waiter:
    thread: int
    lock_type: LockType
    cond: threading.Condition
    granted: bool = False


@dataclass(eq=False)
class _Resource:
    mutex: threading.Lock = field(default_factory=threading.Lock)
    shared_count: int = 0
    exclusive_held: bool = False
    queue: Deque[_Waiter] = field(default_factory=deque)

    def free_for(self, lock_type: LockType) -> bool:
        if self.queue or self.exclusive_held:
            return False
        return lock_type is LockType.SHARED or self.shared_count == 0

    def take(self, lock_type: LockType) -> None:
        if lock_type is LockType.SHARED:
            self.shared_count += 1
        else:
            self.exclusive_held = True


class LockManager:
    """Grants shared and exclusive locks on named resources."""

    def __init__(self, logger: Optional[SupportsLog] = None) -> None:
        self._logger = logger
        self._rag = ResourceAllocationGraph()
        self._resources: Dict[str, _Resource] = {}
        self._global = threading.Lock()

    def _log(self, message: str) -> None:
        (self._logger or get_logger()).log(message)

    def lock_resource(self, name: str, lock_type: LockType) -> None:
        """Block until ``lock_type`` is granted on ``name``.

        Raises DeadlockError, without waiting, if the request would deadlock.
        """
        with self._global:
            res = self._resources.setdefault(name, _Resource())
        tid = threading.get_ident()

        with res.mutex:
            self._rag.add_request_edge(tid, name)
            if self._rag.has_cycle():
                self._rag.remove_request_edge(tid, name)
                self._log(f"Thread {tid} detected DEADLOCK while requesting {name}")
                raise DeadlockError(f"thread {tid} would deadlock requesting {name}")

            if res.free_for(lock_type):
                res.take(lock_type)
            else:
                waiter = _Waiter(tid, lock_type, threading.Condition(res.mutex))
                res.queue.append(waiter)
                self._log(f"Thread {tid} waiting for {lock_type.value} lock on {name}")
                while not waiter.granted:
                    waiter.cond.wait()

            self._rag.add_allocation_edge(tid, name)
            self._rag.remove_request_edge(tid, name)
            self._log(f"Thread {tid} acquired {lock_type.value} lock on {name}")

    def unlock_resource(self, name: str) -> None:
        """Release one lock on ``name`` and wake whoever can now proceed."""
        with self._global:
            res = self._resources.get(name)
        if res is None:
            self._log(f"Error: Resource not found: {name}")
            raise UnknownResourceError(name)
        tid = threading.get_ident()

        with res.mutex:
            if res.exclusive_held:
                res.exclusive_held = False
                self._rag.remove_allocation_edge(tid, name)
                self._log(f"Thread {tid} released EXCLUSIVE lock on {name}")
                held = True
            elif res.shared_count > 0:
                res.shared_count -= 1
                self._rag.remove_allocation_edge(tid, name)
                self._log(f"Thread {tid} released SHARED lock on {name}")
                held = True
            else:
                self._log(f"Error: No lock held on {name}")
                held = False

            self._grant_waiters(res)

        if not held:
            raise NotLockedError(name)

    def state(self, name: str) -> ResourceState:
        """Return a snapshot of ``name``'s lock state."""
        with self._global:
            res = self._resources.get(name)
        if res is None:
            raise UnknownResourceError(name)
        with res.mutex:
            return ResourceState(
                shared_count=res.shared_count,
                exclusive_held=res.exclusive_held,
                waiting=tuple(w.lock_type for w in res.queue),
            )

    @staticmethod
    def _grant_waiters(res: _Resource) -> None:
        """Wake the head of the queue: a run of shared waiters or one exclusive."""
        if not res.queue:
            return
        head = res.queue[0]
        if head.lock_type is LockType.SHARED:
            if res.exclusive_held:
                return
            while res.queue and res.queue[0].lock_type is LockType.SHARED:
                waiter = res.queue.popleft()
                res.take(waiter.lock_type)
                waiter.granted = True
                waiter.cond.notify()
        elif res.shared_count == 0 and not res.exclusive_held:
            waiter = res.queue.popleft()
            res.take(waiter.lock_type)
            waiter.granted = True
            waiter.cond.notify()