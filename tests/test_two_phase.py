import threading

import pytest

from lockmgr.lock_manager import LockType, UnknownResourceError
from lockmgr.two_phase import TwoPhaseLockManager, TwoPhaseViolationError


class RecordingLogger:
    def __init__(self):
        self.messages = []
        self._lock = threading.Lock()

    def log(self, message):
        with self._lock:
            self.messages.append(message)


def run_in_thread(fn):
    outcome = {}

    def target():
        try:
            outcome["result"] = fn()
        except Exception as exc:  # noqa: BLE001
            outcome["error"] = exc

    thread = threading.Thread(target=target)
    thread.start()
    thread.join(timeout=5)
    assert not thread.is_alive()
    return outcome


@pytest.fixture
def logger():
    return RecordingLogger()


@pytest.fixture
def manager(logger):
    return TwoPhaseLockManager(logger)


def test_valid_transaction_grows_then_shrinks(manager):
    manager.acquire("resource1", LockType.SHARED)
    manager.acquire("resource2", LockType.EXCLUSIVE)
    assert manager.held_resources() == frozenset({"resource1", "resource2"})
    manager.release("resource1")
    assert manager.held_resources() == frozenset({"resource2"})
    manager.release("resource2")
    assert manager.held_resources() == frozenset()


def test_acquire_after_release_violates_2pl(manager, logger):
    manager.acquire("resource3", LockType.SHARED)
    manager.release("resource3")
    with pytest.raises(TwoPhaseViolationError):
        manager.acquire("resource4", LockType.EXCLUSIVE)
    tid = threading.get_ident()
    assert f"Thread {tid} violated 2PL by acquiring resource4" in logger.messages
    assert manager.held_resources() == frozenset()


def test_shrinking_phase_is_per_thread(manager):
    manager.acquire("a", LockType.SHARED)
    manager.release("a")
    outcome = run_in_thread(lambda: manager.acquire("b", LockType.EXCLUSIVE))
    assert "error" not in outcome
    with pytest.raises(TwoPhaseViolationError):
        manager.acquire("c", LockType.SHARED)


def test_held_resources_empty_for_new_thread(manager):
    manager.acquire("x", LockType.EXCLUSIVE)
    outcome = run_in_thread(manager.held_resources)
    assert outcome == {"result": frozenset()}
    assert manager.held_resources() == frozenset({"x"})


def test_release_unknown_resource_still_shrinks(manager):
    with pytest.raises(UnknownResourceError):
        manager.release("missing")
    with pytest.raises(TwoPhaseViolationError):
        manager.acquire("other", LockType.SHARED)


def test_shared_locks_held_by_two_threads_at_once(manager):
    manager.acquire("doc", LockType.SHARED)

    def reader():
        manager.acquire("doc", LockType.SHARED)
        held = manager.held_resources()
        manager.release("doc")
        return held

    outcome = run_in_thread(reader)
    assert outcome == {"result": frozenset({"doc"})}
    assert manager.held_resources() == frozenset({"doc"})
    manager.release("doc")
    assert manager.held_resources() == frozenset()