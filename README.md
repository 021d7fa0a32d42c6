# lockmgr

A small in-process lock manager for Python threads. It is modelled on the
locking layer of a database engine.

- **`lockmgr.lock_manager.LockManager`** hands out `LockType.SHARED` and
  `LockType.EXCLUSIVE` locks on named resources. A request that cannot be
  granted at once waits in FIFO order. When the lock is freed, the head of
  the queue is woken. That is either a run of shared waiters or a single
  exclusive waiter. Before any request is granted or queued, it is checked
  against a resource allocation graph. A request that would close a cycle
  raises `DeadlockError` and does not wait.
- **`lockmgr.two_phase.TwoPhaseLockManager`** enforces two-phase locking, and
  each thread is one transaction. A thread's first release puts it in its
  shrinking phase. Any later `acquire` by that thread raises
  `TwoPhaseViolationError`.
- **`lockmgr.rag.ResourceAllocationGraph`** is the graph used for deadlock
  detection. It has request edges (thread → resource) and allocation edges
  (resource → thread), and `has_cycle()` reports whether a directed cycle
  exists.
- **`lockmgr.logger.Logger`** writes every event (grant, wait, release,
  refusal, error). Each line goes to a log file as `[<ctime>] message`, and
  the message can also be printed to standard output.

## Installation

```
pip install .
```

## Usage

```python
import threading

from lockmgr.logger import Logger
from lockmgr.lock_manager import LockManager, LockType
from lockmgr.two_phase import TwoPhaseLockManager, TwoPhaseViolationError

log = Logger("operations.log", echo=False)

# Plain shared/exclusive locking
manager = LockManager(log)
manager.lock_resource("accounts", LockType.SHARED)
print(manager.state("accounts"))
# ResourceState(shared_count=1, exclusive_held=False, waiting=())
manager.unlock_resource("accounts")

# Two-phase locking
tpl = TwoPhaseLockManager(log)

def transaction():
    tpl.acquire("resource1", LockType.SHARED)
    tpl.acquire("resource2", LockType.EXCLUSIVE)
    tpl.release("resource1")
    try:
        tpl.acquire("resource3", LockType.SHARED)  # shrinking phase
    except TwoPhaseViolationError:
        pass
    print(tpl.held_resources())  # frozenset({'resource2'})
    tpl.release("resource2")

worker = threading.Thread(target=transaction)
worker.start()
worker.join()
```

### Errors

All errors derive from `lockmgr.lock_manager.LockError`:

- `DeadlockError`: granting the request would create a cycle in the
  allocation graph.
- `UnknownResourceError`: `unlock_resource` or `state` was called with a
  name that has never been locked.
- `NotLockedError`: `unlock_resource` was called on a resource that holds
  no lock. Waiters are still re-examined before this is raised.
- `TwoPhaseViolationError` (in `lockmgr.two_phase`): an acquire was
  attempted during the shrinking phase.

Every refusal and every error is also written to the log.

### Logging

`Logger(path="logs/operations.log", echo=True)` is the default. It creates
the file's directory when needed. Pass `path=None` to skip the file and
`echo=False` to stay quiet. All instances share one lock, so lines written
by different loggers never interleave.

`lockmgr.logger.get_logger()` returns the shared logger. It creates the
default one on first use. `lockmgr.logger.set_logger()` replaces the shared
logger. Any object with a `log(message)` method will do. The managers use
the shared logger when they are given none.

## What it does not do

- Locks are held by threads within one Python process. Nothing is shared
  between processes, and no lock state is stored on disk.
- There is no command-line program. The package is used as a library.
- Deadlocks are detected only when a request is made. Existing waiters are
  never chosen as victims or aborted.

## Running the tests

```
pip install ".[test]"
pytest
```