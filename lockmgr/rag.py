"""Resource allocation graph used for deadlock detection."""

from __future__ import annotations

import threading
from collections import defaultdict
from typing import Dict, Hashable, Set


class ResourceAllocationGraph:
    """Directed graph of request (thread -> resource) and allocation
    (resource -> thread) edges; a cycle means a deadlock.

    Threads and resources share one node namespace: a thread is the
    string form of its identifier.
    """

    def __init__(self) -> None:
        self._adj: Dict[str, Set[str]] = defaultdict(set)
        self._lock = threading.Lock()

    def add_request_edge(self, thread: Hashable, resource: str) -> None:
        """Record that ``thread`` is waiting for ``resource``."""
        with self._lock:
            self._adj[str(thread)].add(resource)

    def add_allocation_edge(self, thread: Hashable, resource: str) -> None:
        """Record that ``resource`` is held by ``thread``, dropping its request."""
        node = str(thread)
        with self._lock:
            self._adj[resource].add(node)
            self._adj[node].discard(resource)

    def remove_allocation_edge(self, thread: Hashable, resource: str) -> None:
        with self._lock:
            self._adj[resource].discard(str(thread))

    def remove_request_edge(self, thread: Hashable, resource: str) -> None:
        with self._lock:
            self._adj[str(thread)].discard(resource)

    def has_cycle(self) -> bool:
        """Return True if the graph contains a directed cycle."""
        with self._lock:
            adj = self._adj
            visited: Set[str] = set()
            for start in list(adj):
                if start in visited:
                    continue
                visited.add(start)
                on_path = {start}
                stack = [(start, iter(adj.get(start, ())))]
                while stack:
                    node, neighbours = stack[-1]
                    nxt = next(neighbours, None)
                    if nxt is None:
                        stack.pop()
                        on_path.discard(node)
                        continue
                    if nxt in on_path:
                        return True
                    if nxt not in visited:
                        visited.add(nxt)
                        on_path.add(nxt)
                        stack.append((nxt, iter(adj.get(nxt, ()))))
            return False