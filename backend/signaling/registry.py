"""
Connection registry: the live set of connections eligible for broadcasts.

Design:
- Copy-on-write: membership is an immutable tuple swapped under a lock
- Readers take the current tuple and iterate it without holding the lock
- Keyed by connection_id, so a connection is never listed twice

Guarantees:
- add/remove are safe from any thread or task, no caller-side locking
- Iteration never fails because of concurrent add/remove
- A broadcast in progress may or may not see connections added meanwhile
- remove is idempotent
"""

from __future__ import annotations

import threading
from typing import Awaitable, Callable, Iterator

from signaling.connection import Connection


class ConnectionRegistry:
    """Thread-safe copy-on-write set of open connections."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._members: tuple[Connection, ...] = ()

    # -------------------------
    # Mutation
    # -------------------------

    def add(self, conn: Connection) -> bool:
        """
        Register a connection.

        Returns:
            True if added
            False if a connection with the same id is already registered
        """
        with self._lock:
            if any(c.connection_id == conn.connection_id for c in self._members):
                return False
            self._members = self._members + (conn,)
            return True

    def remove(self, conn: Connection) -> bool:
        """
        Unregister a connection.

        Returns:
            True if it was a member
            False if it was already gone (no-op)
        """
        with self._lock:
            kept = tuple(
                c for c in self._members
                if c.connection_id != conn.connection_id
            )
            if len(kept) == len(self._members):
                return False
            self._members = kept
            return True

    # -------------------------
    # Iteration
    # -------------------------

    def snapshot(self) -> tuple[Connection, ...]:
        """Current membership. Never mutated after it is returned."""
        return self._members

    def others(self, exclude: Connection) -> Iterator[Connection]:
        """Members from the current snapshot except `exclude`."""
        for conn in self.snapshot():
            if conn.connection_id != exclude.connection_id:
                yield conn

    async def for_each_except(
        self,
        exclude: Connection,
        fn: Callable[[Connection], Awaitable[None]],
    ) -> int:
        """
        Await fn(conn) for every member other than `exclude`, in
        registration order. Stops at the first exception and re-raises it.

        Returns the number of members visited.
        """
        visited = 0
        for conn in self.others(exclude):
            await fn(conn)
            visited += 1
        return visited

    # -------------------------
    # Introspection helpers
    # -------------------------

    def __len__(self) -> int:
        return len(self._members)

    def __contains__(self, conn: object) -> bool:
        conn_id = getattr(conn, "connection_id", None)
        return any(c.connection_id == conn_id for c in self._members)
