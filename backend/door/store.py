"""
Single-slot door state store.

Shared by every connection handler and the status endpoint.
No history, no compare-and-swap, no change notification: readers poll.
"""

from __future__ import annotations

import threading

from door.state import DoorState


class DoorStateStore:
    """
    Holds the current DoorState.

    get/set are safe from any thread or task without external locking.
    A set is visible to every get that starts after it returns.
    """

    def __init__(self, initial: DoorState = DoorState.IDLE) -> None:
        self._lock = threading.Lock()
        self._state = initial

    def get(self) -> DoorState:
        with self._lock:
            return self._state

    def set(self, state: DoorState) -> None:
        with self._lock:
            self._state = state
