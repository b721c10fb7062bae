"""
Status accessor: read-only view of the door state for HTTP pollers.
"""

from __future__ import annotations

from door.store import DoorStateStore


def current_state(store: DoorStateStore) -> str:
    """Return "idle" or "busy"."""
    return store.get().wire()


def status_payload(store: DoorStateStore) -> dict[str, str]:
    """Serializable status response body."""
    return {"state": current_state(store)}
