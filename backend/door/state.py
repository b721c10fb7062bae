"""
Door state enumeration.

Rules:
- Exactly two values exist.
- Transitions are total overwrites; there is no pending state.
- The only behavior is the wire mapping used by the status endpoint.
"""

from __future__ import annotations

from enum import Enum

from constants import WIRE_BUSY, WIRE_IDLE


class DoorState(str, Enum):
    """
    Process-wide call state of the door intercom.

    CONNECTING covers the whole call lifecycle from ring to hangup,
    which external pollers see as "busy".
    """

    IDLE = "IDLE"
    CONNECTING = "CONNECTING"

    def wire(self) -> str:
        """Wire value reported to status pollers."""
        return WIRE_BUSY if self is DoorState.CONNECTING else WIRE_IDLE
