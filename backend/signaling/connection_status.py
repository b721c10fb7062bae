"""
Per-connection lifecycle status.

OPENING -> OPEN -> CLOSED, nothing else.
A CLOSED connection never re-enters OPEN.

This is pure data owned by the connection adapter; the handler drives it.
"""
from enum import Enum

class ConnectionStatus(Enum):
    """
    Connection lifecycle status.

    Independent of DoorState: the door can be busy with any mix of
    open and closed connections.
    """
    OPENING = "OPENING"  # Upgrade in progress, not yet registered
    OPEN = "OPEN"        # Registered, eligible for broadcasts
    CLOSED = "CLOSED"    # Removed (graceful or error path)
