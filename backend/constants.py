"""
SIGNALING-AS-CONSTANTS
----------------------
Single source of truth for the signaling vocabulary and relay defaults.

Rules:
- If changing a value changes which messages move the door state, it belongs here.
- No magic strings elsewhere in the codebase.
- Other modules MUST import from this file.
"""

from __future__ import annotations

from typing import Final, FrozenSet

# =============================================================================
# Recognized payload keys
# =============================================================================

KEY_EVENT: Final[str] = "event"
KEY_ICE_CONNECTION_STATE: Final[str] = "iceConnectionState"
KEY_ONTRACK: Final[str] = "ontrack"

# =============================================================================
# Event axis (compared lower-cased)
# =============================================================================

BUSY_EVENTS: Final[FrozenSet[str]] = frozenset({
    "ring",
    "offer",
    "answer",
    "connecting",
    "ice-connected",
    "call-start",
    "in_call",
})

IDLE_EVENTS: Final[FrozenSet[str]] = frozenset({
    "bye",
    "hangup",
    "call-end",
})

# =============================================================================
# ICE connection-state axis (compared lower-cased)
# =============================================================================

BUSY_ICE_STATES: Final[FrozenSet[str]] = frozenset({"connected", "completed"})
IDLE_ICE_STATES: Final[FrozenSet[str]] = frozenset({"disconnected", "failed", "closed"})

# =============================================================================
# Door state wire values
# =============================================================================

WIRE_IDLE: Final[str] = "idle"
WIRE_BUSY: Final[str] = "busy"

# =============================================================================
# WebSocket close codes (RFC 6455)
# =============================================================================

WS_CLOSE_NORMAL: Final[int] = 1000
WS_CLOSE_UNSUPPORTED_DATA: Final[int] = 1003
WS_CLOSE_INTERNAL_ERROR: Final[int] = 1011

# =============================================================================
# Logging
# =============================================================================

# Max chars of a raw payload copied into a log event
LOG_PAYLOAD_PREVIEW_CHARS: Final[int] = 100
