"""
Door state classifier.

Maps one decoded signaling message to the door state transitions it implies.

Rules:
- Pure and deterministic: no I/O, no store access, never raises.
- Three independent axes, always evaluated in this order:
    1. event               (named call-lifecycle marker)
    2. iceConnectionState  (WebRTC connectivity status)
    3. ontrack             (media attached flag)
- Every axis that fires contributes one transition. Transitions are
  applied in order by the caller, so the last one wins: an idle event
  plus ontrack=true ends CONNECTING.
- Absent, non-string, blank or unknown values are "no signal" for that axis.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

from constants import (
    BUSY_EVENTS,
    BUSY_ICE_STATES,
    IDLE_EVENTS,
    IDLE_ICE_STATES,
    KEY_EVENT,
    KEY_ICE_CONNECTION_STATE,
    KEY_ONTRACK,
)
from door.state import DoorState
from protocol.signaling import as_lower_string, is_true


class Axis(str, Enum):
    """Which part of a message produced a transition."""
    EVENT = "event"
    ICE_STATE = "ice_state"
    MEDIA_FLAG = "media_flag"


@dataclass(frozen=True)
class Transition:
    """One door state overwrite, tagged with the axis that caused it."""
    axis: Axis
    state: DoorState


# ---------------------------------------------------------------------
# Per-axis rules
# ---------------------------------------------------------------------

def classify_event(value: Any) -> Optional[DoorState]:
    event = as_lower_string(value)
    if event is None:
        return None

    if event in BUSY_EVENTS:
        return DoorState.CONNECTING
    if event in IDLE_EVENTS:
        return DoorState.IDLE
    return None


def classify_ice_state(value: Any) -> Optional[DoorState]:
    ice = as_lower_string(value)
    if ice is None:
        return None

    if ice in BUSY_ICE_STATES:
        return DoorState.CONNECTING
    if ice in IDLE_ICE_STATES:
        return DoorState.IDLE
    # new / checking / anything else: explicit no-op
    return None


def classify_media_flag(message: Mapping[str, Any]) -> Optional[DoorState]:
    if is_true(message, KEY_ONTRACK):
        return DoorState.CONNECTING
    return None


# ---------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------

def classify(message: Optional[Mapping[str, Any]]) -> tuple[Transition, ...]:
    """
    Return the ordered transitions for a decoded message.

    None (payload was not a JSON object) yields no transitions.
    """
    if message is None:
        return ()

    candidates = (
        (Axis.EVENT, classify_event(message.get(KEY_EVENT))),
        (Axis.ICE_STATE, classify_ice_state(message.get(KEY_ICE_CONNECTION_STATE))),
        (Axis.MEDIA_FLAG, classify_media_flag(message)),
    )

    return tuple(
        Transition(axis=axis, state=state)
        for axis, state in candidates
        if state is not None
    )
