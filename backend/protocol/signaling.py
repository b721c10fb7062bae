# backend/protocol/signaling.py
"""
Text payload helpers for the signaling channel.

Wire format:
- Every frame is UTF-8 text and is relayed verbatim.
- A frame MAY be a JSON object. Recognized keys:
    event               (string)
    iceConnectionState  (string)
    ontrack             (boolean)
  Everything else is ignored.
- Plain-text frames ("ping", ...) are valid and simply carry no signal.
- Binary frames are not part of the channel (UnsupportedFrameError).

Usage example:

    try:
        message = decode_payload(payload)
    except SignalingPayloadError as e:
        log_event({"event_type": "WS_PAYLOAD_NOT_JSON", "error": str(e)}, level="DEBUG")
        message = None

    event = as_lower_string(message.get("event"))
"""

from __future__ import annotations

import json
from typing import Any, Mapping, Optional


# -------------------------
# Exceptions
# -------------------------

class SignalingPayloadError(Exception):
    """Base class for payloads that carry no structured signal."""


class NotJsonPayload(SignalingPayloadError):
    """
    Raised when a text frame is not valid JSON.

    Expected for plain-text control messages; the frame is still relayed.
    """


class NotAnObjectPayload(SignalingPayloadError):
    """
    Raised when a text frame is valid JSON but not an object
    (array, string, number, null).
    """


# -------------------------
# Decoding
# -------------------------

def decode_payload(payload: str) -> dict[str, Any]:
    """
    Parse a text frame into a key -> loosely-typed value mapping.
    """
    try:
        data = json.loads(payload)
    except (ValueError, RecursionError) as e:
        raise NotJsonPayload(str(e)) from e

    if not isinstance(data, dict):
        raise NotAnObjectPayload(
            f"JSON payload is {type(data).__name__}, expected object"
        )

    return data


# -------------------------
# Typed accessors (never raise)
# -------------------------

def as_lower_string(value: Any) -> Optional[str]:
    """
    Return the lower-cased string, or None for absent, non-string
    or blank values.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    return value.lower()


def is_true(message: Mapping[str, Any], key: str) -> bool:
    """True only for a JSON boolean true (not 1, not "true")."""
    return message.get(key) is True


# -------------------------
# Framing violations
# -------------------------

class UnsupportedFrameError(Exception):
    """
    Raised when a client sends a binary frame on the text-only channel.

    Fatal to that connection: it is closed with 1003 (unsupported data).
    """
