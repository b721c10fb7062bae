"""
JSONL event logger.

- Write one JSON object per line
- Output to stdout
- No buffering, no batching
- Level threshold applied before serialization
"""

from __future__ import annotations

import json
import sys
import time
from typing import Any, Mapping, Callable


LEVELS: dict[str, int] = {
    "DEBUG": 10,
    "INFO": 20,
    "WARNING": 30,
    "ERROR": 40,
}


# ------------------------------------------------------------------
# Explicit output sink (patchable in tests)
# ------------------------------------------------------------------

def _stdout_print(line: str) -> None:
    sys.stdout.write(line + "\n")
    sys.stdout.flush()

_print: Callable[[str], None] = _stdout_print

_threshold: int = LEVELS["INFO"]
_json_lines: bool = True


def configure(*, level: str = "INFO", json_lines: bool = True) -> None:
    """
    Set the process-wide level threshold and output format.

    Called once at startup from AppConfig.

    Raises:
        ValueError for an unknown level name.
    """
    global _threshold, _json_lines  # pylint: disable=global-statement

    key = level.upper()
    if key not in LEVELS:
        raise ValueError(f"Unknown log level: {level!r}")

    _threshold = LEVELS[key]
    _json_lines = json_lines


def is_enabled(level: str) -> bool:
    """True if events at `level` would be written."""
    return LEVELS.get(level.upper(), LEVELS["ERROR"]) >= _threshold


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


def _render_plain(record: Mapping[str, Any]) -> str:
    extras = " ".join(
        f"{k}={v}" for k, v in record.items()
        if k not in ("ts_ms", "level", "event_type")
    )
    head = f"{record.get('level')} {record.get('event_type')}"
    return f"{head} {extras}" if extras else head


def log_event(event: Mapping[str, Any], *, level: str = "INFO") -> None:
    """
    Write a single log event to stdout.

    The caller supplies event_type and any correlation fields
    (connection_id, remote, ...). ts_ms and level are filled in
    when missing.

    This function:
    - Drops events below the configured threshold
    - Serializes to JSON (or key=value when JSON lines are off)
    - Writes exactly one line
    - Never raises
    """
    if not is_enabled(level):
        return

    record: dict[str, Any] = {"ts_ms": _now_ms(), "level": level.upper()}
    record.update(event)

    if not _json_lines:
        _print(_render_plain(record))
        return

    try:
        line = json.dumps(record, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError) as e:
        # Last-resort fallback: logging must never crash a connection
        fallback: dict[str, Any] = {
            "ts_ms": record.get("ts_ms"),
            "level": "ERROR",
            "event_type": "LOGGER_SERIALIZATION_ERROR",
            "error": str(e),
            "original_event_repr": repr(event),
        }
        line = json.dumps(fallback, ensure_ascii=False, separators=(",", ":"))

    _print(line)
