"""
Timing helpers for relay observability.

Responsibilities:
- Measure durations using monotonic time (immune to clock changes)
- Emit metrics as log events via observability.logger
- Never aggregate: one metric = one log event

Design notes:
- Metrics are diagnostic and emitted at DEBUG level
- Callers may attach counters to the running block via the yielded dict
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any, Iterator

from observability.logger import log_event


@contextmanager
def timed(
    name: str,
    *,
    connection_id: str | None = None,
    details: dict[str, Any] | None = None,
) -> Iterator[dict[str, Any]]:
    """
    Context manager for measuring durations safely.

    Guarantees:
    - Metric is emitted exactly once, also when the block raises
    - Exceptions inside the block are not suppressed

    Usage:
        with timed("relay_fanout", connection_id=sender.connection_id) as m:
            m["recipients"] = await send_all()
    """
    fields: dict[str, Any] = dict(details or {})
    start_ns = time.monotonic_ns()
    ok = False
    try:
        yield fields
        ok = True
    finally:
        log_event({
            "event_type": "METRIC_TIMER",
            "metric": name,
            "value_ms": (time.monotonic_ns() - start_ns) / 1_000_000,
            "connection_id": connection_id,
            "ok": ok,
            "details": fields,
        }, level="DEBUG")
