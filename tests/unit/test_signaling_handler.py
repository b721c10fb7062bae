# pylint: disable=missing-module-docstring,missing-function-docstring

import asyncio

import pytest

from door.store import DoorStateStore
from signaling.connection_status import ConnectionStatus
from signaling.handler import SignalingHandler
from signaling.registry import ConnectionRegistry
from signaling.relay import BroadcastRelay, PeerSendError


def build() -> tuple[SignalingHandler, ConnectionRegistry, DoorStateStore]:
    registry = ConnectionRegistry()
    store = DoorStateStore()
    relay = BroadcastRelay(registry=registry, store=store)
    return SignalingHandler(registry=registry, relay=relay), registry, store


def opening(make_conn, conn_id: str, **kwargs):
    return make_conn(conn_id, status=ConnectionStatus.OPENING, **kwargs)


# ---------------------------------------------------------------------
# Open
# ---------------------------------------------------------------------

def test_on_open_registers_connection(make_conn, captured_logs):
    handler, registry, _ = build()
    a = opening(make_conn, "A")

    handler.on_open(a)

    assert a.status is ConnectionStatus.OPEN
    assert a in registry
    assert len(registry) == 1
    connected = [e for e in captured_logs if e["event_type"] == "WS_CONNECTED"]
    assert connected[0]["connection_id"] == "A"
    assert connected[0]["remote"] == "127.0.0.1:12345"


def test_on_open_runs_once(make_conn, captured_logs):
    handler, registry, _ = build()
    a = opening(make_conn, "A")

    handler.on_open(a)
    handler.on_open(a)

    assert len(registry) == 1
    assert any(e["event_type"] == "WS_OPEN_IGNORED" for e in captured_logs)


def test_closed_connection_never_reopens(make_conn):
    handler, registry, _ = build()
    a = opening(make_conn, "A")

    handler.on_open(a)
    handler.on_close(a, code=1000)
    handler.on_open(a)

    assert a.status is ConnectionStatus.CLOSED
    assert a not in registry


# ---------------------------------------------------------------------
# Close
# ---------------------------------------------------------------------

def test_on_close_removes_connection(make_conn):
    handler, registry, _ = build()
    a = opening(make_conn, "A")
    handler.on_open(a)

    handler.on_close(a, code=1000)

    assert a.status is ConnectionStatus.CLOSED
    assert len(registry) == 0


def test_graceful_then_error_removal_is_idempotent(make_conn):
    handler, registry, _ = build()
    a, b = opening(make_conn, "A"), opening(make_conn, "B")
    handler.on_open(a)
    handler.on_open(b)

    handler.on_close(a, code=1001)
    asyncio.run(handler.on_transport_error(a, RuntimeError("late")))

    assert registry.snapshot() == (b,)
    # Already closed: no close attempt on the error path
    assert a.close_codes == []


def test_error_then_graceful_removal_is_idempotent(make_conn):
    handler, registry, _ = build()
    a, b = opening(make_conn, "A"), opening(make_conn, "B")
    handler.on_open(a)
    handler.on_open(b)

    asyncio.run(handler.on_transport_error(a, RuntimeError("boom")))
    handler.on_close(a, code=1006)

    assert registry.snapshot() == (b,)


# ---------------------------------------------------------------------
# Transport errors
# ---------------------------------------------------------------------

def test_transport_error_closes_and_removes(make_conn, captured_logs):
    handler, registry, _ = build()
    a = opening(make_conn, "A")
    handler.on_open(a)

    asyncio.run(handler.on_transport_error(a, RuntimeError("boom")))

    assert a.close_codes == [1011]
    assert a.status is ConnectionStatus.CLOSED
    assert a not in registry
    errors = [e for e in captured_logs if e["event_type"] == "WS_TRANSPORT_ERROR"]
    assert errors[0]["level"] == "WARNING"
    assert errors[0]["exception"] == "RuntimeError"


def test_transport_error_uses_given_close_code(make_conn):
    handler, _, _ = build()
    a = opening(make_conn, "A")
    handler.on_open(a)

    asyncio.run(handler.on_transport_error(a, ValueError("binary"), close_code=1003))

    assert a.close_codes == [1003]


def test_transport_error_ignores_close_failure(make_conn, captured_logs):
    handler, registry, _ = build()
    a = opening(make_conn, "A", close_error=OSError("already gone"))
    handler.on_open(a)

    asyncio.run(handler.on_transport_error(a, RuntimeError("boom")))

    assert a not in registry
    ignored = [e for e in captured_logs if e["event_type"] == "WS_CLOSE_IGNORED"]
    assert ignored[0]["level"] == "DEBUG"


# ---------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------

def test_on_message_relays_and_sets_state(make_conn):
    handler, _, store = build()
    a, b = opening(make_conn, "A"), opening(make_conn, "B")
    handler.on_open(a)
    handler.on_open(b)

    asyncio.run(handler.on_message(a, '{"event":"offer"}'))

    assert b.sent == ['{"event":"offer"}']
    assert a.sent == []
    assert store.get().wire() == "busy"


def test_peer_failure_propagates_then_peer_is_removed(make_conn, captured_logs):
    """Scenario E end to end through the handler."""
    handler, registry, _ = build()
    a = opening(make_conn, "A")
    b = opening(make_conn, "B", fail_with=OSError("io"))
    c = opening(make_conn, "C")
    for conn in (a, b, c):
        handler.on_open(conn)

    with pytest.raises(PeerSendError) as exc_info:
        asyncio.run(handler.on_message(a, "boom"))

    asyncio.run(handler.on_peer_send_failure(exc_info.value))

    assert b not in registry
    assert b.status is ConnectionStatus.CLOSED
    assert b.close_codes == [1011]
    # Sender is untouched
    assert a in registry
    assert a.status is ConnectionStatus.OPEN
    assert c in registry
    assert any(e["event_type"] == "WS_BROADCAST_FAILED" for e in captured_logs)

    # Later broadcasts skip the removed peer
    asyncio.run(handler.on_message(a, "after"))
    assert c.sent == ["after"]
