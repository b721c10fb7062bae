"""
Signaling handler (connection lifecycle).

Responsibilities:
- Drive each connection through OPENING -> OPEN -> CLOSED
- Register on open, unregister on close or error (exactly once, idempotent)
- Route text frames to the BroadcastRelay
- Tear down peers whose send failed during someone else's broadcast

Still NOT responsible for:
- Accepting the upgrade or reading frames (server.routes)
- Door state rules (signaling.classifier)
- Fan-out (signaling.relay)
"""

from __future__ import annotations

from constants import WS_CLOSE_INTERNAL_ERROR
from observability.logger import log_event
from signaling.connection import Connection
from signaling.connection_status import ConnectionStatus
from signaling.registry import ConnectionRegistry
from signaling.relay import BroadcastRelay, PeerSendError


class SignalingHandler:
    """
    One handler per process, shared by every connection's task.
    """

    def __init__(
        self,
        *,
        registry: ConnectionRegistry,
        relay: BroadcastRelay,
    ) -> None:
        self._registry = registry
        self._relay = relay

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def on_open(self, conn: Connection) -> None:
        """Called once the upgrade succeeded."""
        if conn.status is not ConnectionStatus.OPENING:
            log_event({
                "event_type": "WS_OPEN_IGNORED",
                "connection_id": conn.connection_id,
                "status": conn.status.value,
            }, level="WARNING")
            return

        conn.status = ConnectionStatus.OPEN
        self._registry.add(conn)

        log_event({
            "event_type": "WS_CONNECTED",
            "connection_id": conn.connection_id,
            "remote": conn.remote_address,
            "connections": len(self._registry),
        })

    async def on_message(self, conn: Connection, payload: str) -> int:
        """
        Relay one text frame.

        Raises:
            PeerSendError from the relay, unchanged.
        """
        return await self._relay.on_message(conn, payload)

    def on_close(self, conn: Connection, code: int | None = None) -> None:
        """Graceful close, from either side."""
        conn.status = ConnectionStatus.CLOSED
        removed = self._registry.remove(conn)

        log_event({
            "event_type": "WS_DISCONNECTED",
            "connection_id": conn.connection_id,
            "code": code,
            "removed": removed,
            "connections": len(self._registry),
        })

    async def on_transport_error(
        self,
        conn: Connection,
        exc: BaseException,
        *,
        close_code: int = WS_CLOSE_INTERNAL_ERROR,
    ) -> None:
        """
        Error path: best-effort close, then the same removal as on_close.

        Never raises; a failing close is logged at DEBUG and ignored.
        """
        log_event({
            "event_type": "WS_TRANSPORT_ERROR",
            "connection_id": conn.connection_id,
            "exception": type(exc).__name__,
            "message": str(exc),
        }, level="WARNING")

        try:
            if conn.is_open:
                await conn.close(code=close_code)
        except Exception as close_exc:  # pylint: disable=broad-exception-caught
            log_event({
                "event_type": "WS_CLOSE_IGNORED",
                "connection_id": conn.connection_id,
                "exception": type(close_exc).__name__,
                "message": str(close_exc),
            }, level="DEBUG")
        finally:
            conn.status = ConnectionStatus.CLOSED
            self._registry.remove(conn)

    async def on_peer_send_failure(self, error: PeerSendError) -> None:
        """
        A broadcast failed on `error.peer`: tear that peer down.

        The sender stays open.
        """
        log_event({
            "event_type": "WS_BROADCAST_FAILED",
            "connection_id": error.sender_id,
            "peer_id": error.peer.connection_id,
            "exception": type(error.error).__name__,
            "message": str(error.error),
        }, level="WARNING")

        await self.on_transport_error(error.peer, error.error)
