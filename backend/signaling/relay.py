"""
Broadcast relay.

Per inbound text frame:
1. Decode best-effort (plain text is expected and only logged at DEBUG)
2. Classify and apply door state transitions, in axis order
3. Forward the original payload, unmodified, to every other open member

Failure policy:
- A send failure to any peer aborts the broadcast and propagates as
  PeerSendError. Peers already served keep their copy; nothing is retried.
- Tearing down the failing peer is the caller's job (handler error path).

Sends are awaited one after another inside the sender's task, so a slow
peer delays the sender. Each sender's frames reach a given peer in order.
"""

from __future__ import annotations

from typing import Any, Optional

from constants import LOG_PAYLOAD_PREVIEW_CHARS
from door.store import DoorStateStore
from observability.logger import log_event
from observability.metrics import timed
from protocol.signaling import SignalingPayloadError, decode_payload
from signaling.classifier import Transition, classify
from signaling.connection import Connection
from signaling.registry import ConnectionRegistry


# -------------------------
# Exceptions
# -------------------------

class RelayError(Exception):
    """Base class for relay failures surfaced to the caller."""


class PeerSendError(RelayError):
    """
    Raised when forwarding to one peer fails mid-broadcast.

    The original transport exception is chained as __cause__.
    """

    def __init__(self, *, peer: Connection, sender_id: str, error: BaseException) -> None:
        super().__init__(
            f"send to {peer.connection_id} failed while relaying from {sender_id}: "
            f"{type(error).__name__}: {error}"
        )
        self.peer = peer
        self.sender_id = sender_id
        self.error = error


# -------------------------
# Relay
# -------------------------

class BroadcastRelay:
    """
    Stateless per-message orchestration over the shared registry and store.

    Safe to call concurrently from every connection's task.
    """

    def __init__(
        self,
        *,
        registry: ConnectionRegistry,
        store: DoorStateStore,
    ) -> None:
        self._registry = registry
        self._store = store

    async def on_message(self, sender: Connection, payload: str) -> int:
        """
        Handle one text frame from `sender`.

        Returns:
            Number of peers the payload was delivered to.

        Raises:
            PeerSendError if any peer send fails.
        """
        message = self._decode(sender, payload)
        self._apply(sender, classify(message))
        return await self._broadcast(sender, payload)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _decode(self, sender: Connection, payload: str) -> Optional[dict[str, Any]]:
        try:
            return decode_payload(payload)
        except SignalingPayloadError as e:
            log_event({
                "event_type": "WS_PAYLOAD_NOT_JSON",
                "connection_id": sender.connection_id,
                "size": len(payload),
                "error": str(e),
                "payload_preview": payload[:LOG_PAYLOAD_PREVIEW_CHARS],
            }, level="DEBUG")
            return None

    def _apply(self, sender: Connection, transitions: tuple[Transition, ...]) -> None:
        # Each transition overwrites the previous one; last axis wins
        for transition in transitions:
            self._store.set(transition.state)
            log_event({
                "event_type": "DOOR_STATE_SET",
                "connection_id": sender.connection_id,
                "axis": transition.axis.value,
                "state": transition.state.wire(),
            }, level="DEBUG")

    async def _broadcast(self, sender: Connection, payload: str) -> int:
        log_event({
            "event_type": "WS_BROADCAST",
            "connection_id": sender.connection_id,
            "members": len(self._registry),
        }, level="DEBUG")

        delivered = 0

        async def forward(peer: Connection) -> None:
            nonlocal delivered
            if not peer.is_open:
                return
            try:
                await peer.send_text(payload)
            except Exception as exc:  # pylint: disable=broad-exception-caught
                raise PeerSendError(
                    peer=peer,
                    sender_id=sender.connection_id,
                    error=exc,
                ) from exc
            delivered += 1

        with timed("relay_fanout", connection_id=sender.connection_id) as metric:
            try:
                await self._registry.for_each_except(sender, forward)
            finally:
                metric["recipients"] = delivered

        return delivered
