"""
Connection adapter for the signaling channel.

Responsibilities:
- Give each live WebSocket a stable id for self-exclusion and log correlation
- Expose open/closed status without leaking Starlette types to the relay
- Serialize outbound sends per connection (whole frames, sender order kept)
- Optionally bound each send with a timeout

Non-responsibilities:
- No registry membership (see signaling.registry)
- No lifecycle decisions (see signaling.handler)
"""

from __future__ import annotations

import asyncio
from typing import Protocol
from uuid import uuid4

from fastapi import WebSocket
from starlette.websockets import WebSocketState

from constants import WS_CLOSE_NORMAL
from signaling.connection_status import ConnectionStatus


def new_connection_id() -> str:
    return f"conn_{uuid4().hex[:12]}"


class Connection(Protocol):
    """
    What the registry, relay and handler need from a live channel.
    """

    connection_id: str
    remote_address: str | None
    status: ConnectionStatus

    @property
    def is_open(self) -> bool: ...

    async def send_text(self, payload: str) -> None: ...

    async def close(self, code: int = WS_CLOSE_NORMAL, reason: str = "") -> None: ...


class WebSocketConnection:
    """
    One accepted Starlette WebSocket.

    Created by the route right after the upgrade; status starts at OPENING
    and is moved by SignalingHandler.
    """

    def __init__(
        self,
        websocket: WebSocket,
        *,
        send_timeout_s: float | None = None,
        connection_id: str | None = None,
    ) -> None:
        self._ws = websocket
        self._send_timeout_s = send_timeout_s
        self._send_lock = asyncio.Lock()

        self.connection_id = connection_id or new_connection_id()
        self.status = ConnectionStatus.OPENING

        client = websocket.client
        self.remote_address = f"{client.host}:{client.port}" if client else None

    @property
    def is_open(self) -> bool:
        return (
            self.status is ConnectionStatus.OPEN
            and self._ws.client_state == WebSocketState.CONNECTED
            and self._ws.application_state == WebSocketState.CONNECTED
        )

    async def send_text(self, payload: str) -> None:
        """
        Send one text frame, unmodified.

        Raises whatever the transport raises, or asyncio.TimeoutError
        when a send timeout is configured and exceeded.
        """
        async with self._send_lock:
            if self._send_timeout_s is None:
                await self._ws.send_text(payload)
            else:
                await asyncio.wait_for(
                    self._ws.send_text(payload),
                    timeout=self._send_timeout_s,
                )

    async def close(self, code: int = WS_CLOSE_NORMAL, reason: str = "") -> None:
        if self._ws.application_state == WebSocketState.DISCONNECTED:
            return
        await self._ws.close(code=code, reason=reason)

    def __repr__(self) -> str:
        return (
            f"WebSocketConnection(id={self.connection_id!r}, "
            f"remote={self.remote_address!r}, status={self.status.value})"
        )
