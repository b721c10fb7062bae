"""
Route registration for the door signal relay.

Responsibilities:
- Define HTTP and WebSocket endpoints
- Wire the signaling handler to the WebSocket lifecycle
- Pull dependencies from app.state
"""

from __future__ import annotations

from fastapi import WebSocket, WebSocketDisconnect, FastAPI

from config import AppConfig
from constants import WS_CLOSE_UNSUPPORTED_DATA
from door.status import status_payload
from door.store import DoorStateStore
from protocol.signaling import UnsupportedFrameError
from signaling.connection import WebSocketConnection
from signaling.handler import SignalingHandler
from signaling.relay import PeerSendError


def register_routes(app: FastAPI) -> None:
    """Register all routes on the FastAPI app."""
    config: AppConfig = app.state.config

    @app.get("/health")
    async def health() -> dict[str, str]: # pyright: ignore[reportUnusedFunction]
        return {"status": "ok"}

    @app.get(config.status_path)
    async def status() -> dict[str, str]: # pyright: ignore[reportUnusedFunction]
        store: DoorStateStore = app.state.door_store
        return status_payload(store)

    @app.websocket(config.ws_path)
    async def signaling_endpoint(ws: WebSocket) -> None: # pyright: ignore[reportUnusedFunction]
        await ws.accept()

        handler: SignalingHandler = app.state.signaling

        # No await between accept and registration
        conn = WebSocketConnection(ws, send_timeout_s=config.send_timeout_s)
        handler.on_open(conn)

        try:
            while True:
                msg = await ws.receive()

                if msg["type"] == "websocket.disconnect":
                    raise WebSocketDisconnect(code=msg.get("code", 1000))

                if msg.get("text") is not None:
                    try:
                        await handler.on_message(conn, msg["text"])
                    except PeerSendError as exc:
                        await handler.on_peer_send_failure(exc)

                elif msg.get("bytes") is not None:
                    raise UnsupportedFrameError(
                        f"binary frame of {len(msg['bytes'])} bytes on text channel"
                    )

        except WebSocketDisconnect as exc:
            handler.on_close(conn, code=exc.code)

        except UnsupportedFrameError as exc:
            await handler.on_transport_error(
                conn, exc, close_code=WS_CLOSE_UNSUPPORTED_DATA
            )

        except Exception as exc:  # pylint: disable=broad-exception-caught
            await handler.on_transport_error(conn, exc)
