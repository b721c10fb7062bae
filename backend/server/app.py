"""
FastAPI app factory.

Responsibilities:
- Create and configure FastAPI app
- Set up middleware and logging
- Initialize shared resources (state store, registry, relay, handler)
- Register routes
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import AppConfig
from door.store import DoorStateStore
from observability import logger
from signaling.handler import SignalingHandler
from signaling.registry import ConnectionRegistry
from signaling.relay import BroadcastRelay

from server.routes import register_routes


def create_app(config: AppConfig | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    This is the app factory pattern that allows:
    - Testing with different configurations
    - Environment-specific setup
    - ASGI server compatibility
    """
    if config is None:
        config = AppConfig.load_from_env()

    logger.configure(level=config.log_level, json_lines=config.enable_json_logs)

    app = FastAPI(title="Door Signal Relay")

    app.state.config = config

    # Middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.cors_allow_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # One store / registry per process: every connection is a peer of every other
    build_signaling(app)

    # Routes
    register_routes(app)

    return app


def build_signaling(app: FastAPI) -> None:
    """Attach the shared signaling objects to app.state."""
    store = DoorStateStore()
    registry = ConnectionRegistry()
    relay = BroadcastRelay(registry=registry, store=store)

    app.state.door_store = store
    app.state.registry = registry
    app.state.signaling = SignalingHandler(registry=registry, relay=relay)
