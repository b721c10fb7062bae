"""
Process entry point.

Runs the ASGI app under uvicorn with host/port from AppConfig.
"""

from __future__ import annotations

from dotenv import load_dotenv
import uvicorn

from config import AppConfig


def run() -> None:
    """Console script: `door-signal-relay`."""
    load_dotenv()
    config = AppConfig.load_from_env()

    uvicorn.run(
        "server.asgi:app",
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
        reload=config.env == "dev",
    )


if __name__ == "__main__":
    run()
