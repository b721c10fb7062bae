"""
Application configuration.

Responsibilities:
- Load deployment-specific configuration
- Read environment variables
- Provide a typed, immutable config object

Non-responsibilities:
- No relay logic
- No signaling vocabulary (see constants.py)
- No runtime mutation
"""

from __future__ import annotations

import os
from dataclasses import dataclass


def _parse_origins(raw: str) -> tuple[str, ...]:
    origins = tuple(o.strip() for o in raw.split(",") if o.strip())
    return origins or ("*",)


def _parse_optional_float(name: str, raw: str | None) -> float | None:
    if raw is None or not raw.strip():
        return None
    value = float(raw)
    if value <= 0:
        raise ValueError(f"{name} must be > 0, got {raw!r}")
    return value


@dataclass(frozen=True)
class AppConfig:
    """
    Immutable application configuration.

    Constructed once at process startup.
    Passed downward to the app factory and the signaling handler.
    """

    # ------------------------------------------------------------------
    # Environment
    # ------------------------------------------------------------------

    env: str = "dev"
    log_level: str = "INFO"

    # ------------------------------------------------------------------
    # Hosting
    # ------------------------------------------------------------------

    host: str = "0.0.0.0"
    port: int = 8080
    ws_path: str = "/ws"
    status_path: str = "/status"
    cors_allow_origins: tuple[str, ...] = ("*",)

    # ------------------------------------------------------------------
    # Relay hardening
    # ------------------------------------------------------------------

    # None = sends may block indefinitely on a slow peer
    send_timeout_s: float | None = None

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    enable_json_logs: bool = True

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------

    @staticmethod
    def load_from_env() -> AppConfig:
        """
        Load configuration from environment variables.

        Raises:
            ValueError if a numeric variable is malformed.
        """
        return AppConfig(
            env=os.environ.get("ENV", "dev"),
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),

            host=os.environ.get("HOST", "0.0.0.0"),
            port=int(os.environ.get("PORT", "8080")),
            ws_path=os.environ.get("WS_PATH", "/ws"),
            status_path=os.environ.get("STATUS_PATH", "/status"),
            cors_allow_origins=_parse_origins(os.environ.get("CORS_ALLOW_ORIGINS", "*")),

            send_timeout_s=_parse_optional_float(
                "SEND_TIMEOUT_S", os.environ.get("SEND_TIMEOUT_S")
            ),

            enable_json_logs=os.environ.get("ENABLE_JSON_LOGS", "1") == "1",
        )
