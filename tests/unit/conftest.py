# pylint: disable=missing-module-docstring,missing-function-docstring

from __future__ import annotations

from typing import Callable

import pytest

from signaling.connection_status import ConnectionStatus


class FakeConnection:
    """In-memory stand-in for WebSocketConnection."""

    def __init__(
        self,
        connection_id: str,
        *,
        status: ConnectionStatus = ConnectionStatus.OPEN,
        fail_with: BaseException | None = None,
        close_error: BaseException | None = None,
    ) -> None:
        self.connection_id = connection_id
        self.remote_address = "127.0.0.1:12345"
        self.status = status
        self.sent: list[str] = []
        self.close_codes: list[int] = []
        self.transport_closed = False
        self._fail_with = fail_with
        self._close_error = close_error

    @property
    def is_open(self) -> bool:
        return self.status is ConnectionStatus.OPEN and not self.transport_closed

    async def send_text(self, payload: str) -> None:
        if self._fail_with is not None:
            raise self._fail_with
        self.sent.append(payload)

    async def close(self, code: int = 1000, reason: str = "") -> None:
        self.close_codes.append(code)
        if self._close_error is not None:
            raise self._close_error
        self.transport_closed = True


@pytest.fixture
def make_conn() -> Callable[..., FakeConnection]:
    return FakeConnection


@pytest.fixture
def captured_logs(monkeypatch: pytest.MonkeyPatch) -> list[dict]:
    """Collect every log_event call (all levels) from relay, handler and metrics."""
    import signaling.handler as handler_mod
    import signaling.relay as relay_mod
    import observability.metrics as metrics_mod

    emitted: list[dict] = []

    def fake_log_event(payload: dict, *, level: str = "INFO") -> None:
        emitted.append({**payload, "level": level})

    for mod in (handler_mod, relay_mod, metrics_mod):
        monkeypatch.setattr(mod, "log_event", fake_log_event)

    return emitted
