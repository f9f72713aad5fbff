"""
Test fixtures and configuration.
"""

import asyncio
import json
import random
from typing import Any, Dict, List, Optional

import pytest

from crieur.config.settings import Settings
from crieur.domain.entities import Client
from crieur.domain.value_objects import Envelope
from crieur.reporter import SystemReporter


class RecordingClient(Client):
    """Client whose outbound envelopes and close calls are recorded."""

    def __init__(self, client_id: str, presence: Optional[Dict[str, Any]] = None):
        self.outbox: List[Envelope] = []
        self.closed_with: Optional[tuple] = None
        super().__init__(
            client_id,
            send=self.outbox.append,
            close=self._record_close,
            presence=presence,
        )

    def _record_close(self, code: int, reason: str) -> None:
        self.closed_with = (code, reason)

    def of_type(self, envelope_type: str) -> List[Envelope]:
        return [e for e in self.outbox if e.type == envelope_type]

    def types(self) -> List[str]:
        return [e.type for e in self.outbox]


class FakeWebSocket:
    """Minimal stand-in for an accepted Starlette WebSocket."""

    def __init__(self):
        self.sent: List[Dict[str, Any]] = []
        self.closed: Optional[tuple] = None
        self.fail_sends = False
        self.incoming: asyncio.Queue = asyncio.Queue()

    async def send_text(self, data: str) -> None:
        if self.fail_sends:
            raise RuntimeError("socket is gone")
        self.sent.append(json.loads(data))

    async def close(self, code: int = 1000, reason: str = "") -> None:
        self.closed = (code, reason)
        self.incoming.put_nowait({"type": "websocket.disconnect", "code": code})

    async def receive(self) -> Dict[str, Any]:
        return await self.incoming.get()

    def push_text(self, data: Any) -> None:
        text = data if isinstance(data, str) else json.dumps(data)
        self.incoming.put_nowait({"type": "websocket.receive", "text": text})

    def push_disconnect(self, code: int = 1000) -> None:
        self.incoming.put_nowait({"type": "websocket.disconnect", "code": code})

    def sent_types(self) -> List[str]:
        return [frame["type"] for frame in self.sent]


@pytest.fixture
def settings() -> Settings:
    """Settings with short timings for tests."""
    return Settings(
        ENV="test",
        heartbeat_interval_ms=50,
        ping_timeout_limit=3,
        ack_timeout_ms=300,
        shutdown_grace_period=0,
        store_backend="memory",
        log_level="warning",
        verbose=0,
    )


@pytest.fixture
def reporter() -> SystemReporter:
    """Reporter used by tests for their own progress lines."""
    return SystemReporter(name="crieur.tests", verbose=1)


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def make_client():
    """Factory for RecordingClient instances."""

    def _make(client_id: str, presence: Optional[Dict[str, Any]] = None):
        return RecordingClient(client_id, presence=presence)

    return _make


@pytest.fixture
def make_websocket():
    """Factory for FakeWebSocket instances."""
    return FakeWebSocket
