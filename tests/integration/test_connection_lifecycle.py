"""
Integration tests for ConnectionLifecycleManager.

Runs the reader and heartbeat tasks against a fake socket and a real
channel actor.
"""

import asyncio
import json
import time

import pytest_asyncio

from crieur.infrastructure.actor import ChannelActor
from crieur.infrastructure.storage import InMemoryLogStore
from crieur.infrastructure.websocket import ConnectionLifecycleManager


async def wait_until(predicate, timeout: float = 2.0) -> None:
    """Poll until predicate() is true or fail after timeout."""
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.005)


@pytest_asyncio.fixture
async def actor(settings):
    actor = ChannelActor(name="lobby", store=InMemoryLogStore(), settings=settings)
    yield actor
    await actor.stop()


@pytest_asyncio.fixture
async def lifecycle(actor, settings):
    return ConnectionLifecycleManager(
        actor, heartbeat_interval=settings.heartbeat_interval
    )


class TestConnectionLifecycle:
    """Integration tests for ConnectionLifecycleManager."""

    async def test_serve_registers_then_cleans_up(self, actor, lifecycle, make_websocket):
        """Test connect, CONNECTED frame, and deregistration on disconnect."""
        websocket = make_websocket()
        serving = asyncio.create_task(lifecycle.serve(websocket))

        await wait_until(lambda: "CONNECTED" in websocket.sent_types())
        assert actor.client_count == 1

        websocket.push_disconnect()
        client = await asyncio.wait_for(serving, timeout=2.0)

        assert actor.client_count == 0
        assert client.id.startswith("client_")
        assert websocket.sent[0]["clientID"] == client.id

    async def test_frames_are_forwarded_to_actor(self, actor, lifecycle, make_websocket):
        """Test a PRESENCE frame sent on the socket reaches peers."""
        first = make_websocket()
        second = make_websocket()
        tasks = [
            asyncio.create_task(lifecycle.serve(first)),
        ]
        await wait_until(lambda: "CONNECTED" in first.sent_types())
        tasks.append(asyncio.create_task(lifecycle.serve(second)))
        await wait_until(lambda: "CONNECTED" in second.sent_types())

        first.push_text({"type": "presence", "payload": {"name": "a"}})

        await wait_until(lambda: "PRESENCE:UPDATED" in second.sent_types())
        update = next(f for f in second.sent if f["type"] == "PRESENCE:UPDATED")
        assert update["payload"]["presence"] == {"name": "a"}

        first.push_disconnect()
        second.push_disconnect()
        await asyncio.gather(*tasks)

    async def test_heartbeat_pings_client(self, lifecycle, make_websocket):
        """Test PING frames arrive on the heartbeat interval."""
        websocket = make_websocket()
        serving = asyncio.create_task(lifecycle.serve(websocket))

        await wait_until(lambda: "PING" in websocket.sent_types())

        websocket.push_disconnect()
        await serving

    async def test_answered_pings_keep_client_alive(
        self, actor, lifecycle, make_websocket, settings
    ):
        """Test a client that answers every PING is never expired."""
        websocket = make_websocket()
        serving = asyncio.create_task(lifecycle.serve(websocket))

        deadline = time.monotonic() + settings.heartbeat_interval * 8
        answered = 0
        while time.monotonic() < deadline:
            pings = websocket.sent_types().count("PING")
            while answered < pings:
                websocket.push_text({"type": "PONG"})
                answered += 1
            await asyncio.sleep(0.005)

        assert "ERROR" not in websocket.sent_types()
        assert actor.client_count == 1

        websocket.push_disconnect()
        await serving

    async def test_silent_client_expires(self, actor, lifecycle, make_websocket):
        """Test a client that never answers gets PING_TIMEOUT and is closed."""
        websocket = make_websocket()

        await asyncio.wait_for(lifecycle.serve(websocket), timeout=2.0)

        error = next(f for f in websocket.sent if f["type"] == "ERROR")
        assert error["payload"]["code"] == "PING_TIMEOUT"
        assert websocket.sent_types().count("PING") >= 3
        assert websocket.closed == (1000, "Ping timeout")
        assert actor.client_count == 0

    async def test_binary_frames_are_decoded(self, actor, lifecycle, make_websocket):
        """Test bytes frames are treated as UTF-8 text."""
        websocket = make_websocket()
        serving = asyncio.create_task(lifecycle.serve(websocket))
        await wait_until(lambda: actor.client_count == 1)

        payload = json.dumps({"type": "presence", "payload": {"b": 1}}).encode()
        websocket.incoming.put_nowait({"type": "websocket.receive", "bytes": payload})

        await wait_until(lambda: "PRESENCE:UPDATED" in websocket.sent_types())

        websocket.push_disconnect()
        await serving

    # ================================================================
    # Cancellation
    # ================================================================

    async def _serve_pair(self, lifecycle, make_websocket):
        first = make_websocket()
        second = make_websocket()
        staying = asyncio.create_task(lifecycle.serve(first))
        await wait_until(lambda: "CONNECTED" in first.sent_types())
        leaving = asyncio.create_task(lifecycle.serve(second))
        await wait_until(lambda: "CONNECTED" in second.sent_types())
        await wait_until(lambda: "PRESENCE:JOINED" in first.sent_types())
        return first, second, staying, leaving

    async def test_cancelled_serve_deregisters(self, actor, lifecycle, make_websocket):
        """Test cancelling the handler removes the client and tells its peer."""
        first, second, staying, leaving = await self._serve_pair(
            lifecycle, make_websocket
        )

        leaving.cancel()
        await asyncio.gather(leaving, return_exceptions=True)

        assert leaving.cancelled()
        assert actor.client_count == 1
        await wait_until(lambda: "PRESENCE:LEFT" in first.sent_types())
        await wait_until(lambda: second.closed is not None)

        first.push_disconnect()
        await staying
        assert actor.client_count == 0

    async def test_repeated_cancellation_during_cleanup(
        self, actor, lifecycle, make_websocket
    ):
        """Test a handler cancelled again while cleaning up still deregisters."""
        first, second, staying, leaving = await self._serve_pair(
            lifecycle, make_websocket
        )

        leaving.cancel()
        await asyncio.sleep(0)
        leaving.cancel()
        await asyncio.gather(leaving, return_exceptions=True)

        assert actor.client_count == 1
        await wait_until(lambda: "PRESENCE:LEFT" in first.sent_types())
        left = next(f for f in first.sent if f["type"] == "PRESENCE:LEFT")
        assert left["payload"]["clientID"] == second.sent[0]["clientID"]

        first.push_disconnect()
        await staying
