"""
Listen-connection lifecycle: registration, heartbeat and inbound frames.
"""

import asyncio
import time
from typing import Any, List, Optional

from crieur.domain.entities import Client
from crieur.infrastructure.actor.channel_actor import ChannelActor
from crieur.infrastructure.websocket.connection import Connection
from crieur.reporter import SystemReporter
from crieur.reporter.emojis import Emoji


class ConnectionLifecycleManager:
    """
    Drives one accepted WebSocket for its whole lifetime.

    Each connection runs two tasks: a reader that forwards every frame
    into the channel actor, and a heartbeat ticker that asks the actor to
    ping (or expire) the client. Neither touches the registry directly;
    state changes go through the actor. When the socket closes, or the
    handler is cancelled, the client is deregistered before anything
    else is awaited.
    """

    def __init__(
        self,
        actor: ChannelActor,
        heartbeat_interval: float,
        reporter: Optional[SystemReporter] = None,
    ):
        """
        Initialize lifecycle manager.

        Args:
            actor: Channel actor owning the client registry
            heartbeat_interval: Seconds between heartbeat ticks
            reporter: Optional SystemReporter for logging
        """
        self.actor = actor
        self.heartbeat_interval = heartbeat_interval
        self.reporter = reporter

    async def serve(self, websocket: Any) -> Client:
        """
        Register an accepted socket and run it until either side closes.

        Args:
            websocket: Accepted WebSocket

        Returns:
            The client that was served (already deregistered)
        """
        client_id = self.actor.new_client_id()
        connection = Connection(websocket, connection_id=client_id, reporter=self.reporter)
        connection.start()

        client = Client(client_id, send=connection.send, close=connection.close)
        started = time.time()
        tasks: List[asyncio.Task] = []

        try:
            await self.actor.connect(client)

            if self.reporter:
                self.reporter.info(
                    f"{Emoji.NETWORK.CONNECTED} Client connected "
                    f"[channel={self.actor.name}] [client={client_id}] "
                    f"[clients={self.actor.client_count}]",
                    context="Lifecycle",
                )

            tasks = [
                asyncio.create_task(self._heartbeat(client)),
                asyncio.create_task(self._read(websocket, client)),
            ]
            done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
            for task in done:
                if task.cancelled():
                    continue
                error = task.exception()
                if error is not None and self.reporter:
                    self.reporter.error(
                        f"Connection error [client={client_id}]: "
                        f"{type(error).__name__}: {error}",
                        context="Lifecycle",
                    )
        finally:
            # Nothing before the first await here, so cancellation
            # cannot skip deregistration
            for task in tasks:
                task.cancel()
            self.actor.disconnect(client_id)
            connection.close()

            if self.reporter:
                self.reporter.info(
                    f"{Emoji.NETWORK.DISCONNECT} Connection closed "
                    f"[channel={self.actor.name}] [client={client_id}] "
                    f"[duration={time.time() - started:.2f}s] "
                    f"[sent={connection.sent}]",
                    context="Lifecycle",
                )

            await asyncio.gather(*tasks, return_exceptions=True)
            await connection.wait_closed()

        return client

    async def _read(self, websocket: Any, client: Client) -> None:
        while True:
            message = await websocket.receive()

            if message["type"] == "websocket.disconnect":
                return

            raw = message.get("text")
            if raw is None and message.get("bytes") is not None:
                raw = message["bytes"].decode("utf-8", errors="replace")
            if raw is None:
                continue

            await self.actor.receive(client.id, raw)

    async def _heartbeat(self, client: Client) -> None:
        while True:
            await asyncio.sleep(self.heartbeat_interval)

            if not await self.actor.heartbeat(client.id):
                return
