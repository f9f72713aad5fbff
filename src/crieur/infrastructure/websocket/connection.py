"""
Outbound side of a listen connection.
"""

import asyncio
from typing import Any, Optional, Tuple

from crieur.domain.value_objects import Envelope
from crieur.reporter import SystemReporter


class Connection:
    """
    FIFO outbox in front of a WebSocket.

    ``send`` and ``close`` only enqueue, so the channel actor never waits
    on a slow socket. One writer task drains the outbox in order, which
    keeps per-connection delivery order intact.
    """

    def __init__(
        self,
        websocket: Any,
        connection_id: str = "",
        reporter: Optional[SystemReporter] = None,
    ):
        """
        Initialize connection.

        Args:
            websocket: Accepted socket exposing ``send_text`` and ``close``
            connection_id: Identifier used in log lines
            reporter: Optional SystemReporter for logging
        """
        self.websocket = websocket
        self.connection_id = connection_id
        self.reporter = reporter
        self.sent = 0
        self._outbox: asyncio.Queue = asyncio.Queue()
        self._writer: Optional[asyncio.Task] = None
        self._closing = False
        self._closed = False

    @property
    def is_open(self) -> bool:
        return not self._closing and not self._closed

    def start(self) -> None:
        """Start the writer task."""
        if self._writer is None:
            self._writer = asyncio.create_task(self._drain())

    def send(self, envelope: Envelope) -> None:
        """Queue an envelope; dropped once the connection is closing."""
        if not self.is_open:
            return
        self._outbox.put_nowait(envelope)

    def close(self, code: int = 1000, reason: str = "") -> None:
        """Queue a close frame behind every envelope already queued."""
        if not self.is_open:
            return
        self._closing = True
        self._outbox.put_nowait((code, reason))

    async def _drain(self) -> None:
        while True:
            item = await self._outbox.get()

            if isinstance(item, Envelope):
                try:
                    await self.websocket.send_text(item.to_json())
                    self.sent += 1
                except Exception as e:
                    self._log_failure("send", e)
                    self._closed = True
                    return
                continue

            await self._close_socket(item)
            return

    async def _close_socket(self, item: Tuple[int, str]) -> None:
        code, reason = item
        self._closed = True
        try:
            await self.websocket.close(code=code, reason=reason)
        except Exception as e:
            # Peer already gone
            self._log_failure("close", e)

    async def wait_closed(self, timeout: float = 1.0) -> None:
        """
        Flush the outbox, close the socket and stop the writer.

        Args:
            timeout: Maximum seconds to wait for the flush
        """
        self.close()

        if self._writer is None:
            return

        try:
            await asyncio.wait_for(asyncio.shield(self._writer), timeout=timeout)
        except asyncio.TimeoutError:
            self._writer.cancel()
            await asyncio.gather(self._writer, return_exceptions=True)

    def _log_failure(self, action: str, error: Exception) -> None:
        if self.reporter:
            self.reporter.debug(
                f"Socket {action} failed [conn={self.connection_id}]: "
                f"{type(error).__name__}: {error}",
                context="Connection",
                verbose_level=3,
            )
