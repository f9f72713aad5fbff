"""
Client entity - represents one live connection registered to a channel.
"""

import time
from typing import Any, Callable, Dict, Optional

from crieur.domain.value_objects import Envelope, EnvelopeType

SendFn = Callable[[Envelope], None]
CloseFn = Callable[[int, str], None]


class Client:
    """
    Client entity representing a listen connection.

    Owned by exactly one channel actor. Heartbeat state lives here so the
    actor can decide liveness without touching the socket.

    Attributes:
        id: Client identifier, unique within the channel
        presence: Arbitrary document the client associates with itself
        ping_timeout: Consecutive pings without a PONG
        ping_sent_at: Monotonic timestamp of the last PING (or last PONG)
        ping_latency: Last measured round trip in milliseconds
    """

    def __init__(
        self,
        client_id: str,
        send: SendFn,
        close: Optional[CloseFn] = None,
        presence: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize Client entity.

        Args:
            client_id: Client identifier
            send: Callable that queues an envelope on the connection
            close: Optional callable that closes the connection
            presence: Initial presence document (defaults to empty)
        """
        self.id: str = client_id
        self.presence: Any = presence if presence is not None else {}
        self.ping_timeout: int = 0
        self.ping_sent_at: float = time.monotonic()
        self.ping_latency: int = 0
        self._send = send
        self._close = close

    # ================================================================
    # Outbound
    # ================================================================

    def send(
        self,
        envelope_type: EnvelopeType,
        payload: Any = None,
        **extra: Any,
    ) -> None:
        """
        Queue an envelope addressed to this client.

        Args:
            envelope_type: Outbound envelope type
            payload: Envelope payload
            **extra: Protocol-specific fields merged into the frame
        """
        self._send(
            Envelope(
                type=envelope_type.value,
                payload=payload if payload is not None else {},
                client_id=self.id,
                latency=self.ping_latency,
                extra=extra,
            )
        )

    def close(self, code: int = 1000, reason: str = "") -> None:
        """Close the underlying connection (no-op without a close capability)."""
        if self._close is not None:
            self._close(code, reason)

    # ================================================================
    # Heartbeat
    # ================================================================

    def mark_ping_sent(self, now: Optional[float] = None) -> None:
        """Record an outgoing PING."""
        self.ping_sent_at = now if now is not None else time.monotonic()
        self.ping_timeout += 1

    def mark_pong(self, now: Optional[float] = None) -> None:
        """Record a PONG: measure latency and reset the miss counter."""
        now = now if now is not None else time.monotonic()
        self.ping_latency = max(0, round((now - self.ping_sent_at) * 1000))
        self.ping_sent_at = now
        self.ping_timeout = 0

    def is_timed_out(self, limit: int) -> bool:
        """Check whether the client missed ``limit`` consecutive pings."""
        return self.ping_timeout >= limit

    # ================================================================
    # Presence
    # ================================================================

    def member(self) -> Dict[str, Any]:
        """Presence entry as seen by other clients."""
        return {"clientID": self.id, "presence": self.presence}

    def __eq__(self, other) -> bool:
        if not isinstance(other, Client):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        return (
            f"Client(id={self.id}, ping_timeout={self.ping_timeout}, "
            f"latency={self.ping_latency}ms)"
        )
