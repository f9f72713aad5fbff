"""
Envelope value object - the wire unit for all connection traffic.

Every frame exchanged on a listen connection is a JSON object:

    {"type": ..., "payload": ..., "clientID": ..., "latency": ..., **extra}

Types are sent upper-case and matched case-insensitively on receipt.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from crieur.domain.exceptions import InvalidEnvelopeError


class EnvelopeType(str, Enum):
    """Envelope type vocabulary."""

    PING = "PING"
    PONG = "PONG"
    DATA = "DATA"
    CONNECTED = "CONNECTED"
    PRESENCE = "PRESENCE"
    PRESENCE_JOINED = "PRESENCE:JOINED"
    PRESENCE_UPDATED = "PRESENCE:UPDATED"
    PRESENCE_LEFT = "PRESENCE:LEFT"
    ACK = "ACK"
    ACK_RECEIVED = "ACK-RECEIVED"
    ERROR = "ERROR"

    @classmethod
    def parse(cls, raw: str) -> Optional["EnvelopeType"]:
        """
        Match a received type tag case-insensitively.

        Args:
            raw: Type tag as sent by the client

        Returns:
            Matching EnvelopeType, or None for application-defined types
        """
        try:
            return cls(raw.upper())
        except ValueError:
            return None


@dataclass(frozen=True)
class Envelope:
    """
    One frame of connection traffic.

    Attributes:
        type: Type tag (upper-case for outbound frames)
        payload: Opaque structured document
        client_id: ID of the client the frame is addressed to
        latency: Recipient's last measured ping round trip in ms
        extra: Protocol-specific fields (eventID, requires_ack, ...)
    """

    type: str
    payload: Any = None
    client_id: Optional[str] = None
    latency: int = 0
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def kind(self) -> Optional[EnvelopeType]:
        """Known envelope type, or None for application messages."""
        return EnvelopeType.parse(self.type)

    def is_type(self, envelope_type: EnvelopeType) -> bool:
        """Case-insensitive type check."""
        return self.type.upper() == envelope_type.value

    def to_dict(self) -> Dict[str, Any]:
        """Wire representation."""
        return {
            "type": self.type,
            "payload": self.payload,
            "clientID": self.client_id,
            "latency": self.latency,
            **self.extra,
        }

    def to_json(self) -> str:
        """Serialize for sending."""
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, raw: str) -> "Envelope":
        """
        Parse an inbound frame.

        Args:
            raw: Text frame received on the connection

        Returns:
            Envelope with any unknown top-level keys kept in extra

        Raises:
            InvalidEnvelopeError: If the frame is not a JSON object with a
                string type
        """
        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as e:
            raise InvalidEnvelopeError(f"not valid JSON ({e})") from e

        if not isinstance(data, dict):
            raise InvalidEnvelopeError("frame must be a JSON object")

        envelope_type = data.pop("type", None)
        if not isinstance(envelope_type, str) or not envelope_type:
            raise InvalidEnvelopeError("missing 'type'")

        payload = data.pop("payload", None)
        client_id = data.pop("clientID", None)
        latency = data.pop("latency", 0)

        return cls(
            type=envelope_type,
            payload=payload,
            client_id=client_id,
            latency=latency if isinstance(latency, int) else 0,
            extra=data,
        )
