"""
Use case for tracking client presence.
"""

from typing import Any, Iterable, Optional

from crieur.domain.entities import Client
from crieur.domain.value_objects import EnvelopeType
from crieur.reporter import SystemReporter
from crieur.reporter.emojis import Emoji


class PresenceTracker:
    """
    Owns presence transitions and their PRESENCE:* fan-out.

    Presence is stored on the Client itself; this class only mutates it
    and tells the other clients. Delivery is best-effort with no ack.
    """

    def __init__(self, reporter: Optional[SystemReporter] = None):
        self.reporter = reporter

    def joined(self, newcomer: Client, members: Iterable[Client]) -> None:
        """
        Announce a newcomer and hand it the current member list.

        Must run before the newcomer is added to the registry, so
        ``members`` does not include it.

        Args:
            newcomer: Client that just connected
            members: Clients already registered
        """
        members = list(members)

        for member in members:
            member.send(
                EnvelopeType.PRESENCE_JOINED,
                {"clientID": newcomer.id, "presence": newcomer.presence},
            )

        newcomer.send(
            EnvelopeType.CONNECTED,
            {"members": [member.member() for member in members]},
        )

        self._log(f"{newcomer.id} joined ({len(members)} peers notified)")

    def updated(self, client: Client, presence: Any, members: Iterable[Client]) -> None:
        """
        Replace a client's presence and broadcast the change.

        The sender is included in the broadcast.

        Args:
            client: Client whose presence changed
            presence: New presence document
            members: All registered clients
        """
        client.presence = presence if presence is not None else {}

        for member in members:
            member.send(
                EnvelopeType.PRESENCE_UPDATED,
                {"clientID": client.id, "presence": client.presence},
            )

        self._log(f"{client.id} updated presence")

    def left(self, client_id: str, members: Iterable[Client]) -> None:
        """
        Announce a departure to the remaining clients.

        Args:
            client_id: ID of the client that left
            members: Clients still registered
        """
        for member in members:
            member.send(EnvelopeType.PRESENCE_LEFT, {"clientID": client_id})

        self._log(f"{client_id} left")

    def _log(self, msg: str) -> None:
        if self.reporter:
            self.reporter.debug(
                f"{Emoji.MESSAGE.PRESENCE} {msg}",
                context="Presence",
                verbose_level=2,
            )
