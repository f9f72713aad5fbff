"""
Use case for dispatching emitted events to a channel audience.
"""

import asyncio
import random
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Set

from crieur.domain.entities import Client
from crieur.domain.exceptions import EmptyPayloadError, InsufficientClientsError
from crieur.domain.value_objects import Envelope, EnvelopeType, TargetMode, TargetSpec
from crieur.reporter import SystemReporter
from crieur.reporter.emojis import Emoji

MessageListener = Callable[[Client, Envelope], None]
Unsubscribe = Callable[[], None]
Subscribe = Callable[[str, MessageListener], Unsubscribe]


class AckCollector:
    """
    Collects ACK envelopes for one event from a fixed set of clients.

    Listens on each target's application-message stream. A matching ACK
    answers the client with ACK-RECEIVED right away and drops it from the
    pending set; the collector completes when the set is empty.
    """

    def __init__(
        self,
        event_id: str,
        targets: List[Client],
        subscribe: Subscribe,
    ):
        """
        Initialize AckCollector and subscribe to every target.

        Args:
            event_id: Event the ACKs must reference
            targets: Clients expected to acknowledge
            subscribe: Registers a listener for one client's messages
        """
        self.event_id = event_id
        self.pending: Set[str] = {client.id for client in targets}
        self.acknowledged: List[str] = []
        self._done = asyncio.Event()
        self._unsubscribers: Dict[str, Unsubscribe] = {}

        for client in targets:
            self._unsubscribers[client.id] = subscribe(client.id, self._on_message)

        if not self.pending:
            self._done.set()

    @property
    def complete(self) -> bool:
        return not self.pending

    def _on_message(self, client: Client, envelope: Envelope) -> None:
        if not envelope.is_type(EnvelopeType.ACK):
            return

        payload = envelope.payload
        if not isinstance(payload, dict) or payload.get("eventID") != self.event_id:
            return

        if client.id not in self.pending:
            return

        self.pending.discard(client.id)
        self.acknowledged.append(client.id)
        self._unsubscribe(client.id)

        client.send(EnvelopeType.ACK_RECEIVED, {"eventID": self.event_id})

        if not self.pending:
            self._done.set()

    async def wait(self, timeout: float) -> bool:
        """
        Wait until every target acknowledged or the timeout elapsed.

        Args:
            timeout: Maximum wait in seconds

        Returns:
            True if every target acknowledged in time
        """
        try:
            await asyncio.wait_for(self._done.wait(), timeout=timeout)
            return True
        except asyncio.TimeoutError:
            return False

    def close(self) -> None:
        """Drop every remaining subscription."""
        for client_id in list(self._unsubscribers):
            self._unsubscribe(client_id)

    def _unsubscribe(self, client_id: str) -> None:
        unsubscribe = self._unsubscribers.pop(client_id, None)
        if unsubscribe is not None:
            unsubscribe()


@dataclass
class Dispatch:
    """
    Outcome of sending one event.

    Attributes:
        event_id: ID carried by every DATA envelope of this event
        recipients: IDs of the clients the event was sent to
        acks: Collector to wait on, None when no ack was requested
    """

    event_id: str
    recipients: List[str] = field(default_factory=list)
    acks: Optional[AckCollector] = None


class EventDispatcher:
    """
    Resolves the audience of an emit and delivers DATA envelopes.

    Stateless between calls; the channel actor passes in its registry and
    its message-subscription hook.
    """

    def __init__(
        self,
        id_factory: Callable[[], str],
        rng: Optional[random.Random] = None,
        reporter: Optional[SystemReporter] = None,
    ):
        """
        Initialize dispatcher.

        Args:
            id_factory: Produces fresh event IDs
            rng: Random source for numeric targets
            reporter: Optional SystemReporter for logging
        """
        self.id_factory = id_factory
        self.rng = rng or random.Random()
        self.reporter = reporter

    def resolve_audience(
        self,
        clients: Mapping[str, Client],
        target: TargetSpec,
    ) -> List[Client]:
        """
        Select the clients an event goes to.

        Args:
            clients: Current registry
            target: Requested audience

        Returns:
            Selected clients

        Raises:
            InsufficientClientsError: If a numeric target exceeds the
                number of connected clients
        """
        if target.mode is TargetMode.BROADCAST:
            return list(clients.values())

        if target.mode is TargetMode.RANDOM:
            return self._sample(clients, target.count)

        requested = dict.fromkeys(target.client_ids)
        return [clients[cid] for cid in requested if cid in clients]

    def _sample(self, clients: Mapping[str, Client], count: int) -> List[Client]:
        if count > len(clients):
            raise InsufficientClientsError(requested=count, available=len(clients))

        ids = list(clients)
        chosen: List[str] = []

        # Rejection sampling: redraw until count distinct IDs are collected
        while len(chosen) < count:
            candidate = self.rng.choice(ids)
            if candidate not in chosen:
                chosen.append(candidate)

        return [clients[cid] for cid in chosen]

    def dispatch(
        self,
        payload: Any,
        target: TargetSpec,
        require_ack: bool,
        clients: Mapping[str, Client],
        subscribe: Subscribe,
    ) -> Dispatch:
        """
        Send one event to its audience.

        Args:
            payload: Event payload (a non-empty dict or list)
            target: Requested audience
            require_ack: Whether recipients must acknowledge
            clients: Current registry
            subscribe: Message-subscription hook used for ACK collection

        Returns:
            Dispatch describing what was sent

        Raises:
            EmptyPayloadError: If payload is not a non-empty dict or list
            InsufficientClientsError: If a numeric target cannot be met
        """
        if not isinstance(payload, (dict, list)) or not payload:
            raise EmptyPayloadError()

        audience = self.resolve_audience(clients, target)
        event_id = self.id_factory()

        # Listen before sending so no ACK can slip past
        acks = AckCollector(event_id, audience, subscribe) if require_ack else None

        for client in audience:
            client.send(
                EnvelopeType.DATA,
                payload,
                eventID=event_id,
                requires_ack=require_ack,
            )

        if self.reporter:
            self.reporter.info(
                f"{Emoji.NETWORK.BROADCAST} Event {event_id} sent "
                f"[target={target}] [recipients={len(audience)}] "
                f"[require_ack={require_ack}]",
                context="Dispatcher",
                verbose_level=2,
            )

        return Dispatch(
            event_id=event_id,
            recipients=[client.id for client in audience],
            acks=acks,
        )
