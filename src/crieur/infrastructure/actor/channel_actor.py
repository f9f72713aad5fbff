"""
Channel actor - single owner of one channel's clients and history.
"""

import asyncio
import inspect
import random
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from crieur.application.dto import EmitResult
from crieur.application.use_cases import (
    Dispatch,
    EventDispatcher,
    HistoryLog,
    PresenceTracker,
)
from crieur.application.use_cases.dispatch_event import MessageListener, Unsubscribe
from crieur.config.settings import Settings
from crieur.domain.entities import Client
from crieur.domain.exceptions import DispatchError, InvalidEnvelopeError
from crieur.domain.value_objects import Envelope, EnvelopeType, TargetSpec
from crieur.infrastructure.ids import generate_id
from crieur.infrastructure.storage import ILogStore
from crieur.reporter import SystemReporter
from crieur.reporter.emojis import Emoji

Handler = Callable[..., Any]


class ChannelActor:
    """
    Actor owning one channel.

    Registry work (connect, inbound frame, heartbeat tick, dispatch,
    history append) is a mailbox item handled by a single worker task,
    one at a time. Callers await the item's result. Disconnect is the
    exception: it runs immediately, so a cancelled connection handler
    can never leave its client behind. Every registry handler is
    synchronous, so applying it outside the worker cannot interleave
    with another one. Waiting for acknowledgements happens outside the
    mailbox, so the channel keeps serving other clients during the wait.

    Attributes:
        name: Channel name
        clients: Registry of connected clients by ID
        presence: Presence tracker
        dispatcher: Event dispatcher
        history: History log scoped to this channel
    """

    PING_TIMEOUT_CODE = "PING_TIMEOUT"
    INVALID_MESSAGE_CODE = "INVALID_MESSAGE"

    def __init__(
        self,
        name: str,
        store: ILogStore,
        settings: Settings,
        reporter: Optional[SystemReporter] = None,
        id_factory: Optional[Callable[[str], str]] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize channel actor.

        Args:
            name: Validated channel name
            store: Log store scoped to this channel
            settings: Application settings (timings, limits)
            reporter: Optional SystemReporter for logging
            id_factory: Produces IDs from a prefix ("client", "evt")
            rng: Random source for numeric targets
        """
        self.name = name
        self.settings = settings
        self.reporter = reporter
        self.clients: Dict[str, Client] = {}

        self._new_id = id_factory or (
            lambda prefix: generate_id(prefix, settings.id_length)
        )
        self._listeners: Dict[str, List[MessageListener]] = {}
        self._inbox: asyncio.Queue = asyncio.Queue()
        self._worker: Optional[asyncio.Task] = None
        self._stopped = False
        self._appends: Set[asyncio.Future] = set()

        self.presence = PresenceTracker(reporter)
        self.dispatcher = EventDispatcher(
            id_factory=lambda: self._new_id("evt"),
            rng=rng,
            reporter=reporter,
        )
        self.history = HistoryLog(store, id_factory=lambda: self._new_id("evt"))

    @property
    def client_count(self) -> int:
        return len(self.clients)

    @property
    def is_running(self) -> bool:
        return self._worker is not None and not self._stopped

    def new_client_id(self) -> str:
        """Generate an ID for a connecting client."""
        return self._new_id("client")

    # ================================================================
    # Mailbox
    # ================================================================

    async def submit(self, handler: Handler, *args: Any) -> Any:
        """
        Run a handler on the actor's worker and return its result.

        Once the actor is stopped, handlers run inline so late
        disconnects still clean up.

        Args:
            handler: Sync or async callable
            *args: Handler arguments

        Returns:
            Handler result (exceptions are re-raised to the caller)
        """
        if self._stopped:
            return await self._invoke(handler, args)

        if self._worker is None:
            self._worker = asyncio.create_task(
                self._run(), name=f"channel:{self.name}"
            )

        future = asyncio.get_running_loop().create_future()
        await self._inbox.put((handler, args, future))
        return await future

    @staticmethod
    async def _invoke(handler: Handler, args: Tuple[Any, ...]) -> Any:
        result = handler(*args)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def _run(self) -> None:
        while True:
            handler, args, future = await self._inbox.get()
            if future.cancelled():
                # Caller gave up before its turn
                self._inbox.task_done()
                continue

            try:
                result = await self._invoke(handler, args)
            except asyncio.CancelledError:
                if not future.done():
                    future.cancel()
                raise
            except Exception as e:
                if not future.done():
                    future.set_exception(e)
            else:
                if not future.done():
                    future.set_result(result)
            finally:
                self._inbox.task_done()

    async def stop(self, code: int = 1001, reason: str = "Server shutdown") -> None:
        """
        Close every client and stop the worker.

        Args:
            code: WebSocket close code sent to clients
            reason: Close reason sent to clients
        """
        if self._stopped:
            return

        self._stopped = True

        for client in list(self.clients.values()):
            client.close(code, reason)

        if self._worker is not None:
            self._worker.cancel()
            await asyncio.gather(self._worker, return_exceptions=True)

        while not self._inbox.empty():
            _, _, future = self._inbox.get_nowait()
            if not future.done():
                future.cancel()

        if self.reporter:
            self.reporter.info(
                f"{Emoji.SYSTEM.SHUTDOWN} Channel stopped "
                f"[channel={self.name}] [clients_closed={len(self.clients)}]",
                context="ChannelActor",
                verbose_level=2,
            )

    # ================================================================
    # Public operations
    # ================================================================

    async def connect(self, client: Client) -> None:
        """Announce and register a newly connected client."""
        await self.submit(self._on_connect, client)

    def disconnect(self, client_id: str) -> bool:
        """
        Deregister a client and tell the others.

        Applied at once rather than queued, so it also runs from a
        handler that is being cancelled.

        Returns:
            True if the client was registered (False on repeat calls)
        """
        return self._on_disconnect(client_id)

    async def receive(self, client_id: str, raw: str) -> None:
        """Handle one inbound text frame from a client."""
        await self.submit(self._on_message, client_id, raw)

    async def heartbeat(self, client_id: str) -> bool:
        """
        Run one heartbeat tick for a client.

        Returns:
            False once the client is gone (expired or disconnected)
        """
        return await self.submit(self._on_heartbeat, client_id)

    async def emit(
        self,
        payload: Any,
        clients: Optional[str] = None,
        require_ack: bool = False,
    ) -> EmitResult:
        """
        Deliver an event and append it to history.

        Args:
            payload: Event payload
            clients: Raw target spec (None = broadcast)
            require_ack: Wait for recipients to acknowledge

        Returns:
            EmitResult (ack timeouts still count as success)
        """
        target = TargetSpec.parse(clients)

        try:
            dispatch: Dispatch = await self.submit(
                self._dispatch, payload, target, require_ack
            )
        except DispatchError as e:
            if self.reporter:
                self.reporter.warning(
                    f"{Emoji.ERROR.VALIDATION} Emit rejected "
                    f"[channel={self.name}] [target={target}]: {e}",
                    context="ChannelActor",
                )
            return EmitResult.failure(str(e))

        acknowledged = None
        try:
            if dispatch.acks is not None:
                complete = await dispatch.acks.wait(self.settings.ack_timeout)
                acknowledged = list(dispatch.acks.acknowledged)

                if self.reporter:
                    marker = (
                        Emoji.MESSAGE.ACK if complete else Emoji.MESSAGE.ACK_TIMEOUT
                    )
                    self.reporter.info(
                        f"{marker} Ack wait ended [channel={self.name}] "
                        f"[event={dispatch.event_id}] [complete={complete}] "
                        f"[acked={len(acknowledged)}/{len(dispatch.recipients)}]",
                        context="ChannelActor",
                        verbose_level=2,
                    )
        finally:
            if dispatch.acks is not None:
                dispatch.acks.close()
            # Delivered events are logged even if the caller goes away
            append = self._append_history(payload)

        history_key = await asyncio.shield(append)

        return EmitResult(
            success=True,
            event_id=dispatch.event_id,
            recipients=dispatch.recipients,
            acknowledged=acknowledged,
            history_key=history_key,
        )

    def _append_history(self, payload: Any) -> asyncio.Future:
        append = asyncio.ensure_future(self.submit(self.history.append, payload))
        self._appends.add(append)
        append.add_done_callback(self._appends.discard)
        return append

    async def read_history(self, limit: Optional[int] = None) -> List[Any]:
        """
        Read stored payloads, oldest first.

        Args:
            limit: Maximum entries (defaults to history_default_limit)
        """
        limit = limit or self.settings.history_default_limit
        return await self.submit(self.history.read, limit)

    # ================================================================
    # Mailbox handlers
    # ================================================================

    def _on_connect(self, client: Client) -> None:
        self.presence.joined(client, self.clients.values())
        self.clients[client.id] = client

    def _on_disconnect(self, client_id: str) -> bool:
        client = self._remove(client_id)
        if client is None:
            return False

        self.presence.left(client_id, self.clients.values())
        return True

    def _on_message(self, client_id: str, raw: str) -> None:
        client = self.clients.get(client_id)
        if client is None:
            return

        try:
            envelope = Envelope.from_json(raw)
        except InvalidEnvelopeError as e:
            client.send(
                EnvelopeType.ERROR,
                {"message": str(e), "code": self.INVALID_MESSAGE_CODE},
            )
            return

        kind = envelope.kind

        if kind is EnvelopeType.PONG:
            client.mark_pong()
        elif kind is EnvelopeType.PRESENCE:
            self.presence.updated(client, envelope.payload, self.clients.values())
        else:
            for listener in list(self._listeners.get(client_id, ())):
                listener(client, envelope)

    def _on_heartbeat(self, client_id: str) -> bool:
        client = self.clients.get(client_id)
        if client is None:
            return False

        if client.is_timed_out(self.settings.ping_timeout_limit):
            client.send(
                EnvelopeType.ERROR,
                {
                    "message": "Failed to respond to ping in time.",
                    "code": self.PING_TIMEOUT_CODE,
                },
            )
            self._remove(client_id)
            self.presence.left(client_id, self.clients.values())
            client.close(1000, "Ping timeout")

            if self.reporter:
                self.reporter.warning(
                    f"{Emoji.NETWORK.TIMEOUT} Client timed out "
                    f"[channel={self.name}] [client={client_id}]",
                    context="ChannelActor",
                )
            return False

        client.send(EnvelopeType.PING, {})
        client.mark_ping_sent()
        return True

    def _dispatch(
        self, payload: Any, target: TargetSpec, require_ack: bool
    ) -> Dispatch:
        return self.dispatcher.dispatch(
            payload, target, require_ack, self.clients, self._subscribe
        )

    def _subscribe(self, client_id: str, listener: MessageListener) -> Unsubscribe:
        listeners = self._listeners.setdefault(client_id, [])
        listeners.append(listener)

        def unsubscribe() -> None:
            current = self._listeners.get(client_id)
            if current and listener in current:
                current.remove(listener)

        return unsubscribe

    def _remove(self, client_id: str) -> Optional[Client]:
        self._listeners.pop(client_id, None)
        return self.clients.pop(client_id, None)

    def __repr__(self) -> str:
        return f"ChannelActor(name={self.name}, clients={len(self.clients)})"
