"""
Unit tests for EventDispatcher and AckCollector.

Tests audience resolution, DATA delivery and acknowledgement tracking.
"""

import itertools
import random

import pytest

from crieur.application.use_cases import AckCollector, EventDispatcher
from crieur.domain.exceptions import EmptyPayloadError, InsufficientClientsError
from crieur.domain.value_objects import Envelope, TargetSpec


class ListenerHub:
    """Stand-in for the actor's message-subscription hook."""

    def __init__(self):
        self.listeners = {}

    def subscribe(self, client_id, listener):
        self.listeners.setdefault(client_id, []).append(listener)

        def unsubscribe():
            self.listeners[client_id].remove(listener)

        return unsubscribe

    def deliver(self, client, envelope):
        for listener in list(self.listeners.get(client.id, [])):
            listener(client, envelope)

    def count(self, client_id):
        return len(self.listeners.get(client_id, []))


def ack(event_id):
    return Envelope(type="ack", payload={"eventID": event_id})


@pytest.fixture
def registry(make_client):
    clients = [make_client(f"client_{c}") for c in "abcd"]
    return {client.id: client for client in clients}


@pytest.fixture
def dispatcher(rng):
    counter = itertools.count(1)
    return EventDispatcher(id_factory=lambda: f"evt_{next(counter)}", rng=rng)


class TestResolveAudience:
    """Unit tests for EventDispatcher.resolve_audience."""

    def test_broadcast_selects_everyone(self, dispatcher, registry):
        """Test broadcast returns every client."""
        audience = dispatcher.resolve_audience(registry, TargetSpec.broadcast())

        assert [c.id for c in audience] == list(registry)

    def test_random_selects_distinct_clients(self, dispatcher, registry):
        """Test random target picks exactly N distinct clients."""
        for _ in range(20):
            audience = dispatcher.resolve_audience(registry, TargetSpec.parse("3"))
            ids = [c.id for c in audience]

            assert len(ids) == 3
            assert len(set(ids)) == 3
            assert set(ids) <= set(registry)

    def test_negative_count_uses_absolute_value(self, dispatcher, registry):
        """Test '-2' selects two clients."""
        audience = dispatcher.resolve_audience(registry, TargetSpec.parse("-2"))

        assert len(audience) == 2

    def test_random_all_clients(self, dispatcher, registry):
        """Test N equal to the client count selects everyone."""
        audience = dispatcher.resolve_audience(registry, TargetSpec.parse("4"))

        assert {c.id for c in audience} == set(registry)

    def test_zero_count_is_empty_audience(self, dispatcher, registry):
        """Test '0' selects nobody."""
        assert dispatcher.resolve_audience(registry, TargetSpec.parse("0")) == []

    def test_random_more_than_available_raises(self, dispatcher, registry):
        """Test N above the client count fails."""
        with pytest.raises(InsufficientClientsError):
            dispatcher.resolve_audience(registry, TargetSpec.parse("5"))

    def test_random_is_reproducible_with_seed(self, registry):
        """Test the injected random source drives the selection."""
        first = EventDispatcher(lambda: "evt", rng=random.Random(7))
        second = EventDispatcher(lambda: "evt", rng=random.Random(7))

        target = TargetSpec.parse("2")
        assert [c.id for c in first.resolve_audience(registry, target)] == [
            c.id for c in second.resolve_audience(registry, target)
        ]

    def test_explicit_keeps_only_registered(self, dispatcher, registry):
        """Test unknown IDs are ignored."""
        target = TargetSpec.parse("client_b,client_x,client_d")

        audience = dispatcher.resolve_audience(registry, target)

        assert [c.id for c in audience] == ["client_b", "client_d"]

    def test_explicit_deduplicates(self, dispatcher, registry):
        """Test a repeated ID is delivered once."""
        target = TargetSpec.parse("client_a,client_a")

        assert len(dispatcher.resolve_audience(registry, target)) == 1

    def test_explicit_none_registered_is_empty(self, dispatcher, registry):
        """Test a list with no registered IDs does not fall back to broadcast."""
        target = TargetSpec.parse("client_x,client_y")

        assert dispatcher.resolve_audience(registry, target) == []


class TestDispatch:
    """Unit tests for EventDispatcher.dispatch."""

    def test_empty_payload_raises(self, dispatcher, registry):
        """Test empty payload is rejected before anything is sent."""
        hub = ListenerHub()

        for payload in (None, {}, "", []):
            with pytest.raises(EmptyPayloadError):
                dispatcher.dispatch(
                    payload, TargetSpec.broadcast(), False, registry, hub.subscribe
                )

        assert all(client.outbox == [] for client in registry.values())

    @pytest.mark.parametrize("payload", [5, 0, True, False, 1.5, "text"])
    def test_scalar_payload_raises(self, dispatcher, registry, payload):
        """Test a payload that is not a dict or list is rejected."""
        hub = ListenerHub()

        with pytest.raises(EmptyPayloadError):
            dispatcher.dispatch(
                payload, TargetSpec.broadcast(), False, registry, hub.subscribe
            )

        assert all(client.outbox == [] for client in registry.values())

    def test_broadcast_delivers_once_with_shared_event_id(
        self, dispatcher, registry, reporter
    ):
        """Test every client receives one DATA with the same eventID."""
        reporter.info("Testing broadcast dispatch", context="Test")
        hub = ListenerHub()

        result = dispatcher.dispatch(
            {"x": 1}, TargetSpec.broadcast(), False, registry, hub.subscribe
        )

        assert result.event_id == "evt_1"
        assert result.recipients == list(registry)
        assert result.acks is None
        for client in registry.values():
            data = client.of_type("DATA")
            assert len(data) == 1
            assert data[0].payload == {"x": 1}
            assert data[0].extra == {"eventID": "evt_1", "requires_ack": False}

    def test_targeted_dispatch_skips_others(self, dispatcher, registry):
        """Test only the audience receives DATA."""
        hub = ListenerHub()

        dispatcher.dispatch(
            {"x": 1}, TargetSpec.parse("client_c"), False, registry, hub.subscribe
        )

        assert len(registry["client_c"].of_type("DATA")) == 1
        for cid in ("client_a", "client_b", "client_d"):
            assert registry[cid].of_type("DATA") == []

    def test_require_ack_subscribes_before_sending(self, dispatcher, registry):
        """Test an ACK collector listens on every recipient."""
        hub = ListenerHub()

        result = dispatcher.dispatch(
            {"x": 1}, TargetSpec.parse("client_a,client_b"), True, registry, hub.subscribe
        )

        assert result.acks is not None
        assert result.acks.pending == {"client_a", "client_b"}
        assert hub.count("client_a") == 1
        assert hub.count("client_c") == 0
        assert registry["client_a"].of_type("DATA")[0].extra["requires_ack"] is True

    def test_fresh_event_id_per_dispatch(self, dispatcher, registry):
        """Test each dispatch gets a new eventID."""
        hub = ListenerHub()
        target = TargetSpec.broadcast()

        first = dispatcher.dispatch({"n": 1}, target, False, registry, hub.subscribe)
        second = dispatcher.dispatch({"n": 2}, target, False, registry, hub.subscribe)

        assert first.event_id != second.event_id


class TestAckCollector:
    """Unit tests for AckCollector."""

    def test_matching_ack_is_answered(self, make_client):
        """Test a matching ACK gets ACK-RECEIVED and is recorded."""
        hub = ListenerHub()
        a = make_client("client_a")
        collector = AckCollector("evt_1", [a], hub.subscribe)

        hub.deliver(a, ack("evt_1"))

        assert collector.acknowledged == ["client_a"]
        assert collector.complete
        received = a.of_type("ACK-RECEIVED")
        assert received[0].payload == {"eventID": "evt_1"}
        assert hub.count("client_a") == 0

    def test_other_event_ack_is_ignored(self, make_client):
        """Test ACKs for another eventID do not count."""
        hub = ListenerHub()
        a = make_client("client_a")
        collector = AckCollector("evt_1", [a], hub.subscribe)

        hub.deliver(a, ack("evt_2"))
        hub.deliver(a, Envelope(type="ACK", payload="evt_1"))
        hub.deliver(a, Envelope(type="chat", payload={"eventID": "evt_1"}))

        assert collector.pending == {"client_a"}
        assert a.outbox == []

    def test_duplicate_ack_answered_once(self, make_client):
        """Test a second ACK from the same client is ignored."""
        hub = ListenerHub()
        a = make_client("client_a")
        b = make_client("client_b")
        collector = AckCollector("evt_1", [a, b], hub.subscribe)

        hub.deliver(a, ack("evt_1"))
        collector._on_message(a, ack("evt_1"))

        assert collector.acknowledged == ["client_a"]
        assert len(a.of_type("ACK-RECEIVED")) == 1

    async def test_wait_completes_when_all_acked(self, make_client):
        """Test wait returns True once every target acknowledged."""
        hub = ListenerHub()
        a = make_client("client_a")
        b = make_client("client_b")
        collector = AckCollector("evt_1", [a, b], hub.subscribe)

        hub.deliver(a, ack("evt_1"))
        hub.deliver(b, ack("evt_1"))

        assert await collector.wait(timeout=1.0) is True

    async def test_wait_times_out(self, make_client):
        """Test wait returns False when a target stays silent."""
        hub = ListenerHub()
        a = make_client("client_a")
        b = make_client("client_b")
        collector = AckCollector("evt_1", [a, b], hub.subscribe)

        hub.deliver(a, ack("evt_1"))

        assert await collector.wait(timeout=0.05) is False
        assert collector.acknowledged == ["client_a"]

    async def test_empty_audience_completes_immediately(self):
        """Test no targets means nothing to wait for."""
        collector = AckCollector("evt_1", [], ListenerHub().subscribe)

        assert collector.complete
        assert await collector.wait(timeout=0.01) is True

    def test_close_drops_remaining_subscriptions(self, make_client):
        """Test close unsubscribes clients that never acknowledged."""
        hub = ListenerHub()
        a = make_client("client_a")
        collector = AckCollector("evt_1", [a], hub.subscribe)

        collector.close()
        hub.deliver(a, ack("evt_1"))

        assert hub.count("client_a") == 0
        assert collector.acknowledged == []
