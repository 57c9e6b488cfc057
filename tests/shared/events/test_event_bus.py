# -*- coding: utf-8 -*-
"""
tests/shared/events/test_event_bus.py

EventBus en proceso: entrega por nombre y wildcard, aislamiento de
handlers que fallan.
"""

from tradevault.shared.events import DomainEvent, EventBus, EventName


def _event(name=EventName.ORDER_CREATED):
    return DomainEvent(name, aggregate_id="ord-1", payload={"k": "v"})


class TestEventBus:

    async def test_delivers_to_named_and_wildcard_handlers(self):
        bus = EventBus()
        named, everything = [], []

        async def on_created(event):
            named.append(event.name)

        async def on_any(event):
            everything.append(event.name)

        bus.subscribe(EventName.ORDER_CREATED, on_created)
        bus.subscribe("*", on_any)

        await bus.publish(_event())
        await bus.publish(_event(EventName.DISPUTE_FILED))

        assert named == [EventName.ORDER_CREATED]
        assert everything == [EventName.ORDER_CREATED, EventName.DISPUTE_FILED]
        assert bus.published == 2

    async def test_failing_handler_does_not_block_others(self, caplog):
        bus = EventBus()
        seen = []

        async def broken(event):
            raise RuntimeError("subscriber down")

        async def healthy(event):
            seen.append(event.aggregate_id)

        bus.subscribe(EventName.ORDER_CREATED, broken)
        bus.subscribe(EventName.ORDER_CREATED, healthy)

        await bus.publish(_event())

        assert seen == ["ord-1"]
        assert bus.failed == 1
        assert "event_handler_failed" in caplog.text

    async def test_unsubscribe(self):
        bus = EventBus()
        seen = []

        async def handler(event):
            seen.append(event)

        bus.subscribe(EventName.ORDER_CREATED, handler)
        bus.unsubscribe(EventName.ORDER_CREATED, handler)
        bus.unsubscribe(EventName.ORDER_CREATED, handler)

        await bus.publish(_event())

        assert seen == []

    def test_events_carry_utc_timestamp(self):
        event = _event()
        assert event.occurred_at.tzinfo is not None


# Fin del archivo tests/shared/events/test_event_bus.py
