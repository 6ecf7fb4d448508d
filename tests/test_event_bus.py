# -*- coding: utf-8 -*-
"""Barramento de eventos."""
import asyncio

from focusos.core.event_bus import Event, EventBus, EventType


def test_priority_order_and_filters():
    bus = EventBus()
    order = []
    bus.subscribe(EventType.TICK, lambda e: order.append('low'), priority=0)
    bus.subscribe(EventType.TICK, lambda e: order.append('high'), priority=10)
    bus.subscribe(EventType.TICK, lambda e: order.append('filtered'),
                  filter_func=lambda e: e.data.get('elapsed_time', 0) > 5)

    bus.emit_nowait(Event(type=EventType.TICK, data={'elapsed_time': 1}))
    assert order == ['high', 'low']


def test_middleware_can_block_and_modify():
    bus = EventBus()
    received = []
    bus.subscribe(EventType.SESSION_STARTED, received.append)

    def tag_source(event):
        event.source = event.source or 'middleware'
        return event

    bus.add_middleware(tag_source)
    bus.add_middleware(lambda e: None if e.data.get('blocked') else e)

    bus.emit_nowait(Event(type=EventType.SESSION_STARTED, data={'blocked': True}))
    bus.emit_nowait(Event(type=EventType.SESSION_STARTED))

    assert len(received) == 1
    assert received[0].source == 'middleware'


def test_failing_handler_does_not_stop_others():
    bus = EventBus()
    received = []

    def broken(event):
        raise RuntimeError("boom")

    bus.subscribe(EventType.SESSION_ENDED, broken, priority=1)
    bus.subscribe(EventType.SESSION_ENDED, received.append)

    assert bus.emit_nowait(Event(type=EventType.SESSION_ENDED)) == 1
    assert len(received) == 1


def test_publish_awaits_async_handlers():
    bus = EventBus()
    received = []

    async def handler(event):
        await asyncio.sleep(0)
        received.append(event.type)

    bus.subscribe(EventType.STATS_UPDATED, handler)
    bus.subscribe(EventType.STATS_UPDATED, lambda e: received.append('sync'))

    count = asyncio.run(bus.publish(Event(type=EventType.STATS_UPDATED)))
    assert count == 2
    assert received == [EventType.STATS_UPDATED, 'sync']


def test_emit_nowait_schedules_async_handlers_on_running_loop():
    bus = EventBus()
    received = []

    async def handler(event):
        received.append(event.data['n'])

    bus.subscribe(EventType.GOAL_REACHED, handler)

    async def scenario():
        dispatched = bus.emit_nowait(Event(type=EventType.GOAL_REACHED, data={'n': 1}))
        assert received == []
        await bus.drain()
        return dispatched

    assert asyncio.run(scenario()) == 1
    assert received == [1]


def test_emit_nowait_without_loop_skips_async_handlers():
    bus = EventBus()
    received = []

    async def handler(event):
        received.append(event)

    bus.subscribe(EventType.GOAL_REACHED, handler)
    bus.subscribe(EventType.GOAL_REACHED, received.append)

    assert bus.emit_nowait(Event(type=EventType.GOAL_REACHED)) == 1
    assert len(received) == 1


def test_history_unsubscribe_and_stop():
    bus = EventBus(max_history=2)
    received = []
    bus.subscribe(EventType.TICK, received.append)
    assert bus.get_subscriber_count(EventType.TICK) == 1

    for i in range(3):
        bus.emit_nowait(Event(type=EventType.TICK, data={'i': i}))
    assert [e.data['i'] for e in bus.get_history()] == [1, 2]
    assert bus.get_history(EventType.SESSION_ENDED) == []

    bus.unsubscribe(EventType.TICK, received.append)
    bus.emit_nowait(Event(type=EventType.TICK))
    assert len(received) == 3

    bus.stop()
    assert bus.emit_nowait(Event(type=EventType.TICK)) == 0
    bus.start()


def test_event_to_dict():
    event = Event(type=EventType.SESSION_SAVED, data={'id': 'x'}, source='productivity')
    d = event.to_dict()
    assert d['type'] == 'session_saved'
    assert d['source'] == 'productivity'
