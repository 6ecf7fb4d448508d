# -*- coding: utf-8 -*-
"""Fila de sincronização: execução, tentativas e desistência."""
import asyncio

from focusos.core.event_bus import EventBus, EventType
from focusos.core.exceptions import PersistenceException, SyncException
from focusos.modules.sync.sync_queue import SyncQueue


class Flaky:
    """Falha nas primeiras `failures` chamadas."""

    def __init__(self, failures):
        self.failures = failures
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise PersistenceException(operation='save_session', message='offline', backend='memory')
        return 'ok'


def test_tasks_run_and_drain_on_stop():
    done = []

    async def push(i):
        await asyncio.sleep(0.01)
        done.append(i)

    async def scenario():
        queue = SyncQueue(workers=2, retry_delay=0)
        await queue.start()
        for i in range(5):
            queue.enqueue(f'task-{i}', lambda i=i: push(i))
        await queue.stop(drain=True)
        return queue

    queue = asyncio.run(scenario())
    assert sorted(done) == [0, 1, 2, 3, 4]
    assert queue.completed == 5
    assert queue.failed_tasks == []
    assert not queue.running


def test_retries_until_success():
    flaky = Flaky(failures=2)

    async def scenario():
        queue = SyncQueue(workers=1, max_retries=3, retry_delay=0)
        await queue.start()
        task = queue.enqueue('save_session', flaky, session_id='s-1')
        await queue.join()
        await queue.stop()
        return queue, task

    queue, task = asyncio.run(scenario())
    assert flaky.calls == 3
    assert task.attempts == 3
    assert task.error is None
    assert queue.completed == 1


def test_gives_up_after_max_retries():
    flaky = Flaky(failures=100)
    bus = EventBus()
    failures = []
    bus.subscribe(EventType.SYNC_FAILED, failures.append)

    async def scenario():
        queue = SyncQueue(workers=1, max_retries=2, retry_delay=0, event_bus=bus)
        await queue.start()
        queue.enqueue('fold_stats', flaky, session_id='s-1')
        await queue.stop()
        return queue

    queue = asyncio.run(scenario())
    assert flaky.calls == 3
    assert queue.completed == 0

    [task] = queue.failed_tasks
    assert isinstance(task.error, SyncException)
    assert task.error.attempts == 3
    assert isinstance(task.error.cause, PersistenceException)

    assert len(failures) == 1
    assert failures[0].data['task'] == 'fold_stats'
    assert failures[0].data['session_id'] == 's-1'


def test_failure_does_not_block_other_tasks():
    ran = []

    async def ok():
        ran.append('ok')

    async def scenario():
        queue = SyncQueue(workers=1, max_retries=0, retry_delay=0)
        await queue.start()
        queue.enqueue('bad', Flaky(failures=1))
        queue.enqueue('good', ok)
        await queue.stop()
        return queue

    queue = asyncio.run(scenario())
    assert ran == ['ok']
    assert [t.name for t in queue.failed_tasks] == ['bad']


def test_retry_delay_is_applied():
    flaky = Flaky(failures=1)

    async def scenario():
        loop = asyncio.get_running_loop()
        queue = SyncQueue(workers=1, max_retries=1, retry_delay=0.05)
        await queue.start()
        started = loop.time()
        queue.enqueue('save_session', flaky)
        await queue.join()
        elapsed = loop.time() - started
        await queue.stop()
        return elapsed

    assert asyncio.run(scenario()) >= 0.05
