# -*- coding: utf-8 -*-
"""Fixtures compartilhadas dos testes."""
from datetime import datetime, timedelta, timezone

import pytest

from focusos.core.event_bus import EventBus
from focusos.core.exceptions import PersistenceException
from focusos.modules.session.clock import AlarmScheduler
from focusos.modules.session.engine import SessionEngine
from focusos.modules.storage.memory_store import InMemoryGateway

TZ = timezone(timedelta(hours=-3))
START = datetime(2026, 10, 16, 9, 0, 0, tzinfo=TZ)


class FakeClock:
    """Relógio manual: só anda com advance()."""

    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float = 0, **kwargs):
        self.now += timedelta(seconds=seconds, **kwargs)
        return self.now


class RecordingAlarmScheduler(AlarmScheduler):
    """Guarda alarmes e callbacks; fire() dispara manualmente."""

    def __init__(self):
        self.alarms = {}
        self.history = []

    def schedule(self, identifier, delay_seconds, callback=None):
        self.alarms.pop(identifier, None)
        if delay_seconds <= 0:
            return False
        self.alarms[identifier] = (delay_seconds, callback)
        self.history.append((identifier, delay_seconds))
        return True

    def cancel(self, identifier):
        return self.alarms.pop(identifier, None) is not None

    def pending(self):
        return list(self.alarms)

    def fire(self, identifier):
        _, callback = self.alarms.pop(identifier)
        if callback is not None:
            callback()


class CommitThenFail(InMemoryGateway):
    """Grava o upsert e depois falha, como um timeout após o commit."""

    def __init__(self, failures=1, latency=0.0):
        super().__init__(latency=latency)
        self.failures = failures

    async def upsert_daily_statistic(self, stat):
        await super().upsert_daily_statistic(stat)
        if self.failures:
            self.failures -= 1
            raise PersistenceException(operation='upsert_daily_statistic',
                                       message='timeout', backend=self.backend)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def alarms():
    return RecordingAlarmScheduler()


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def gateway():
    return InMemoryGateway()


@pytest.fixture
def engine(event_bus, alarms, clock):
    return SessionEngine(event_bus=event_bus, alarm_scheduler=alarms, clock=clock)


@pytest.fixture
def collect(event_bus):
    """collect(EventType.X) -> lista que recebe os eventos daquele tipo."""
    def _collect(event_type):
        received = []
        event_bus.subscribe(event_type, received.append)
        return received
    return _collect


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in (
        'FOCUSOS_LOG_LEVEL', 'LOG_LEVEL', 'FOCUSOS_STORAGE', 'FOCUSOS_DB_PATH',
        'SUPABASE_URL', 'SUPABASE_ANON_KEY', 'SUPABASE_TIMEOUT', 'FOCUSOS_TICK_INTERVAL',
        'FOCUSOS_SYNC_WORKERS', 'FOCUSOS_SYNC_MAX_RETRIES', 'FOCUSOS_SYNC_RETRY_DELAY',
        'FOCUSOS_STATS_DATE_MODE', 'FOCUSOS_SERIALIZE_FOLDS',
    ):
        monkeypatch.delenv(key, raising=False)
