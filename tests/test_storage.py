# -*- coding: utf-8 -*-
"""Gateways em memória e SQLite."""
import asyncio
from datetime import timedelta

import pytest

from focusos.core.config import Config
from focusos.core.exceptions import ConfigurationException, PersistenceException, RecordNotFoundException
from focusos.modules.habits.models import Habit
from focusos.modules.session.models import FocusSession
from focusos.modules.stats.daily_stat import DailyStatistic
from focusos.modules.storage import (
    InMemoryGateway,
    SQLiteGateway,
    SupabaseGateway,
    create_gateway,
)

from conftest import START

USER = "user-1"


@pytest.fixture(params=['memory', 'sqlite'])
def store(request, tmp_path):
    if request.param == 'memory':
        return InMemoryGateway()
    return SQLiteGateway(tmp_path / 'data' / 'focusos.db')


def ended_session(offset_minutes=0, user_id=USER, distractions=("phone",)):
    start = START + timedelta(minutes=offset_minutes)
    session = FocusSession(start_time=start, tag="deep work", planned_duration=1500, user_id=user_id)
    for d in distractions:
        session.add_distraction(d, start + timedelta(minutes=1))
    session.end_time = start + timedelta(minutes=25)
    session.focus_score = 80.0
    return session


def run(coro):
    return asyncio.run(coro)


def test_stat_upsert_is_idempotent(store):
    stat = DailyStatistic(user_id=USER, date="2026-10-16", total_focus_time=1500,
                          session_count=1, avg_productivity_score=90.0, distraction_count=1)

    async def scenario():
        await store.upsert_daily_statistic(stat)
        await store.upsert_daily_statistic(stat)
        return await store.fetch_daily_statistic(USER, "2026-10-16")

    fetched = run(scenario())
    assert fetched.session_count == 1
    assert fetched.total_focus_time == 1500
    assert fetched.avg_productivity_score == 90.0
    assert fetched.id is not None


def test_stat_upsert_overwrites_by_natural_key(store):
    async def scenario():
        await store.upsert_daily_statistic(DailyStatistic(user_id=USER, date="2026-10-16", session_count=1))
        await store.upsert_daily_statistic(DailyStatistic(user_id=USER, date="2026-10-16", session_count=2))
        await store.upsert_daily_statistic(DailyStatistic(user_id="other", date="2026-10-16", session_count=7))
        mine = await store.fetch_daily_statistic(USER, "2026-10-16")
        missing = await store.fetch_daily_statistic(USER, "2026-10-15")
        return mine, missing

    mine, missing = run(scenario())
    assert mine.session_count == 2
    assert missing is None


def test_session_round_trip(store):
    session = ended_session()

    async def scenario():
        await store.save_session(session)
        await store.save_session(session)
        return await store.fetch_sessions(USER)

    sessions = run(scenario())
    assert len(sessions) == 1
    loaded = sessions[0]
    assert loaded.id == session.id
    assert loaded.start_time == session.start_time
    assert loaded.end_time == session.end_time
    assert loaded.tag == "deep work"
    assert loaded.planned_duration == 1500
    assert loaded.focus_score == 80.0
    assert [d.description for d in loaded.distractions] == ["phone"]
    assert loaded.distractions[0].id == session.distractions[0].id


def test_sessions_newest_first(store):
    older, newer = ended_session(0), ended_session(120)

    async def scenario():
        await store.save_session(older)
        await store.save_session(newer)
        await store.save_session(ended_session(60, user_id="other"))
        return await store.fetch_sessions(USER)

    assert [s.id for s in run(scenario())] == [newer.id, older.id]


def test_save_session_requires_user(store):
    with pytest.raises(PersistenceException):
        run(store.save_session(ended_session(user_id=None)))


def test_habits(store):
    water = Habit(name="Water", icon="💧", user_id=USER)
    read = Habit(name="Read", user_id=USER)

    async def scenario():
        await store.save_habit(water)
        await store.save_habit(read)
        await store.delete_habit(water.id)
        return await store.fetch_habits(USER)

    habits = run(scenario())
    assert [h.name for h in habits] == ["Read"]

    with pytest.raises(RecordNotFoundException):
        run(store.delete_habit("missing"))


def test_clear_all_user_data(store):
    async def scenario():
        await store.save_session(ended_session())
        await store.save_session(ended_session(user_id="other"))
        await store.upsert_daily_statistic(DailyStatistic(user_id=USER, date="2026-10-16", session_count=1))
        await store.save_habit(Habit(name="Walk", user_id=USER))

        await store.clear_all_user_data(USER)
        return (
            await store.fetch_sessions(USER),
            await store.fetch_daily_statistic(USER, "2026-10-16"),
            await store.fetch_habits(USER),
            await store.fetch_sessions("other"),
        )

    sessions, stat, habits, others = run(scenario())
    assert sessions == []
    assert stat is None
    assert habits == []
    assert len(others) == 1


def test_sqlite_persists_across_connections(tmp_path):
    path = tmp_path / 'focusos.db'
    session = ended_session()

    async def write():
        store = SQLiteGateway(path)
        await store.save_session(session)
        await store.close()

    async def read():
        store = SQLiteGateway(path)
        try:
            return await store.fetch_sessions(USER)
        finally:
            await store.close()

    run(write())
    assert [s.id for s in run(read())] == [session.id]


def test_memory_failure_injection():
    store = InMemoryGateway()
    store.fail_operations.add('fetch_sessions')
    with pytest.raises(PersistenceException) as exc:
        run(store.fetch_sessions(USER))
    assert exc.value.operation == 'fetch_sessions'
    assert exc.value.to_dict()['error_code'] == 'PERSISTENCE_ERROR'


def test_create_gateway(tmp_path):
    assert isinstance(create_gateway(Config(base_dir=tmp_path)), InMemoryGateway)

    sqlite = create_gateway(Config(base_dir=tmp_path, overrides={'FOCUSOS_STORAGE': 'sqlite'}))
    assert isinstance(sqlite, SQLiteGateway)
    assert sqlite.db_path == str(tmp_path / 'data' / 'focusos.db')
    run(sqlite.close())

    remote = create_gateway(Config(base_dir=tmp_path, overrides={
        'FOCUSOS_STORAGE': 'supabase',
        'SUPABASE_URL': 'https://example.supabase.co/',
        'SUPABASE_ANON_KEY': 'anon',
    }))
    assert isinstance(remote, SupabaseGateway)
    assert remote.base_url == 'https://example.supabase.co/rest/v1'


def test_create_gateway_requires_supabase_credentials(tmp_path):
    config = Config(base_dir=tmp_path, overrides={'FOCUSOS_STORAGE': 'supabase'})
    with pytest.raises(ConfigurationException):
        create_gateway(config)
