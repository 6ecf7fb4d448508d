# -*- coding: utf-8 -*-
"""Modelos e validação dos registros persistidos."""
from datetime import timedelta

import pytest

from focusos.core.exceptions import PersistenceException
from focusos.modules.session.models import FocusSession, parse_timestamp
from focusos.modules.stats.daily_stat import DailyStatistic, normalize_date
from focusos.modules.storage.gateway import session_from_record, session_to_record, stat_from_record

from conftest import START


def test_active_session_duration_uses_now():
    session = FocusSession(start_time=START)
    assert session.is_active
    assert session.duration(now=START + timedelta(minutes=5)) == 300


def test_parse_timestamp_accepts_zulu():
    parsed = parse_timestamp("2026-10-16T12:00:00Z")
    assert parsed.utcoffset() == timedelta(0)
    assert parsed == START


def test_normalize_date():
    assert normalize_date(START) == "2026-10-16"
    assert normalize_date(START.date()) == "2026-10-16"
    assert normalize_date("2026-10-16T23:59:00") == "2026-10-16"
    assert DailyStatistic(user_id="u", date=START).date == "2026-10-16"


def test_record_rejects_end_before_start():
    session = FocusSession(start_time=START, end_time=START - timedelta(seconds=1), user_id="u")
    with pytest.raises(PersistenceException):
        session_to_record(session)


def test_record_rejects_out_of_range_score():
    session = FocusSession(start_time=START, end_time=START, focus_score=120.0, user_id="u")
    with pytest.raises(PersistenceException):
        session_to_record(session)


def test_record_ignores_unknown_columns():
    record = {
        'id': 'abc',
        'user_id': 'u',
        'start_time': '2026-10-16T09:00:00-03:00',
        'end_time': '2026-10-16T09:25:00-03:00',
        'focus_score': 95,
        'distractions': [],
        'created_at': '2026-10-16T12:25:01Z',
    }
    session = session_from_record(record)
    assert session.duration() == 1500
    assert session.focus_score == 95.0


def test_stat_record_coerces_numeric_id():
    stat = stat_from_record({'id': 7, 'user_id': 'u', 'date': '2026-10-16', 'session_count': 2})
    assert stat.id == "7"
    assert stat.session_count == 2


def test_stat_record_rejects_bad_date():
    with pytest.raises(PersistenceException):
        stat_from_record({'user_id': 'u', 'date': '16/10/2026'})
