# -*- coding: utf-8 -*-
"""Relatórios: duração formatada, mapa de calor, histórico e semana."""
from datetime import date, timedelta

import pytest

from focusos.modules.session.models import FocusSession
from focusos.modules.stats.daily_stat import DailyStatistic
from focusos.modules.stats.reports import (
    StatsReports,
    day_header,
    format_duration,
    group_sessions_by_day,
    heatmap_intensity,
)

from conftest import START

TODAY = START.date()


def session_on(days_ago, hour=9, minutes=30, tag=None, score=100.0):
    start = START.replace(hour=hour) - timedelta(days=days_ago)
    return FocusSession(start_time=start, end_time=start + timedelta(minutes=minutes),
                        focus_score=score, tag=tag, user_id="user-1")


@pytest.mark.parametrize('seconds,text', [(0, '0m'), (59, '0m'), (300, '5m'), (3900, '1h 5m'), (-5, '0m')])
def test_format_duration(seconds, text):
    assert format_duration(seconds) == text


def test_heatmap_intensity():
    def stat(score, count=1):
        return DailyStatistic(user_id="u", date="2026-10-16", session_count=count, avg_productivity_score=score)

    assert heatmap_intensity(None) == 0
    assert heatmap_intensity(stat(95, count=0)) == 0
    assert heatmap_intensity(stat(80)) == 4
    assert heatmap_intensity(stat(60)) == 3
    assert heatmap_intensity(stat(40)) == 2
    assert heatmap_intensity(stat(10)) == 1


def test_day_header():
    assert day_header(TODAY, TODAY) == "Today"
    assert day_header(TODAY - timedelta(days=1), TODAY) == "Yesterday"
    assert day_header(date(2026, 10, 12), TODAY) == "Monday, Oct 12"


def test_group_sessions_by_day_newest_first():
    morning, evening = session_on(0, hour=8), session_on(0, hour=18)
    old = session_on(3)

    grouped = group_sessions_by_day([old, morning, evening])

    assert list(grouped) == [TODAY, TODAY - timedelta(days=3)]
    assert grouped[TODAY] == [evening, morning]


def test_history_sections_use_engine_history(engine, clock):
    engine.start()
    clock.advance(600)
    engine.end()

    sections = StatsReports(engine).history_sections(today=TODAY)

    assert [s['header'] for s in sections] == ["Today"]
    assert sections[0]['date'] == "2026-10-16"
    assert len(sections[0]['sessions']) == 1


def test_daily_report():
    stat = DailyStatistic(user_id="u", date="2026-10-16", total_focus_time=3900,
                          session_count=3, avg_productivity_score=87.4, distraction_count=2)
    report = StatsReports().daily_report(stat)

    assert "2026-10-16" in report
    assert "Focus time: 1h 5m" in report
    assert "Sessions: 3" in report
    assert "Average score: 87" in report

    empty = StatsReports().daily_report(DailyStatistic.empty("u", TODAY))
    assert "No sessions recorded." in empty


def test_week_summary():
    sessions = [
        session_on(0, minutes=30, tag="code", score=90.0),
        session_on(2, minutes=60, tag="code", score=70.0),
        session_on(6, minutes=15, score=50.0),
        session_on(7, minutes=120, tag="old"),
    ]
    active = FocusSession(start_time=START, user_id="user-1")

    summary = StatsReports().week_summary(sessions + [active], today=TODAY)

    assert summary['session_count'] == 3
    assert summary['total_seconds'] == 105 * 60
    assert summary['total_hours'] == 1.75
    assert summary['by_tag'] == {'code': 90 * 60, 'untagged': 15 * 60}
    assert summary['avg_focus_score'] == pytest.approx(70.0)


def test_week_summary_empty():
    summary = StatsReports().week_summary([], today=TODAY)
    assert summary['session_count'] == 0
    assert summary['avg_focus_score'] == 0.0
