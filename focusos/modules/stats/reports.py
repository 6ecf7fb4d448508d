# -*- coding: utf-8 -*-
"""Relatórios de produtividade a partir de sessões e estatísticas diárias."""
from collections import defaultdict
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional

from focusos.modules.session.models import FocusSession, local_now

from .daily_stat import DailyStatistic


def format_duration(seconds: float) -> str:
    """'1h 5m' ou '5m'."""
    total = int(max(seconds, 0))
    hours = total // 3600
    minutes = total // 60 % 60
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def heatmap_intensity(stat: Optional[DailyStatistic]) -> int:
    """Nível 0-4 do mapa de calor para um dia."""
    if stat is None or stat.session_count == 0:
        return 0
    if stat.avg_productivity_score >= 80:
        return 4
    if stat.avg_productivity_score >= 60:
        return 3
    if stat.avg_productivity_score >= 40:
        return 2
    return 1


def group_sessions_by_day(sessions: Iterable[FocusSession]) -> Dict[date, List[FocusSession]]:
    """Agrupa por dia de início, do dia mais recente ao mais antigo."""
    grouped = defaultdict(list)
    for s in sessions:
        grouped[s.start_time.date()].append(s)
    return {
        day: sorted(items, key=lambda s: s.start_time, reverse=True)
        for day, items in sorted(grouped.items(), reverse=True)
    }


def day_header(day: date, today: Optional[date] = None) -> str:
    today = today or local_now().date()
    if day == today:
        return "Today"
    if day == today - timedelta(days=1):
        return "Yesterday"
    return f"{day.strftime('%A, %b')} {day.day}"


class StatsReports:
    def __init__(self, engine=None):
        self.engine = engine

    def _sessions(self, sessions: Optional[Iterable[FocusSession]]) -> List[FocusSession]:
        if sessions is not None:
            return list(sessions)
        if self.engine is None:
            return []
        return self.engine.history

    def daily_report(self, stat: DailyStatistic) -> str:
        lines = [
            f"📊 Daily report ({stat.date})",
            "",
            f"• Focus time: {format_duration(stat.total_focus_time)}",
            f"• Sessions: {stat.session_count}",
            f"• Average score: {stat.avg_productivity_score:.0f}",
            f"• Distractions: {stat.distraction_count}",
        ]
        if stat.session_count == 0:
            lines.append("")
            lines.append("No sessions recorded.")
        return "\n".join(lines)

    def week_summary(
        self,
        sessions: Optional[Iterable[FocusSession]] = None,
        today: Optional[date] = None
    ) -> Dict[str, Any]:
        today = today or local_now().date()
        week_start = today - timedelta(days=6)
        recent = [
            s for s in self._sessions(sessions)
            if s.end_time is not None and week_start <= s.start_time.date() <= today
        ]

        by_day = defaultdict(float)
        by_tag = defaultdict(float)
        for s in recent:
            by_day[s.start_time.date().isoformat()] += s.duration()
            by_tag[s.tag or 'untagged'] += s.duration()

        total = sum(by_day.values())
        scores = [s.focus_score for s in recent]
        return {
            'total_seconds': total,
            'total_hours': round(total / 3600, 2),
            'by_day': dict(by_day),
            'by_tag': dict(by_tag),
            'session_count': len(recent),
            'distraction_count': sum(s.distraction_count for s in recent),
            'avg_focus_score': sum(scores) / len(scores) if scores else 0.0,
        }

    def history_sections(
        self,
        sessions: Optional[Iterable[FocusSession]] = None,
        today: Optional[date] = None
    ) -> List[Dict[str, Any]]:
        """Seções do histórico: cabeçalho do dia + sessões."""
        return [
            {'header': day_header(day, today), 'date': day.isoformat(), 'sessions': items}
            for day, items in group_sessions_by_day(self._sessions(sessions)).items()
        ]
