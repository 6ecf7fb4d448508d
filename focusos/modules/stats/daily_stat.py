# -*- coding: utf-8 -*-
"""Estatística diária por usuário."""
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Optional, Union

from focusos.modules.session.models import parse_timestamp


def normalize_date(value: Union[date, datetime, str]) -> str:
    """Data de calendário no formato YYYY-MM-DD."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return date.fromisoformat(str(value)[:10]).isoformat()


@dataclass
class DailyStatistic:
    """Agregado de um (user_id, date); chave natural do armazenamento."""
    user_id: str
    date: str
    total_focus_time: int = 0
    session_count: int = 0
    avg_productivity_score: float = 0.0
    distraction_count: int = 0
    id: Optional[str] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        self.date = normalize_date(self.date)

    @classmethod
    def empty(cls, user_id: str, on_date: Union[date, datetime, str]) -> "DailyStatistic":
        return cls(user_id=user_id, date=normalize_date(on_date))

    @property
    def key(self):
        return (self.user_id, self.date)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'user_id': self.user_id,
            'date': self.date,
            'total_focus_time': self.total_focus_time,
            'session_count': self.session_count,
            'avg_productivity_score': self.avg_productivity_score,
            'distraction_count': self.distraction_count,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "DailyStatistic":
        updated_at = d.get('updated_at')
        stat_id = d.get('id')
        return cls(
            id=str(stat_id) if stat_id is not None else None,
            user_id=str(d['user_id']),
            date=d['date'],
            total_focus_time=int(d.get('total_focus_time', 0)),
            session_count=int(d.get('session_count', 0)),
            avg_productivity_score=float(d.get('avg_productivity_score', 0.0)),
            distraction_count=int(d.get('distraction_count', 0)),
            updated_at=parse_timestamp(updated_at) if updated_at else None,
        )
