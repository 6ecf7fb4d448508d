# -*- coding: utf-8 -*-
"""Modelos de sessão de foco e distrações."""
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


def local_now() -> datetime:
    """Instante atual com o fuso horário local."""
    return datetime.now().astimezone()


def new_id() -> str:
    return str(uuid.uuid4())


def parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace('Z', '+00:00'))


@dataclass(frozen=True)
class DistractionRecord:
    """Perda de foco registrada durante uma sessão. Imutável."""
    description: str
    timestamp: datetime = field(default_factory=local_now)
    id: str = field(default_factory=new_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'timestamp': self.timestamp.isoformat(),
            'description': self.description,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "DistractionRecord":
        return cls(
            id=str(d['id']),
            timestamp=parse_timestamp(d['timestamp']),
            description=d.get('description', ''),
        )


@dataclass
class FocusSession:
    """
    Uma tentativa contínua (possivelmente pausada) de foco.

    A duração é sempre derivada de start_time/end_time (ou do instante
    atual enquanto ativa), nunca do contador de ticks. focus_score só é
    definitivo depois que end_time é definido.
    """
    start_time: datetime = field(default_factory=local_now)
    end_time: Optional[datetime] = None
    focus_score: float = 100.0
    distractions: List[DistractionRecord] = field(default_factory=list)
    tag: Optional[str] = None
    planned_duration: Optional[int] = None
    user_id: Optional[str] = None
    id: str = field(default_factory=new_id)

    @property
    def is_active(self) -> bool:
        return self.end_time is None

    def duration(self, now: Optional[datetime] = None) -> float:
        """Duração em segundos: (end_time ou now) - start_time."""
        end = self.end_time or now or local_now()
        return (end - self.start_time).total_seconds()

    @property
    def distraction_count(self) -> int:
        return len(self.distractions)

    def add_distraction(
        self,
        description: str,
        timestamp: Optional[datetime] = None
    ) -> Optional[DistractionRecord]:
        """Acrescenta uma distração; sessões encerradas não aceitam novas."""
        if not self.is_active:
            return None
        record = DistractionRecord(description=description, timestamp=timestamp or local_now())
        self.distractions.append(record)
        return record

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'user_id': self.user_id,
            'start_time': self.start_time.isoformat(),
            'end_time': self.end_time.isoformat() if self.end_time else None,
            'focus_score': self.focus_score,
            'distractions': [d.to_dict() for d in self.distractions],
            'tag': self.tag,
            'planned_duration': self.planned_duration,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "FocusSession":
        end_time = d.get('end_time')
        planned = d.get('planned_duration')
        return cls(
            id=str(d['id']),
            user_id=d.get('user_id'),
            start_time=parse_timestamp(d['start_time']),
            end_time=parse_timestamp(end_time) if end_time else None,
            focus_score=float(d.get('focus_score', 100.0)),
            distractions=[DistractionRecord.from_dict(x) for x in d.get('distractions') or []],
            tag=d.get('tag'),
            planned_duration=int(planned) if planned is not None else None,
        )
