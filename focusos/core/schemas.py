# -*- coding: utf-8 -*-
"""
Schemas - Validação dos registros persistidos com Pydantic
Formatos das tabelas sessions, daily_stats e habits

Autor: FocusOS Team
Versão: 1.0.0
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class BaseSchema(BaseModel):
    """Schema base: ignora colunas extras vindas do armazenamento"""
    model_config = ConfigDict(
        extra='ignore',
        validate_assignment=True,
    )


class DistractionSchema(BaseSchema):
    """Distração aninhada dentro de uma sessão"""
    id: str = Field(..., min_length=1)
    timestamp: datetime
    description: str = Field(default="")


class SessionRecord(BaseSchema):
    """Linha da tabela sessions"""
    id: str = Field(..., min_length=1)
    user_id: Optional[str] = None
    start_time: datetime
    end_time: Optional[datetime] = None
    focus_score: float = Field(default=100.0, ge=0.0, le=100.0)
    distractions: List[DistractionSchema] = Field(default_factory=list)
    tag: Optional[str] = None
    planned_duration: Optional[int] = Field(None, ge=0)

    @field_validator('end_time')
    @classmethod
    def validate_end_time(cls, v, info):
        """Fim não pode ser antes do início"""
        start = info.data.get('start_time')
        if v is not None and start is not None and v < start:
            raise ValueError('end_time deve ser depois de start_time')
        return v


class DailyStatRecord(BaseSchema):
    """Linha da tabela daily_stats; chave natural (user_id, date)"""
    id: Optional[str] = None
    user_id: str = Field(..., min_length=1)
    date: str = Field(..., pattern=r'^\d{4}-\d{2}-\d{2}$')
    total_focus_time: int = Field(default=0, ge=0)
    session_count: int = Field(default=0, ge=0)
    avg_productivity_score: float = Field(default=0.0)
    distraction_count: int = Field(default=0, ge=0)
    updated_at: Optional[datetime] = None

    @field_validator('id', mode='before')
    @classmethod
    def coerce_id(cls, v):
        return str(v) if v is not None else None


class HabitRecord(BaseSchema):
    """Linha da tabela habits"""
    id: str = Field(..., min_length=1)
    user_id: Optional[str] = None
    name: str = Field(..., min_length=1, max_length=200)
    icon: str = Field(default="")


def validate_session(data: Dict[str, Any]) -> SessionRecord:
    return SessionRecord.model_validate(data)


def validate_daily_stat(data: Dict[str, Any]) -> DailyStatRecord:
    return DailyStatRecord.model_validate(data)


def validate_habit(data: Dict[str, Any]) -> HabitRecord:
    return HabitRecord.model_validate(data)
