# -*- coding: utf-8 -*-
"""
Persistence Gateway - Interface de armazenamento consumida pelo núcleo

Todas as operações são assíncronas e podem falhar com
PersistenceException. Upserts são idempotentes: sessões por id,
estatísticas por (user_id, date).

Autor: FocusOS Team
Versão: 1.0.0
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from focusos.core.exceptions import PersistenceException
from focusos.core.schemas import validate_daily_stat, validate_habit, validate_session
from focusos.modules.habits.models import Habit
from focusos.modules.session.models import FocusSession
from focusos.modules.stats.daily_stat import DailyStatistic


class PersistenceGateway(ABC):
    """Operações de armazenamento por entidade"""

    backend = 'abstract'

    @abstractmethod
    async def fetch_daily_statistic(self, user_id: str, date: str) -> Optional[DailyStatistic]:
        raise NotImplementedError

    @abstractmethod
    async def upsert_daily_statistic(self, stat: DailyStatistic) -> None:
        raise NotImplementedError

    @abstractmethod
    async def fetch_sessions(self, user_id: str) -> List[FocusSession]:
        """Sessões do usuário, da mais recente para a mais antiga"""
        raise NotImplementedError

    @abstractmethod
    async def save_session(self, session: FocusSession) -> None:
        raise NotImplementedError

    @abstractmethod
    async def fetch_habits(self, user_id: str) -> List[Habit]:
        raise NotImplementedError

    @abstractmethod
    async def save_habit(self, habit: Habit) -> None:
        raise NotImplementedError

    @abstractmethod
    async def delete_habit(self, habit_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def clear_all_user_data(self, user_id: str) -> None:
        """Apaga sessões, estatísticas e hábitos do usuário"""
        raise NotImplementedError

    async def close(self) -> None:
        """Libera recursos"""
        return None

    def _require_user(self, operation: str, user_id: Optional[str]):
        if not user_id:
            raise PersistenceException(
                operation=operation,
                message=f"{operation} exige user_id",
                backend=self.backend
            )


# ------------------------------------------------------------------ #
# Conversão domínio <-> registro validado
# ------------------------------------------------------------------ #

def _validated(operation: str, backend: str, validator, data: Dict[str, Any]) -> Dict[str, Any]:
    try:
        return validator(data).model_dump(mode='json')
    except ValidationError as e:
        raise PersistenceException(
            operation=operation,
            message=f"Registro inválido: {e}",
            backend=backend
        ) from e


def session_to_record(session: FocusSession, backend: str = 'unknown') -> Dict[str, Any]:
    return _validated('encode_session', backend, validate_session, session.to_dict())


def session_from_record(data: Dict[str, Any], backend: str = 'unknown') -> FocusSession:
    return FocusSession.from_dict(_validated('decode_session', backend, validate_session, data))


def stat_to_record(stat: DailyStatistic, backend: str = 'unknown') -> Dict[str, Any]:
    return _validated('encode_daily_stat', backend, validate_daily_stat, stat.to_dict())


def stat_from_record(data: Dict[str, Any], backend: str = 'unknown') -> DailyStatistic:
    return DailyStatistic.from_dict(_validated('decode_daily_stat', backend, validate_daily_stat, data))


def habit_to_record(habit: Habit, backend: str = 'unknown') -> Dict[str, Any]:
    return _validated('encode_habit', backend, validate_habit, habit.to_dict())


def habit_from_record(data: Dict[str, Any], backend: str = 'unknown') -> Habit:
    return Habit.from_dict(_validated('decode_habit', backend, validate_habit, data))
