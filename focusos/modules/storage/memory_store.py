# -*- coding: utf-8 -*-
"""Gateway em memória (testes, modo offline)."""
import asyncio
from typing import Dict, List, Optional, Set, Tuple

from focusos.core.exceptions import PersistenceException, RecordNotFoundException
from focusos.core.logger import get_logger
from focusos.modules.habits.models import Habit
from focusos.modules.session.models import FocusSession
from focusos.modules.stats.daily_stat import DailyStatistic

from .gateway import (
    PersistenceGateway,
    habit_from_record,
    habit_to_record,
    session_from_record,
    session_to_record,
    stat_from_record,
    stat_to_record,
)

logger = get_logger(__name__)


class InMemoryGateway(PersistenceGateway):
    """
    Guarda registros já serializados em dicionários.

    fail_operations permite simular falhas de rede/armazenamento:
    qualquer operação cujo nome esteja no conjunto levanta
    PersistenceException. latency introduz um await entre leitura e
    escrita, útil para expor corridas.
    """

    backend = 'memory'

    def __init__(self, latency: float = 0.0):
        self._sessions: Dict[str, dict] = {}
        self._stats: Dict[Tuple[str, str], dict] = {}
        self._habits: Dict[str, dict] = {}
        self._next_stat_id = 1
        self.latency = latency
        self.fail_operations: Set[str] = set()
        self.calls: List[str] = []

    async def _enter(self, operation: str):
        self.calls.append(operation)
        if self.latency:
            await asyncio.sleep(self.latency)
        if operation in self.fail_operations:
            raise PersistenceException(
                operation=operation,
                message=f"Falha simulada em {operation}",
                backend=self.backend
            )

    async def fetch_daily_statistic(self, user_id: str, date: str) -> Optional[DailyStatistic]:
        await self._enter('fetch_daily_statistic')
        record = self._stats.get((user_id, date))
        return stat_from_record(record, self.backend) if record else None

    async def upsert_daily_statistic(self, stat: DailyStatistic) -> None:
        await self._enter('upsert_daily_statistic')
        record = stat_to_record(stat, self.backend)
        key = (record['user_id'], record['date'])
        existing = self._stats.get(key)
        if existing is not None:
            record['id'] = existing['id']
        elif record['id'] is None:
            record['id'] = str(self._next_stat_id)
            self._next_stat_id += 1
        self._stats[key] = record

    async def fetch_sessions(self, user_id: str) -> List[FocusSession]:
        await self._enter('fetch_sessions')
        sessions = [
            session_from_record(r, self.backend)
            for r in self._sessions.values() if r['user_id'] == user_id
        ]
        sessions.sort(key=lambda s: s.start_time, reverse=True)
        return sessions

    async def save_session(self, session: FocusSession) -> None:
        await self._enter('save_session')
        self._require_user('save_session', session.user_id)
        self._sessions[session.id] = session_to_record(session, self.backend)

    async def fetch_habits(self, user_id: str) -> List[Habit]:
        await self._enter('fetch_habits')
        return [habit_from_record(r, self.backend) for r in self._habits.values() if r['user_id'] == user_id]

    async def save_habit(self, habit: Habit) -> None:
        await self._enter('save_habit')
        self._require_user('save_habit', habit.user_id)
        self._habits[habit.id] = habit_to_record(habit, self.backend)

    async def delete_habit(self, habit_id: str) -> None:
        await self._enter('delete_habit')
        if self._habits.pop(habit_id, None) is None:
            raise RecordNotFoundException('delete_habit', habit_id, self.backend)

    async def clear_all_user_data(self, user_id: str) -> None:
        await self._enter('clear_all_user_data')
        self._sessions = {k: v for k, v in self._sessions.items() if v['user_id'] != user_id}
        self._stats = {k: v for k, v in self._stats.items() if k[0] != user_id}
        self._habits = {k: v for k, v in self._habits.items() if v['user_id'] != user_id}
        logger.info("Dados do usuário apagados", context={'user_id': user_id, 'backend': self.backend})

    def stat_count(self) -> int:
        return len(self._stats)

    def session_count(self) -> int:
        return len(self._sessions)
