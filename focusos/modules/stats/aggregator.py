# -*- coding: utf-8 -*-
"""
Stats Aggregator - Consolida sessões encerradas na estatística do dia

fold() é a parte pura: média incremental, tempo de foco truncado em
segundos e soma de distrações. StatsAggregator faz a sequência
buscar -> consolidar -> upsert contra o gateway de persistência.

Autor: FocusOS Team
Versão: 1.0.0
"""

import asyncio
import math
from contextlib import asynccontextmanager
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Callable, Dict, Optional, Set, Tuple, Union

from focusos.core.event_bus import Event, EventBus, EventType
from focusos.core.logger import get_logger
from focusos.modules.session.models import FocusSession, local_now

from .daily_stat import DailyStatistic, normalize_date

logger = get_logger(__name__)

DATE_MODE_FOLD_TIME = 'fold_time'
DATE_MODE_SESSION_START = 'session_start'


def fold(
    existing: Optional[DailyStatistic],
    session: FocusSession,
    user_id: str,
    on_date: Optional[Union[date, datetime, str]] = None
) -> DailyStatistic:
    """
    Consolida uma sessão encerrada na estatística do dia

    Args:
        existing: Estatística atual do dia (None = zerada)
        session: Sessão encerrada
        user_id: Usuário dono da estatística
        on_date: Dia usado quando existing é None (default: hoje)

    Returns:
        Nova DailyStatistic; existing não é modificada
    """
    if existing is None:
        existing = DailyStatistic.empty(user_id, on_date or local_now())

    old_total_score = existing.avg_productivity_score * existing.session_count
    new_session_count = existing.session_count + 1

    return replace(
        existing,
        total_focus_time=existing.total_focus_time + math.floor(session.duration()),
        session_count=new_session_count,
        avg_productivity_score=(old_total_score + session.focus_score) / new_session_count,
        distraction_count=existing.distraction_count + session.distraction_count,
        updated_at=local_now(),
    )


@dataclass
class _Unconfirmed:
    """Estatística calculada cujo upsert ainda não foi confirmado"""
    stat: DailyStatistic
    session_ids: Set[str] = field(default_factory=set)


class StatsAggregator:
    """
    Busca, consolida e grava a estatística diária de cada sessão encerrada

    Com serialize=True, consolidações do mesmo (usuário, dia) são
    serializadas por um lock; com False a corrida de leitura-modificação-
    escrita fica como no comportamento original (atualizações podem se
    perder se duas sessões terminarem quase juntas).

    Um upsert que falha pode ter sido gravado mesmo assim (ex.: timeout
    depois do commit). A estatística calculada fica guardada até um
    upsert ser confirmado: a nova tentativa da mesma sessão regrava esse
    valor sem consolidar de novo, e outras sessões do mesmo dia partem
    dele em vez do valor buscado.
    """

    def __init__(
        self,
        gateway,
        event_bus: Optional[EventBus] = None,
        date_mode: str = DATE_MODE_FOLD_TIME,
        serialize: bool = True,
        clock: Optional[Callable[[], datetime]] = None
    ):
        if date_mode not in (DATE_MODE_FOLD_TIME, DATE_MODE_SESSION_START):
            raise ValueError(f"date_mode inválido: {date_mode}")
        self.gateway = gateway
        self.event_bus = event_bus
        self.date_mode = date_mode
        self.serialize = serialize
        self.clock = clock or local_now
        # chave -> [lock, quantos coroutines usam ou aguardam o lock]
        self._locks: Dict[Tuple[str, str], list] = {}
        self._unconfirmed: Dict[Tuple[str, str], _Unconfirmed] = {}
        self._session_keys: Dict[str, Tuple[str, str]] = {}

    def attribution_date(self, session: FocusSession) -> str:
        """Dia de calendário que recebe a sessão"""
        if self.date_mode == DATE_MODE_SESSION_START:
            return normalize_date(session.start_time)
        return normalize_date(self.clock())

    @property
    def unconfirmed_count(self) -> int:
        return len(self._unconfirmed)

    @asynccontextmanager
    async def _key_lock(self, key: Tuple[str, str]):
        entry = self._locks.get(key)
        if entry is None:
            entry = self._locks[key] = [asyncio.Lock(), 0]
        entry[1] += 1
        try:
            async with entry[0]:
                yield
        finally:
            entry[1] -= 1
            if entry[1] == 0:
                del self._locks[key]

    async def record_session(self, session: FocusSession, user_id: str) -> DailyStatistic:
        """
        Consolida a sessão na estatística do dia e grava via upsert

        Falhas do gateway (PersistenceException) propagam para o chamador.
        Pode ser repetida para a mesma sessão: ela é contada uma vez só.
        """
        # Nova tentativa usa o mesmo dia da primeira, mesmo após a meia-noite
        key = self._session_keys.get(session.id) or (user_id, self.attribution_date(session))
        if not self.serialize:
            return await self._fold_and_save(session, key)

        async with self._key_lock(key):
            return await self._fold_and_save(session, key)

    async def _fold_and_save(self, session: FocusSession, key: Tuple[str, str]) -> DailyStatistic:
        user_id, day = key
        pending = self._unconfirmed.get(key)

        if pending is not None and session.id in pending.session_ids:
            updated = pending.stat
            logger.debug(
                "Regravando estatística não confirmada",
                context={'date': day, 'session_id': session.id}
            )
        else:
            if pending is not None:
                base = pending.stat
            else:
                base = await self.gateway.fetch_daily_statistic(user_id, day)
                if base is None:
                    base = DailyStatistic.empty(user_id, day)
            updated = fold(base, session, user_id)
            ids = (pending.session_ids if pending is not None else set()) | {session.id}
            self._unconfirmed[key] = _Unconfirmed(updated, ids)
            for session_id in ids:
                self._session_keys[session_id] = key

        await self.gateway.upsert_daily_statistic(updated)

        confirmed = self._unconfirmed.pop(key, None)
        if confirmed is not None:
            for session_id in confirmed.session_ids:
                self._session_keys.pop(session_id, None)

        logger.info(
            "Estatística diária atualizada",
            context={
                'user_id': user_id,
                'date': day,
                'session_count': updated.session_count,
                'avg_productivity_score': round(updated.avg_productivity_score, 2)
            }
        )
        if self.event_bus is not None:
            await self.event_bus.publish(Event(
                type=EventType.STATS_UPDATED,
                data={'stat': updated, 'session_id': session.id},
                source='stats_aggregator'
            ))
        return updated
