# -*- coding: utf-8 -*-
"""
Supabase Gateway - Armazenamento remoto via PostgREST

Fala diretamente com a API REST do Supabase (/rest/v1/<tabela>) usando
aiohttp. Upserts usam Prefer: resolution=merge-duplicates com
on_conflict na chave natural de cada tabela.

Autor: FocusOS Team
Versão: 1.0.0
"""

import asyncio
from typing import Any, Dict, List, Optional

import aiohttp

from focusos.core.exceptions import PersistenceException
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


class SupabaseGateway(PersistenceGateway):
    """Gateway HTTP para as tabelas sessions, daily_stats e habits"""

    backend = 'supabase'

    def __init__(
        self,
        url: str,
        anon_key: str,
        access_token: Optional[str] = None,
        timeout_seconds: float = 10.0,
        session: Optional[aiohttp.ClientSession] = None
    ):
        if not url or not anon_key:
            raise PersistenceException(
                operation='connect',
                message="SUPABASE_URL e SUPABASE_ANON_KEY são obrigatórios",
                backend=self.backend
            )
        self.base_url = f"{url.rstrip('/')}/rest/v1"
        self.anon_key = anon_key
        self.access_token = access_token
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._session = session
        self._owns_session = session is None

    def set_access_token(self, token: Optional[str]):
        """Token do usuário autenticado (JWT); sem ele usa a chave anônima"""
        self.access_token = token

    def _headers(self, prefer: Optional[str] = None) -> Dict[str, str]:
        headers = {
            'apikey': self.anon_key,
            'Authorization': f"Bearer {self.access_token or self.anon_key}",
            'Content-Type': 'application/json',
            'Accept': 'application/json',
        }
        if prefer:
            headers['Prefer'] = prefer
        return headers

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
            self._owns_session = True
        return self._session

    async def _request(
        self,
        operation: str,
        method: str,
        table: str,
        params: Dict[str, str],
        json_body: Any = None,
        prefer: Optional[str] = None
    ) -> Any:
        url = f"{self.base_url}/{table}"
        logger.debug(f"Supabase {method} {table}", context={'operation': operation, 'params': params})
        try:
            async with self._get_session().request(
                method,
                url,
                params=params,
                json=json_body,
                headers=self._headers(prefer),
                timeout=self.timeout,
            ) as resp:
                if resp.status >= 400:
                    text = await resp.text()
                    raise PersistenceException(
                        operation=operation,
                        message=f"Supabase respondeu {resp.status} em {operation}",
                        backend=self.backend,
                        details={'status': resp.status, 'response': text[:500]}
                    )
                if resp.status == 204 or resp.content_length == 0:
                    return None
                return await resp.json(content_type=None)
        except asyncio.TimeoutError as e:
            raise PersistenceException(
                operation=operation,
                message=f"Timeout do Supabase em {operation}",
                backend=self.backend
            ) from e
        except aiohttp.ClientError as e:
            raise PersistenceException(
                operation=operation,
                message=f"Erro de rede em {operation}: {e}",
                backend=self.backend
            ) from e

    # ---------------- daily_stats ----------------

    async def fetch_daily_statistic(self, user_id: str, date: str) -> Optional[DailyStatistic]:
        rows = await self._request(
            'fetch_daily_statistic', 'GET', 'daily_stats',
            {'select': '*', 'user_id': f'eq.{user_id}', 'date': f'eq.{date}'},
        )
        if not rows:
            return None
        return stat_from_record(rows[0], self.backend)

    async def upsert_daily_statistic(self, stat: DailyStatistic) -> None:
        record = stat_to_record(stat, self.backend)
        if record.get('id') is None:
            record.pop('id', None)
        await self._request(
            'upsert_daily_statistic', 'POST', 'daily_stats',
            {'on_conflict': 'user_id,date'},
            json_body=record,
            prefer='resolution=merge-duplicates,return=minimal',
        )
        logger.debug("Upsert de estatística concluído", context={'date': stat.date})

    # ---------------- sessions ----------------

    async def fetch_sessions(self, user_id: str) -> List[FocusSession]:
        rows = await self._request(
            'fetch_sessions', 'GET', 'sessions',
            {'select': '*', 'user_id': f'eq.{user_id}', 'order': 'start_time.desc'},
        )
        return [session_from_record(r, self.backend) for r in rows or []]

    async def save_session(self, session: FocusSession) -> None:
        self._require_user('save_session', session.user_id)
        await self._request(
            'save_session', 'POST', 'sessions',
            {'on_conflict': 'id'},
            json_body=session_to_record(session, self.backend),
            prefer='resolution=merge-duplicates,return=minimal',
        )

    # ---------------- habits ----------------

    async def fetch_habits(self, user_id: str) -> List[Habit]:
        rows = await self._request(
            'fetch_habits', 'GET', 'habits',
            {'select': '*', 'user_id': f'eq.{user_id}'},
        )
        return [habit_from_record(r, self.backend) for r in rows or []]

    async def save_habit(self, habit: Habit) -> None:
        self._require_user('save_habit', habit.user_id)
        await self._request(
            'save_habit', 'POST', 'habits',
            {'on_conflict': 'id'},
            json_body=habit_to_record(habit, self.backend),
            prefer='resolution=merge-duplicates,return=minimal',
        )

    async def delete_habit(self, habit_id: str) -> None:
        await self._request('delete_habit', 'DELETE', 'habits', {'id': f'eq.{habit_id}'})

    async def clear_all_user_data(self, user_id: str) -> None:
        for table in ('sessions', 'daily_stats', 'habits'):
            await self._request('clear_all_user_data', 'DELETE', table, {'user_id': f'eq.{user_id}'})
        logger.info("Dados do usuário apagados", context={'user_id': user_id, 'backend': self.backend})

    async def close(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
