# -*- coding: utf-8 -*-
"""
SQLite Gateway - Armazenamento local em arquivo

Autor: FocusOS Team
Versão: 1.0.0
"""

import json
import sqlite3
import threading
from pathlib import Path
from typing import List, Optional, Union

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


class SQLiteGateway(PersistenceGateway):
    """
    Gateway sobre sqlite3

    - sessions: distrações em coluna JSON
    - daily_stats: UNIQUE(user_id, date), upsert com ON CONFLICT
    - habits
    """

    backend = 'sqlite'

    def __init__(self, db_path: Union[str, Path] = ':memory:'):
        self.db_path = str(db_path)
        if self.db_path != ':memory:':
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        # Acesso de várias threads protegido pelo lock
        self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.Lock()

        self._create_tables()
        logger.info(f"SQLite: {self.db_path}")

    def _create_tables(self):
        with self._lock:
            cursor = self._conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS sessions (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    start_time TEXT NOT NULL,
                    end_time TEXT,
                    focus_score REAL NOT NULL DEFAULT 100,
                    distractions TEXT NOT NULL DEFAULT '[]',
                    tag TEXT,
                    planned_duration INTEGER
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS daily_stats (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    date TEXT NOT NULL,
                    total_focus_time INTEGER NOT NULL DEFAULT 0,
                    session_count INTEGER NOT NULL DEFAULT 0,
                    avg_productivity_score REAL NOT NULL DEFAULT 0,
                    distraction_count INTEGER NOT NULL DEFAULT 0,
                    updated_at TEXT,
                    UNIQUE(user_id, date)
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS habits (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    icon TEXT NOT NULL DEFAULT ''
                )
            """)

            cursor.execute(
                "CREATE INDEX IF NOT EXISTS idx_sessions_user_start ON sessions (user_id, start_time)"
            )
            self._conn.commit()

    def _execute(self, operation: str, sql: str, params: tuple = ()) -> List[sqlite3.Row]:
        try:
            with self._lock:
                cursor = self._conn.execute(sql, params)
                rows = cursor.fetchall()
                self._conn.commit()
                return rows
        except sqlite3.Error as e:
            raise PersistenceException(
                operation=operation,
                message=f"Erro SQLite em {operation}: {e}",
                backend=self.backend
            ) from e

    # ---------------- daily_stats ----------------

    async def fetch_daily_statistic(self, user_id: str, date: str) -> Optional[DailyStatistic]:
        rows = self._execute(
            'fetch_daily_statistic',
            "SELECT * FROM daily_stats WHERE user_id = ? AND date = ?",
            (user_id, date),
        )
        if not rows:
            return None
        return stat_from_record(dict(rows[0]), self.backend)

    async def upsert_daily_statistic(self, stat: DailyStatistic) -> None:
        record = stat_to_record(stat, self.backend)
        self._execute(
            'upsert_daily_statistic',
            """
            INSERT INTO daily_stats (
                user_id, date, total_focus_time, session_count,
                avg_productivity_score, distraction_count, updated_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(user_id, date) DO UPDATE SET
                total_focus_time = excluded.total_focus_time,
                session_count = excluded.session_count,
                avg_productivity_score = excluded.avg_productivity_score,
                distraction_count = excluded.distraction_count,
                updated_at = excluded.updated_at
            """,
            (
                record['user_id'],
                record['date'],
                record['total_focus_time'],
                record['session_count'],
                record['avg_productivity_score'],
                record['distraction_count'],
                record['updated_at'],
            ),
        )

    # ---------------- sessions ----------------

    def _session_from_row(self, row: sqlite3.Row) -> FocusSession:
        data = dict(row)
        data['distractions'] = json.loads(data['distractions'] or '[]')
        return session_from_record(data, self.backend)

    async def fetch_sessions(self, user_id: str) -> List[FocusSession]:
        rows = self._execute(
            'fetch_sessions',
            "SELECT * FROM sessions WHERE user_id = ?",
            (user_id,),
        )
        sessions = [self._session_from_row(r) for r in rows]
        # Ordena pelo instante, não pelo texto (fusos podem diferir)
        sessions.sort(key=lambda s: s.start_time, reverse=True)
        return sessions

    async def save_session(self, session: FocusSession) -> None:
        self._require_user('save_session', session.user_id)
        record = session_to_record(session, self.backend)
        self._execute(
            'save_session',
            """
            INSERT INTO sessions (
                id, user_id, start_time, end_time, focus_score,
                distractions, tag, planned_duration
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                user_id = excluded.user_id,
                start_time = excluded.start_time,
                end_time = excluded.end_time,
                focus_score = excluded.focus_score,
                distractions = excluded.distractions,
                tag = excluded.tag,
                planned_duration = excluded.planned_duration
            """,
            (
                record['id'],
                record['user_id'],
                record['start_time'],
                record['end_time'],
                record['focus_score'],
                json.dumps(record['distractions'], ensure_ascii=False),
                record['tag'],
                record['planned_duration'],
            ),
        )

    # ---------------- habits ----------------

    async def fetch_habits(self, user_id: str) -> List[Habit]:
        rows = self._execute(
            'fetch_habits',
            "SELECT * FROM habits WHERE user_id = ? ORDER BY rowid",
            (user_id,),
        )
        return [habit_from_record(dict(r), self.backend) for r in rows]

    async def save_habit(self, habit: Habit) -> None:
        self._require_user('save_habit', habit.user_id)
        record = habit_to_record(habit, self.backend)
        self._execute(
            'save_habit',
            """
            INSERT INTO habits (id, user_id, name, icon) VALUES (?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET name = excluded.name, icon = excluded.icon
            """,
            (record['id'], record['user_id'], record['name'], record['icon']),
        )

    async def delete_habit(self, habit_id: str) -> None:
        exists = self._execute('delete_habit', "SELECT id FROM habits WHERE id = ?", (habit_id,))
        if not exists:
            raise RecordNotFoundException('delete_habit', habit_id, self.backend)
        self._execute('delete_habit', "DELETE FROM habits WHERE id = ?", (habit_id,))

    async def clear_all_user_data(self, user_id: str) -> None:
        for table in ('sessions', 'daily_stats', 'habits'):
            self._execute('clear_all_user_data', f"DELETE FROM {table} WHERE user_id = ?", (user_id,))
        logger.info("Dados do usuário apagados", context={'user_id': user_id, 'backend': self.backend})

    async def close(self) -> None:
        with self._lock:
            self._conn.close()
