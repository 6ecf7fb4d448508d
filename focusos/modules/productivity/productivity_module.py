# -*- coding: utf-8 -*-
"""
Módulo de Produtividade - monta motor de sessões, estatísticas,
sincronização e hábitos a partir de um Config.

Fluxo ao encerrar uma sessão:
  engine.end() (síncrono, estado volta a IDLE)
    -> SESSION_ENDED
      -> fila: save_session      (independente)
      -> fila: fold_stats        (buscar -> consolidar -> upsert)
"""
from datetime import datetime
from typing import Callable, List, Optional

from focusos.core.config import Config
from focusos.core.event_bus import Event, EventBus, EventType
from focusos.core.exceptions import AuthenticationRequiredException
from focusos.core.logger import get_logger
from focusos.modules.habits.habits_manager import HabitsManager
from focusos.modules.session.clock import AlarmScheduler, AsyncioAlarmScheduler
from focusos.modules.session.engine import SessionEngine
from focusos.modules.session.models import FocusSession, local_now
from focusos.modules.stats.aggregator import StatsAggregator
from focusos.modules.stats.daily_stat import DailyStatistic
from focusos.modules.stats.reports import StatsReports
from focusos.modules.storage import PersistenceGateway, create_gateway
from focusos.modules.sync.sync_queue import SyncQueue

logger = get_logger(__name__)


class ProductivityModule:
    def __init__(
        self,
        config: Optional[Config] = None,
        gateway: Optional[PersistenceGateway] = None,
        event_bus: Optional[EventBus] = None,
        alarm_scheduler: Optional[AlarmScheduler] = None,
        clock: Optional[Callable[[], datetime]] = None,
        user_id: Optional[str] = None
    ):
        self.config = config or Config()
        self.clock = clock or local_now
        self._running = False
        self._user_id = user_id

        self.event_bus = event_bus or EventBus()
        self.gateway = gateway or create_gateway(self.config)
        self.engine = SessionEngine(
            event_bus=self.event_bus,
            alarm_scheduler=alarm_scheduler or AsyncioAlarmScheduler(),
            clock=self.clock,
            tick_interval=float(self.config.get('FOCUSOS_TICK_INTERVAL', 1.0)),
        )
        self.aggregator = StatsAggregator(
            self.gateway,
            event_bus=self.event_bus,
            date_mode=self.config.get('FOCUSOS_STATS_DATE_MODE', 'fold_time'),
            serialize=bool(self.config.get('FOCUSOS_SERIALIZE_FOLDS', True)),
            clock=self.clock,
        )
        self.sync_queue = SyncQueue(
            workers=int(self.config.get('FOCUSOS_SYNC_WORKERS', 2)),
            max_retries=int(self.config.get('FOCUSOS_SYNC_MAX_RETRIES', 3)),
            retry_delay=float(self.config.get('FOCUSOS_SYNC_RETRY_DELAY', 2.0)),
            event_bus=self.event_bus,
        )
        self.habits = HabitsManager(self.gateway, user_id=user_id, event_bus=self.event_bus)
        self.reports = StatsReports(self.engine)

        self.event_bus.subscribe(EventType.SESSION_ENDED, self._on_session_ended)

    @property
    def user_id(self) -> Optional[str]:
        return self._user_id

    def set_user(self, user_id: Optional[str]):
        """Usuário atual (ou None após sign out)"""
        self._user_id = user_id
        self.habits.user_id = user_id
        if user_id is None:
            self.engine.clear_history()
            self.habits.clear()

    async def start(self):
        logger.info("📈 Iniciando módulo de produtividade...")
        await self.sync_queue.start()
        self._running = True

    async def stop(self):
        if self.engine.is_active:
            self.engine.end()
        await self.sync_queue.stop(drain=True)
        await self.event_bus.drain()
        await self.gateway.close()
        self._running = False

    # ------------------------------------------------------------------ #
    # Sessão encerrada -> sincronização
    # ------------------------------------------------------------------ #

    def _on_session_ended(self, event: Event):
        session: FocusSession = event.data['session']
        user_id = self._user_id
        if not user_id:
            logger.warning("Sessão encerrada sem usuário atual; sincronização ignorada",
                           context={'session_id': session.id})
            return

        if session.user_id is None:
            session.user_id = user_id

        self.sync_queue.enqueue(
            'save_session', lambda: self._save_session(session), session_id=session.id
        )
        self.sync_queue.enqueue(
            'fold_stats', lambda: self.aggregator.record_session(session, user_id), session_id=session.id
        )

    async def _save_session(self, session: FocusSession):
        await self.gateway.save_session(session)
        await self.event_bus.publish(Event(
            type=EventType.SESSION_SAVED, data={'session': session}, source='productivity'
        ))

    # ------------------------------------------------------------------ #
    # Consultas e conta
    # ------------------------------------------------------------------ #

    def _require_user(self, operation: str) -> str:
        if not self._user_id:
            raise AuthenticationRequiredException(operation)
        return self._user_id

    async def load_history(self) -> List[FocusSession]:
        """Busca sessões passadas e repõe o histórico do motor"""
        sessions = await self.gateway.fetch_sessions(self._require_user('load_history'))
        self.engine.restore_history(sessions)
        return sessions

    async def today_statistic(self) -> DailyStatistic:
        """Estatística de hoje; zerada (e não gravada) se ainda não existir"""
        user_id = self._require_user('today_statistic')
        today = self.clock().date().isoformat()
        stat = await self.gateway.fetch_daily_statistic(user_id, today)
        return stat or DailyStatistic.empty(user_id, today)

    async def clear_all_data(self):
        """Apaga os dados do usuário no armazenamento e depois localmente"""
        user_id = self._require_user('clear_all_data')
        await self.gateway.clear_all_user_data(user_id)
        self.engine.clear_history()
        self.habits.clear()
        await self.event_bus.publish(Event(
            type=EventType.USER_DATA_CLEARED, data={'user_id': user_id}, source='productivity'
        ))
