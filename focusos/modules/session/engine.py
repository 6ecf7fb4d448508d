# -*- coding: utf-8 -*-
"""
Session Engine - Máquina de estados da sessão de foco

Estados: IDLE -> RUNNING <-> PAUSED -> COMPLETED -> IDLE

- Existe no máximo uma sessão ativa por instância.
- Chamadas fora de hora (pause sem sessão, etc.) são ignoradas sem erro.
- A duração vem sempre do relógio de parede; o contador elapsed_time é
  apenas para exibição.
- Atingir a duração planejada emite GOAL_REACHED uma única vez; a sessão
  continua até end().

Autor: FocusOS Team
Versão: 1.0.0
"""

import threading
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional

from focusos.core import metrics
from focusos.core.event_bus import Event, EventBus, EventType
from focusos.core.logger import get_logger

from .clock import SESSION_END_ALARM, AlarmScheduler, NullAlarmScheduler, Ticker
from .models import DistractionRecord, FocusSession, local_now
from .scoring import calculate_focus_score

logger = get_logger(__name__)


class SessionState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"


class SessionEngine:
    """
    Dono da sessão ativa e do relógio de tempo decorrido

    Construído explicitamente e injetado em quem o consome; todos os
    colaboradores (barramento, alarmes, relógio) entram pelo construtor.
    """

    SOURCE = 'session_engine'

    def __init__(
        self,
        event_bus: Optional[EventBus] = None,
        alarm_scheduler: Optional[AlarmScheduler] = None,
        clock: Optional[Callable[[], datetime]] = None,
        tick_interval: float = 1.0,
        max_history: int = 1000
    ):
        self.event_bus = event_bus or EventBus()
        self.alarm_scheduler = alarm_scheduler or NullAlarmScheduler()
        self.clock = clock or local_now
        self.tick_interval = float(tick_interval)

        self._lock = threading.RLock()
        self._state = SessionState.IDLE
        self._current: Optional[FocusSession] = None
        self._history: List[FocusSession] = []
        self._max_history = max_history

        self.elapsed_time: float = 0.0
        # Tempo ativo acumulado antes da pausa atual + início do trecho corrente
        self._active_accumulated: float = 0.0
        self._running_since: Optional[datetime] = None
        self._goal_reached = False

        self._ticker = Ticker(self.tick_interval, self.tick)

    # ------------------------------------------------------------------ #
    # Observação
    # ------------------------------------------------------------------ #

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def current_session(self) -> Optional[FocusSession]:
        return self._current

    @property
    def is_active(self) -> bool:
        return self._current is not None

    @property
    def is_paused(self) -> bool:
        return self._state == SessionState.PAUSED

    @property
    def goal_reached(self) -> bool:
        return self._goal_reached

    @property
    def history(self) -> List[FocusSession]:
        return list(self._history)

    def active_seconds(self) -> float:
        """Tempo em RUNNING pelo relógio de parede, excluindo pausas"""
        with self._lock:
            total = self._active_accumulated
            if self._running_since is not None:
                total += max(0.0, (self.clock() - self._running_since).total_seconds())
            return total

    def remaining_seconds(self) -> Optional[float]:
        """Tempo restante até a duração planejada (None se aberta)"""
        with self._lock:
            if self._current is None or self._current.planned_duration is None:
                return None
            return max(0.0, self._current.planned_duration - self.active_seconds())

    def formatted_elapsed_time(self) -> str:
        total = int(self.elapsed_time)
        hours = total // 3600
        minutes = total // 60 % 60
        seconds = total % 60
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}"

    # ------------------------------------------------------------------ #
    # Transições
    # ------------------------------------------------------------------ #

    def start(
        self,
        tag: Optional[str] = None,
        planned_duration: Optional[int] = None
    ) -> Optional[FocusSession]:
        """IDLE -> RUNNING. Com uma sessão ativa, não faz nada."""
        with self._lock:
            if self._state != SessionState.IDLE:
                logger.debug("start ignorado: sessão já ativa", context={'state': self._state.value})
                return None

            now = self.clock()
            session = FocusSession(start_time=now, tag=tag, planned_duration=planned_duration)
            self._current = session
            self._state = SessionState.RUNNING
            self.elapsed_time = 0.0
            self._active_accumulated = 0.0
            self._running_since = now
            self._goal_reached = False

            self.alarm_scheduler.cancel(SESSION_END_ALARM)
            if planned_duration:
                self._arm_alarm(planned_duration)
            self._ticker.start()

        logger.info(
            "Sessão iniciada",
            context={'session_id': session.id, 'tag': tag, 'planned_duration': planned_duration}
        )
        self._emit(EventType.SESSION_STARTED, session=session)
        return session

    def pause(self) -> Optional[FocusSession]:
        """RUNNING -> PAUSED"""
        with self._lock:
            if self._state != SessionState.RUNNING:
                return None

            self._ticker.stop()
            self.alarm_scheduler.cancel(SESSION_END_ALARM)
            self._active_accumulated = self.active_seconds()
            self._running_since = None
            self._state = SessionState.PAUSED
            session = self._current

        logger.info("Sessão pausada", context={'session_id': session.id})
        self._emit(EventType.SESSION_PAUSED, session=session)
        return session

    def resume(self) -> Optional[FocusSession]:
        """PAUSED -> RUNNING; rearma o alarme pelo tempo restante"""
        with self._lock:
            if self._state != SessionState.PAUSED:
                return None

            self._running_since = self.clock()
            self._state = SessionState.RUNNING
            session = self._current

            remaining = self.remaining_seconds()
            if remaining is not None and remaining > 0 and not self._goal_reached:
                self._arm_alarm(remaining)
            self._ticker.start()

        logger.info("Sessão retomada", context={'session_id': session.id})
        self._emit(EventType.SESSION_RESUMED, session=session)
        return session

    def log_distraction(self, description: str) -> Optional[DistractionRecord]:
        """Registra distração na sessão em RUNNING"""
        with self._lock:
            if self._state != SessionState.RUNNING:
                return None
            session = self._current
            record = session.add_distraction(description, timestamp=self.clock())

        metrics.inc_distractions_logged()
        logger.info(
            "Distração registrada",
            context={'session_id': session.id, 'count': session.distraction_count}
        )
        self._emit(EventType.DISTRACTION_LOGGED, session=session, distraction=record)
        return record

    def end(self) -> Optional[FocusSession]:
        """
        RUNNING/PAUSED -> COMPLETED -> IDLE

        Retorna a sessão encerrada de forma síncrona; persistência e
        estatísticas ficam com os assinantes de SESSION_ENDED.
        """
        with self._lock:
            if self._state not in (SessionState.RUNNING, SessionState.PAUSED):
                return None

            self._ticker.stop()
            self.alarm_scheduler.cancel(SESSION_END_ALARM)

            session = self._current
            session.end_time = max(self.clock(), session.start_time)
            session.focus_score = calculate_focus_score(
                session.duration(), session.distraction_count
            )
            self._state = SessionState.COMPLETED

            self._history.append(session)
            if len(self._history) > self._max_history:
                self._history.pop(0)

            self._current = None
            self._running_since = None
            self._active_accumulated = 0.0
            self._state = SessionState.IDLE

        metrics.record_session_completed(session.focus_score)
        logger.info(
            "Sessão encerrada",
            context={
                'session_id': session.id,
                'duration': round(session.duration(), 3),
                'distractions': session.distraction_count,
                'focus_score': round(session.focus_score, 2)
            }
        )
        self._emit(EventType.SESSION_ENDED, session=session)
        return session

    # ------------------------------------------------------------------ #
    # Relógio e meta
    # ------------------------------------------------------------------ #

    def tick(self):
        """Chamado a cada intervalo pelo ticker (ou manualmente)"""
        with self._lock:
            if self._state != SessionState.RUNNING:
                return
            self.elapsed_time += self.tick_interval
            session = self._current
            elapsed = self.elapsed_time

        self._emit(EventType.TICK, session=session, elapsed_time=elapsed)
        self.check_goal()

    def check_goal(self) -> bool:
        """Emite GOAL_REACHED uma única vez por sessão"""
        with self._lock:
            session = self._current
            if (
                self._state != SessionState.RUNNING
                or self._goal_reached
                or session is None
                or session.planned_duration is None
            ):
                return False
            if self.active_seconds() < session.planned_duration:
                return False
            self._goal_reached = True

        metrics.inc_goals_reached()
        logger.info(
            "Meta de duração atingida",
            context={'session_id': session.id, 'planned_duration': session.planned_duration}
        )
        self._emit(EventType.GOAL_REACHED, session=session)
        return True

    def restore_history(self, sessions: List[FocusSession]):
        """Substitui o histórico local (ex.: após buscar no armazenamento)"""
        with self._lock:
            self._history = sorted(sessions, key=lambda s: s.start_time)[-self._max_history:]

    def clear_history(self):
        with self._lock:
            self._history = []

    # ------------------------------------------------------------------ #
    # Internos
    # ------------------------------------------------------------------ #

    def _arm_alarm(self, delay_seconds: float):
        session_id = self._current.id
        self.alarm_scheduler.schedule(
            SESSION_END_ALARM,
            delay_seconds,
            lambda: self._on_alarm(session_id)
        )

    def _on_alarm(self, session_id: str):
        # Alarme de uma sessão anterior não afeta a atual
        current = self._current
        if current is None or current.id != session_id:
            return
        self.check_goal()

    def _emit(self, event_type: EventType, **data):
        self.event_bus.emit_nowait(Event(type=event_type, data=data, source=self.SOURCE))
