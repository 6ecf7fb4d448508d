# -*- coding: utf-8 -*-
"""
Event Bus - Sistema de Eventos do FocusOS
Observer Pattern com tipos de eventos, prioridades e filtros

O motor de sessões publica eventos discretos (sessão iniciada, distração
registrada, meta atingida, sessão encerrada) e os assinantes (UI,
persistência, estatísticas) reagem a eles.

Autor: FocusOS Team
Versão: 1.0.0
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Set

from .logger import get_logger

logger = get_logger(__name__)


class EventType(Enum):
    """Tipos de eventos do sistema"""
    # Sessão
    SESSION_STARTED = "session_started"
    SESSION_PAUSED = "session_paused"
    SESSION_RESUMED = "session_resumed"
    DISTRACTION_LOGGED = "distraction_logged"
    GOAL_REACHED = "goal_reached"
    TICK = "tick"
    SESSION_ENDED = "session_ended"

    # Estatísticas e sincronização
    STATS_UPDATED = "stats_updated"
    SESSION_SAVED = "session_saved"
    SYNC_FAILED = "sync_failed"

    # Hábitos e conta
    HABIT_ADDED = "habit_added"
    HABIT_DELETED = "habit_deleted"
    USER_DATA_CLEARED = "user_data_cleared"


@dataclass
class Event:
    """Representa um evento"""
    type: EventType
    data: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)
    source: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Converte evento para dicionário"""
        return {
            'type': self.type.value,
            'data': self.data,
            'timestamp': self.timestamp.isoformat(),
            'source': self.source
        }


class EventBus:
    """
    Barramento de eventos

    Funcionalidades:
    - Publicação assíncrona (publish) e a partir de código síncrono (emit_nowait)
    - Assinatura com filtros e prioridades
    - Handlers assíncronos e síncronos
    - Middleware
    """

    def __init__(self, max_history: int = 1000):
        self._subscribers: Dict[EventType, List[Dict[str, Any]]] = {}
        self._middleware: List[Callable] = []
        self._event_history: List[Event] = []
        self._max_history = max_history
        self._pending: Set[asyncio.Task] = set()
        self._running = True

    def subscribe(
        self,
        event_type: EventType,
        handler: Callable,
        priority: int = 0,
        filter_func: Optional[Callable] = None
    ):
        """
        Assina um tipo de evento

        Args:
            event_type: Tipo de evento
            handler: Função handler (async ou sync)
            priority: Prioridade (maior = executa primeiro)
            filter_func: Função de filtro síncrona (opcional)
        """
        self._subscribers.setdefault(event_type, []).append({
            'handler': handler,
            'priority': priority,
            'filter': filter_func
        })
        self._subscribers[event_type].sort(key=lambda x: x['priority'], reverse=True)

        logger.debug(
            f"Handler registrado para {event_type.value}",
            context={'priority': priority}
        )

    def unsubscribe(self, event_type: EventType, handler: Callable):
        """Remove assinatura"""
        if event_type not in self._subscribers:
            return

        self._subscribers[event_type] = [
            sub for sub in self._subscribers[event_type]
            if sub['handler'] != handler
        ]

    def add_middleware(self, middleware: Callable):
        """
        Adiciona middleware síncrono

        Middleware recebe o evento e devolve o evento (possivelmente
        modificado) ou None para bloqueá-lo.
        """
        self._middleware.append(middleware)

    def _prepare(self, event: Event) -> Optional[Event]:
        """Registra no histórico e aplica middleware"""
        if not self._running:
            return None

        self._event_history.append(event)
        if len(self._event_history) > self._max_history:
            self._event_history.pop(0)

        processed = event
        for middleware in self._middleware:
            try:
                processed = middleware(processed)
            except Exception as e:
                logger.error(f"Erro em middleware: {e}", exc_info=True)
                continue
            if processed is None:
                return None
        return processed

    def _matching(self, event: Event) -> List[Callable]:
        handlers = []
        for subscriber in self._subscribers.get(event.type, []):
            filter_func = subscriber['filter']
            if filter_func:
                try:
                    if not filter_func(event):
                        continue
                except Exception as e:
                    logger.error(f"Erro em filtro para {event.type.value}: {e}", exc_info=True)
                    continue
            handlers.append(subscriber['handler'])
        return handlers

    async def publish(self, event: Event) -> int:
        """
        Publica um evento aguardando todos os handlers

        Returns:
            Número de handlers executados com sucesso
        """
        processed = self._prepare(event)
        if processed is None:
            return 0

        executed = 0
        for handler in self._matching(processed):
            try:
                if asyncio.iscoroutinefunction(handler):
                    await handler(processed)
                else:
                    handler(processed)
                executed += 1
            except Exception as e:
                logger.error(f"Erro em handler para {event.type.value}: {e}", exc_info=True)

        return executed

    def emit_nowait(self, event: Event) -> int:
        """
        Publica a partir de código síncrono

        Handlers síncronos rodam imediatamente; handlers assíncronos são
        agendados no loop em execução. Sem loop, handlers assíncronos são
        descartados com aviso.

        Returns:
            Número de handlers executados ou agendados
        """
        processed = self._prepare(event)
        if processed is None:
            return 0

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        dispatched = 0
        for handler in self._matching(processed):
            if asyncio.iscoroutinefunction(handler):
                if loop is None:
                    logger.warning(
                        f"Handler assíncrono ignorado para {event.type.value}: nenhum loop em execução"
                    )
                    continue
                task = loop.create_task(self._run_async_handler(handler, processed))
                self._pending.add(task)
                task.add_done_callback(self._pending.discard)
                dispatched += 1
                continue
            try:
                handler(processed)
                dispatched += 1
            except Exception as e:
                logger.error(f"Erro em handler para {event.type.value}: {e}", exc_info=True)

        return dispatched

    async def _run_async_handler(self, handler: Callable, event: Event):
        try:
            await handler(event)
        except Exception as e:
            logger.error(f"Erro em handler para {event.type.value}: {e}", exc_info=True)

    async def drain(self):
        """Aguarda handlers assíncronos agendados por emit_nowait"""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    def get_history(
        self,
        event_type: Optional[EventType] = None,
        limit: int = 100
    ) -> List[Event]:
        """
        Retorna histórico de eventos

        Args:
            event_type: Filtrar por tipo (opcional)
            limit: Limite de eventos
        """
        events = self._event_history
        if event_type:
            events = [e for e in events if e.type == event_type]
        return events[-limit:]

    def get_subscriber_count(self, event_type: EventType) -> int:
        """Retorna número de subscribers para um tipo"""
        return len(self._subscribers.get(event_type, []))

    def stop(self):
        """Para o event bus"""
        self._running = False
        logger.info("Event bus parado")

    def start(self):
        """Inicia o event bus"""
        self._running = True
        logger.info("Event bus iniciado")
