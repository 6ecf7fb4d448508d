# -*- coding: utf-8 -*-
"""
Clock - Ticker periódico e alarme de fim de sessão

O ticker alimenta o contador de tempo exibido na UI; o alarme representa
a notificação local "sessão concluída" (a entrega real fica com a
plataforma). Ambos são canceláveis e não disparam depois de parados.

Autor: FocusOS Team
Versão: 1.0.0
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional

from focusos.core.logger import get_logger

logger = get_logger(__name__)

# Identificador único: reagendar substitui qualquer alarme pendente
SESSION_END_ALARM = "session_end_notification"


class Ticker:
    """
    Tarefa asyncio que chama `callback` a cada `interval` segundos

    Sem loop em execução, start() devolve False e os ticks devem ser
    dirigidos manualmente (útil em testes e em hosts síncronos).
    """

    def __init__(self, interval: float, callback: Callable[[], None]):
        self.interval = float(interval)
        self.callback = callback
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> bool:
        """Inicia o ticker"""
        if self.running:
            return True
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("Ticker sem loop em execução; ticks manuais")
            return False
        self._task = loop.create_task(self._loop())
        return True

    def stop(self):
        """Para o ticker; nenhum tick é entregue depois desta chamada"""
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _loop(self):
        while True:
            await asyncio.sleep(self.interval)
            try:
                self.callback()
            except Exception as e:
                logger.error(f"Erro no callback do ticker: {e}", exc_info=True)


class AlarmScheduler(ABC):
    """
    Agendador de alarmes locais de disparo único

    Cada identificador ocupa um único slot: agendar de novo com o mesmo
    identificador substitui o alarme pendente.
    """

    @abstractmethod
    def schedule(
        self,
        identifier: str,
        delay_seconds: float,
        callback: Optional[Callable[[], None]] = None
    ) -> bool:
        """Agenda o alarme; devolve False se não foi agendado"""
        raise NotImplementedError

    @abstractmethod
    def cancel(self, identifier: str) -> bool:
        """Cancela o alarme pendente; devolve True se havia um"""
        raise NotImplementedError

    @abstractmethod
    def pending(self) -> List[str]:
        """Identificadores com alarme pendente"""
        raise NotImplementedError


class AsyncioAlarmScheduler(AlarmScheduler):
    """Alarmes sobre loop.call_later"""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop
        self._handles: Dict[str, asyncio.TimerHandle] = {}

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None:
            return self._loop
        return asyncio.get_running_loop()

    def schedule(
        self,
        identifier: str,
        delay_seconds: float,
        callback: Optional[Callable[[], None]] = None
    ) -> bool:
        self.cancel(identifier)
        if delay_seconds <= 0:
            return False

        try:
            loop = self._get_loop()
        except RuntimeError:
            logger.warning(f"Alarme '{identifier}' não agendado: nenhum loop em execução")
            return False

        self._handles[identifier] = loop.call_later(
            delay_seconds, self._fire, identifier, callback
        )
        logger.info(
            "Alarme agendado",
            context={'identifier': identifier, 'delay_seconds': round(delay_seconds, 3)}
        )
        return True

    def _fire(self, identifier: str, callback: Optional[Callable[[], None]]):
        self._handles.pop(identifier, None)
        logger.info("Alarme disparado", context={'identifier': identifier})
        if callback is None:
            return
        try:
            callback()
        except Exception as e:
            logger.error(f"Erro no callback do alarme '{identifier}': {e}", exc_info=True)

    def cancel(self, identifier: str) -> bool:
        handle = self._handles.pop(identifier, None)
        if handle is None:
            return False
        handle.cancel()
        logger.debug("Alarme cancelado", context={'identifier': identifier})
        return True

    def pending(self) -> List[str]:
        return list(self._handles)


class NullAlarmScheduler(AlarmScheduler):
    """Apenas registra os pedidos; para hosts sem notificações"""

    def __init__(self):
        self._pending: Dict[str, float] = {}

    def schedule(
        self,
        identifier: str,
        delay_seconds: float,
        callback: Optional[Callable[[], None]] = None
    ) -> bool:
        self._pending.pop(identifier, None)
        if delay_seconds <= 0:
            return False
        self._pending[identifier] = delay_seconds
        return True

    def cancel(self, identifier: str) -> bool:
        return self._pending.pop(identifier, None) is not None

    def pending(self) -> List[str]:
        return list(self._pending)

    def delay_for(self, identifier: str) -> Optional[float]:
        return self._pending.get(identifier)
