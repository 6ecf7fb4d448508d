# -*- coding: utf-8 -*-
"""
Sync Queue - Fila de sincronização remota

Mudanças de estado são aplicadas localmente antes; o trabalho remoto
(gravar sessão, consolidar estatística) entra aqui como tarefas
idempotentes com política de tentativas explícita. Falhas são
registradas e não desfazem o estado local.

Autor: FocusOS Team
Versão: 1.0.0
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional

from focusos.core import metrics
from focusos.core.event_bus import Event, EventBus, EventType
from focusos.core.exceptions import SyncException
from focusos.core.logger import get_logger

logger = get_logger(__name__)


@dataclass
class SyncTask:
    """Uma operação remota a executar"""
    name: str
    factory: Callable[[], Awaitable[Any]]
    context: Dict[str, Any] = field(default_factory=dict)
    attempts: int = 0
    created_at: datetime = field(default_factory=datetime.now)
    error: Optional[SyncException] = None


class SyncQueue:
    """
    Fila com N workers assíncronos

    Com mais de um worker, tarefas independentes (ex.: save_session e
    fold_stats da mesma sessão) rodam concorrentemente, sem garantia de
    ordem entre elas.
    """

    def __init__(
        self,
        workers: int = 2,
        max_retries: int = 3,
        retry_delay: float = 2.0,
        event_bus: Optional[EventBus] = None,
        max_failed: int = 100
    ):
        self.workers = max(1, int(workers))
        self.max_retries = max(0, int(max_retries))
        self.retry_delay = float(retry_delay)
        self.event_bus = event_bus
        self._queue: asyncio.Queue = asyncio.Queue()
        self._tasks: List[asyncio.Task] = []
        self._failed: List[SyncTask] = []
        self._max_failed = max_failed
        self.completed = 0

    @property
    def running(self) -> bool:
        return any(not t.done() for t in self._tasks)

    @property
    def failed_tasks(self) -> List[SyncTask]:
        return list(self._failed)

    def pending_count(self) -> int:
        return self._queue.qsize()

    async def start(self):
        """Inicia os workers"""
        if self.running:
            return
        self._tasks = [
            asyncio.create_task(self._worker(i), name=f"sync-worker-{i}")
            for i in range(self.workers)
        ]
        logger.info("Fila de sincronização iniciada", context={'workers': self.workers})

    async def stop(self, drain: bool = True):
        """Para os workers (por padrão após esvaziar a fila)"""
        if drain and self.running:
            await self.join()
        for task in self._tasks:
            task.cancel()
        for task in self._tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._tasks = []
        logger.info("Fila de sincronização parada")

    def enqueue(self, name: str, factory: Callable[[], Awaitable[Any]], **context) -> SyncTask:
        """Enfileira sem bloquear; a execução fica com os workers"""
        task = SyncTask(name=name, factory=factory, context=context)
        self._queue.put_nowait(task)
        logger.debug(f"Tarefa enfileirada: {name}", context=context)
        return task

    async def join(self):
        """Aguarda todas as tarefas enfileiradas"""
        await self._queue.join()

    async def _worker(self, index: int):
        while True:
            task = await self._queue.get()
            try:
                await self._execute(task)
            finally:
                self._queue.task_done()

    async def _execute(self, task: SyncTask) -> bool:
        last_error: Optional[BaseException] = None

        for attempt in range(self.max_retries + 1):
            task.attempts = attempt + 1
            try:
                with metrics.time_sync_task(task.name):
                    await task.factory()
                self.completed += 1
                logger.debug(f"Tarefa concluída: {task.name}", context={'attempts': task.attempts})
                return True
            except asyncio.CancelledError:
                raise
            except Exception as e:
                last_error = e
                logger.warning(
                    f"Falha na tarefa {task.name}: {e}",
                    context={'attempt': task.attempts, **task.context}
                )
                if attempt < self.max_retries and self.retry_delay > 0:
                    await asyncio.sleep(self.retry_delay)

        await self._give_up(task, last_error)
        return False

    async def _give_up(self, task: SyncTask, cause: Optional[BaseException]):
        task.error = SyncException(task.name, task.attempts, cause)
        self._failed.append(task)
        if len(self._failed) > self._max_failed:
            self._failed.pop(0)

        metrics.inc_sync_failures(task.name)
        logger.error(str(task.error), context=task.context)

        if self.event_bus is not None:
            await self.event_bus.publish(Event(
                type=EventType.SYNC_FAILED,
                data={'task': task.name, 'error': task.error, **task.context},
                source='sync_queue'
            ))
