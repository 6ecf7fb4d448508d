# -*- coding: utf-8 -*-
"""
Métricas Prometheus para observabilidade
Contadores e histogramas de sessões, distrações e sincronização.

Para expor: se usar um app ASGI, adicione:
  from prometheus_client import make_asgi_app
  app.mount("/metrics", make_asgi_app())
"""

import time
from contextlib import contextmanager

from prometheus_client import Counter, Histogram

sessions_completed = Counter(
    "focusos_sessions_completed_total",
    "Total de sessões de foco encerradas",
)
distractions_logged = Counter(
    "focusos_distractions_logged_total",
    "Total de distrações registradas",
)
goals_reached = Counter(
    "focusos_goals_reached_total",
    "Sessões que atingiram a duração planejada",
)
sync_failures = Counter(
    "focusos_sync_failures_total",
    "Tarefas de sincronização que esgotaram as tentativas",
    ["operation"],
)
focus_scores = Histogram(
    "focusos_focus_score",
    "Pontuação de foco das sessões encerradas",
    buckets=(10, 20, 30, 40, 50, 60, 70, 80, 90, 100),
)
sync_latency = Histogram(
    "focusos_sync_latency_seconds",
    "Tempo de execução das tarefas de sincronização",
    ["operation"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)


def record_session_completed(focus_score: float) -> None:
    """Registra uma sessão encerrada e sua pontuação."""
    sessions_completed.inc()
    focus_scores.observe(focus_score)


def inc_distractions_logged() -> None:
    distractions_logged.inc()


def inc_goals_reached() -> None:
    goals_reached.inc()


def inc_sync_failures(operation: str) -> None:
    sync_failures.labels(operation=operation).inc()


@contextmanager
def time_sync_task(operation: str):
    """
    Context manager para medir uma tarefa de sincronização.
    Uso: with time_sync_task('save_session'): ...
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        sync_latency.labels(operation=operation).observe(time.perf_counter() - start)
