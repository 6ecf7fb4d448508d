# -*- coding: utf-8 -*-
"""
Session Module - Sessões de foco
Máquina de estados, pontuação, ticker e alarme de fim de sessão

Autor: FocusOS Team
Versão: 1.0.0
"""

from .clock import SESSION_END_ALARM, AlarmScheduler, AsyncioAlarmScheduler, NullAlarmScheduler, Ticker
from .engine import SessionEngine, SessionState
from .models import DistractionRecord, FocusSession
from .scoring import calculate_focus_score, generate_summary, score_band, score_session

__all__ = [
    'SESSION_END_ALARM', 'AlarmScheduler', 'AsyncioAlarmScheduler', 'NullAlarmScheduler', 'Ticker',
    'SessionEngine', 'SessionState', 'DistractionRecord', 'FocusSession',
    'calculate_focus_score', 'generate_summary', 'score_band', 'score_session',
]
