# -*- coding: utf-8 -*-
"""Pontuação de foco e resumos de sessão."""
from .models import FocusSession

BASE_SCORE = 100.0
PENALTY_PER_DISTRACTION = 5.0
# Piso em horas; evita divisão por valores próximos de zero
MIN_EFFECTIVE_HOURS = 0.1


def calculate_focus_score(duration: float, distraction_count: int) -> float:
    """
    Pontuação 0-100 a partir da taxa de distrações por hora.

    Entradas inválidas (duração ou contagem negativas) ainda produzem um
    valor dentro de [0, 100].
    """
    effective_hours = max(duration / 3600.0, MIN_EFFECTIVE_HOURS)
    distraction_rate = distraction_count / effective_hours
    penalty = distraction_rate * PENALTY_PER_DISTRACTION
    return max(0.0, min(BASE_SCORE, BASE_SCORE - penalty))


def score_session(session: FocusSession) -> float:
    return calculate_focus_score(session.duration(), session.distraction_count)


def generate_summary(session: FocusSession) -> str:
    minutes = int(session.duration() / 60)
    return (
        f"You stayed focused for {minutes} minutes "
        f"with {session.distraction_count} distractions."
    )


def score_band(score: float) -> str:
    """Faixa qualitativa: high (> 80), medium (> 50) ou low."""
    if score > 80:
        return 'high'
    if score > 50:
        return 'medium'
    return 'low'
