# -*- coding: utf-8 -*-
"""
Habits Module - Hábitos do usuário
"""

from .habits_manager import HabitsManager
from .models import Habit

__all__ = ['HabitsManager', 'Habit']
