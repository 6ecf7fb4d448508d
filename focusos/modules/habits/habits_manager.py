# -*- coding: utf-8 -*-
"""Hábitos do usuário com atualização otimista."""
from typing import List, Optional

from focusos.core.event_bus import Event, EventBus, EventType
from focusos.core.exceptions import FocusOSException, ValidationException
from focusos.core.logger import get_logger

from .models import Habit

logger = get_logger(__name__)


class HabitsManager:
    """
    A lista local muda primeiro; a gravação remota vem depois. Se ela
    falhar, a lista é recarregada do armazenamento para reconciliar.
    """

    def __init__(self, gateway, user_id: Optional[str] = None, event_bus: Optional[EventBus] = None):
        self.gateway = gateway
        self.user_id = user_id
        self.event_bus = event_bus
        self.habits: List[Habit] = []
        self.is_loading = False

    async def refresh(self) -> List[Habit]:
        if not self.user_id:
            return self.habits
        self.is_loading = True
        try:
            self.habits = await self.gateway.fetch_habits(self.user_id)
        except FocusOSException as e:
            logger.error(f"Erro ao buscar hábitos: {e}")
        finally:
            self.is_loading = False
        return self.habits

    async def add_habit(self, name: str, icon: str = "") -> Habit:
        name = name.strip()
        if not name:
            raise ValidationException("name", name, "Nome do hábito não pode ser vazio")
        habit = Habit(name=name, icon=icon, user_id=self.user_id)
        self.habits.append(habit)

        try:
            await self.gateway.save_habit(habit)
        except FocusOSException as e:
            logger.error(f"Erro ao salvar hábito: {e}", context={'habit_id': habit.id})
            await self.refresh()
            return habit

        await self._publish(EventType.HABIT_ADDED, habit)
        return habit

    async def delete_habit(self, habit_id: str) -> bool:
        habit = next((h for h in self.habits if h.id == habit_id), None)
        if habit is None:
            return False
        self.habits = [h for h in self.habits if h.id != habit_id]

        try:
            await self.gateway.delete_habit(habit_id)
        except FocusOSException as e:
            logger.error(f"Erro ao apagar hábito: {e}", context={'habit_id': habit_id})
            await self.refresh()
            return False

        await self._publish(EventType.HABIT_DELETED, habit)
        return True

    def clear(self):
        self.habits = []

    async def _publish(self, event_type: EventType, habit: Habit):
        if self.event_bus is not None:
            await self.event_bus.publish(Event(type=event_type, data={'habit': habit}, source='habits'))
