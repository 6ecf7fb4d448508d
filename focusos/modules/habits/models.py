# -*- coding: utf-8 -*-
"""Modelo de hábito."""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from focusos.modules.session.models import new_id


@dataclass
class Habit:
    name: str
    icon: str = ""
    user_id: Optional[str] = None
    id: str = field(default_factory=new_id)

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'user_id': self.user_id, 'name': self.name, 'icon': self.icon}

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Habit":
        return cls(id=str(d['id']), user_id=d.get('user_id'), name=d['name'], icon=d.get('icon') or "")
