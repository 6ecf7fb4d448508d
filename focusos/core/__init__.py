# -*- coding: utf-8 -*-
"""
FocusOS Core Package
Logger, configuração, exceções, eventos e métricas
"""

from .config import Config
from .event_bus import Event, EventBus, EventType
from .exceptions import FocusOSException
from .logger import get_logger, setup_logging

__all__ = ['Config', 'Event', 'EventBus', 'EventType', 'FocusOSException', 'get_logger', 'setup_logging']
