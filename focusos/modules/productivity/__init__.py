# -*- coding: utf-8 -*-
"""
Productivity Module - Composição do FocusOS
Liga motor de sessões, estatísticas, sincronização e hábitos

Autor: FocusOS Team
Versão: 1.0.0
"""

from .productivity_module import ProductivityModule

__all__ = ['ProductivityModule']
