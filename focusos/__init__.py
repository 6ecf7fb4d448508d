# -*- coding: utf-8 -*-
"""
FocusOS
Sessões de foco, pontuação, estatísticas diárias e hábitos
"""

from .modules.productivity import ProductivityModule

__all__ = ['ProductivityModule']
__version__ = '1.0.0'
