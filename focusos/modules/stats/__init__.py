# -*- coding: utf-8 -*-
"""
Stats Module - Estatísticas diárias e relatórios
"""

from .aggregator import StatsAggregator, fold
from .daily_stat import DailyStatistic
from .reports import StatsReports

__all__ = ['StatsAggregator', 'fold', 'DailyStatistic', 'StatsReports']
