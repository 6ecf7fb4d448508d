# -*- coding: utf-8 -*-
"""
Sync Module - Fila de sincronização com tentativas
"""

from .sync_queue import SyncQueue, SyncTask

__all__ = ['SyncQueue', 'SyncTask']
