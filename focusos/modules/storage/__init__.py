# -*- coding: utf-8 -*-
"""Gateways de persistência."""
from focusos.core.exceptions import ConfigurationException

from .gateway import PersistenceGateway
from .memory_store import InMemoryGateway
from .sqlite_store import SQLiteGateway
from .supabase_store import SupabaseGateway


def create_gateway(config) -> PersistenceGateway:
    """Escolhe o gateway por FOCUSOS_STORAGE."""
    backend = config.get('FOCUSOS_STORAGE', 'memory')
    if backend == 'memory':
        return InMemoryGateway()
    if backend == 'sqlite':
        return SQLiteGateway(config.db_path)
    if backend == 'supabase':
        url = config.get('SUPABASE_URL')
        key = config.get('SUPABASE_ANON_KEY')
        if not url or not key:
            raise ConfigurationException(
                "FOCUSOS_STORAGE=supabase exige SUPABASE_URL e SUPABASE_ANON_KEY",
                details={'backend': backend}
            )
        return SupabaseGateway(url, key, timeout_seconds=float(config.get('SUPABASE_TIMEOUT', 10.0)))
    raise ConfigurationException(f"Backend de armazenamento desconhecido: {backend}")


__all__ = [
    'PersistenceGateway', 'InMemoryGateway', 'SQLiteGateway', 'SupabaseGateway', 'create_gateway',
]
