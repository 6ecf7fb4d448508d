# -*- coding: utf-8 -*-
"""
Config - Gerenciador de Configurações
Carrega e valida configurações de ambiente, .env e config.json

Autor: FocusOS Team
Versão: 1.0.0
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import ConfigurationException
from .logger import get_logger

logger = get_logger(__name__)


class ConfigSchema(BaseModel):
    """Schema de validação para configurações"""
    FOCUSOS_LOG_LEVEL: str = Field(default="INFO")

    FOCUSOS_STORAGE: Literal['memory', 'sqlite', 'supabase'] = Field(default='memory')
    FOCUSOS_DB_PATH: Optional[str] = None

    SUPABASE_URL: Optional[str] = None
    SUPABASE_ANON_KEY: Optional[str] = None
    SUPABASE_TIMEOUT: float = Field(default=10.0, gt=0)

    FOCUSOS_TICK_INTERVAL: float = Field(default=1.0, gt=0)

    FOCUSOS_SYNC_WORKERS: int = Field(default=2, ge=1, le=16)
    FOCUSOS_SYNC_MAX_RETRIES: int = Field(default=3, ge=0)
    FOCUSOS_SYNC_RETRY_DELAY: float = Field(default=2.0, ge=0)

    FOCUSOS_STATS_DATE_MODE: Literal['fold_time', 'session_start'] = Field(default='fold_time')
    FOCUSOS_SERIALIZE_FOLDS: bool = Field(default=True)

    @field_validator('FOCUSOS_LOG_LEVEL')
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'Log level deve ser um de: {", ".join(valid_levels)}')
        return v.upper()

    @field_validator('SUPABASE_URL')
    @classmethod
    def validate_supabase_url(cls, v):
        if v is None:
            return v
        if not v.startswith(('http://', 'https://')):
            raise ValueError('SUPABASE_URL deve começar com http:// ou https://')
        return v.rstrip('/')


class Config:
    """
    Gerenciador de configurações centralizado e validado

    Carrega de:
    1. Variáveis de ambiente
    2. Arquivo .env
    3. config.json

    Não existe instância global: quem monta o módulo cria um Config e o
    repassa aos componentes.
    """

    def __init__(
        self,
        config_path: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
        base_dir: Optional[Path] = None,
        validate: bool = True
    ):
        self._config: Dict[str, Any] = {}
        self._env_loaded = False
        self.base_dir = Path(base_dir) if base_dir else Path.cwd()

        self._load_env()
        self._load_json_config(config_path)
        if overrides:
            self._config.update(overrides)

        if validate:
            self._validate_config()

    def _load_env(self):
        """Carrega variáveis do .env"""
        env_path = self.base_dir / '.env'

        if env_path.exists():
            load_dotenv(env_path)
            self._env_loaded = True
            logger.debug(f".env carregado de {env_path}")
        else:
            logger.debug(f"Arquivo .env não encontrado em {env_path}")

    def _load_json_config(self, config_path: Optional[str] = None):
        """Carrega config.json"""
        json_path = Path(config_path) if config_path else self.base_dir / 'config.json'

        if not json_path.exists():
            if config_path:
                raise ConfigurationException(
                    f"Arquivo de configuração não encontrado: {json_path}",
                    details={'path': str(json_path)}
                )
            return

        try:
            with open(json_path, 'r', encoding='utf-8') as f:
                self._config.update(json.load(f))
            logger.debug("config.json carregado", context={'path': str(json_path)})
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationException(
                f"Erro ao carregar {json_path}: {e}",
                details={'path': str(json_path)}
            ) from e

    def _schema_data(self) -> Dict[str, Any]:
        data = {}
        for key in ConfigSchema.model_fields:
            value = self.get(key)
            if value is not None:
                data[key] = value
        return data

    def _validate_config(self):
        """Valida configurações usando o schema"""
        try:
            schema = ConfigSchema(**self._schema_data())
        except ValidationError as e:
            raise ConfigurationException(
                f"Erro de validação de configuração: {e}",
                details={'errors': e.errors(include_url=False)}
            ) from e

        self._config.update(schema.model_dump(exclude_none=True))
        logger.debug("Configurações validadas")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Obtém valor de configuração

        Prioridade:
        1. Variável de ambiente
        2. config.json / overrides
        3. Valor default
        """
        env_value = os.getenv(key)
        if env_value is not None:
            return self._parse_value(env_value)

        if key in self._config:
            return self._config[key]

        return default

    def _parse_value(self, value: str) -> Any:
        """Converte string para tipo apropriado"""
        if value.lower() in ('true', 'yes'):
            return True
        if value.lower() in ('false', 'no'):
            return False

        try:
            if '.' in value:
                return float(value)
            return int(value)
        except ValueError:
            pass

        return value

    def set(self, key: str, value: Any, persist: bool = False):
        """
        Define valor de configuração

        Args:
            key: Chave
            value: Valor
            persist: Se True, salva no config.json
        """
        self._config[key] = value

        if persist:
            self._save_json_config()

    def _save_json_config(self):
        """Salva config.json"""
        json_path = self.base_dir / 'config.json'
        ConfigSchema(**self._schema_data())

        try:
            with open(json_path, 'w', encoding='utf-8') as f:
                json.dump(self._config, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise ConfigurationException(
                f"Erro ao salvar config.json: {e}",
                details={'path': str(json_path)}
            ) from e
        logger.debug("config.json salvo")

    @property
    def db_path(self) -> Path:
        """Caminho do arquivo SQLite"""
        configured = self.get('FOCUSOS_DB_PATH')
        if configured:
            return Path(configured)
        return self.base_dir / 'data' / 'focusos.db'

    def get_all(self) -> Dict[str, Any]:
        """Retorna todas as configurações"""
        return self._config.copy()

    def __getitem__(self, key: str) -> Any:
        return self.get(key)

    def __setitem__(self, key: str, value: Any):
        self.set(key, value)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None
