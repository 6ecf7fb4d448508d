# -*- coding: utf-8 -*-
"""
Logger - Logging Estruturado do FocusOS
Logging com contexto e formatação consistente

Autor: FocusOS Team
Versão: 1.0.0
"""

import json
import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional


PLAIN_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s'

_RESERVED_ATTRS = {
    'name', 'msg', 'args', 'created', 'filename', 'funcName', 'levelname',
    'levelno', 'lineno', 'module', 'msecs', 'message', 'pathname', 'process',
    'processName', 'relativeCreated', 'thread', 'threadName', 'taskName',
    'exc_info', 'exc_text', 'stack_info', 'context',
}


class StructuredFormatter(logging.Formatter):
    """Formatter que produz uma linha JSON por registro"""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }

        if getattr(record, 'context', None):
            log_data['context'] = record.context

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = value

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


class ColoredFormatter(logging.Formatter):
    """Formatter colorido para terminal"""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
        'RESET': '\033[0m',
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        reset = self.COLORS['RESET']
        timestamp = datetime.fromtimestamp(record.created).strftime('%H:%M:%S')

        context_str = ""
        if getattr(record, 'context', None):
            context_str = f" | {json.dumps(record.context, ensure_ascii=False, default=str)}"

        formatted = (
            f"{color}[{timestamp}] {record.levelname:8s}{reset} | "
            f"{record.name} | {record.getMessage()}{context_str}"
        )

        if record.exc_info:
            formatted += f"\n{self.formatException(record.exc_info)}"

        return formatted


class ContextFormatter(logging.Formatter):
    """Formatter simples que acrescenta o contexto ao final da linha"""

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)
        context = getattr(record, 'context', None)
        if context:
            formatted += f" | {json.dumps(context, ensure_ascii=False, default=str)}"
        return formatted


def _resolve_level(level: Optional[int]) -> int:
    if level is not None:
        return level
    level_str = (os.getenv('FOCUSOS_LOG_LEVEL') or os.getenv('LOG_LEVEL') or 'INFO').upper()
    return getattr(logging, level_str, logging.INFO)


def _console_handler(level: int, colored: bool = True) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    if colored and sys.stdout.isatty():
        handler.setFormatter(ColoredFormatter())
    else:
        handler.setFormatter(ContextFormatter(PLAIN_FORMAT, datefmt='%H:%M:%S'))
    return handler


def _file_handler(log_file: Path, level: int, structured: bool) -> logging.Handler:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file, encoding='utf-8')
    handler.setLevel(level)
    if structured:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(ContextFormatter(PLAIN_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
    return handler


class FocusLogger:
    """
    Logger do FocusOS com contexto

    Cada chamada aceita um dicionário ``context`` que é anexado ao registro
    e exibido depois da mensagem (ou como campo no formato JSON).
    """

    def __init__(
        self,
        name: str,
        level: int = logging.INFO,
        log_file: Optional[Path] = None,
        structured: bool = False,
        colored: bool = True
    ):
        self.name = name
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)

        # Evita handlers duplicados quando o mesmo logger é recriado
        self.logger.handlers.clear()
        self.logger.addHandler(_console_handler(level, colored))
        self.logger.propagate = False

        if log_file:
            self.logger.addHandler(_file_handler(Path(log_file), level, structured))

    def _log_with_context(
        self,
        level: int,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        exc_info: bool = False,
        **kwargs
    ):
        extra = {'context': context or {}}
        extra.update(kwargs)
        self.logger.log(level, message, extra=extra, exc_info=exc_info)

    def debug(self, message: str, context: Optional[Dict[str, Any]] = None, **kwargs):
        self._log_with_context(logging.DEBUG, message, context, **kwargs)

    def info(self, message: str, context: Optional[Dict[str, Any]] = None, **kwargs):
        self._log_with_context(logging.INFO, message, context, **kwargs)

    def warning(self, message: str, context: Optional[Dict[str, Any]] = None, **kwargs):
        self._log_with_context(logging.WARNING, message, context, **kwargs)

    def error(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        exc_info: bool = False,
        **kwargs
    ):
        self._log_with_context(logging.ERROR, message, context, exc_info=exc_info, **kwargs)

    def critical(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        exc_info: bool = False,
        **kwargs
    ):
        self._log_with_context(logging.CRITICAL, message, context, exc_info=exc_info, **kwargs)


def get_logger(
    name: str,
    level: Optional[int] = None,
    log_file: Optional[Path] = None,
    structured: bool = False
) -> FocusLogger:
    """
    Cria logger configurado

    Args:
        name: Nome do logger (geralmente __name__)
        level: Nível de log (default: FOCUSOS_LOG_LEVEL ou INFO)
        log_file: Arquivo para logs (opcional)
        structured: Se deve usar formato JSON no arquivo
    """
    return FocusLogger(name, _resolve_level(level), log_file, structured)


def setup_logging(
    level: Optional[int] = None,
    log_file: Optional[Path] = None,
    structured: bool = False
):
    """
    Configura o root logger para aplicações que embutem o FocusOS

    Args:
        level: Nível de log
        log_file: Arquivo para logs
        structured: Formato JSON no arquivo
    """
    level = _resolve_level(level)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(_console_handler(level))

    if log_file:
        root_logger.addHandler(_file_handler(Path(log_file), level, structured))
