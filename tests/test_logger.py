# -*- coding: utf-8 -*-
"""Configuração de logging para aplicações que embutem o FocusOS."""
import json
import logging
from contextlib import contextmanager

from focusos.core.logger import get_logger, setup_logging


@contextmanager
def isolated_root():
    """Restaura handlers e nível do root logger ao sair."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    try:
        yield root
    finally:
        for handler in root.handlers:
            if handler not in handlers:
                handler.close()
        root.handlers[:] = handlers
        root.setLevel(level)


def read_lines(path):
    return [json.loads(line) for line in path.read_text(encoding='utf-8').splitlines()]


def test_setup_logging_writes_structured_file(tmp_path):
    log_file = tmp_path / 'logs' / 'focusos.log'

    with isolated_root() as root:
        setup_logging(level=logging.DEBUG, log_file=log_file, structured=True)
        logging.getLogger('host_app').info(
            "Sessão sincronizada", extra={'context': {'session_id': 's-1'}}
        )
        logging.getLogger('host_app').debug("Detalhe")
        level, handler_count = root.level, len(root.handlers)

    assert level == logging.DEBUG
    assert handler_count == 2
    first, second = read_lines(log_file)
    assert first['level'] == 'INFO'
    assert first['logger'] == 'host_app'
    assert first['message'] == "Sessão sincronizada"
    assert first['context'] == {'session_id': 's-1'}
    assert second['level'] == 'DEBUG'


def test_setup_logging_level_from_environment(monkeypatch):
    monkeypatch.setenv('FOCUSOS_LOG_LEVEL', 'warning')

    with isolated_root() as root:
        setup_logging()
        level, handler_count = root.level, len(root.handlers)

    assert level == logging.WARNING
    assert handler_count == 1


def test_setup_logging_plain_file(tmp_path):
    log_file = tmp_path / 'focusos.log'

    with isolated_root():
        setup_logging(level=logging.INFO, log_file=log_file)
        logging.getLogger('host_app').info("Olá", extra={'context': {'n': 1}})

    line = log_file.read_text(encoding='utf-8').strip()
    assert '| INFO     | host_app | Olá | {"n": 1}' in line


def test_focus_logger_context_in_json_file(tmp_path):
    log_file = tmp_path / 'module.log'
    focus_logger = get_logger('focusos.tests.module', level=logging.INFO,
                              log_file=log_file, structured=True)
    try:
        focus_logger.info("Alarme agendado", context={'delay_seconds': 1.5})
        focus_logger.debug("Ignorado")
    finally:
        for handler in focus_logger.logger.handlers:
            handler.close()
        focus_logger.logger.handlers.clear()

    [record] = read_lines(log_file)
    assert record['message'] == "Alarme agendado"
    assert record['context'] == {'delay_seconds': 1.5}
