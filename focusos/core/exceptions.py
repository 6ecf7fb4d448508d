# -*- coding: utf-8 -*-
"""
FocusOS Exceptions - Hierarquia de Exceções
Sistema unificado de tratamento de erros

Autor: FocusOS Team
Versão: 1.0.0
"""

from typing import Any, Dict, Optional


class FocusOSException(Exception):
    """
    Exceção base para todos os erros do FocusOS

    Attributes:
        message: Mensagem de erro
        error_code: Código de erro opcional
        details: Detalhes adicionais do erro
        module: Módulo onde o erro ocorreu
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        module: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.module = module

    def __str__(self) -> str:
        parts = [self.message]
        if self.error_code:
            parts.append(f"[{self.error_code}]")
        if self.module:
            parts.append(f"(módulo: {self.module})")
        return " ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Converte exceção para dicionário"""
        return {
            'error': self.__class__.__name__,
            'message': self.message,
            'error_code': self.error_code,
            'module': self.module,
            'details': self.details
        }


class ConfigurationException(FocusOSException):
    """Erro de configuração"""
    pass


class ValidationException(FocusOSException):
    """Erro de validação de dados"""

    def __init__(
        self,
        field: str,
        value: Any,
        message: str,
        error_code: Optional[str] = None
    ):
        super().__init__(
            message=message,
            error_code=error_code or 'VALIDATION_ERROR',
            details={'field': field, 'value': str(value)}
        )
        self.field = field
        self.value = value


class PersistenceException(FocusOSException):
    """Falha de leitura/escrita no armazenamento (local ou remoto)"""

    def __init__(
        self,
        operation: str,
        message: str,
        backend: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code='PERSISTENCE_ERROR',
            details={'operation': operation, 'backend': backend, **(details or {})},
            module='storage'
        )
        self.operation = operation
        self.backend = backend


class RecordNotFoundException(PersistenceException):
    """Registro inexistente no armazenamento"""

    def __init__(self, operation: str, key: Any, backend: Optional[str] = None):
        super().__init__(
            operation=operation,
            message=f"Registro não encontrado: {key}",
            backend=backend,
            details={'key': str(key)}
        )
        self.error_code = 'RECORD_NOT_FOUND'
        self.key = key


class AuthenticationRequiredException(FocusOSException):
    """Operação exige um usuário atual e nenhum está definido"""

    def __init__(self, operation: str):
        super().__init__(
            message=f"Nenhum usuário atual para '{operation}'",
            error_code='AUTH_REQUIRED',
            details={'operation': operation}
        )
        self.operation = operation


class SyncException(FocusOSException):
    """Tarefa de sincronização remota esgotou as tentativas"""

    def __init__(
        self,
        task_name: str,
        attempts: int,
        cause: Optional[BaseException] = None
    ):
        message = f"Sincronização '{task_name}' falhou após {attempts} tentativa(s)"
        if cause is not None:
            message += f": {cause}"
        super().__init__(
            message=message,
            error_code='SYNC_FAILED',
            details={'task': task_name, 'attempts': attempts},
            module='sync'
        )
        self.task_name = task_name
        self.attempts = attempts
        self.cause = cause
