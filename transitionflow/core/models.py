"""
Modelos de dados e exceções para TransitionFlow
"""

from enum import Enum
from typing import Optional


# Exceções customizadas
class TransitionFlowError(Exception):
    """Exceção base para erros do TransitionFlow"""
    pass


class DocumentLoadError(TransitionFlowError):
    """Erro ao carregar documentos de transição"""
    pass


class ExportError(TransitionFlowError):
    """Erro na exportação de resultados"""
    pass


class ValidationError(TransitionFlowError):
    """Erro de validação"""
    pass


class BlockType(str, Enum):
    """Tipos de bloco de condição"""
    CONDITION_CHECK = "condition-check"
    CUSTOM_CODE = "custom-code"

    @classmethod
    def from_value(cls, value) -> Optional['BlockType']:
        """Cria tipo a partir de string; retorna None se desconhecido"""
        try:
            return cls(value)
        except (ValueError, TypeError):
            return None


class WriteType(str, Enum):
    """Classificação best-effort do valor produzido por um storeAs"""
    STRING = "string"
    NUMBER = "number"
    ARRAY = "array"
    GETTER = "getter"
    UNKNOWN = "unknown"


class ReferenceKind(str, Enum):
    """Origem sintática de uma referência de campo"""
    DATA = "data"  # ctx.data.x, ctx.x, testData.x
    VARIABLE = "variable"  # {{x}}


class Verdict(str, Enum):
    """Classificação de uma leitura pelo validador"""
    VALID = "valid"
    FROM_STORED = "fromStored"
    WARNING = "warning"
    MISSING = "missing"
