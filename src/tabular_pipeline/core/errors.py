"""
Tabular Pipeline — Canonical Error Structures (v1)

Este módulo define o padrão canônico de erros reportados ao chamador.
Erros fazem parte do contrato operacional do pipeline, devendo ser:

- explícitos
- serializáveis
- rastreáveis
- acionáveis (carregam a coluna/valor ofensivo)

Nenhuma decisão implícita é permitida: toda exceção tipada é convertida
em um `ErrorPayload` com código estável.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from tabular_pipeline.core.exceptions import (
    AmbiguousPivotError,
    ColumnTypeError,
    DateParseError,
    DegenerateRangeError,
    DuplicateColumn,
    EmptyColumnError,
    InvalidStrategy,
    LoadError,
    PipelineConfigError,
    SchemaError,
    TabularException,
    UnknownColumn,
)


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ErrorPayload:
    """
    Payload canônico de erro do Tabular Pipeline.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico (coluna, valor, linha)
    - hint: ação sugerida ao operador
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Estrutura
SCHEMA_ERROR = "SCHEMA_ERROR"
UNKNOWN_COLUMN = "UNKNOWN_COLUMN"
DUPLICATE_COLUMN = "DUPLICATE_COLUMN"
COLUMN_TYPE_ERROR = "COLUMN_TYPE_ERROR"

# Transformações
INVALID_STRATEGY = "INVALID_STRATEGY"
EMPTY_COLUMN = "EMPTY_COLUMN"
DEGENERATE_RANGE = "DEGENERATE_RANGE"
DATE_PARSE_ERROR = "DATE_PARSE_ERROR"
AMBIGUOUS_PIVOT = "AMBIGUOUS_PIVOT"

# Colaboradores / Engine
LOAD_ERROR = "LOAD_ERROR"
PIPELINE_CONFIGURATION_ERROR = "PIPELINE_CONFIGURATION_ERROR"
ENGINE_EXECUTION_ERROR = "ENGINE_EXECUTION_ERROR"
ENGINE_CONFIGURATION_ERROR = "ENGINE_CONFIGURATION_ERROR"


_CODES = (
    (SchemaError, SCHEMA_ERROR),
    (UnknownColumn, UNKNOWN_COLUMN),
    (DuplicateColumn, DUPLICATE_COLUMN),
    (ColumnTypeError, COLUMN_TYPE_ERROR),
    (InvalidStrategy, INVALID_STRATEGY),
    (EmptyColumnError, EMPTY_COLUMN),
    (DegenerateRangeError, DEGENERATE_RANGE),
    (DateParseError, DATE_PARSE_ERROR),
    (AmbiguousPivotError, AMBIGUOUS_PIVOT),
    (LoadError, LOAD_ERROR),
    (PipelineConfigError, PIPELINE_CONFIGURATION_ERROR),
)


def error_code_for(exc: BaseException) -> str:
    for cls, code in _CODES:
        if isinstance(exc, cls):
            return code
    return ENGINE_EXECUTION_ERROR


def exception_to_payload(exc: BaseException) -> ErrorPayload:
    """Converte exceções em ErrorPayload (serializável, acionável).

    Regras:
    - TabularException: já vem com message/details/hint.
    - Outras exceções: encapsular como ENGINE_EXECUTION_ERROR sem expor stack trace.
    """
    if isinstance(exc, TabularException):
        return ErrorPayload(
            type=error_code_for(exc),
            message=exc.message or "Erro de execução",
            details=dict(exc.details or {}),
            hint=exc.hint,
        )

    return ErrorPayload(
        type=ENGINE_EXECUTION_ERROR,
        message=str(exc) or "Erro inesperado durante execução",
        details={"exception_class": exc.__class__.__name__},
        hint="Verifique o log de eventos do RunContext para diagnosticar a falha.",
    )


def engine_configuration_error(
    *,
    message: str = "Configuração inválida para execução do pipeline",
    details: Optional[Dict[str, Any]] = None,
    hint: str = "Revise a configuração do run/steps e declare explicitamente as opções necessárias antes de reexecutar.",
) -> ErrorPayload:
    return ErrorPayload(
        type=ENGINE_CONFIGURATION_ERROR,
        message=message,
        details=details or {},
        hint=hint,
    )
