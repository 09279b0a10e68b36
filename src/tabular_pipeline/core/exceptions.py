"""
Tabular Pipeline — Canonical Exceptions (v1)

Este módulo define as exceções tipadas levantadas pelas operações sobre
Dataset e pelos Steps do pipeline.

Objetivo:
- Permitir que operações levantem falhas semânticas tipadas
- Facilitar o mapeamento determinístico para ErrorPayload
- Evitar ValueError/RuntimeError genéricos nas fronteiras de transformação

Regras:
- Toda exceção carrega a coluna/valor ofensivo em `details`.
- `details` deve conter apenas dados serializáveis.
- Nenhuma exceção é engolida: quem captura converte em StepResult FAILED.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(eq=False)
class TabularException(Exception):
    """Base class para exceções internas do Tabular Pipeline.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Não embedar stack trace em payloads de erro
    - Mensagem deve ser curta e humana
    """

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Estrutura do Dataset
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class SchemaError(TabularException):
    """Dataset mal formado: comprimentos divergentes, nomes repetidos ou valor fora do tipo."""


@dataclass(eq=False)
class UnknownColumn(TabularException):
    """Coluna referenciada não existe no dataset."""


@dataclass(eq=False)
class DuplicateColumn(TabularException):
    """Coluna a ser criada (ou projetada) já existe."""


@dataclass(eq=False)
class ColumnTypeError(TabularException):
    """Operação incompatível com o tipo declarado da coluna."""


# ---------------------------------------------------------------------------
# Transformações
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class InvalidStrategy(TabularException):
    """Estratégia de imputação desconhecida ou incompatível com o tipo da coluna."""


@dataclass(eq=False)
class EmptyColumnError(TabularException):
    """Coluna sem nenhum valor observado: estatística indefinida."""


@dataclass(eq=False)
class DegenerateRangeError(TabularException):
    """Amplitude (ou desvio) nulo impede a normalização."""


@dataclass(eq=False)
class DateParseError(TabularException):
    """Valor não pôde ser interpretado no formato de data informado."""


@dataclass(eq=False)
class AmbiguousPivotError(TabularException):
    """Par (grupo, chave) repetido impede o pivot long → wide."""


# ---------------------------------------------------------------------------
# Colaboradores / Configuração
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class LoadError(TabularException):
    """Fonte de dados não pôde ser convertida em Dataset bem formado."""


@dataclass(eq=False)
class PipelineConfigError(TabularException):
    """Declaração de pipeline inválida (op desconhecida, parâmetro ausente)."""
