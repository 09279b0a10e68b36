"""
Modelo de dados do Tabular Pipeline.

Componentes:
    - MISSING / Missing → sentinela explícita de ausência
    - ColumnType        → tipo semântico declarado de uma coluna
    - Column            → coluna tipada e imutável
    - Dataset           → sequência ordenada de colunas de mesmo comprimento
"""

from .column import Column
from .dataset import Dataset
from .missing import MISSING, Missing, is_missing
from .types import ColumnType

__all__ = ["Column", "ColumnType", "Dataset", "MISSING", "Missing", "is_missing"]
