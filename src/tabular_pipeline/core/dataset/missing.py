"""
Sentinela canônica de valor ausente.

Uma célula ausente é representada por `MISSING`, um singleton distinto de
qualquer valor de domínio (zero, string vazia, False, None, NaN).

Invariantes:
    - Existe exatamente uma instância de `Missing` por processo
    - `MISSING == x` é verdadeiro apenas quando `x is MISSING`
    - A forma serializada é `{"$missing": true}` e faz round-trip
"""

from __future__ import annotations

from typing import Any, Dict

JSON_MARKER = "$missing"


class Missing:
    """Marcador explícito de ausência (singleton, hashable, falsy)."""

    _instance: "Missing | None" = None

    def __new__(cls) -> "Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self):
        return (Missing, ())

    def __copy__(self) -> "Missing":
        return self

    def __deepcopy__(self, memo: Dict[int, Any]) -> "Missing":
        return self

    def to_json(self) -> Dict[str, bool]:
        return {JSON_MARKER: True}


MISSING = Missing()


def is_missing(value: Any) -> bool:
    return value is MISSING


def is_json_missing(value: Any) -> bool:
    """Reconhece a forma serializada da sentinela."""
    return isinstance(value, dict) and value == {JSON_MARKER: True}
