"""Step canônico: transform.select_columns (v1).

Projeta o Dataset nas colunas nomeadas, na ordem em que foram pedidas,
preservando a ordem das linhas.

Falhas:
- UnknownColumn: algum nome não existe no Dataset
- DuplicateColumn: o mesmo nome foi pedido mais de uma vez
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from tabular_pipeline.core.dataset import Dataset
from tabular_pipeline.core.exceptions import DuplicateColumn
from tabular_pipeline.core.pipeline.context import RunContext
from tabular_pipeline.steps.base import DatasetTransformStep


def select_columns(dataset: Dataset, names: Sequence[str]) -> Dataset:
    seen = set()
    for name in names:
        if name in seen:
            raise DuplicateColumn(
                f"Column selected more than once: {name}",
                details={"column": name},
            )
        seen.add(name)
    dataset.require(names)
    return dataset.select(list(names))


@dataclass
class TransformSelectColumnsStep(DatasetTransformStep):
    id: str = "transform.select_columns"
    names: List[str] = field(default_factory=list)

    def apply(self, dataset: Dataset, ctx: RunContext) -> Dataset:
        return select_columns(dataset, self.names)

    def params(self) -> Dict[str, Any]:
        return {"names": list(self.names)}

    def impact(self, before: Dataset, after: Dataset) -> Dict[str, Any]:
        return {"columns_dropped": [n for n in before.names if n not in after]}
