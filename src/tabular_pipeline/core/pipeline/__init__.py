"""
# Pipeline Core — Tabular Pipeline

Este pacote define os **contratos canônicos** que compõem um pipeline.

Um pipeline é uma sequência (DAG) explícita de Steps, onde:
- cada Step declara identidade, tipo semântico e dependências
- a execução é coordenada exclusivamente pelo Engine
- Datasets circulam apenas via `RunContext`, cada um em sua própria chave

## Componentes

- **types**: `StepStatus`, `StepKind`, `StepResult`
- **step**: `Step` (Protocol)
- **context**: `RunContext` (artefatos, logs, warnings)
- **registry**: `StepRegistry` (unicidade de `step.id`)

## Limites Explícitos

- Não planeja nem executa pipeline
- Não contém lógica de transformação de dados
"""
