"""
Exceções canônicas da camada de configuração do Tabular Pipeline.

As exceções aqui definidas representam violações estruturais da
configuração, e não erros de transformação de dados.

Invariantes:
    - Todas as exceções de configuração herdam de `ConfigError`
"""


class ConfigError(Exception):
    """
    Exceção base para erros relacionados à configuração.

    Permite captura genérica de erros de configuração e distinção clara
    entre falhas estruturais e falhas de execução do pipeline.
    """


class DefaultsNotFoundError(ConfigError):
    """Arquivo de configuração base (defaults) não encontrado."""


class UnsupportedConfigFormatError(ConfigError):
    """
    Formato do arquivo de configuração não suportado.

    Formatos suportados (v1): YAML (.yaml, .yml) e JSON (.json).
    """


class InvalidConfigRootTypeError(ConfigError):
    """Conteúdo raiz da configuração não é um dicionário."""


class ConfigTypeConflictError(ConfigError):
    """
    Conflito de tipos durante o deep-merge.

    Exemplo de conflito:
        - base:     {"engine": {"fail_fast": true}}
        - override: {"engine": "DEBUG"}

    Nenhum merge parcial é produzido em caso de conflito.
    """
