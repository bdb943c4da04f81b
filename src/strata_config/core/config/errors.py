# src/strata_config/core/config/errors.py
"""
Exceções canônicas da camada de configuração do Strata Config.

Este módulo define a hierarquia oficial de exceções utilizadas durante
a descoberta, o parsing, o merge e a validação de configuração.

As exceções aqui definidas representam **falhas estruturais explícitas**
ou **erros de programação** (ex.: schema malformado). Falhas de validação
de valores não são exceções no engine de validação: elas são reportadas
como dados (`ValidationResult`) e só são convertidas em erro pelo loader.

Princípios fundamentais:
    - Exceções são tipadas e semânticas
    - Erros estruturais são tratados como falhas fatais
    - Erros de mergers, transformers e validators customizados
      propagam sem encapsulamento

Invariantes:
    - Todas as exceções de configuração herdam de `ConfigError`

Limites explícitos:
    - Não realiza fallback ou recovery
    - Não registra logs
"""

from __future__ import annotations

from typing import List, Optional, Sequence


class ConfigError(Exception):
    """
    Exceção base para erros relacionados à configuração.

    Todas as exceções levantadas durante descoberta, parsing, merge,
    validação fail-fast e observação de arquivos herdam desta classe,
    permitindo captura genérica de erros de configuração.
    """


class DefaultsNotFoundError(ConfigError):
    """
    Exceção levantada quando o arquivo de configuração base (defaults)
    não é encontrado no caminho especificado.

    Decisões arquiteturais:
        - O arquivo de defaults é obrigatório em `load_config`
        - Não há tentativa de inferir ou criar defaults automaticamente
    """


class UnsupportedConfigFormatError(ConfigError):
    """
    Exceção levantada quando nenhum parser registrado aceita o arquivo.

    Formatos suportados:
        - JSON (.json), JSON5 (.json5)
        - YAML (.yaml, .yml)
        - TOML (.toml)
        - dotenv (.env)

    Limites explícitos:
        - Não tenta inferir formato por conteúdo
    """


class InvalidConfigRootTypeError(ConfigError):
    """
    Exceção levantada quando o conteúdo raiz de um documento parseado
    não é um dicionário (`dict`).

    Invariantes:
        - Todo ConfigDocument é um mapa chave-valor no nível raiz
    """


class ConfigParseError(ConfigError):
    """
    Falha de decodificação específica de formato.

    Carrega um código estável (ex.: ``YAML_PARSE_ERROR``) e o caminho do
    arquivo de origem, quando conhecido.
    """

    def __init__(self, message: str, code: str, file_path: Optional[str] = None):
        super().__init__(message)
        self.code = code
        self.file_path = file_path


class ConfigDirectoryError(ConfigError):
    """Diretório de configuração inexistente ou que não é um diretório."""


class InvalidMergeOptionsError(ConfigError):
    """Estratégia de merge ou política de listas desconhecida."""


class InvalidSchemaError(ConfigError):
    """
    Erro de programação na definição de um schema de validação.

    Diferente de uma violação de regra (reportada como dado), um schema
    malformado interrompe a validação imediatamente.
    """


class ConfigValidationError(ConfigError):
    """
    Exceção levantada pelo loader quando a configuração resolvida não
    passa na validação contra o schema configurado (caminho fail-fast).

    A mensagem agrega todas as entradas de `errors`, separadas por vírgula.
    """

    def __init__(self, errors: Sequence[str]):
        self.errors: List[str] = list(errors)
        super().__init__(
            f"Falha na validação da configuração: {', '.join(self.errors)}"
        )


class WatcherUnavailableError(ConfigError):
    """Observação de arquivos solicitada sem um watcher injetado no loader."""
