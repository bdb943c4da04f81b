# src/strata_config/core/config/environments.py
"""
Resolução de ambiente e mapas de configuração por ambiente.

Um mapa de ambientes declara um documento ``base`` e sobreposições por
nome de ambiente (``development``, ``production``, ...). A configuração
efetiva é o merge da base com a sobreposição do ambiente corrente.
"""

from __future__ import annotations

import os
from typing import Any, Mapping, Optional

from .merge import merge
from .types import ConfigDocument, MergeOptions


DEFAULT_ENV_KEY = "APP_ENV"
DEFAULT_ENVIRONMENT = "development"


def resolve_environment(
    env: Optional[str] = None,
    *,
    env_key: str = DEFAULT_ENV_KEY,
    fallback: Optional[str] = None,
) -> Optional[str]:
    """
    Determina o ambiente corrente.

    Ordem: argumento explícito, variável de ambiente `env_key`, `fallback`.
    Strings vazias são tratadas como ausentes.
    """
    if env:
        return env
    from_process = os.environ.get(env_key)
    if from_process:
        return from_process
    return fallback


def load_env_config(
    configs: Mapping[str, Mapping[str, Any]],
    env: Optional[str] = None,
    *,
    env_key: str = DEFAULT_ENV_KEY,
    options: Optional[MergeOptions] = None,
) -> ConfigDocument:
    """
    Resolve um mapa de ambientes para o ambiente corrente.

    Args:
        configs: Mapa com a chave ``base`` e sobreposições por ambiente.
        env: Ambiente explícito; senão `env_key`, senão ``development``.
        env_key: Variável de ambiente consultada.
        options: Política de merge da sobreposição sobre a base.

    Returns:
        ConfigDocument: Base com a sobreposição do ambiente aplicada.
    """
    current = resolve_environment(env, env_key=env_key, fallback=DEFAULT_ENVIRONMENT)
    base = configs.get("base") or {}
    overlay = configs.get(current) or {}
    return merge(base, overlay, options)
