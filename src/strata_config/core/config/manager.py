# src/strata_config/core/config/manager.py
"""
Armazenamento em memória de uma configuração resolvida.

O `ConfigManager` mantém um documento de configuração (tipicamente o
`ConfigResult.config` produzido pelo loader) e oferece acesso por caminho
pontilhado, escrita, merge incremental e notificação de mudanças.

Decisões arquiteturais:
    - Leituras e eventos entregam cópias profundas; o estado interno nunca
      é exposto por referência
    - `merge` reutiliza o engine de merge com as opções do manager
    - Notificações são síncronas e entregues fora do lock interno

Invariantes:
    - `reset` restaura exatamente o documento inicial
    - Uma escrita sempre gera um evento, mesmo sem mudança de valor

Limites explícitos:
    - Não lê arquivos nem consulta fontes remotas
    - Não valida o documento (ver `validation.validate`)
"""

from __future__ import annotations

import threading
from copy import deepcopy
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Mapping, Optional

from .merge import merge
from .types import MISSING, ConfigDocument, MergeOptions


class ConfigSource(str, Enum):
    """Origem de uma mudança notificada pelo `ConfigManager`."""
    INITIAL = "initial"
    SET = "set"
    MERGE = "merge"


@dataclass(frozen=True)
class ConfigChangeEvent:
    """
    Mudança aplicada ao documento.

    `key` é o caminho pontilhado alterado, ou ``"*"`` quando o documento
    inteiro foi substituído (merge e reset).
    """
    key: str
    old_value: Any
    new_value: Any
    source: ConfigSource


ChangeHandler = Callable[[ConfigChangeEvent], None]

WHOLE_DOCUMENT = "*"


class ConfigManager:
    """
    Documento de configuração mutável com acesso por caminho.

    Args:
        initial: Documento inicial (copiado); também é o alvo de `reset`.
        separator: Separador dos caminhos (padrão ``"."``).
        merge_options: Política usada por `merge`.
    """

    def __init__(
        self,
        initial: Optional[Mapping[str, Any]] = None,
        *,
        separator: str = ".",
        merge_options: Optional[MergeOptions] = None,
    ):
        if not separator:
            raise ValueError("separator não pode ser vazio")
        self._initial: ConfigDocument = deepcopy(dict(initial or {}))
        self._config: ConfigDocument = deepcopy(self._initial)
        self._separator = separator
        self._merge_options = merge_options
        self._lock = threading.RLock()
        self._handlers: List[ChangeHandler] = []

    @property
    def separator(self) -> str:
        return self._separator

    def _parts(self, key: str) -> List[str]:
        parts = key.split(self._separator)
        if not key or any(part == "" for part in parts):
            raise ValueError(f"Caminho de configuração inválido: {key!r}")
        return parts

    def _lookup(self, key: str) -> Any:
        current: Any = self._config
        for part in self._parts(key):
            if not isinstance(current, Mapping) or part not in current:
                return MISSING
            current = current[part]
        return current

    def get(self, key: str, default: Any = None) -> Any:
        """Valor em `key` (ex.: ``database.port``), ou `default` se ausente."""
        with self._lock:
            value = self._lookup(key)
            return default if value is MISSING else deepcopy(value)

    def has(self, key: str) -> bool:
        with self._lock:
            return self._lookup(key) is not MISSING

    def set(self, key: str, value: Any, source: ConfigSource = ConfigSource.SET) -> None:
        """
        Grava `value` em `key`, criando os níveis intermediários.

        Um nível intermediário que não seja dicionário é substituído.
        """
        parts = self._parts(key)
        with self._lock:
            old = self._lookup(key)
            current = self._config
            for part in parts[:-1]:
                if not isinstance(current.get(part), dict):
                    current[part] = {}
                current = current[part]
            current[parts[-1]] = deepcopy(value)
            event = ConfigChangeEvent(
                key=key,
                old_value=None if old is MISSING else deepcopy(old),
                new_value=deepcopy(value),
                source=ConfigSource(source),
            )
        self._notify(event)

    def merge(self, partial: Mapping[str, Any], source: ConfigSource = ConfigSource.MERGE) -> None:
        """Aplica `partial` sobre o documento com as opções de merge do manager."""
        with self._lock:
            old = self._config
            self._config = merge(old, partial, self._merge_options)
            event = ConfigChangeEvent(
                key=WHOLE_DOCUMENT,
                old_value=old,
                new_value=deepcopy(self._config),
                source=ConfigSource(source),
            )
        self._notify(event)

    def get_all(self) -> ConfigDocument:
        with self._lock:
            return deepcopy(self._config)

    def reset(self) -> None:
        """Restaura o documento inicial."""
        with self._lock:
            old = self._config
            self._config = deepcopy(self._initial)
            event = ConfigChangeEvent(
                key=WHOLE_DOCUMENT,
                old_value=old,
                new_value=deepcopy(self._config),
                source=ConfigSource.INITIAL,
            )
        self._notify(event)

    def on_change(self, handler: ChangeHandler) -> Callable[[], None]:
        """Registra `handler`; retorna a função de cancelamento."""
        with self._lock:
            self._handlers.append(handler)

        def unsubscribe() -> None:
            with self._lock:
                if handler in self._handlers:
                    self._handlers.remove(handler)

        return unsubscribe

    def _notify(self, event: ConfigChangeEvent) -> None:
        with self._lock:
            handlers = list(self._handlers)
        for handler in handlers:
            handler(event)
