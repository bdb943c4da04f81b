# src/strata_config/core/config/types.py
"""
Tipos canônicos da camada de configuração do Strata Config.

Este módulo define as estruturas e enums que padronizam a comunicação
entre descoberta de arquivos, parsers, engine de merge, engine de
validação e loader.

Componentes principais:
    - MISSING          → marcador de "ausente" (distinto de `None` explícito)
    - MergeStrategy    → enum de estratégias de merge (deep, shallow, replace)
    - ArrayPolicy      → enum de políticas de combinação de listas
    - MergeOptions     → política imutável de merge
    - ValidationRule   → regra declarativa e recursiva por chave
    - ValidationResult → resultado imutável da validação
    - ConfigFormat     → formatos de arquivo suportados
    - ConfigFileInfo   → descritor de arquivo descoberto
    - ConfigTemplate   → bloco condicional aplicado sobre a configuração
    - ConfigResult     → configuração resolvida e sua procedência

Princípios fundamentais:
    - Tipos são imutáveis (frozen) e não contêm lógica de execução
    - Enums possuem valores textuais canônicos
    - Strings são aceitas nas fronteiras e normalizadas para enums

Invariantes:
    - Um ConfigDocument é sempre um `dict` em forma de árvore
      (sem referências cíclicas)
    - `MISSING` nunca aparece em documentos parseados

Limites explícitos:
    - Não executa merge nem validação
    - Não realiza I/O
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import (
    Any,
    Callable,
    Dict,
    FrozenSet,
    Iterable,
    List,
    Mapping,
    Optional,
    Tuple,
    Type,
    TypeVar,
    Union,
)

from .errors import InvalidMergeOptionsError, InvalidSchemaError


# Documento de configuração já decodificado (qualquer formato de origem).
ConfigDocument = Dict[str, Any]

Merger = Callable[[Any, Any], Any]
Validator = Callable[[Any], Union[bool, str]]
Transformer = Callable[[Any], Any]

_E = TypeVar("_E", bound=Enum)


class _MissingType(Enum):
    MISSING = "MISSING"

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


# Marcador de valor ausente. Um merge nunca rebaixa um valor existente
# para ausente, e uma regra sem default usa MISSING.
MISSING = _MissingType.MISSING


class MergeStrategy(str, Enum):
    """
    Estratégias de merge entre dois documentos.

    Estratégias definidas:
        - DEEP: merge recursivo por chave (padrão)
        - SHALLOW: sobrescrita apenas do primeiro nível
        - REPLACE: o documento de origem substitui o alvo por inteiro
    """
    DEEP = "deep"
    SHALLOW = "shallow"
    REPLACE = "replace"


class ArrayPolicy(str, Enum):
    """
    Políticas de combinação quando alvo e origem possuem listas na mesma chave.

    Políticas definidas:
        - REPLACE: a lista de origem substitui a do alvo
        - CONCAT: elementos do alvo seguidos dos da origem (duplicatas mantidas)
        - UNIQUE: concatenação sem duplicatas, preservando a primeira ocorrência
    """
    REPLACE = "replace"
    CONCAT = "concat"
    UNIQUE = "unique"


class ConfigFormat(str, Enum):
    """Formatos de arquivo de configuração suportados pelos parsers padrão."""
    JSON = "json"
    JSON5 = "json5"
    YAML = "yaml"
    TOML = "toml"
    ENV = "env"


class WatchEventType(str, Enum):
    """Tipos de evento emitidos por um watcher de arquivos."""
    ADD = "add"
    CHANGE = "change"
    UNLINK = "unlink"


def _coerce_enum(enum_cls: Type[_E], value: Any, field_name: str) -> _E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise InvalidMergeOptionsError(
            f"{field_name} inválido: {value!r} (esperado um de: {allowed})"
        ) from None


def _coerce_key_set(value: Iterable[str], field_name: str) -> FrozenSet[str]:
    if isinstance(value, str):
        raise InvalidMergeOptionsError(
            f"{field_name} deve ser uma coleção de chaves, recebido string: {value!r}"
        )
    return frozenset(value)


@dataclass(frozen=True)
class MergeOptions:
    """
    Política imutável de merge.

    Campos:
        - strategy: estratégia de merge (deep, shallow, replace)
        - array_policy: combinação de listas (replace, concat, unique)
        - custom_mergers: função `(alvo, origem) -> valor` por nome de chave
        - skip_keys: chaves que nunca são sobrescritas pela origem
        - only_keys: se definido, apenas estas chaves da origem participam

    Decisões arquiteturais:
        - Strings são aceitas para os enums e normalizadas em `__post_init__`
        - Qualquer iterável é aceito para os conjuntos de chaves
        - `skip_keys`/`only_keys` são avaliados antes dos mergers customizados
        - Os filtros de chaves valem em todos os níveis, pois as opções são
          propagadas sem alteração aos dicionários aninhados

    Raises:
        InvalidMergeOptionsError: Para estratégia ou política desconhecida.
    """
    strategy: MergeStrategy = MergeStrategy.DEEP
    array_policy: ArrayPolicy = ArrayPolicy.REPLACE
    custom_mergers: Mapping[str, Merger] = field(default_factory=dict)
    skip_keys: FrozenSet[str] = frozenset()
    only_keys: Optional[FrozenSet[str]] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "strategy", _coerce_enum(MergeStrategy, self.strategy, "strategy"))
        object.__setattr__(
            self, "array_policy", _coerce_enum(ArrayPolicy, self.array_policy, "array_policy")
        )
        object.__setattr__(self, "custom_mergers", dict(self.custom_mergers or {}))
        object.__setattr__(self, "skip_keys", _coerce_key_set(self.skip_keys or (), "skip_keys"))
        if self.only_keys is not None:
            object.__setattr__(self, "only_keys", _coerce_key_set(self.only_keys, "only_keys"))


RULE_TYPES = frozenset({"string", "number", "boolean", "object", "array"})

_RULE_MAPPING_KEYS = frozenset({"type", "required", "default", "children"})


@dataclass(frozen=True)
class ValidationRule:
    """
    Regra declarativa de validação para uma chave.

    Campos:
        - type: tipo esperado (string, number, boolean, object, array)
        - required: a chave deve existir e não ser `None`
        - default: valor usado quando a chave está ausente ou inválida
        - validator: função `valor -> True | mensagem de erro`
        - transform: função aplicada ao valor antes das checagens
        - children: schema aninhado para valores do tipo object

    Invariantes:
        - `type`, quando definido, pertence a RULE_TYPES
        - `children` contém apenas instâncias de ValidationRule

    Raises:
        InvalidSchemaError: Se a regra for estruturalmente inválida.
    """
    type: Optional[str] = None
    required: bool = False
    default: Any = MISSING
    validator: Optional[Validator] = None
    transform: Optional[Transformer] = None
    children: Optional[Mapping[str, "ValidationRule"]] = None

    def __post_init__(self) -> None:
        if self.type is not None and self.type not in RULE_TYPES:
            raise InvalidSchemaError(
                f"Tipo de regra inválido: {self.type!r} (esperado um de: {sorted(RULE_TYPES)})"
            )
        if self.validator is not None and not callable(self.validator):
            raise InvalidSchemaError("validator deve ser chamável")
        if self.transform is not None and not callable(self.transform):
            raise InvalidSchemaError("transform deve ser chamável")
        if self.children is not None:
            if not isinstance(self.children, Mapping):
                raise InvalidSchemaError(
                    f"children deve ser um mapeamento, recebido: {type(self.children).__name__}"
                )
            for name, child in self.children.items():
                if not isinstance(child, ValidationRule):
                    raise InvalidSchemaError(
                        f"children.{name} deve ser ValidationRule, recebido: {type(child).__name__}"
                    )
            object.__setattr__(self, "children", dict(self.children))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ValidationRule":
        """Constrói uma regra a partir de um mapeamento declarativo (ex.: YAML)."""
        if not isinstance(data, Mapping):
            raise InvalidSchemaError(
                f"Regra deve ser um mapeamento, recebido: {type(data).__name__}"
            )
        unknown = set(data) - _RULE_MAPPING_KEYS
        if unknown:
            raise InvalidSchemaError(f"Campos de regra desconhecidos: {sorted(unknown)}")

        children = data.get("children")
        return cls(
            type=data.get("type"),
            required=bool(data.get("required", False)),
            default=data.get("default", MISSING),
            children=schema_from_mapping(children) if children is not None else None,
        )


def schema_from_mapping(data: Mapping[str, Any]) -> Dict[str, ValidationRule]:
    """Converte um schema declarativo (`{chave: {type, required, ...}}`) em regras."""
    if not isinstance(data, Mapping):
        raise InvalidSchemaError(
            f"Schema deve ser um mapeamento, recebido: {type(data).__name__}"
        )
    return {key: ValidationRule.from_mapping(rule) for key, rule in data.items()}


@dataclass(frozen=True)
class ValidationResult:
    """Resultado imutável da validação de um documento contra um schema."""
    is_valid: bool
    errors: List[str]
    validated: ConfigDocument


@dataclass(frozen=True)
class ConfigFileInfo:
    """
    Descritor de um arquivo de configuração descoberto.

    Campos:
        - path: caminho absoluto do arquivo
        - format: formato lógico (yaml cobre .yaml e .yml)
        - ext: extensão sem ponto, usada na ordem de prioridade
        - is_base: arquivo base (`{nome}.config.{ext}`)
        - env: ambiente do arquivo (`{nome}.config.{env}.{ext}`)
        - mtime: data de modificação no momento da descoberta
    """
    path: Path
    format: ConfigFormat
    ext: str
    is_base: bool
    env: Optional[str] = None
    mtime: Optional[datetime] = None


@dataclass(frozen=True)
class ConfigTemplate:
    """
    Bloco de configuração aplicado apenas quando `condition(config)` é verdadeiro.
    """
    name: str
    condition: Callable[[ConfigDocument], bool]
    body: ConfigDocument
    description: Optional[str] = None


@dataclass(frozen=True)
class ConfigResult:
    """Configuração resolvida, arquivos de origem, ambiente e hash canônico."""
    config: ConfigDocument
    files: Tuple[ConfigFileInfo, ...]
    env: Optional[str]
    config_hash: str
