# src/strata_config/core/config/merge.py
"""
Engine canônico de merge de configuração.

Este módulo implementa a política de merge utilizada pelo Strata Config
para combinar documentos de configuração (base, variantes de ambiente,
templates) em um único documento resolvido.

Política de merge (estratégia `deep`, padrão):
    - chave em `skip_keys` → preservada do alvo
    - `only_keys` definido e chave fora dele → ignorada
    - valor de origem `MISSING` → ignorado
    - merger customizado para a chave → `merger(alvo, origem)`
    - list → combinação segundo `array_policy`
    - dict + dict → merge recursivo por chave
    - demais casos → sobrescrita direta pela origem

Operações derivadas:
    - conditional_merge → filtra a origem por predicado antes do merge
    - transform_merge   → transforma folhas de ambos os lados antes do merge
    - apply_template    → merge condicional de um bloco de template
    - merge_all         → dobra à esquerda de vários documentos

Princípios fundamentais:
    - O merge é determinístico e puramente funcional
    - Nenhum input é mutado; a saída é sempre uma estrutura nova
    - O merge é right-biased: a origem vence, salvo skip ou merger customizado

Invariantes:
    - Chaves presentes apenas no alvo são preservadas
    - A ordem de chaves do alvo é mantida; chaves novas seguem a ordem da origem
    - Exceções de mergers e transformers customizados propagam sem encapsulamento

Limites explícitos:
    - Não carrega arquivos de configuração
    - Não valida semântica de domínio
    - Não detecta ciclos (documentos são árvores por construção)
"""

from __future__ import annotations

from copy import deepcopy
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from .types import (
    MISSING,
    ArrayPolicy,
    ConfigDocument,
    ConfigTemplate,
    MergeOptions,
    MergeStrategy,
    Transformer,
)


_DEFAULT_OPTIONS = MergeOptions()

Predicate = Callable[[str, Any], bool]


def _is_mapping(value: Any) -> bool:
    return isinstance(value, Mapping)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _unique(items: Iterable[Any]) -> List[Any]:
    # Igualdade com o mesmo tipo: evita que True colapse com 1.
    out: List[Any] = []
    for item in items:
        if not any(type(seen) is type(item) and seen == item for seen in out):
            out.append(item)
    return out


def _combine_sequences(target: Any, source: Any, policy: ArrayPolicy) -> List[Any]:
    if policy is ArrayPolicy.CONCAT:
        return deepcopy(list(target)) + deepcopy(list(source))
    if policy is ArrayPolicy.UNIQUE:
        return deepcopy(_unique(list(target) + list(source)))
    return deepcopy(list(source))


def merge(
    target: Mapping[str, Any],
    source: Mapping[str, Any],
    options: Optional[MergeOptions] = None,
) -> ConfigDocument:
    """
    Realiza o merge de um documento de origem sobre um documento alvo.

    Esta função combina `target` com `source` segundo a política definida
    em `options`, produzindo um novo documento sem mutar nenhum dos inputs.

    Decisões arquiteturais:
        - `shallow` sobrescreve apenas o primeiro nível (valores `MISSING`
          da origem são descartados)
        - `replace` retorna uma cópia da origem, descartando o alvo
        - `deep` aplica a política por chave descrita no módulo
        - `skip_keys`/`only_keys` são avaliados antes de mergers customizados
        - Listas só são combinadas quando ambos os lados são listas

    Invariantes:
        - A estrutura retornada é sempre um novo dicionário
        - O mesmo par (target, source) sempre produz o mesmo resultado

    Args:
        target (Mapping[str, Any]): Documento base.
        source (Mapping[str, Any]): Documento cujos valores prevalecem.
        options (Optional[MergeOptions]): Política de merge (padrão: deep/replace).

    Returns:
        ConfigDocument: Novo documento resultante do merge.

    Raises:
        Exception: Qualquer erro levantado por um merger customizado,
            propagado sem encapsulamento.
    """
    opts = options or _DEFAULT_OPTIONS

    if opts.strategy is MergeStrategy.SHALLOW:
        result = deepcopy(dict(target))
        for key, value in source.items():
            if value is not MISSING:
                result[key] = deepcopy(value)
        return result

    if opts.strategy is MergeStrategy.REPLACE:
        return deepcopy(dict(source))

    result: Dict[str, Any] = deepcopy(dict(target))

    for key, source_value in source.items():
        if key in opts.skip_keys:
            continue

        if opts.only_keys is not None and key not in opts.only_keys:
            continue

        if source_value is MISSING:
            continue

        target_value = result.get(key, MISSING)

        merger = opts.custom_mergers.get(key)
        if merger is not None:
            result[key] = merger(
                None if target_value is MISSING else target_value,
                deepcopy(source_value),
            )
            continue

        # list -> política de listas
        if _is_sequence(source_value):
            if _is_sequence(target_value):
                result[key] = _combine_sequences(target_value, source_value, opts.array_policy)
            else:
                result[key] = deepcopy(list(source_value))
            continue

        # dict -> merge recursivo
        if _is_mapping(source_value) and _is_mapping(target_value):
            result[key] = merge(target_value, source_value, opts)
            continue

        # escalar ou tipos diferentes -> sobrescrita
        result[key] = deepcopy(source_value)

    return result


def merge_all(
    documents: Iterable[Mapping[str, Any]],
    options: Optional[MergeOptions] = None,
) -> ConfigDocument:
    """
    Acumula vários documentos da esquerda para a direita a partir de `{}`.

    Documentos posteriores prevalecem sobre os anteriores, o que reflete
    a ordem de prioridade produzida pela descoberta de arquivos.
    """
    result: ConfigDocument = {}
    for document in documents:
        result = merge(result, document, options)
    return result


def conditional_merge(
    target: Mapping[str, Any],
    source: Mapping[str, Any],
    predicate: Union[bool, Predicate],
    options: Optional[MergeOptions] = None,
) -> ConfigDocument:
    """
    Merge restrito às chaves de primeiro nível aceitas por `predicate`.

    `predicate` pode ser um booleano constante ou uma função
    `(chave, valor_de_origem) -> bool`. Com `False` o alvo é devolvido
    (como cópia); com `True` o merge é incondicional.
    """
    if isinstance(predicate, bool):
        return merge(target, source, options) if predicate else deepcopy(dict(target))

    filtered = {key: value for key, value in source.items() if predicate(key, value)}
    return merge(target, filtered, options)


def transform_values(
    document: Mapping[str, Any],
    transformers: Mapping[str, Transformer],
    _prefix: str = "",
) -> ConfigDocument:
    """
    Aplica transformers às folhas de um documento.

    Para cada valor que não é mapeamento, procura um transformer pelo
    caminho pontilhado completo (ex.: ``database.port``) e, em seguida,
    pelo nome simples da chave. Mapeamentos são sempre percorridos.
    """
    result: ConfigDocument = {}
    for key, value in document.items():
        path = f"{_prefix}.{key}" if _prefix else str(key)

        if _is_mapping(value):
            result[key] = transform_values(value, transformers, path)
            continue

        transformer = transformers.get(path) or transformers.get(key)
        result[key] = transformer(value) if transformer is not None else deepcopy(value)
    return result


def transform_merge(
    target: Mapping[str, Any],
    source: Mapping[str, Any],
    transformers: Mapping[str, Transformer],
    options: Optional[MergeOptions] = None,
) -> ConfigDocument:
    """Transforma as folhas de `target` e `source` e então aplica `merge`."""
    return merge(
        transform_values(target, transformers),
        transform_values(source, transformers),
        options,
    )


def apply_template(config: Mapping[str, Any], template: ConfigTemplate) -> ConfigDocument:
    """
    Aplica o corpo de um template quando sua condição é satisfeita.

    O merge usa as opções padrão (deep, listas substituídas). Quando a
    condição é falsa, uma cópia da configuração é devolvida inalterada.
    """
    if not template.condition(config):
        return deepcopy(dict(config))
    return merge(config, template.body)
