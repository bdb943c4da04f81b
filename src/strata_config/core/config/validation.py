# src/strata_config/core/config/validation.py
"""
Engine de validação de configuração contra schemas declarativos.

Cada chave do schema é processada na ordem do schema:
    1. required → ausente ou `None` gera "{path} is required" e usa o default
    2. ausente com default → default (confiável, sem checagens)
    3. ausente sem default → permanece ausente
    4. transform → aplicado antes das checagens
    5. type → divergência gera "{path} should be {tipo}, got {real}" e usa o default
    6. validator → retorno diferente de `True` gera erro e usa o default
    7. children → validação recursiva com erros prefixados pelo caminho pai

Violações de regra são reportadas como dados (`ValidationResult`), nunca
como exceções. Apenas schemas malformados levantam `InvalidSchemaError`.

Chaves do documento que não aparecem no schema são copiadas sem
alteração: o schema não é uma whitelist.
"""

from __future__ import annotations

from copy import deepcopy
from typing import Any, List, Mapping

from .errors import InvalidSchemaError
from .types import MISSING, ConfigDocument, ValidationResult, ValidationRule


def type_name(value: Any) -> str:
    """Nome do tipo de um valor no vocabulário das regras de validação."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    return type(value).__name__


def _validate_value(value: Any, rule: ValidationRule, path: str, errors: List[str]) -> Any:
    if rule.required and (value is MISSING or value is None):
        errors.append(f"{path} is required")
        return deepcopy(rule.default)

    if value is MISSING:
        return deepcopy(rule.default)

    if rule.transform is not None:
        value = rule.transform(value)

    if rule.type is not None:
        actual = type_name(value)
        if actual != rule.type:
            errors.append(f"{path} should be {rule.type}, got {actual}")
            return deepcopy(rule.default)

    if rule.validator is not None:
        outcome = rule.validator(value)
        if outcome is not True:
            errors.append(outcome if isinstance(outcome, str) else f"{path} validation failed")
            return deepcopy(rule.default)

    if rule.children is not None and isinstance(value, Mapping):
        nested = validate(value, rule.children)
        errors.extend(f"{path}.{err}" for err in nested.errors)
        return nested.validated

    return value


def validate(config: Mapping[str, Any], schema: Mapping[str, ValidationRule]) -> ValidationResult:
    """
    Valida um documento contra um schema e preenche defaults.

    Args:
        config (Mapping[str, Any]): Documento a validar (não é mutado).
        schema (Mapping[str, ValidationRule]): Regras por chave.

    Returns:
        ValidationResult: `is_valid`, erros na ordem do schema e o
        documento validado (defaults aplicados, valores transformados).

    Raises:
        InvalidSchemaError: Se o schema não for um mapeamento de ValidationRule.
        Exception: Erros levantados por transforms ou validators propagam.
    """
    if not isinstance(config, Mapping):
        raise InvalidSchemaError(
            f"Documento a validar deve ser um mapeamento, recebido: {type(config).__name__}"
        )
    if not isinstance(schema, Mapping):
        raise InvalidSchemaError(
            f"Schema deve ser um mapeamento, recebido: {type(schema).__name__}"
        )

    errors: List[str] = []
    validated: ConfigDocument = deepcopy(dict(config))

    for key, rule in schema.items():
        if not isinstance(rule, ValidationRule):
            raise InvalidSchemaError(
                f"Regra para '{key}' deve ser ValidationRule, recebido: {type(rule).__name__}"
            )

        outcome = _validate_value(validated.get(key, MISSING), rule, str(key), errors)
        if outcome is MISSING:
            validated.pop(key, None)
        else:
            validated[key] = outcome

    return ValidationResult(is_valid=not errors, errors=errors, validated=validated)
