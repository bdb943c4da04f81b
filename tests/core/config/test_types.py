from __future__ import annotations

import copy

import pytest

from strata_config.core.config.errors import InvalidMergeOptionsError, InvalidSchemaError
from strata_config.core.config.types import (
    MISSING,
    ArrayPolicy,
    MergeOptions,
    MergeStrategy,
    ValidationRule,
    schema_from_mapping,
)


def test_merge_options_defaults() -> None:
    options = MergeOptions()
    assert options.strategy is MergeStrategy.DEEP
    assert options.array_policy is ArrayPolicy.REPLACE
    assert options.skip_keys == frozenset()
    assert options.only_keys is None
    assert options.custom_mergers == {}


def test_merge_options_normalizes_strings_and_iterables() -> None:
    options = MergeOptions(strategy="shallow", array_policy="unique", skip_keys=["a", "a"], only_keys=("b",))
    assert options.strategy is MergeStrategy.SHALLOW
    assert options.array_policy is ArrayPolicy.UNIQUE
    assert options.skip_keys == frozenset({"a"})
    assert options.only_keys == frozenset({"b"})


@pytest.mark.parametrize("kwargs", [{"strategy": "append"}, {"array_policy": "merge"}])
def test_merge_options_rejects_unknown_enums(kwargs) -> None:
    with pytest.raises(InvalidMergeOptionsError):
        MergeOptions(**kwargs)


def test_merge_options_rejects_bare_string_key_sets() -> None:
    with pytest.raises(InvalidMergeOptionsError):
        MergeOptions(skip_keys="abc")


def test_missing_sentinel_is_falsy_and_survives_copy() -> None:
    assert not MISSING
    assert copy.deepcopy(MISSING) is MISSING
    assert repr(MISSING) == "MISSING"


def test_validation_rule_rejects_unknown_type() -> None:
    with pytest.raises(InvalidSchemaError):
        ValidationRule(type="integer")


def test_validation_rule_rejects_non_rule_children() -> None:
    with pytest.raises(InvalidSchemaError):
        ValidationRule(children={"port": {"type": "number"}})


def test_validation_rule_rejects_non_callable_validator() -> None:
    with pytest.raises(InvalidSchemaError):
        ValidationRule(validator="not callable")


def test_schema_from_mapping_builds_recursive_rules() -> None:
    schema = schema_from_mapping(
        {
            "database": {
                "type": "object",
                "children": {
                    "port": {"type": "number", "required": True},
                    "host": {"default": "localhost"},
                },
            }
        }
    )
    database = schema["database"]
    assert database.type == "object"
    assert database.children["port"] == ValidationRule(type="number", required=True)
    assert database.children["host"].default == "localhost"
    assert database.children["port"].default is MISSING


def test_schema_from_mapping_rejects_unknown_fields() -> None:
    with pytest.raises(InvalidSchemaError):
        schema_from_mapping({"port": {"type": "number", "validator": "x"}})
