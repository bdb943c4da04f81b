from __future__ import annotations

from pathlib import Path

import pytest

from strata_config.core.config.discovery import (
    find_config_files,
    generate_config_paths,
    get_config_format,
    get_extension_variants,
    is_relevant_config_file,
    parse_config_file_name,
    resolve_config_path,
    validate_config_dir,
)
from strata_config.core.config.errors import ConfigDirectoryError
from strata_config.core.config.types import ConfigFormat


@pytest.mark.parametrize(
    "name, expected",
    [
        ("app.config.json", ConfigFormat.JSON),
        ("app.config.JSON5", ConfigFormat.JSON5),
        ("app.config.yml", ConfigFormat.YAML),
        ("app.config.yaml", ConfigFormat.YAML),
        ("app.config.toml", ConfigFormat.TOML),
        ("app.config.env", ConfigFormat.ENV),
        ("app.config.ts", None),
        ("app.config.py", None),
    ],
)
def test_get_config_format(name, expected) -> None:
    assert get_config_format(name) == expected


def test_extension_variants() -> None:
    assert get_extension_variants(ConfigFormat.YAML) == ["yaml", "yml"]
    assert get_extension_variants("json") == ["json"]


def test_parse_config_file_name() -> None:
    parsed = parse_config_file_name("/etc/app/app.config.production.yaml")
    assert parsed.base_name == "app"
    assert parsed.env == "production"
    assert parsed.format is ConfigFormat.YAML

    base = parse_config_file_name("app.config.json")
    assert (base.base_name, base.env) == ("app", None)

    plain = parse_config_file_name("settings.json")
    assert (plain.base_name, plain.env) == ("settings", None)


def test_is_relevant_config_file() -> None:
    assert is_relevant_config_file("/x/app.config.yaml", "app")
    assert is_relevant_config_file("/x/app.config.staging.toml", "app")
    assert not is_relevant_config_file("/x/other.config.yaml", "app")
    assert not is_relevant_config_file("/x/app.yaml", "app")
    assert not is_relevant_config_file("/x/app.config.ts", "app")


def test_generate_config_paths(tmp_path: Path) -> None:
    base = generate_config_paths(tmp_path, "app", None, ["yaml", "json"])
    assert [p.name for p in base] == ["app.config.yaml", "app.config.json"]
    env = generate_config_paths(tmp_path, "app", "test", ["env"])
    assert [p.name for p in env] == ["app.config.test.env"]
    assert all(p.is_absolute() for p in base + env)


def test_find_config_files_orders_base_before_env_and_by_priority(config_dir: Path) -> None:
    (config_dir / "app.config.production.json").write_text("{}", encoding="utf-8")
    (config_dir / "app.config.env").write_text("A=1\n", encoding="utf-8")

    files = find_config_files("app", config_dir, "production")

    assert [f.path.name for f in files] == [
        "app.config.env",
        "app.config.yaml",
        "app.config.json",
        "app.config.production.yaml",
        "app.config.production.json",
    ]
    assert [f.is_base for f in files] == [True, True, True, False, False]
    assert files[-1].env == "production"
    assert files[0].format is ConfigFormat.ENV
    assert all(f.mtime is not None for f in files)


def test_find_config_files_without_env_ignores_env_files(config_dir: Path) -> None:
    files = find_config_files("app", config_dir)
    assert [f.path.name for f in files] == ["app.config.yaml", "app.config.json"]


def test_find_config_files_respects_extensions(config_dir: Path) -> None:
    files = find_config_files("app", config_dir, "production", extensions=["yaml"])
    assert [f.path.name for f in files] == ["app.config.yaml", "app.config.production.yaml"]


def test_find_config_files_empty_dir(tmp_path: Path) -> None:
    assert find_config_files("app", tmp_path, "production") == []


def test_validate_config_dir(tmp_path: Path) -> None:
    assert validate_config_dir(tmp_path) == tmp_path.resolve()
    with pytest.raises(ConfigDirectoryError):
        validate_config_dir(tmp_path / "missing")
    file_path = tmp_path / "file.txt"
    file_path.write_text("x", encoding="utf-8")
    with pytest.raises(ConfigDirectoryError):
        validate_config_dir(file_path)


def test_resolve_config_path(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    assert resolve_config_path("~/app.config.yaml") == tmp_path / "app.config.yaml"
    assert resolve_config_path(tmp_path / "a.yaml") == tmp_path / "a.yaml"
    assert resolve_config_path("conf/a.yaml", tmp_path) == (tmp_path / "conf" / "a.yaml").resolve()
