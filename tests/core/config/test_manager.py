# tests/core/config/test_manager.py
"""
Testes do `ConfigManager`.

Os testes asseguram que:
- caminhos pontilhados leem e gravam em qualquer profundidade
- merge e reset substituem o documento e notificam com a chave ``"*"``
- leituras e eventos nunca expõem o estado interno
"""

from __future__ import annotations

import pytest

from strata_config.core.config.manager import ConfigChangeEvent, ConfigManager, ConfigSource
from strata_config.core.config.types import MergeOptions


@pytest.fixture
def manager() -> ConfigManager:
    return ConfigManager(
        {"server": {"host": "localhost", "port": 8080}, "features": ["auth"], "debug": None}
    )


def test_get_by_dotted_path(manager: ConfigManager) -> None:
    assert manager.get("server.port") == 8080
    assert manager.get("server") == {"host": "localhost", "port": 8080}
    assert manager.get("server.missing") is None
    assert manager.get("server.port.value", "n/a") == "n/a"
    assert manager.get("database.host", "db.local") == "db.local"


def test_explicit_none_is_present(manager: ConfigManager) -> None:
    assert manager.has("debug") is True
    assert manager.get("debug", "fallback") is None
    assert manager.has("server.port") is True
    assert manager.has("server.timeout") is False


def test_custom_separator() -> None:
    manager = ConfigManager({"db": {"pool.size": 5, "host": "a"}}, separator="/")
    assert manager.separator == "/"
    assert manager.get("db/pool.size") == 5
    manager.set("db/host", "b")
    assert manager.get_all() == {"db": {"pool.size": 5, "host": "b"}}


def test_invalid_paths_raise(manager: ConfigManager) -> None:
    with pytest.raises(ValueError):
        manager.get("")
    with pytest.raises(ValueError):
        manager.set("server..port", 1)
    with pytest.raises(ValueError):
        ConfigManager(separator="")


def test_set_creates_intermediate_levels_and_notifies(manager: ConfigManager) -> None:
    events = []
    manager.on_change(events.append)

    manager.set("database.pool.size", 10)
    manager.set("server.port", 9090)

    assert manager.get("database") == {"pool": {"size": 10}}
    assert events == [
        ConfigChangeEvent(key="database.pool.size", old_value=None, new_value=10, source=ConfigSource.SET),
        ConfigChangeEvent(key="server.port", old_value=8080, new_value=9090, source=ConfigSource.SET),
    ]


def test_set_replaces_non_mapping_intermediate(manager: ConfigManager) -> None:
    manager.set("features.primary", "auth")
    assert manager.get("features") == {"primary": "auth"}


def test_merge_uses_merge_options_and_notifies() -> None:
    manager = ConfigManager({"features": ["auth"]}, merge_options=MergeOptions(array_policy="unique"))
    events = []
    manager.on_change(events.append)

    manager.merge({"features": ["auth", "api"], "server": {"port": 80}})

    assert manager.get_all() == {"features": ["auth", "api"], "server": {"port": 80}}
    assert len(events) == 1
    assert events[0].key == "*"
    assert events[0].source is ConfigSource.MERGE
    assert events[0].old_value == {"features": ["auth"]}
    assert events[0].new_value == manager.get_all()


def test_reset_restores_initial_document(manager: ConfigManager) -> None:
    events = []
    manager.set("server.port", 1)
    manager.merge({"extra": True})
    manager.on_change(events.append)

    manager.reset()

    assert manager.get_all() == {
        "server": {"host": "localhost", "port": 8080},
        "features": ["auth"],
        "debug": None,
    }
    assert events[0].source is ConfigSource.INITIAL
    assert events[0].old_value["extra"] is True


def test_reads_and_events_do_not_expose_internal_state(manager: ConfigManager) -> None:
    events = []
    manager.on_change(events.append)

    manager.get("features").append("leak")
    manager.get_all()["server"]["port"] = 1
    value = {"tags": ["a"]}
    manager.set("meta", value)
    value["tags"].append("leak")
    events[0].new_value["tags"].append("leak")

    assert manager.get("features") == ["auth"]
    assert manager.get("server.port") == 8080
    assert manager.get("meta") == {"tags": ["a"]}


def test_initial_document_is_copied() -> None:
    initial = {"a": {"b": 1}}
    manager = ConfigManager(initial)
    manager.set("a.b", 2)
    manager.reset()
    assert initial == {"a": {"b": 1}}
    assert manager.get("a.b") == 1


def test_unsubscribe_stops_notifications(manager: ConfigManager) -> None:
    events = []
    unsubscribe = manager.on_change(events.append)
    manager.set("debug", True)
    unsubscribe()
    unsubscribe()
    manager.set("debug", False)
    assert [e.new_value for e in events] == [True]


def test_handler_errors_propagate(manager: ConfigManager) -> None:
    def broken(event):
        raise RuntimeError("handler failed")

    manager.on_change(broken)
    with pytest.raises(RuntimeError, match="handler failed"):
        manager.set("debug", True)
    assert manager.get("debug") is True


def test_manager_over_loaded_config(config_dir) -> None:
    from strata_config.core.config.loader import ConfigLoader, LoaderOptions

    result = ConfigLoader("app", LoaderOptions(config_dir=config_dir)).get_config("production")
    manager = ConfigManager(result.config)
    assert manager.get("database.host") == "db.prod"
    assert manager.get("server.workers") == 2
