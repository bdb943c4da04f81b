# tests/conftest.py
"""
Fixtures compartilhados para testes do Strata Config.

Este módulo define fixtures reutilizáveis que fornecem:
- conteúdos YAML/JSON determinísticos semelhantes ao uso real
- um diretório de configuração populado com arquivos base e de ambiente
- um watcher falso que registra chamadas e permite disparar eventos

Decisões arquiteturais:
    - Conteúdos são fornecidos como strings para que cada teste decida
      onde e como gravá-los
    - O watcher falso implementa o contrato `FileWatcher` por duck typing
    - Nenhuma fixture depende de variáveis de ambiente do processo

Limites explícitos:
    - Não substituir testes de integração com um watcher real
    - Não conter lógica condicional complexa
"""

from pathlib import Path
from typing import List

import pytest


# =====================================================
# Config Loader fixtures
# =====================================================

@pytest.fixture
def project_like_config_defaults_yaml() -> str:
    """
    Fixture que fornece um YAML de configuração padrão (defaults) semelhante ao uso real.

    Representa o conteúdo típico de um arquivo `app.config.yaml`, servindo
    como base canônica sobre a qual variantes locais ou de ambiente são
    aplicadas via merge.

    Returns:
        str: Conteúdo YAML representando configuração padrão (defaults).
    """

    return """\
server:
  host: localhost
  port: 8080
database:
  host: db.local
  port: 5432
features:
  - auth
"""


@pytest.fixture
def project_like_config_local_yaml() -> str:
    """
    Fixture que fornece um YAML de overrides locais.

    Contém apenas as chaves sobrescritas, nunca a configuração completa.

    Returns:
        str: Conteúdo YAML representando configuração local de override.
    """

    return """\
server:
  port: 9090
features:
  - auth
  - api
"""


@pytest.fixture
def config_dir(tmp_path: Path, project_like_config_defaults_yaml: str) -> Path:
    """
    Diretório de configuração com arquivos base e de produção.

    Estrutura:
        - app.config.yaml             → defaults
        - app.config.json             → base de maior precedência
        - app.config.production.yaml  → sobreposição de produção
        - other.config.yaml           → configuração de outro nome (ignorada)
    """
    (tmp_path / "app.config.yaml").write_text(project_like_config_defaults_yaml, encoding="utf-8")
    (tmp_path / "app.config.json").write_text('{"server": {"workers": 2}}', encoding="utf-8")
    (tmp_path / "app.config.production.yaml").write_text(
        "server:\n  host: 0.0.0.0\ndatabase:\n  host: db.prod\n", encoding="utf-8"
    )
    (tmp_path / "other.config.yaml").write_text("unrelated: true\n", encoding="utf-8")
    return tmp_path


class FakeWatcher:
    """Watcher em memória que registra chamadas e entrega eventos sob demanda."""

    def __init__(self):
        self.callback = None
        self.paths: List[Path] = []
        self.stopped = False
        self.watch_calls = 0

    def watch(self, paths, callback):
        self.watch_calls += 1
        self.paths = list(paths)
        self.callback = callback
        self.stopped = False

    def add(self, paths):
        self.paths.extend(p for p in paths if p not in self.paths)

    def stop(self):
        self.stopped = True
        self.callback = None

    def watched_files(self):
        return list(self.paths)

    def emit(self, event_type: str, path) -> None:
        assert self.callback is not None, "watcher não está ativo"
        self.callback(event_type, str(path))


@pytest.fixture
def fake_watcher() -> FakeWatcher:
    return FakeWatcher()
