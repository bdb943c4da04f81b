# src/strata_config/core/config/discovery.py
"""
Descoberta de arquivos de configuração e resolução de prioridade.

Convenção de nomes:
    - base:     ``{nome}.config.{ext}``
    - ambiente: ``{nome}.config.{env}.{ext}``

Ordem de participação no merge:
    - todos os arquivos base antes dos arquivos de ambiente
    - dentro de cada grupo, da menor para a maior precedência de extensão:
      env < yml < yaml < toml < json5 < json

Como o merge é acumulado da esquerda para a direita, arquivos posteriores
prevalecem sobre os anteriores.

Limites explícitos:
    - Não lê nem parseia o conteúdo dos arquivos
    - Não observa o diretório (responsabilidade do watcher injetado)
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

from .errors import ConfigDirectoryError
from .types import ConfigFileInfo, ConfigFormat


logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# Extensões da menor para a maior precedência.
PRIORITY_ORDER = ("env", "yml", "yaml", "toml", "json5", "json")

DEFAULT_EXTENSIONS = ("json", "json5", "toml", "yaml", "yml", "env")

_EXTENSION_FORMATS = {
    "json": ConfigFormat.JSON,
    "json5": ConfigFormat.JSON5,
    "yaml": ConfigFormat.YAML,
    "yml": ConfigFormat.YAML,
    "toml": ConfigFormat.TOML,
    "env": ConfigFormat.ENV,
}

_CONFIG_NAME_PATTERN = re.compile(r"^(?P<base>.+)\.config(?:\.(?P<env>[^.]+))?$")


@dataclass(frozen=True)
class ParsedFileName:
    """Componentes de um nome de arquivo de configuração."""
    base_name: str
    env: Optional[str]
    format: Optional[ConfigFormat]


def _extension(path: PathLike) -> str:
    return Path(path).suffix[1:].lower()


def get_config_format(path: PathLike) -> Optional[ConfigFormat]:
    """Formato lógico de um arquivo a partir da extensão, ou `None`."""
    return _EXTENSION_FORMATS.get(_extension(path))


def get_extension_variants(fmt: Union[ConfigFormat, str]) -> List[str]:
    """Extensões aceitas para um formato (ex.: yaml → yaml, yml)."""
    fmt = ConfigFormat(fmt)
    return [ext for ext, mapped in _EXTENSION_FORMATS.items() if mapped is fmt]


def parse_config_file_name(path: PathLike) -> ParsedFileName:
    """
    Extrai nome base e ambiente de ``{nome}.config[.{env}].{ext}``.

    Nomes fora da convenção retornam o stem como nome base e nenhum ambiente.
    """
    stem = Path(path).stem
    fmt = get_config_format(path)
    match = _CONFIG_NAME_PATTERN.match(stem)
    if match:
        return ParsedFileName(base_name=match.group("base"), env=match.group("env"), format=fmt)
    return ParsedFileName(base_name=stem, env=None, format=fmt)


def is_relevant_config_file(path: PathLike, name: str) -> bool:
    """Indica se `path` segue a convenção de nomes da configuração `name`."""
    match = _CONFIG_NAME_PATTERN.match(Path(path).stem)
    return bool(match) and match.group("base") == name and get_config_format(path) is not None


def generate_config_paths(
    config_dir: PathLike,
    name: str,
    env: Optional[str] = None,
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
) -> List[Path]:
    """Caminhos candidatos (base quando `env` é None, senão de ambiente)."""
    root = Path(config_dir).resolve()
    middle = f".{env}" if env else ""
    return [root / f"{name}.config{middle}.{ext}" for ext in extensions]


def _priority(info: ConfigFileInfo) -> int:
    try:
        return PRIORITY_ORDER.index(info.ext)
    except ValueError:
        return len(PRIORITY_ORDER)


def _existing(paths: Iterable[Path], *, env: Optional[str]) -> List[ConfigFileInfo]:
    found: List[ConfigFileInfo] = []
    for path in paths:
        if not path.is_file():
            continue
        fmt = get_config_format(path)
        if fmt is None:
            continue
        found.append(
            ConfigFileInfo(
                path=path,
                format=fmt,
                ext=_extension(path),
                is_base=env is None,
                env=env,
                mtime=datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc),
            )
        )
    return found


def find_config_files(
    name: str,
    config_dir: PathLike,
    env: Optional[str] = None,
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
) -> List[ConfigFileInfo]:
    """
    Descobre os arquivos existentes da configuração `name`.

    Política de resolução:
        - Arquivos base são sempre procurados
        - Arquivos de ambiente só são procurados quando `env` é informado
        - A lista retornada já está na ordem de merge (base antes de
          ambiente; dentro do grupo, menor precedência primeiro)

    Args:
        name (str): Nome lógico da configuração (ex.: ``app``).
        config_dir (PathLike): Diretório onde os arquivos são procurados.
        env (Optional[str]): Ambiente alvo (ex.: ``production``).
        extensions (Sequence[str]): Extensões consideradas.

    Returns:
        List[ConfigFileInfo]: Arquivos descobertos, em ordem de merge.
    """
    base = _existing(generate_config_paths(config_dir, name, None, extensions), env=None)
    env_files: List[ConfigFileInfo] = []
    if env:
        env_files = _existing(generate_config_paths(config_dir, name, env, extensions), env=env)

    files = sorted(base, key=_priority) + sorted(env_files, key=_priority)
    logger.debug("Arquivos de configuração descobertos para %s (env=%s): %s",
                 name, env, [str(f.path) for f in files])
    return files


def validate_config_dir(config_dir: PathLike) -> Path:
    """Garante que `config_dir` existe e é um diretório; retorna o caminho resolvido."""
    path = Path(config_dir)
    if not path.exists():
        raise ConfigDirectoryError(f"Diretório de configuração não existe: {path}")
    if not path.is_dir():
        raise ConfigDirectoryError(f"Caminho de configuração não é um diretório: {path}")
    return path.resolve()


def resolve_config_path(file_name: PathLike, base_path: Optional[PathLike] = None) -> Path:
    """Resolve ``~/``, caminhos absolutos e caminhos relativos a `base_path` (cwd)."""
    path = Path(file_name).expanduser()
    if path.is_absolute():
        return path
    return (Path(base_path) if base_path is not None else Path.cwd()).joinpath(path).resolve()
