# src/strata_config/core/config/parsers.py
"""
Parsers de formato e registro de parsers.

Cada parser converte o conteúdo textual de um arquivo em um ConfigDocument
(`dict` no nível raiz). Os parsers são colaboradores finos sobre bibliotecas
existentes:

    - JSON  → `json` (stdlib)
    - JSON5 → `json5`
    - YAML  → `yaml.safe_load` (PyYAML)
    - TOML  → `tomllib` (stdlib)
    - .env  → `dotenv.dotenv_values` (python-dotenv), sem interpolação

Decisões arquiteturais:
    - Não existe registro global: `default_parser_registry()` cria uma
      instância nova, que é injetada no loader
    - Parsers registrados por último têm prioridade na escolha
    - Arquivos YAML vazios são interpretados como dicionários vazios
    - Raiz diferente de dict é rejeitada com `InvalidConfigRootTypeError`

Limites explícitos:
    - Não executa código de arquivos de configuração (.py, .js, .ts)
    - Não interpola variáveis de ambiente
"""

from __future__ import annotations

import io
import json
import logging
import tomllib
from pathlib import Path
from typing import Any, Iterable, List, Optional, Protocol, Tuple, Union, runtime_checkable

import json5
import yaml  # PyYAML
from dotenv import dotenv_values

from .errors import ConfigParseError, InvalidConfigRootTypeError, UnsupportedConfigFormatError
from .types import ConfigDocument


logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@runtime_checkable
class ConfigParser(Protocol):
    """Contrato de um parser de formato."""

    extensions: Tuple[str, ...]

    def can_parse(self, path: PathLike) -> bool:
        ...

    def parse(self, content: str, path: PathLike) -> ConfigDocument:
        ...


class _SuffixParser:
    """Base para parsers selecionados pela extensão do arquivo."""

    extensions: Tuple[str, ...] = ()
    error_code = "PARSE_ERROR"
    label = ""
    decode_errors: Tuple[type, ...] = (ValueError,)

    def can_parse(self, path: PathLike) -> bool:
        return Path(path).suffix[1:].lower() in self.extensions

    def parse(self, content: str, path: PathLike) -> ConfigDocument:
        try:
            data = self.decode(content)
        except self.decode_errors as e:
            raise ConfigParseError(
                f"Falha ao parsear configuração {self.label}: {e}",
                self.error_code,
                str(path),
            ) from e

        if data is None:
            data = {}

        if not isinstance(data, dict):
            raise InvalidConfigRootTypeError(
                f"Config root deve ser dict, recebido: {type(data).__name__} ({path})"
            )
        return data

    def decode(self, content: str) -> Any:
        raise NotImplementedError


class JsonParser(_SuffixParser):
    extensions = ("json",)
    error_code = "JSON_PARSE_ERROR"
    label = "JSON"
    decode_errors = (json.JSONDecodeError,)

    def decode(self, content: str) -> Any:
        return json.loads(content)


class Json5Parser(_SuffixParser):
    extensions = ("json5",)
    error_code = "JSON5_PARSE_ERROR"
    label = "JSON5"

    def decode(self, content: str) -> Any:
        return json5.loads(content)


class YamlParser(_SuffixParser):
    extensions = ("yaml", "yml")
    error_code = "YAML_PARSE_ERROR"
    label = "YAML"
    decode_errors = (yaml.YAMLError,)

    def decode(self, content: str) -> Any:
        return yaml.safe_load(content)


class TomlParser(_SuffixParser):
    extensions = ("toml",)
    error_code = "TOML_PARSE_ERROR"
    label = "TOML"
    decode_errors = (tomllib.TOMLDecodeError,)

    def decode(self, content: str) -> Any:
        return tomllib.loads(content)


class EnvParser(_SuffixParser):
    """
    Parser de arquivos dotenv (``CHAVE=valor``).

    Linhas sem ``=`` são ignoradas e todos os valores permanecem strings.
    """

    extensions = ("env",)
    error_code = "ENV_PARSE_ERROR"
    label = "ENV"

    def decode(self, content: str) -> Any:
        values = dotenv_values(stream=io.StringIO(content), interpolate=False)
        return {key: value for key, value in values.items() if value is not None}


class ParserRegistry:
    """
    Registro de parsers por arquivo.

    A seleção percorre os parsers do mais recente para o mais antigo, de
    forma que um parser registrado depois substitui um padrão para as
    mesmas extensões.
    """

    def __init__(self, parsers: Iterable[ConfigParser] = ()):
        self._parsers: List[ConfigParser] = []
        for parser in parsers:
            self.register(parser)

    def register(self, parser: ConfigParser) -> None:
        if not isinstance(parser, ConfigParser):
            raise TypeError(
                f"Parser deve implementar ConfigParser, recebido: {type(parser).__name__}"
            )
        self._parsers.append(parser)

    def get_parser(self, path: PathLike) -> Optional[ConfigParser]:
        for parser in reversed(self._parsers):
            if parser.can_parse(path):
                return parser
        return None

    def parse_file(self, path: PathLike) -> ConfigDocument:
        """
        Lê e parseia um arquivo com o parser adequado.

        Raises:
            UnsupportedConfigFormatError: Se nenhum parser aceitar o arquivo.
            ConfigParseError: Se o conteúdo não puder ser decodificado
                (inclusive arquivos fora de UTF-8, código ``ENCODING_ERROR``).
            InvalidConfigRootTypeError: Se a raiz não for um dicionário.
            OSError: Se o arquivo não puder ser lido.
        """
        parser = self.get_parser(path)
        if parser is None:
            raise UnsupportedConfigFormatError(f"Formato não suportado: {path}")

        try:
            content = Path(path).read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise ConfigParseError(
                f"Arquivo de configuração não está em UTF-8: {path} ({e})",
                "ENCODING_ERROR",
                str(path),
            ) from e
        logger.debug("Parseando %s com %s", path, type(parser).__name__)
        return parser.parse(content, path)

    def supported_extensions(self) -> List[str]:
        seen: List[str] = []
        for parser in self._parsers:
            seen.extend(ext for ext in parser.extensions if ext not in seen)
        return seen


def default_parser_registry() -> ParserRegistry:
    """Cria um registro novo com os parsers padrão."""
    return ParserRegistry(
        [JsonParser(), Json5Parser(), YamlParser(), TomlParser(), EnvParser()]
    )
