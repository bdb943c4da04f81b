# src/strata_config/__init__.py
"""
Strata Config: carregamento de configuração em camadas.

Descobre arquivos de configuração em vários formatos, mescla variantes
base e de ambiente, valida o resultado contra um schema declarativo e
invalida o cache quando um watcher injetado reporta mudanças.

Arquitetura em alto nível:
    - core.config.discovery    → descoberta e prioridade de arquivos
    - core.config.parsers      → parsers de formato e registro
    - core.config.merge        → engine de merge e variantes
    - core.config.validation   → engine de validação
    - core.config.loader       → loader com cache por ambiente
    - core.config.manager      → documento em memória com acesso por caminho
"""

from .core.config.discovery import (
    find_config_files,
    generate_config_paths,
    get_config_format,
    parse_config_file_name,
)
from .core.config.environments import load_env_config, resolve_environment
from .core.config.errors import (
    ConfigDirectoryError,
    ConfigError,
    ConfigParseError,
    ConfigValidationError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    InvalidMergeOptionsError,
    InvalidSchemaError,
    UnsupportedConfigFormatError,
    WatcherUnavailableError,
)
from .core.config.hashing import compute_config_hash
from .core.config.loader import ConfigLoader, FileWatcher, LoaderOptions, load_config
from .core.config.manager import ConfigChangeEvent, ConfigManager, ConfigSource
from .core.config.merge import (
    apply_template,
    conditional_merge,
    merge,
    merge_all,
    transform_merge,
    transform_values,
)
from .core.config.parsers import ConfigParser, ParserRegistry, default_parser_registry
from .core.config.types import (
    MISSING,
    ArrayPolicy,
    ConfigFileInfo,
    ConfigFormat,
    ConfigResult,
    ConfigTemplate,
    MergeOptions,
    MergeStrategy,
    ValidationResult,
    ValidationRule,
    WatchEventType,
    schema_from_mapping,
)
from .core.config.validation import validate

__all__ = [
    "MISSING",
    "ArrayPolicy",
    "ConfigChangeEvent",
    "ConfigDirectoryError",
    "ConfigError",
    "ConfigFileInfo",
    "ConfigFormat",
    "ConfigLoader",
    "ConfigManager",
    "ConfigParseError",
    "ConfigParser",
    "ConfigResult",
    "ConfigSource",
    "ConfigTemplate",
    "ConfigValidationError",
    "DefaultsNotFoundError",
    "FileWatcher",
    "InvalidConfigRootTypeError",
    "InvalidMergeOptionsError",
    "InvalidSchemaError",
    "LoaderOptions",
    "MergeOptions",
    "MergeStrategy",
    "ParserRegistry",
    "UnsupportedConfigFormatError",
    "ValidationResult",
    "ValidationRule",
    "WatchEventType",
    "WatcherUnavailableError",
    "apply_template",
    "compute_config_hash",
    "conditional_merge",
    "default_parser_registry",
    "find_config_files",
    "generate_config_paths",
    "get_config_format",
    "load_config",
    "load_env_config",
    "merge",
    "merge_all",
    "parse_config_file_name",
    "resolve_environment",
    "schema_from_mapping",
    "transform_merge",
    "transform_values",
    "validate",
]
