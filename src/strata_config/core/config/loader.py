# src/strata_config/core/config/loader.py
"""
Loader canônico de configuração do Strata Config.

Este módulo é responsável por carregar, mesclar, validar e manter em cache
a configuração efetiva de uma aplicação.

A configuração é resolvida a partir de:
    - arquivos base ``{nome}.config.{ext}``
    - arquivos de ambiente ``{nome}.config.{env}.{ext}`` (opcionais)
    - ou, em `load_config`, de um arquivo de defaults obrigatório e um
      arquivo local opcional

Fluxo de resolução:
    descoberta → parsing por arquivo → transformers → merge (base, depois
    ambiente, na ordem de prioridade) → templates → validação fail-fast

Princípios fundamentais:
    - Colaboradores (registro de parsers, watcher) são injetados na construção
    - A mesma entrada sempre produz a mesma configuração final
    - Erros estruturais e de validação são tratados como falhas fatais

Invariantes:
    - O resultado é sempre um dicionário puro (`dict`)
    - O cache é indexado pelo ambiente (``"default"`` quando não há ambiente)
    - No máximo uma recomputação por chave de cache está em andamento
    - Invalidações por evento de arquivo são atômicas

Limites explícitos:
    - Não implementa a observação de arquivos (apenas consome um watcher)
    - Não executa código de arquivos de configuração
    - Não interpola variáveis de ambiente
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import (
    Any,
    Callable,
    Deque,
    Dict,
    Iterable,
    List,
    Mapping,
    Optional,
    Protocol,
    Sequence,
    Tuple,
    Union,
)

from .discovery import DEFAULT_EXTENSIONS, find_config_files, is_relevant_config_file, validate_config_dir
from .environments import DEFAULT_ENV_KEY, resolve_environment
from .errors import (
    ConfigDirectoryError,
    ConfigValidationError,
    DefaultsNotFoundError,
    WatcherUnavailableError,
)
from .hashing import compute_config_hash
from .merge import apply_template, merge, merge_all, transform_values
from .parsers import ParserRegistry, default_parser_registry
from .types import (
    ConfigDocument,
    ConfigResult,
    ConfigTemplate,
    MergeOptions,
    Transformer,
    ValidationResult,
    ValidationRule,
    WatchEventType,
)
from .validation import validate


logger = logging.getLogger(__name__)

PathLike = Union[str, Path]
WatchCallback = Callable[[str, str], None]
ChangeCallback = Callable[[WatchEventType, str, ConfigDocument], None]
Listener = Callable[[Dict[str, Any]], None]

DEFAULT_CACHE_KEY = "default"


class FileWatcher(Protocol):
    """
    Contrato do colaborador de observação de arquivos.

    O watcher chama `callback(event_type, file_path)` para eventos
    ``add``, ``change`` e ``unlink``, já com debounce aplicado.
    """

    def watch(self, paths: Sequence[Path], callback: WatchCallback) -> None:
        ...

    def add(self, paths: Sequence[Path]) -> None:
        ...

    def stop(self) -> None:
        ...

    def watched_files(self) -> List[Path]:
        ...


@dataclass(frozen=True)
class LoaderOptions:
    """
    Opções do `ConfigLoader`.

    Campos:
        - config_dir: diretório dos arquivos (padrão: diretório corrente)
        - extensions: extensões consideradas na descoberta
        - env_key: variável de ambiente que define o ambiente corrente
        - watch: inicia a observação após o primeiro carregamento
        - merge_options: política de merge entre arquivos
        - validation_schema: schema aplicado à configuração resolvida
        - templates: templates aplicados após o merge, em ordem
        - transformers: transformers aplicados a cada documento parseado
        - max_events: quantidade de eventos mantidos em `ConfigLoader.events`
    """
    config_dir: Optional[PathLike] = None
    extensions: Tuple[str, ...] = DEFAULT_EXTENSIONS
    env_key: str = DEFAULT_ENV_KEY
    watch: bool = False
    merge_options: MergeOptions = field(default_factory=MergeOptions)
    validation_schema: Optional[Mapping[str, ValidationRule]] = None
    templates: Tuple[ConfigTemplate, ...] = ()
    transformers: Mapping[str, Transformer] = field(default_factory=dict)
    max_events: int = 1000


def resolve_documents(
    documents: Iterable[Mapping[str, Any]],
    *,
    merge_options: Optional[MergeOptions] = None,
    templates: Sequence[ConfigTemplate] = (),
    schema: Optional[Mapping[str, ValidationRule]] = None,
) -> ConfigDocument:
    """
    Resolve documentos já parseados em uma configuração final.

    Os documentos são acumulados da esquerda para a direita, os templates
    são aplicados em ordem e, se houver schema, a validação é fail-fast.

    Raises:
        ConfigValidationError: Se a configuração resolvida não for válida.
    """
    resolved = merge_all(documents, merge_options)

    for template in templates:
        resolved = apply_template(resolved, template)

    if schema is not None:
        result = validate(resolved, schema)
        if not result.is_valid:
            raise ConfigValidationError(result.errors)
        resolved = result.validated

    return resolved


def load_config(
    *,
    defaults_path: PathLike,
    local_path: Optional[PathLike] = None,
    merge_options: Optional[MergeOptions] = None,
    schema: Optional[Mapping[str, ValidationRule]] = None,
    parser_registry: Optional[ParserRegistry] = None,
) -> ConfigDocument:
    """
    Carrega e resolve a configuração a partir de caminhos explícitos.

    Política de resolução:
        - O arquivo de defaults é obrigatório
        - O arquivo local é opcional; quando existe, prevalece sobre defaults
        - A resolução utiliza `merge` com a política informada

    Args:
        defaults_path (PathLike): Caminho para o arquivo de configuração base.
        local_path (Optional[PathLike]): Caminho opcional para overrides locais.
        merge_options (Optional[MergeOptions]): Política de merge.
        schema (Optional[Mapping[str, ValidationRule]]): Schema fail-fast.
        parser_registry (Optional[ParserRegistry]): Registro de parsers.

    Returns:
        ConfigDocument: Configuração final resolvida.

    Raises:
        DefaultsNotFoundError: Se o arquivo de defaults não existir.
        UnsupportedConfigFormatError: Se o formato do arquivo não for suportado.
        InvalidConfigRootTypeError: Se o conteúdo não for um dicionário.
        ConfigParseError: Se o conteúdo não puder ser decodificado.
        ConfigValidationError: Se a configuração não passar no schema.
    """
    registry = parser_registry or default_parser_registry()

    defaults_file = Path(defaults_path)
    if not defaults_file.exists():
        raise DefaultsNotFoundError(f"Arquivo de defaults não encontrado: {defaults_file}")

    documents = [registry.parse_file(defaults_file)]

    if local_path is not None:
        local_file = Path(local_path)
        if local_file.exists():
            documents.append(registry.parse_file(local_file))
        else:
            logger.debug("Arquivo local ausente, usando apenas defaults: %s", local_file)

    return resolve_documents(documents, merge_options=merge_options, schema=schema)


class ConfigLoader:
    """
    Loader de configuração baseado em descoberta de arquivos, com cache
    por ambiente e invalidação dirigida por eventos de arquivo.

    Eventos estruturados (`events` e assinantes via `subscribe`):
        - load: configuração carregada do disco
        - reload: recarga explícita via `reload_config`
        - change: recarga provocada por evento de arquivo
        - cache_cleared: cache esvaziado
        - error: falha ao recarregar após evento de arquivo

    Decisões arquiteturais:
        - Registro de parsers e watcher são injetados (sem estado global)
        - Carregamentos concorrentes da mesma chave são coalescidos
    """

    def __init__(
        self,
        config_name: str,
        options: Optional[LoaderOptions] = None,
        *,
        parser_registry: Optional[ParserRegistry] = None,
        watcher: Optional[FileWatcher] = None,
    ):
        self._name = config_name
        self._options = options or LoaderOptions()
        self._config_dir = Path(self._options.config_dir or Path.cwd()).resolve()
        self._registry = parser_registry or default_parser_registry()
        self._watcher = watcher
        self._watching = False
        self._on_change: Optional[ChangeCallback] = None

        self._cache: Dict[str, ConfigResult] = {}
        self._cache_lock = threading.Lock()
        self._key_locks: Dict[str, threading.Lock] = {}
        self._generations: Dict[str, int] = {}
        self._loading: Dict[str, Optional[str]] = {}
        self._listeners: List[Listener] = []
        self.events: Deque[Dict[str, Any]] = deque(maxlen=self._options.max_events)

        if self._options.watch and watcher is None:
            raise WatcherUnavailableError("watch=True requer um watcher injetado")

        try:
            validate_config_dir(self._config_dir)
        except ConfigDirectoryError as e:
            logger.debug("Validação do diretório de configuração falhou: %s", e)

        logger.debug("ConfigLoader inicializado: name=%s dir=%s", self._name, self._config_dir)

    # -----------------------------
    # Propriedades
    # -----------------------------
    @property
    def config_name(self) -> str:
        return self._name

    @property
    def config_dir(self) -> Path:
        return self._config_dir

    @property
    def options(self) -> LoaderOptions:
        return self._options

    def environment(self) -> Optional[str]:
        return resolve_environment(None, env_key=self._options.env_key)

    # -----------------------------
    # Carregamento e cache
    # -----------------------------
    def get_config(self, env: Optional[str] = None) -> ConfigResult:
        """
        Retorna a configuração resolvida do ambiente, usando o cache.

        O ambiente é o argumento explícito ou o valor de `env_key` no
        processo. Chamadas concorrentes para a mesma chave aguardam uma
        única recomputação.
        """
        target_env = resolve_environment(env, env_key=self._options.env_key)
        return self._get(target_env or DEFAULT_CACHE_KEY, target_env)

    def _get(self, key: str, env: Optional[str]) -> ConfigResult:
        cached = self._cached(key)
        if cached is not None:
            logger.debug("Configuração em cache para %s", key)
            return cached

        with self._key_lock(key):
            cached = self._cached(key)
            if cached is not None:
                return cached

            with self._cache_lock:
                self._loading[key] = env
            try:
                while True:
                    with self._cache_lock:
                        generation = self._generations.get(key, 0)
                    result = self._load(env)
                    with self._cache_lock:
                        # Invalidado durante a leitura: o resultado já nasce obsoleto.
                        if self._generations.get(key, 0) == generation:
                            self._cache[key] = result
                            break
                    logger.debug("Cache de %s invalidado durante o carregamento; recarregando", key)
            finally:
                with self._cache_lock:
                    self._loading.pop(key, None)

        self._record("load", env=env, files=[str(f.path) for f in result.files])

        if self._options.watch and not self._watching:
            self.enable_watch()

        return result

    def reload_config(self, env: Optional[str] = None) -> ConfigResult:
        """Descarta o cache do ambiente e recarrega a configuração."""
        target_env = resolve_environment(env, env_key=self._options.env_key)
        self.invalidate(target_env)
        result = self.get_config(target_env)
        self._record("reload", env=target_env, config_hash=result.config_hash)
        return result

    def invalidate(self, env: Optional[str] = None) -> None:
        key = env or DEFAULT_CACHE_KEY
        with self._cache_lock:
            self._bump([key])
            self._cache.pop(key, None)

    def clear_cache(self) -> None:
        with self._cache_lock:
            self._bump(list(self._cache) + list(self._loading))
            self._cache.clear()
        logger.debug("Cache de configuração esvaziado")
        self._record("cache_cleared")

    def _cached(self, key: str) -> Optional[ConfigResult]:
        with self._cache_lock:
            return self._cache.get(key)

    def _bump(self, keys: Iterable[str]) -> None:
        # Chamado com `_cache_lock` adquirido.
        for key in keys:
            self._generations[key] = self._generations.get(key, 0) + 1

    def _key_lock(self, key: str) -> threading.Lock:
        with self._cache_lock:
            return self._key_locks.setdefault(key, threading.Lock())

    def _load(self, env: Optional[str]) -> ConfigResult:
        files = find_config_files(self._name, self._config_dir, env, self._options.extensions)
        if not files:
            logger.debug("Nenhum arquivo de configuração encontrado para %s", self._name)

        documents = []
        for info in files:
            document = self._registry.parse_file(info.path)
            if self._options.transformers:
                document = transform_values(document, self._options.transformers)
            documents.append(document)
            logger.debug("Carregado %s: %s", "base" if info.is_base else f"env={info.env}", info.path)

        config = resolve_documents(
            documents,
            merge_options=self._options.merge_options,
            templates=self._options.templates,
            schema=self._options.validation_schema,
        )
        return ConfigResult(
            config=config,
            files=tuple(files),
            env=env,
            config_hash=compute_config_hash(config),
        )

    # -----------------------------
    # Operações sobre documentos
    # -----------------------------
    def apply_templates(self, config: Mapping[str, Any]) -> ConfigDocument:
        result = dict(config)
        for template in self._options.templates:
            result = apply_template(result, template)
        return result

    def validate_configuration(self, config: Mapping[str, Any]) -> ValidationResult:
        """Valida contra o schema configurado (sempre válido sem schema)."""
        if self._options.validation_schema is None:
            return ValidationResult(is_valid=True, errors=[], validated=dict(config))
        return validate(config, self._options.validation_schema)

    def merge_configurations(
        self,
        target: Mapping[str, Any],
        source: Mapping[str, Any],
        options: Optional[MergeOptions] = None,
    ) -> ConfigDocument:
        return merge(target, source, options or self._options.merge_options)

    # -----------------------------
    # Eventos
    # -----------------------------
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Registra um assinante de eventos; retorna a função de cancelamento."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _record(self, event: str, **extra: Any) -> None:
        entry: Dict[str, Any] = {
            "event": event,
            "config_name": self._name,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        entry.update(extra)
        self.events.append(entry)
        for listener in list(self._listeners):
            listener(entry)

    # -----------------------------
    # Observação de arquivos
    # -----------------------------
    def enable_watch(self, callback: Optional[ChangeCallback] = None) -> None:
        """
        Passa a observar os arquivos já carregados e o diretório de configuração.

        Raises:
            WatcherUnavailableError: Se nenhum watcher foi injetado.
        """
        if self._watcher is None:
            raise WatcherUnavailableError("Nenhum watcher foi injetado no ConfigLoader")
        if callback is not None:
            self._on_change = callback
        if self._watching:
            logger.debug("Observação já habilitada")
            return

        with self._cache_lock:
            paths = {info.path for result in self._cache.values() for info in result.files}
        self._watcher.watch(sorted(paths) + [self._config_dir], self.handle_file_event)
        self._watching = True
        logger.debug("Observação habilitada para %s", self._name)

    def disable_watch(self) -> None:
        if not self._watching or self._watcher is None:
            return
        self._watcher.stop()
        self._watching = False
        logger.debug("Observação desabilitada para %s", self._name)

    def is_watch_enabled(self) -> bool:
        return self._watching

    def watched_files(self) -> List[Path]:
        if not self._watching or self._watcher is None:
            return []
        return self._watcher.watched_files()

    def handle_file_event(self, event_type: Union[str, WatchEventType], file_path: str) -> None:
        """
        Trata uma notificação do watcher.

        Arquivos que não pertencem a esta configuração são ignorados. Para
        arquivos relevantes, as entradas em cache são invalidadas de uma só
        vez e recomputadas; cada recomputação gera um evento ``change``.

        Raises:
            ConfigError: Falhas de recarga são registradas como evento
                ``error`` e propagadas.
        """
        try:
            event = WatchEventType(event_type)
        except ValueError:
            logger.debug("Tipo de evento não tratado (%s): %s", event_type, file_path)
            return
        path = Path(file_path).resolve()

        with self._cache_lock:
            known = any(path == info.path for result in self._cache.values() for info in result.files)
        if not known and not is_relevant_config_file(path, self._name):
            logger.debug("Evento ignorado (%s): %s", event.value, path)
            return

        if event is WatchEventType.ADD and self._watching and self._watcher is not None:
            if path not in self._watcher.watched_files():
                self._watcher.add([path])

        # Cargas em andamento não são aguardadas aqui: a troca de geração
        # obriga quem as executa a reler os arquivos antes de gravar no cache.
        with self._cache_lock:
            stale = {key: result.env for key, result in self._cache.items()}
            self._bump(list(stale) + list(self._loading))
            self._cache.clear()

        logger.debug("Arquivo %s (%s); recarregando %d ambiente(s)", path, event.value, len(stale))

        for key, env in stale.items():
            try:
                result = self._get(key, env)
            except Exception as e:
                logger.warning("Falha ao recarregar configuração após %s em %s: %s", event.value, path, e)
                self._record("error", env=env, file_path=str(path), error=str(e))
                raise

            self._record("change", env=env, event_type=event.value, file_path=str(path),
                         config_hash=result.config_hash)
            if self._on_change is not None:
                self._on_change(event, str(path), result.config)

    # -----------------------------
    # Ciclo de vida
    # -----------------------------
    def close(self) -> None:
        self.disable_watch()
        self.clear_cache()
        self._listeners.clear()

    def __enter__(self) -> "ConfigLoader":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
