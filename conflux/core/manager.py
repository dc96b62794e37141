"""Configuration manager: load, merge, cache and notify."""

from __future__ import annotations

import copy
import logging
import threading
import time
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, TypeVar, Union

from .adapter import AdapterRegistry, EnvironmentAdapter
from .cache import ConfigurationCache
from .errors import Busy, ConfigurationError, ConfigurationKeyError, ListenerError
from .lock import MutationLock
from .merge import merge_configurations, normalize_configuration, normalize_value
from .paths import MISSING, get_path, is_valid_key, set_path, split_key
from .provider import ConfigurationProvider
from .reloader import HotReloader
from .types import (
    Configuration,
    ConfigurationChange,
    ConfigurationSource,
    ConfigurationStatus,
    ManagerOptions,
    ValidationResult,
    utcnow,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
Listener = Callable[[ConfigurationChange], None]


class ConfigurationManager:
    """Aggregate configuration from the sources of one environment.

    The environment adapter names the sources and their precedence; the
    manager asks the matching providers for data, merges it (later sources
    win, mappings merge leaf by leaf), lets the adapter fill in defaults,
    and publishes the result. Reads go through a TTL cache; writes are
    in-memory only.

    ``load``/``reload`` block on the manager's lock; ``set`` only tries it
    and raises ``Busy`` on contention; ``get`` never takes it. The active
    configuration is replaced by reference, so readers always see either
    the previous or the next complete tree.

    Example::

        manager = ConfigurationManager(ManagerOptions(environment="production"))
        manager.initialize()
        host = manager.get("database.host", "localhost")
    """

    def __init__(
        self,
        options: Optional[ManagerOptions] = None,
        *,
        adapters: Optional[AdapterRegistry] = None,
        provider_factory: Optional[Any] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if adapters is None:
            from ..adapters import default_registry

            adapters = default_registry()
        if provider_factory is None:
            from ..providers.factory import ProviderFactory

            provider_factory = ProviderFactory()
        self._options = options or ManagerOptions()
        self._adapters = adapters
        self._factory = provider_factory
        self._adapter: Optional[EnvironmentAdapter] = None
        self._providers: Dict[str, ConfigurationProvider] = {}
        self._config: Configuration = {}
        self._cache = ConfigurationCache(
            ttl=self._options.cache_ttl,
            enabled=self._options.enable_cache,
            clock=clock,
        )
        self._lock = MutationLock()
        self._listeners: List[Listener] = []
        self._reloader: Optional[HotReloader] = None
        self._loaded = False
        self._last_load: Optional[datetime] = None
        self._sources: List[str] = []
        self._error_count = 0
        # Guards _error_count, which the hot-reload thread also updates.
        self._error_lock = threading.Lock()

    @classmethod
    def from_config_file(
        cls,
        config_path: Optional[Union[str, Path]] = None,
        environ: Optional[Mapping[str, str]] = None,
        environment: Optional[str] = None,
        **kwargs: Any,
    ) -> "ConfigurationManager":
        """Build a manager configured by conflux.yaml.

        Declarative environments in the file are registered on top of the
        built-in adapters. An explicit ``environment`` wins over both
        CONFLUX_ENV and the file. The manager is returned uninitialized.
        """
        from ..adapters import default_registry
        from .config_loader import ConfigLoader

        loader = ConfigLoader(config_path)
        registry = kwargs.pop("adapters", None) or default_registry()
        loader.register_adapters(registry)
        options = loader.manager_options(environ)
        if environment:
            options.environment = environment
        return cls(options, adapters=registry, **kwargs)

    @property
    def options(self) -> ManagerOptions:
        return self._options

    @property
    def environment(self) -> str:
        return self._options.environment

    # ---- lifecycle ----
    def initialize(self, options: Optional[ManagerOptions] = None) -> None:
        """Apply options, build the declared providers and load once.

        Providers already attached under a source name are kept. Hot reload
        starts afterwards when enabled.

        Raises:
            NoAdapterForEnvironment: If no adapter serves the environment.
        """
        self._stop_hot_reload()
        if options is not None:
            self._options = options
        self._cache.enabled = self._options.enable_cache
        self._cache.ttl = self._options.cache_ttl
        self._cache.clear()
        self._adapter = None

        for source in self._declared_sources(self._resolve_adapter()):
            try:
                self._provider_for(source)
            except Exception as exc:
                # Retried and counted by load().
                logger.debug("Deferred provider for %s: %s", source.name, exc)

        self.load()

        if self._options.enable_hot_reload:
            self._reloader = HotReloader(
                self.reload,
                self._options.hot_reload_interval,
                on_error=self._record_reload_failure,
            )
            self._reloader.start()

    def attach_provider(self, provider: ConfigurationProvider) -> None:
        """Use ``provider`` for the source with the same name."""
        self._providers[provider.get_name()] = provider

    def close(self) -> None:
        """Stop hot reload and release provider resources."""
        self._stop_hot_reload()
        for provider in self._providers.values():
            closer = getattr(provider, "close", None)
            if callable(closer):
                try:
                    closer()
                except Exception:
                    logger.warning("Failed to close provider %s", provider.get_name(), exc_info=True)

    def __enter__(self) -> "ConfigurationManager":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ---- loading ----
    def load(self) -> None:
        """Load every source and publish the merged configuration.

        Raises:
            NoAdapterForEnvironment: If no adapter serves the environment.
            ConfigurationError: If the adapter declares duplicate source names.
        """
        self._load("load")

    def reload(self) -> None:
        """Reload from all sources, replacing the configuration wholesale."""
        self._load("reload")

    def _load(self, label: str) -> None:
        with self._lock.hold():
            adapter = self._resolve_adapter()
            fetched: List[Configuration] = []
            contributing: List[str] = []
            for source in self._declared_sources(adapter):
                data = self._fetch(source)
                if data is not None:
                    fetched.append(data)
                    contributing.append(source.name)

            merged = merge_configurations(fetched)
            config = adapter.transform_configuration(merged)

            result = adapter.validate_configuration(config)
            for warning in result.warnings:
                logger.info("Configuration warning (%s): %s", adapter.get_environment(), warning)
            if not result.valid:
                logger.warning(
                    "Configuration for %s failed validation: %s",
                    adapter.get_environment(),
                    "; ".join(result.errors),
                )

            self._config = config
            self._cache.clear()
            self._sources = contributing
            self._last_load = utcnow()
            self._loaded = True
            logger.debug(
                "Loaded configuration for %s from %s",
                adapter.get_environment(),
                ", ".join(contributing) or "no sources",
            )
        self._notify(ConfigurationChange(keys=["*"], timestamp=utcnow(), source=label))

    def _fetch(self, source: ConfigurationSource) -> Optional[Configuration]:
        """Load one source; None when it is skipped or fails."""
        try:
            provider = self._provider_for(source)
        except Exception as exc:
            self._count_error()
            logger.warning("Cannot create provider for %s: %s", source.name, exc)
            return None

        try:
            available = provider.is_available()
        except Exception as exc:
            self._count_error()
            logger.warning("Availability check failed for %s: %s", source.name, exc)
            return None
        if not available:
            logger.debug("Skipping unavailable source %s", source.name)
            return None

        try:
            return normalize_configuration(provider.load(), source.name)
        except Exception as exc:
            self._count_error()
            logger.warning("Failed to load configuration from %s: %s", source.name, exc)
            return None

    def _provider_for(self, source: ConfigurationSource) -> ConfigurationProvider:
        provider = self._providers.get(source.name)
        if provider is None:
            provider = self._factory.create(source)
            self._providers[source.name] = provider
        return provider

    def _resolve_adapter(self) -> EnvironmentAdapter:
        if self._adapter is None:
            self._adapter = self._adapters.resolve(self._options.environment)
        return self._adapter

    @staticmethod
    def _declared_sources(adapter: EnvironmentAdapter) -> List[ConfigurationSource]:
        sources = list(adapter.get_configuration_sources())
        seen = set()
        for source in sources:
            if source.name in seen:
                raise ConfigurationError(
                    f"Duplicate source name {source.name!r} for environment "
                    f"{adapter.get_environment()!r}"
                )
            seen.add(source.name)
        return sources

    # ---- access ----
    def get(self, key: str, default: Optional[T] = None) -> Any:
        """Get a value by dotted key, or ``default`` when it is absent.

        A malformed key is treated as absent.

        Returned mappings and lists are copies; modifying them does not
        change the configuration.
        """
        if not is_valid_key(key):
            return default
        cached = self._cache.lookup(key)
        if cached is not MISSING:
            return _detached(cached)

        generation = self._cache.generation
        value = get_path(self._config, key)
        if value is MISSING:
            return default
        self._cache.store(key, value, generation)
        return _detached(value)

    def require(self, key: str) -> Any:
        """Get a value by dotted key.

        Raises:
            ConfigurationKeyError: If the key is absent.
        """
        value = self.get(key, MISSING)
        if value is MISSING:
            raise ConfigurationKeyError(key)
        return value

    def has(self, key: str) -> bool:
        return is_valid_key(key) and get_path(self._config, key) is not MISSING

    def as_dict(self) -> Configuration:
        """Deep copy of the whole active configuration."""
        return copy.deepcopy(self._config)

    def set(self, key: str, value: Any) -> None:
        """Set a value in memory only; providers are not written.

        Raises:
            Busy: If a load or another write holds the lock.
            TypeError: If the value is not a configuration value.
            ValueError: If the key is malformed.
        """
        split_key(key)
        normalized = normalize_value(value, key)
        if not self._lock.try_acquire():
            raise Busy(key)
        try:
            self._config = set_path(self._config, key, normalized)
            self._cache.invalidate(key)
        finally:
            self._lock.release()
        self._notify(ConfigurationChange(keys=[key], timestamp=utcnow(), source="set"))

    def validate(self) -> ValidationResult:
        """Validate the active configuration with the environment adapter.

        Raises:
            NoAdapterForEnvironment: If no adapter serves the environment.
        """
        return self._resolve_adapter().validate_configuration(self._config)

    def sources(self) -> List[ConfigurationSource]:
        """Source descriptors of the active environment, in precedence order."""
        return self._declared_sources(self._resolve_adapter())

    # ---- notification ----
    def on_change(self, listener: Listener) -> Listener:
        """Register a change listener; returns it so it can decorate."""
        self._listeners.append(listener)
        return listener

    def remove_listener(self, listener: Listener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def _notify(self, change: ConfigurationChange) -> None:
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception as exc:
                error = ListenerError(listener, exc)
                logger.error("%s", error, exc_info=exc)

    # ---- status ----
    def get_status(self) -> ConfigurationStatus:
        return ConfigurationStatus(
            loaded=self._loaded,
            last_load=self._last_load,
            sources=list(self._sources),
            cache=replace(self._cache.stats()),
            error_count=self._error_count,
        )

    def _count_error(self) -> None:
        with self._error_lock:
            self._error_count += 1

    def _record_reload_failure(self, exc: BaseException) -> None:
        self._count_error()

    def _stop_hot_reload(self) -> None:
        if self._reloader is not None:
            self._reloader.stop()
            self._reloader = None


def _detached(value: Any) -> Any:
    if isinstance(value, (dict, list)):
        return copy.deepcopy(value)
    return value
