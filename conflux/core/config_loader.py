"""Configuration loader for conflux.yaml files."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import yaml

from .adapter import AdapterRegistry
from .errors import ConfigFileError
from .types import ConfigurationSource, ManagerOptions, SourceType

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "conflux.yaml"
ENVIRONMENT_VARIABLE = "CONFLUX_ENV"


class ConfigLoader:
    """Handles loading and parsing of conflux.yaml configuration files.

    The file configures the manager itself::

        environment: staging
        cache:
          enabled: true
          ttl: 30
        hot_reload:
          enabled: false
          interval: 5
        environments:
          local:
            sources: [...]
    """

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        """Initialize config loader.

        Args:
            config_path: Path to conflux.yaml file. If None, looks in current
                directory and parent directories.
        """
        self.config_path = self._find_config_file(config_path)
        self._config: Optional[Dict[str, Any]] = None

    def _find_config_file(
        self, config_path: Optional[Union[str, Path]] = None
    ) -> Optional[Path]:
        """Find the conflux.yaml file.

        Args:
            config_path: Explicit path to config file, or None to search.

        Returns:
            Path to config file if found, None otherwise.
        """
        if config_path is not None:
            path = Path(config_path)
            if path.exists():
                return path
            return None

        current = Path.cwd()
        while True:
            candidate = current / CONFIG_FILENAME
            if candidate.exists():
                return candidate
            if current == current.parent:
                return None
            current = current.parent

    def load(self) -> Dict[str, Any]:
        """Load the configuration file.

        Returns:
            Parsed configuration dictionary, or empty dict if no config file.

        Raises:
            ConfigFileError: If the config file is invalid YAML or not a mapping.
        """
        if self.config_path is None:
            return {}

        if self._config is not None:
            return self._config

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigFileError(f"Invalid {CONFIG_FILENAME} at {self.config_path}: {e}") from e
        except OSError as e:
            logger.warning("Could not read %s at %s: %s", CONFIG_FILENAME, self.config_path, e)
            return {}

        if not isinstance(data, dict):
            raise ConfigFileError(f"{CONFIG_FILENAME} at {self.config_path} must be a mapping")
        self._config = data
        return self._config

    def manager_options(self, environ: Optional[Mapping[str, str]] = None) -> ManagerOptions:
        """Build manager options from the file and the environment.

        ``CONFLUX_ENV`` overrides the file's ``environment`` key.

        Raises:
            ConfigFileError: If the ``cache`` or ``hot_reload`` section is
                malformed.
        """
        config = self.load()
        env = environ if environ is not None else os.environ
        cache = self._section(config, "cache")
        hot_reload = self._section(config, "hot_reload")
        defaults = ManagerOptions()
        try:
            return ManagerOptions(
                environment=str(
                    env.get(ENVIRONMENT_VARIABLE)
                    or config.get("environment")
                    or defaults.environment
                ),
                enable_cache=bool(cache.get("enabled", defaults.enable_cache)),
                cache_ttl=float(cache.get("ttl", defaults.cache_ttl)),
                enable_hot_reload=bool(hot_reload.get("enabled", defaults.enable_hot_reload)),
                hot_reload_interval=float(
                    hot_reload.get("interval", defaults.hot_reload_interval)
                ),
            )
        except (TypeError, ValueError) as e:
            raise ConfigFileError(f"Invalid manager options in {self.config_path}: {e}") from e

    def _section(self, parent: Mapping[str, Any], key: str) -> Dict[str, Any]:
        """Return the mapping under ``key``; an absent or empty section is ``{}``."""
        value = parent.get(key)
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ConfigFileError(
                f"'{key}' in {self.config_path} must be a mapping, "
                f"got {type(value).__name__}"
            )
        return value

    def get_environment_config(
        self, environment_name: str
    ) -> Optional[Dict[str, Any]]:
        """Get configuration for a specific environment.

        Args:
            environment_name: Name of the environment.

        Returns:
            Environment configuration dict, or None if not found.

        Raises:
            ConfigFileError: If ``environments`` or the entry is not a mapping.
        """
        environments = self._section(self.load(), "environments")
        if environment_name not in environments:
            return None
        return self._section(environments, environment_name)

    def environment_names(self) -> List[str]:
        return list(self._section(self.load(), "environments"))

    def get_sources(self, environment_name: str) -> List[ConfigurationSource]:
        """Get the source descriptors declared for an environment.

        Relative file paths are resolved against the directory holding
        conflux.yaml.

        Raises:
            ConfigFileError: If a source entry is malformed.
        """
        env_config = self.get_environment_config(environment_name) or {}
        sources = env_config.get("sources") or []
        if not isinstance(sources, list):
            raise ConfigFileError(
                f"'sources' of environment {environment_name!r} in {self.config_path} "
                "must be a list"
            )
        return [self.parse_source(s) for s in sources]

    def parse_source(self, source_config: Mapping[str, Any]) -> ConfigurationSource:
        """Parse one source entry into a ConfigurationSource.

        Raises:
            ConfigFileError: If the entry is not a mapping, lacks ``name`` or
                ``type``, or names an unknown type.
        """
        if not isinstance(source_config, Mapping):
            raise ConfigFileError(f"Source entry must be a mapping, got {source_config!r}")
        try:
            source = ConfigurationSource.from_dict(source_config)
        except (TypeError, ValueError) as e:
            raise ConfigFileError(f"Invalid source {dict(source_config)!r}: {e}") from e
        if source.type != SourceType.FILE or self.config_path is None:
            return source
        path = source.options.get("path")
        if not path or path == ":memory:" or Path(path).is_absolute():
            return source
        options = dict(source.options)
        options["path"] = str(self.config_path.parent / path)
        return ConfigurationSource(name=source.name, type=source.type, options=options)

    def register_adapters(self, registry: AdapterRegistry) -> List[str]:
        """Register a declarative adapter for every environment in the file.

        A declared environment replaces a built-in adapter of the same name.

        Returns:
            The registered environment names.

        Raises:
            ConfigFileError: If an environment entry is malformed.
        """
        from ..adapters.declarative import DeclarativeEnvironmentAdapter

        registered: List[str] = []
        for name in self.environment_names():
            env_config = self.get_environment_config(name) or {}
            sources = self.get_sources(name)
            defaults = self._section(env_config, "defaults")
            required = env_config.get("required") or []
            if not isinstance(required, list):
                raise ConfigFileError(
                    f"'required' of environment {name!r} in {self.config_path} must be a list"
                )

            def factory(
                name: str = name,
                sources: List[ConfigurationSource] = sources,
                defaults: Dict[str, Any] = defaults,
                required: List[str] = required,
            ) -> DeclarativeEnvironmentAdapter:
                return DeclarativeEnvironmentAdapter(name, sources, defaults, required)

            registry.register(name, factory)
            registered.append(name)
            logger.debug("Registered declarative environment %s", name)
        return registered
