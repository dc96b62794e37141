"""Shared behaviour for environment adapters."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from ..core.adapter import EnvironmentAdapter
from ..core.merge import fill_missing
from ..core.types import Configuration, ConfigurationSource, SourceType, ValidationResult

LOG_LEVELS = ("debug", "info", "warn", "warning", "error")


class BaseEnvironmentAdapter(EnvironmentAdapter):
    """Adapter skeleton with fill-missing defaults and collected validation.

    Subclasses set ``environment``, implement ``get_configuration_sources``
    and override ``defaults`` and ``check`` as needed.

    Args:
        environ: Environment mapping consulted for URLs, tokens and platform
            detection. Defaults to ``os.environ``.
        config_dir: Directory holding the environment's local files.
            Defaults to ``./config``.
    """

    environment: str = ""

    def __init__(
        self,
        environ: Optional[Mapping[str, str]] = None,
        config_dir: Optional[Path] = None,
    ):
        self.environ: Mapping[str, str] = environ if environ is not None else os.environ
        self.config_dir = Path(config_dir) if config_dir else Path.cwd() / "config"

    def get_environment(self) -> str:
        return self.environment

    def get_configuration_sources(self) -> List[ConfigurationSource]:
        raise NotImplementedError

    def defaults(self, config: Configuration) -> Dict[str, Any]:
        """Default tree for this environment.

        ``config`` is the merged input and must not be modified; it lets
        defaults depend on which sections are present.
        """
        return {}

    def transform_configuration(self, config: Configuration) -> Configuration:
        return fill_missing(config, self.defaults(config))

    def validate_configuration(self, config: Configuration) -> ValidationResult:
        errors: List[str] = []
        warnings: List[str] = []
        self.check(config, errors, warnings)
        return ValidationResult(valid=not errors, errors=errors, warnings=warnings)

    def check(self, config: Configuration, errors: List[str], warnings: List[str]) -> None:
        """Append validation problems for ``config``."""

    # ---- source helpers ----
    def file_source(self, name: str, filename: str) -> ConfigurationSource:
        path = self.config_dir / filename
        fmt = "yaml" if path.suffix in (".yaml", ".yml") else "json"
        return ConfigurationSource(
            name=name, type=SourceType.FILE, options={"path": str(path), "format": fmt}
        )

    def memory_source(self, name: str) -> ConfigurationSource:
        return ConfigurationSource(
            name=name, type=SourceType.FILE, options={"path": ":memory:", "format": "json"}
        )

    def env_source(self, name: str, prefix: str) -> ConfigurationSource:
        return ConfigurationSource(
            name=name, type=SourceType.ENVIRONMENT, options={"prefix": prefix}
        )

    def remote_source(
        self,
        name: str,
        url: str,
        token_variable: Optional[str] = None,
        timeout: float = 10.0,
    ) -> ConfigurationSource:
        options: Dict[str, Any] = {"url": url, "timeout": timeout}
        token = self.environ.get(token_variable) if token_variable else None
        if token:
            options["headers"] = {"Authorization": f"Bearer {token}"}
        return ConfigurationSource(name=name, type=SourceType.REMOTE, options=options)

    def secure_source(self, name: str, namespace: str) -> ConfigurationSource:
        return ConfigurationSource(
            name=name, type=SourceType.SECURE, options={"namespace": namespace}
        )


def section(config: Mapping[str, Any], key: str) -> Optional[Mapping[str, Any]]:
    """Return ``config[key]`` when it is a mapping, else None."""
    value = config.get(key)
    return value if isinstance(value, dict) else None


def api_base_url(config: Mapping[str, Any]) -> Optional[str]:
    api = section(config, "api")
    url = api.get("base_url") if api else None
    return url if isinstance(url, str) and url else None


def check_log_level(
    config: Mapping[str, Any],
    allowed: tuple,
    problems: List[str],
    message: str,
) -> None:
    logging_cfg = section(config, "logging")
    if logging_cfg is None:
        return
    level = logging_cfg.get("level")
    if level not in allowed:
        problems.append(f"{message}: {level}")
