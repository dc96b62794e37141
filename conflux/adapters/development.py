"""Development environment adapter."""

from __future__ import annotations

from typing import Any, Dict, List

from ..core.adapter import EnvironmentType
from ..core.types import Configuration, ConfigurationSource
from .base import LOG_LEVELS, BaseEnvironmentAdapter, api_base_url, check_log_level, section


class DevelopmentEnvironmentAdapter(BaseEnvironmentAdapter):
    """Local files first, then ``APP_`` variables. Validation only warns."""

    environment = EnvironmentType.DEVELOPMENT.value

    def get_configuration_sources(self) -> List[ConfigurationSource]:
        return [
            self.file_source("local-config", "development.json"),
            self.file_source("local-config-yaml", "development.yaml"),
            self.env_source("environment-variables", "APP_"),
        ]

    def defaults(self, config: Configuration) -> Dict[str, Any]:
        defaults: Dict[str, Any] = {
            "debug": True,
            "logging": {"level": "debug", "format": "pretty"},
            "hot_reload": True,
        }
        if section(config, "api") is not None:
            defaults["api"] = {"base_url": "http://localhost:3000"}
        return defaults

    def check(self, config: Configuration, errors: List[str], warnings: List[str]) -> None:
        if api_base_url(config) is None:
            warnings.append("API base URL not configured, using default development URL")
        check_log_level(config, LOG_LEVELS, warnings, "Invalid logging level")
