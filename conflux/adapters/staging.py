"""Staging environment adapter."""

from __future__ import annotations

from typing import Any, Dict, List

from ..core.adapter import EnvironmentType
from ..core.types import Configuration, ConfigurationSource
from .base import BaseEnvironmentAdapter, api_base_url, check_log_level, section


class StagingEnvironmentAdapter(BaseEnvironmentAdapter):
    """Production-like settings with more verbose logging and monitoring."""

    environment = EnvironmentType.STAGING.value

    def get_configuration_sources(self) -> List[ConfigurationSource]:
        return [
            self.file_source("staging-config", "staging.json"),
            self.env_source("staging-environment-variables", "STAGING_"),
            self.remote_source(
                "remote-staging-config",
                self.environ.get("STAGING_CONFIG_URL", "https://config.example.com/staging"),
                token_variable="STAGING_CONFIG_TOKEN",
            ),
        ]

    def defaults(self, config: Configuration) -> Dict[str, Any]:
        defaults: Dict[str, Any] = {
            "debug": False,
            "logging": {"level": "info", "format": "json"},
            "hot_reload": False,
            "monitoring": {"enabled": True, "level": "detailed"},
        }
        if section(config, "api") is not None:
            defaults["api"] = {
                "base_url": self.environ.get(
                    "STAGING_API_URL", "https://api-staging.example.com"
                )
            }
        return defaults

    def check(self, config: Configuration, errors: List[str], warnings: List[str]) -> None:
        url = api_base_url(config)
        if url is None:
            errors.append("API base URL is required in staging environment")
        elif not url.startswith("https://"):
            warnings.append("API base URL should use HTTPS in staging environment")
        if section(config, "logging") is None:
            errors.append("Logging configuration is required for staging")
        check_log_level(
            config,
            ("info", "warn", "warning", "error"),
            warnings,
            "Logging level should be info, warn, or error in staging",
        )
        monitoring = section(config, "monitoring")
        if monitoring is not None and monitoring.get("enabled") is not True:
            warnings.append("Monitoring should be enabled in staging environment")
