"""Production environment adapter."""

from __future__ import annotations

from typing import Any, Dict, List

from ..core.adapter import EnvironmentType
from ..core.types import Configuration, ConfigurationSource
from .base import BaseEnvironmentAdapter, api_base_url, check_log_level, section


class ProductionEnvironmentAdapter(BaseEnvironmentAdapter):
    """Secrets from secure storage, overridden by ``PROD_`` variables and the
    remote configuration service. Validation is strict.
    """

    environment = EnvironmentType.PRODUCTION.value
    env_prefix = "PROD_"

    def get_configuration_sources(self) -> List[ConfigurationSource]:
        return [
            self.secure_source("secure-storage", "production-config"),
            self.env_source("production-environment-variables", self.env_prefix),
            self.remote_source(
                "remote-production-config",
                self.environ.get("PROD_CONFIG_URL", "https://config.example.com/production"),
                token_variable="PROD_CONFIG_TOKEN",
                timeout=5.0,
            ),
        ]

    def allowed_origins(self) -> List[str]:
        return ["https://example.com"]

    def default_api_url(self) -> str:
        return self.environ.get("PROD_API_URL", "https://api.example.com")

    def defaults(self, config: Configuration) -> Dict[str, Any]:
        defaults: Dict[str, Any] = {
            "debug": False,
            "logging": {"level": "warn", "format": "json"},
            "hot_reload": False,
            "monitoring": {"enabled": True, "level": "production"},
            "security": {
                "ssl": True,
                "cors": {"enabled": True, "origins": self.allowed_origins()},
            },
        }
        if section(config, "api") is not None:
            defaults["api"] = {"base_url": self.default_api_url()}
        return defaults

    def check(self, config: Configuration, errors: List[str], warnings: List[str]) -> None:
        env = self.environment
        url = api_base_url(config)
        if url is None:
            errors.append(f"API base URL is required in {env} environment")
        elif not url.startswith("https://"):
            errors.append(f"API base URL must use HTTPS in {env} environment")

        if config.get("debug") is True:
            errors.append(f"Debug mode must be disabled in {env} environment")

        security = section(config, "security")
        if security is None:
            errors.append(f"Security configuration is required for {env}")
        else:
            if security.get("ssl") is not True:
                errors.append(f"SSL must be enabled in {env} environment")
            cors = security.get("cors")
            if isinstance(cors, dict) and cors.get("enabled") is not True:
                warnings.append(f"CORS should be enabled in {env} environment")

        if section(config, "logging") is None:
            errors.append(f"Logging configuration is required for {env}")
        check_log_level(
            config,
            ("warn", "warning", "error"),
            warnings,
            f"Logging level should be warn or error in {env}",
        )

        monitoring = section(config, "monitoring")
        if monitoring is not None and monitoring.get("enabled") is not True:
            errors.append(f"Monitoring must be enabled in {env} environment")
