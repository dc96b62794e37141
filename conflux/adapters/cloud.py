"""Cloud environment adapter."""

from __future__ import annotations

from typing import Any, Dict, List

from ..core.adapter import EnvironmentType
from ..core.types import Configuration, ConfigurationSource
from .base import section
from .production import ProductionEnvironmentAdapter

KNOWN_PROVIDERS = ("aws", "gcp", "azure", "kubernetes", "other")

METADATA_URLS = {
    "aws": "http://169.254.169.254/latest/meta-data/",
    "gcp": "http://metadata.google.internal/computeMetadata/v1/",
    "azure": "http://169.254.169.254/metadata/instance?api-version=2020-06-01",
}


class CloudEnvironmentAdapter(ProductionEnvironmentAdapter):
    """Production rules plus the hosting platform's metadata service."""

    environment = EnvironmentType.CLOUD.value
    env_prefix = "CLOUD_"

    def detect_cloud_provider(self) -> str:
        env = self.environ
        if env.get("AWS_REGION") or env.get("AWS_DEFAULT_REGION"):
            return "aws"
        if env.get("GOOGLE_CLOUD_PROJECT") or env.get("GCP_PROJECT"):
            return "gcp"
        if env.get("AZURE_SUBSCRIPTION_ID"):
            return "azure"
        if env.get("KUBERNETES_SERVICE_HOST"):
            return "kubernetes"
        return "other"

    def metadata_service_url(self) -> str:
        return METADATA_URLS.get(self.detect_cloud_provider(), "http://169.254.169.254/")

    def get_configuration_sources(self) -> List[ConfigurationSource]:
        return [
            self.secure_source("cloud-secure-storage", "cloud-config"),
            self.env_source("cloud-environment-variables", self.env_prefix),
            self.remote_source(
                "remote-cloud-config",
                self.environ.get("CLOUD_CONFIG_URL", "https://config.example.com/cloud"),
                token_variable="CLOUD_CONFIG_TOKEN",
                timeout=5.0,
            ),
            self.remote_source(
                "cloud-metadata-service", self.metadata_service_url(), timeout=2.0
            ),
        ]

    def allowed_origins(self) -> List[str]:
        origins = ["https://example.com"]
        single = self.environ.get("CLOUD_ALLOWED_ORIGIN")
        if single:
            origins.append(single)
        many = self.environ.get("CLOUD_ALLOWED_ORIGINS")
        if many:
            origins.extend(o.strip() for o in many.split(",") if o.strip())
        return origins

    def default_api_url(self) -> str:
        return self.environ.get("CLOUD_API_URL", "https://api.example.com")

    def defaults(self, config: Configuration) -> Dict[str, Any]:
        defaults = super().defaults(config)
        defaults["cloud"] = {
            "provider": self.detect_cloud_provider(),
            "auto_scaling": True,
            "load_balancing": True,
        }
        defaults["limits"] = {
            "max_file_size": 104857600,
            "max_connections": 1000,
            "sync_timeout": 60.0,
        }
        return defaults

    def check(self, config: Configuration, errors: List[str], warnings: List[str]) -> None:
        super().check(config, errors, warnings)
        cloud = section(config, "cloud")
        if cloud is None:
            errors.append("Cloud configuration is required for cloud deployments")
            return
        provider = cloud.get("provider")
        if not provider:
            errors.append("Cloud provider must be specified")
        elif provider not in KNOWN_PROVIDERS:
            warnings.append(f"Unknown cloud provider: {provider}")
        if cloud.get("auto_scaling") is not True:
            warnings.append("Auto-scaling should be enabled in cloud environment")
