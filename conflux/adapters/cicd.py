"""CI/CD environment adapter."""

from __future__ import annotations

from typing import Any, Dict, List

from ..core.adapter import EnvironmentType
from ..core.types import Configuration, ConfigurationSource
from .base import LOG_LEVELS, BaseEnvironmentAdapter, check_log_level, section
from .testing import MEMORY_DATABASE

# Checked in order; the first variable present names the pipeline.
PIPELINE_MARKERS = (
    ("GITHUB_ACTIONS", "github-actions"),
    ("GITLAB_CI", "gitlab-ci"),
    ("JENKINS_URL", "jenkins"),
    ("CIRCLECI", "circleci"),
    ("TRAVIS", "travis"),
    ("TF_BUILD", "azure-pipelines"),
    ("CODEBUILD_BUILD_ID", "codebuild"),
    ("CI", "generic-ci"),
)


class CICDEnvironmentAdapter(BaseEnvironmentAdapter):
    """Pipeline runs: ``CI_`` variables first, then a checked-in file."""

    environment = EnvironmentType.CICD.value

    def detect_pipeline(self) -> str:
        for variable, pipeline in PIPELINE_MARKERS:
            if self.environ.get(variable):
                return pipeline
        return "unknown"

    def get_configuration_sources(self) -> List[ConfigurationSource]:
        return [
            self.env_source("cicd-environment-variables", "CI_"),
            self.file_source("cicd-config", "cicd.json"),
            self.memory_source("in-memory-cicd-config"),
        ]

    def defaults(self, config: Configuration) -> Dict[str, Any]:
        defaults: Dict[str, Any] = {
            "debug": False,
            "logging": {"level": "info", "format": "json"},
            "hot_reload": False,
            "cicd_mode": True,
            "database": {"type": "sqlite", "filename": MEMORY_DATABASE},
            "cicd": {
                "pipeline": self.detect_pipeline(),
                "parallel": True,
                "artifacts": True,
                "reports": True,
            },
            "timeouts": {"test": 300.0, "build": 1800.0, "deploy": 900.0},
        }
        if section(config, "api") is not None:
            defaults["api"] = {"base_url": "http://localhost:3001"}
        return defaults

    def check(self, config: Configuration, errors: List[str], warnings: List[str]) -> None:
        if config.get("cicd_mode") is not True:
            errors.append("CI/CD mode must be enabled in CI/CD environment")

        database = section(config, "database")
        if database is None:
            errors.append("Database configuration is required for CI/CD")
        elif database.get("filename") != MEMORY_DATABASE:
            warnings.append("Database should use in-memory storage for CI/CD")

        if section(config, "logging") is None:
            errors.append("Logging configuration is required for CI/CD")
        check_log_level(config, LOG_LEVELS, errors, "Invalid logging level")

        cicd = section(config, "cicd")
        if cicd is None:
            warnings.append("CI/CD configuration is recommended for CI/CD environments")
        else:
            if not cicd.get("pipeline"):
                warnings.append("CI/CD pipeline should be specified")
            if cicd.get("parallel") is not True:
                warnings.append("Parallel execution should be enabled for CI/CD")

        timeouts = section(config, "timeouts")
        if timeouts is None:
            errors.append("Timeouts configuration is required for CI/CD")
            return
        for stage in ("test", "build", "deploy"):
            value = timeouts.get(stage)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                errors.append(f"{stage.capitalize()} timeout must be a positive number")
