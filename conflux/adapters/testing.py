"""Testing environment adapter."""

from __future__ import annotations

from typing import Any, Dict, List

from ..core.adapter import EnvironmentType
from ..core.types import Configuration, ConfigurationSource
from .base import LOG_LEVELS, BaseEnvironmentAdapter, check_log_level, section

MEMORY_DATABASE = ":memory:"


class TestingEnvironmentAdapter(BaseEnvironmentAdapter):
    """Deterministic settings for test runs, backed by an in-memory database."""

    __test__ = False

    environment = EnvironmentType.TESTING.value

    def get_configuration_sources(self) -> List[ConfigurationSource]:
        return [
            self.file_source("test-config", "test.json"),
            self.env_source("test-environment-variables", "TEST_"),
            self.memory_source("in-memory-config"),
        ]

    def defaults(self, config: Configuration) -> Dict[str, Any]:
        defaults: Dict[str, Any] = {
            "debug": False,
            "logging": {"level": "error", "format": "json"},
            "hot_reload": False,
            "test_mode": True,
            "database": {"type": "sqlite", "filename": MEMORY_DATABASE},
        }
        if section(config, "api") is not None:
            defaults["api"] = {"base_url": "http://localhost:3001"}
        return defaults

    def check(self, config: Configuration, errors: List[str], warnings: List[str]) -> None:
        if config.get("test_mode") is not True:
            errors.append("Test mode must be enabled in testing environment")
        database = section(config, "database")
        if database is None:
            errors.append("Database configuration is required for testing")
        elif database.get("filename") != MEMORY_DATABASE:
            warnings.append("Database should use in-memory storage for testing")
        if section(config, "logging") is None:
            errors.append("Logging configuration is required for testing")
        check_log_level(config, LOG_LEVELS, errors, "Invalid logging level")
