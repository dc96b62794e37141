"""Built-in environment adapters."""

from __future__ import annotations

from ..core.adapter import AdapterRegistry
from .base import BaseEnvironmentAdapter
from .cicd import CICDEnvironmentAdapter
from .cloud import CloudEnvironmentAdapter
from .declarative import DeclarativeEnvironmentAdapter
from .development import DevelopmentEnvironmentAdapter
from .production import ProductionEnvironmentAdapter
from .staging import StagingEnvironmentAdapter
from .testing import TestingEnvironmentAdapter


def default_registry() -> AdapterRegistry:
    """Registry with every built-in adapter and its common aliases."""
    registry = AdapterRegistry()
    registry.register("development", DevelopmentEnvironmentAdapter, aliases=("dev",))
    registry.register("testing", TestingEnvironmentAdapter, aliases=("test",))
    registry.register("staging", StagingEnvironmentAdapter, aliases=("stage",))
    registry.register("production", ProductionEnvironmentAdapter, aliases=("prod",))
    registry.register("cloud", CloudEnvironmentAdapter)
    registry.register("cicd", CICDEnvironmentAdapter, aliases=("ci",))
    return registry


__all__ = [
    "BaseEnvironmentAdapter",
    "CICDEnvironmentAdapter",
    "CloudEnvironmentAdapter",
    "DeclarativeEnvironmentAdapter",
    "DevelopmentEnvironmentAdapter",
    "ProductionEnvironmentAdapter",
    "StagingEnvironmentAdapter",
    "TestingEnvironmentAdapter",
    "default_registry",
]
