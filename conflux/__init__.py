"""Conflux - Environment-aware configuration management.

Aggregate configuration from files, environment variables, encrypted
storage and remote services into one merged tree, shaped and validated by
a per-environment adapter, with cached reads and change notification.
"""

from .adapters import default_registry
from .core.adapter import AdapterRegistry, EnvironmentAdapter
from .core.errors import (
    Busy,
    ConfigurationError,
    ConfigurationKeyError,
    NoAdapterForEnvironment,
    SourceError,
    WriteError,
)
from .core.manager import ConfigurationManager
from .core.provider import ConfigurationProvider
from .core.types import (
    ConfigurationChange,
    ConfigurationSource,
    ConfigurationStatus,
    ManagerOptions,
    SourceType,
    ValidationResult,
)

__all__ = [
    "AdapterRegistry",
    "Busy",
    "ConfigurationChange",
    "ConfigurationError",
    "ConfigurationKeyError",
    "ConfigurationManager",
    "ConfigurationProvider",
    "ConfigurationSource",
    "ConfigurationStatus",
    "EnvironmentAdapter",
    "ManagerOptions",
    "NoAdapterForEnvironment",
    "SourceError",
    "SourceType",
    "ValidationResult",
    "WriteError",
    "default_registry",
]
